"""RSA private key generation.

Draws a FIPS 186-5 style probable prime pair and lets the completion engine derive every other component.

Typical usage example:

    priv = generate(3072)
    pub = priv.public()
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import warnings

from rsaengine import primes
from rsaengine.complete import complete
from rsaengine.errors import KeyCompletionFailed
from rsaengine.errors import PrimitiveFailure
from rsaengine.material import KeyMaterial

logger = logging.getLogger(__name__)

MIN_EXPONENT: int = 3
MAX_EXPONENT: int = 2**33 - 1
RECOMMENDED_BITS: int = 2048


def generate(bits: int, public_exponent: int = 65537) -> KeyMaterial:
    """Generates a complete RSA private key.

    Args:
        bits: The modulus size in bits, in range [512, 16384].
        public_exponent: The public exponent. Has to be odd and in range [3, 2**33 - 1]. Defaults to 65537.

    Returns:
        Key material with all eight components present.

    Raises:
        ValueError: If `bits` or `public_exponent` does not meet requirements.
        PrimitiveFailure: If prime generation or key completion fails.
    """
    if not primes.MIN_KEY_BITS <= bits <= primes.MAX_KEY_BITS:
        raise ValueError(f"Size must be in range [{primes.MIN_KEY_BITS}, {primes.MAX_KEY_BITS}].")
    if not MIN_EXPONENT <= public_exponent <= MAX_EXPONENT or public_exponent % 2 == 0:
        raise ValueError("Public exponent does not meet requirements.")
    if bits < RECOMMENDED_BITS:
        warnings.warn(f"{bits} bit keys are insecure! Please use with care.", RuntimeWarning)
    logger.debug("Generating %d bit key", bits)
    p, q = primes.generate_primes(bits, public_exponent)
    partial = KeyMaterial.from_ints(e=public_exponent, p=p, q=q)
    try:
        _, delta = complete(partial)
    except KeyCompletionFailed as exc:
        raise PrimitiveFailure("Generated primes could not be completed into a key.") from exc
    return partial.merge(delta)
