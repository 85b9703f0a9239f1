"""Structural sanity predicates for RSA key material.

The predicates only look at bit lengths and the parity of the public exponent. They never raise: anything that is not
well-formed key material is reported as `False`, which callers must treat as "reject, do not use". Whether the
components actually belong together is a separate and far more expensive question answered by `check_private`.

Typical usage example:

    if not is_valid_private(key):
        raise InvalidKeyMaterial("Private key is not sane.")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from rsaengine import bignum
from rsaengine import primes
from rsaengine.material import KeyMaterial

logger = logging.getLogger(__name__)

MIN_MODULUS_BITS: int = 512
MAX_MODULUS_BITS: int = 16384
MIN_EXPONENT_BITS: int = 2
MAX_EXPONENT_BITS: int = 33


def _sane_modulus(bits: int) -> bool:
    return MIN_MODULUS_BITS <= bits <= MAX_MODULUS_BITS


def _sane_exponent(key: KeyMaterial) -> bool:
    if not MIN_EXPONENT_BITS <= key.bits("e") <= MAX_EXPONENT_BITS:
        return False
    return key.e[-1] & 1 == 1


def is_valid_public(key: KeyMaterial | None) -> bool:
    """Checks the modulus and public exponent bounds.

    Args:
        key: The key material to check.

    Returns:
        True if the modulus has 512 to 16384 bits and the public exponent is odd with 2 to 33 bits.
    """
    if not isinstance(key, KeyMaterial):
        return False
    if not _sane_modulus(key.bits("n")):
        logger.debug("Rejecting key: modulus of %d bits out of range", key.bits("n"))
        return False
    if not _sane_exponent(key):
        logger.debug("Rejecting key: public exponent out of range or even")
        return False
    return True


def is_valid_private(key: KeyMaterial | None) -> bool:
    """Checks a complete private key.

    On top of `is_valid_public`, all private components must be present and bounded by the modulus and primes they
    derive from, and the prime bit lengths must add up to the modulus bit length exactly.

    Args:
        key: The key material to check.

    Returns:
        True if the key passes all structural checks.
    """
    if not is_valid_public(key):
        return False
    nb = key.bits("n")
    pb, qb = key.bits("p"), key.bits("q")
    checks = (
        ("d", 0 < key.bits("d") <= nb),
        ("p + q", pb + qb == nb),
        ("dp", 0 < key.bits("dp") <= pb),
        ("dq", 0 < key.bits("dq") <= qb),
        ("qinv", 0 < key.bits("qinv") <= pb),
    )
    for name, passed in checks:
        if not passed:
            logger.debug("Rejecting private key: %s bit length out of range", name)
            return False
    return True


def is_valid_for_completion(key: KeyMaterial | None) -> bool:
    """Checks a partial private key that is about to be completed.

    Both primes and at least one of the exponents are required. Every other component may be absent, but if present
    it is held to the same bounds as in a complete key.

    Args:
        key: The key material to check.

    Returns:
        True if `complete` may be run on the key.
    """
    if not isinstance(key, KeyMaterial):
        return False
    nb, eb, db = key.bits("n"), key.bits("e"), key.bits("d")
    pb, qb = key.bits("p"), key.bits("q")
    if pb == 0 or qb == 0:
        return False
    if eb == 0 and db == 0:
        return False
    if nb != 0 and (not _sane_modulus(nb) or pb + qb != nb):
        return False
    if eb != 0 and not _sane_exponent(key):
        return False
    if db > pb + qb:
        return False
    if key.bits("dp") > pb or key.bits("dq") > qb or key.bits("qinv") > pb:
        return False
    return True


def needs_completion(key: KeyMaterial | None) -> bool:
    """Whether any of n, e, d, dp, dq or qinv is absent."""
    if not isinstance(key, KeyMaterial):
        return False
    return any(key.bits(name) == 0 for name in ("n", "e", "d", "dp", "dq", "qinv"))


def check_private(key: KeyMaterial | None) -> bool:
    """Verifies that a private key is internally consistent.

    Runs `is_valid_private` first, then checks that both factors are probable primes multiplying to the modulus, that
    the exponents are inverse modulo lcm(p - 1, q - 1) and that the CRT parameters match.

    Args:
        key: The key material to verify.

    Returns:
        True if the key is consistent.
    """
    if not is_valid_private(key):
        return False
    n, e, d, p, q, dp, dq, qinv = key.to_ints()
    if p * q != n:
        logger.debug("Inconsistent key: p * q != n")
        return False
    if not primes.check_prime(p) or not primes.check_prime(q):
        logger.debug("Inconsistent key: factor is not prime")
        return False
    lam = bignum.lcm(p - 1, q - 1)
    checks = (
        ("d", d * e % lam == 1),
        ("dp", dp == d % (p - 1)),
        ("dq", dq == d % (q - 1)),
        ("qinv", qinv * q % p == 1),
    )
    for name, passed in checks:
        if not passed:
            logger.debug("Inconsistent key: %s does not match", name)
            return False
    return True
