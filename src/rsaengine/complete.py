"""Derives missing RSA key components from the ones present.

Given both primes and at least one exponent, the remaining components follow from the RSA relations. Each absent
component is derived on its own, present components are never touched. Steps involving the private exponent or the
primes run in the substrate's constant-time mode.

Typical usage example:

    has_update, delta = complete(partial)
    key = partial.merge(delta) if has_update else partial
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from rsaengine import bignum
from rsaengine import validate
from rsaengine.errors import InvalidKeyMaterial
from rsaengine.errors import KeyCompletionFailed
from rsaengine.material import KeyMaterial

logger = logging.getLogger(__name__)


def _inverse(value: int, mod: int, name: str) -> int:
    try:
        return bignum.mod_inverse(value, mod, consttime=True)
    except ValueError as exc:
        logger.debug("Completion failed deriving %s", name)
        raise KeyCompletionFailed(f"Cannot derive {name}: no modular inverse exists.") from exc


def complete(key: KeyMaterial) -> tuple[bool, KeyMaterial | None]:
    """Completes a partial private key.

    Uses lambda = (p - 1)(q - 1) for the exponent relations. A caller-supplied exponent pair is not cross-checked,
    run `check_private` on the merged key for that.

    Args:
        key: Partial key material passing `is_valid_for_completion`.

    Returns:
        `(False, None)` if nothing is missing. Otherwise `(True, delta)` where `delta` holds only the derived
        components, to be merged into `key` by the caller with `key.merge(delta)`.

    Raises:
        InvalidKeyMaterial: If the key cannot be completed from what is present.
        KeyCompletionFailed: If a required modular inverse does not exist.
    """
    if not validate.is_valid_for_completion(key):
        raise InvalidKeyMaterial("Key material is not sufficient for completion.")
    if not validate.needs_completion(key):
        return False, None

    n, e, d, p, q, dp, dq, qinv = key.to_ints()
    derived: dict[str, int] = {}

    if n == 0:
        derived["n"] = n = p * q

    r1 = p - 1
    r2 = q - 1
    lam = r1 * r2

    if e == 0:
        derived["e"] = e = _inverse(d, lam, "e")

    if d == 0:
        derived["d"] = d = _inverse(e, lam, "d")

    if dp == 0 or dq == 0:
        if r1 < 1 or r2 < 1:
            raise KeyCompletionFailed("Cannot derive CRT exponents from a unit factor.")
        if dp == 0:
            derived["dp"] = bignum.mod(d, r1, consttime=True)
        if dq == 0:
            derived["dq"] = bignum.mod(d, r2, consttime=True)

    if qinv == 0:
        derived["qinv"] = _inverse(q, p, "qinv")

    logger.debug("Completed key components: %s", ", ".join(derived))
    return True, KeyMaterial.from_ints(**derived)
