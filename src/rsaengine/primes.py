"""Probable-prime machinery, mainly focusing on the generation of random large primes.

Generates IFC prime pairs roughly based on FIPS 186-5, using probable primes only. The same primality test backs the
explicit key consistency check.

Typical usage example:

    get_pre_primes(12000)
    check_prime(candidate)
    p, q = generate_primes(2048)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import secrets

from rsaengine import bignum
from rsaengine.errors import PrimitiveFailure

logger = logging.getLogger(__name__)

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100

MIN_KEY_BITS: int = 512
MAX_KEY_BITS: int = 16384

# Miller-Rabin rounds by candidate bit length, FIPS 186-5 Appendix C.1.
_MR_ROUNDS: tuple[tuple[int, int], ...] = ((512, 40), (1024, 56), (1536, 64), (2048, 70))
_MR_ROUNDS_MAX: int = 74


def _sieve(n: int = 10000) -> list[int]:
    """Lists all primes up to and including `n` with an odd-only Sieve of Eratosthenes.

    Args:
        n: Upper bound of the sieve. Defaults to 10000.

    Returns:
        The primes up to `n`, in ascending order.
    """
    if n < 2:
        return []
    # Slot i stands for the odd number 2 * i + 3.
    odd_slots = (n - 1) // 2
    marks = [True] * odd_slots
    for i in range(int(n**0.5) // 2):
        if not marks[i]:
            continue
        step = 2 * i + 3
        for j in range((step * step - 3) // 2, odd_slots, step):
            marks[j] = False
    return [2] + [2 * i + 3 for i, is_prime in enumerate(marks) if is_prime]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Returns the cached small primes, sieving again when the cache does not reach `n`.

    Args:
        n: The primes have to cover at least this bound. Must be >= 0.
        change: Sieve up to exactly `n` even on a cache hit.

    Returns:
        Ascending list of small primes.

    Raises:
        ValueError: If `n` is negative.
    """
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n < 0:
        raise ValueError("n must be >= 0")
    if change or not _SMALL_PRIMES or n > _SMALL_PRIMES_CAP:
        logger.debug("Sieving small primes up to %d", n)
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Quick rejection of candidates with a small factor.

    Returns:
        False if `no` has a prime factor up to `n` other than itself, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            break
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int) -> bool:
    """FIPS 186-5 Miller-Rabin probabilistic primality test with random bases."""
    if w < 4:
        return w in (2, 3)
    if not w & 1:
        return False
    w_1 = w - 1
    a = (w_1 & -w_1).bit_length() - 1
    m = w_1 >> a
    for _ in range(iters):
        z = bignum.powmod(secrets.randbelow(w - 3) + 2, m, w)
        if z in (1, w_1):
            continue
        for _ in range(a - 1):
            z = bignum.powmod(z, 2, w)
            if z == w_1:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def check_prime(candidate: int, iters: None | int = None, n: int = 10000) -> bool:
    """Probable primality test: trial division by the small primes, then Miller-Rabin.

    Args:
        candidate: The integer to test.
        iters: Miller-Rabin rounds. Chosen from the candidate's size per FIPS 186-5 if omitted.
        n: Bound of the small primes used for trial division.

    Returns:
        True if `candidate` is probably prime.
    """
    if candidate < 2 or not _trial_division(candidate, n):
        return False
    if iters is None:
        size = candidate.bit_length()
        iters = next((rounds for bound, rounds in _MR_ROUNDS if size <= bound), _MR_ROUNDS_MAX)
    return _miller_rabin(candidate, iters)


def _generate_probable_prime(size: int, pub: int = 65537, prm_p: int | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Implements parts of the FIPS 186-5 protocol for generation of prime numbers that are probably prime.
    In this case we're using a multi-use function for both p and q.

    Args:
        size: The size of the prime to generate in bits.
        pub: The public exponent the prime has to be suitable for. `p - 1` must be coprime to it.
        prm_p: The other prime in the pair if this is the second generation. Adds the FIPS 186-5 separation test.
            Optional, if not provided generates 1st prime.

    Returns:
        A probable prime number with exactly `size` bits and its two top bits set.

    Raises:
        PrimitiveFailure: If generation loops way beyond a reasonable time and a bit.
    """
    ml = 2
    if prm_p is None:
        ml = 1
    rep_cap = size * 5 * ml
    # Top two bits fix the product length, the low bit skips even candidates.
    msk = (1 << size - 1) | (1 << size - 2) | 1
    separation = 1 << max(size - _MINIMUM_PRIME_SEPARATION, 0)
    for _ in range(rep_cap):
        byts = secrets.randbits(size) | msk
        if prm_p is not None and abs(prm_p - byts) <= separation:
            continue
        if bignum.gcd(byts - 1, pub) == 1 and check_prime(byts):
            return byts
    logger.debug("No %d bit prime found after %d candidates", size, rep_cap)
    raise PrimitiveFailure(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def generate_primes(size: int, pub: int = 65537) -> tuple[int, int]:
    """Generates an IFC-suitable pair of prime numbers.

    The first prime receives the extra bit of an odd `size`, so the bit lengths of the pair always add up to `size`
    and so does the bit length of their product.

    Args:
        size: The modulus size to generate the prime pair for, in range [512, 16384].
        pub: The public exponent the primes have to be suitable for. Has to be odd and at least 3.

    Returns:
        A pair of distinct IFC-suitable prime numbers.

    Raises:
        ValueError: If `size` or `pub` does not meet requirements.
        PrimitiveFailure: If no prime could be found.
    """
    if not MIN_KEY_BITS <= size <= MAX_KEY_BITS:
        raise ValueError(f"Size must be in range [{MIN_KEY_BITS}, {MAX_KEY_BITS}].")
    if pub % 2 == 0 or pub < 3:
        raise ValueError("Public exponent does not meet requirements.")
    p = _generate_probable_prime((size + 1) // 2, pub)
    q = _generate_probable_prime(size // 2, pub, p)
    while p == q:  # (Un)Likely story.
        q = _generate_probable_prime(size // 2, pub, p)
    return p, q
