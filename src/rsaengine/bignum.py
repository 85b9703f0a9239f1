"""Big-integer substrate used by the engine, backed by GMP through gmpy2.

Provides the handful of arbitrary-precision operations the engine needs: big-endian import/export, significant-bit
counting and modular arithmetic. Operations touching secret values accept a `consttime` flag. When it is set the
modular exponentiation runs on GMP's side-channel resistant `powmod_sec`, while inversion and reduction are
blinded with a fresh random value so their running time does not correlate with the secret operand.

Typical usage example:

    n = bytes_to_integer(key.n)
    d = mod_inverse(e, lam, consttime=True)
    buf = integer_to_bytes(d)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets

import gmpy2

_REDUCTION_BLIND_BITS = 64


def count_bits(buf: bytes | None) -> int:
    """Counts the significant bits of a big-endian buffer.

    Leading zero bytes are ignored, an absent or all-zero buffer has zero bits.

    Args:
        buf: The big-endian buffer.

    Returns:
        The bit length of the represented integer.
    """
    if not buf:
        return 0
    stripped = buf.lstrip(b"\x00")
    if not stripped:
        return 0
    return 8 * len(stripped) - 8 + stripped[0].bit_length()


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer in accordance to preset procedures.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int | None = None) -> bytes:
    """Converts an integer to a string, using a fixed-length or minimal byte representation.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string. Minimal length (empty for zero) if omitted.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    msg = int(msg)
    if fixedlen is None:
        fixedlen = byte_length(msg)
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def byte_length(value: int) -> int:
    return (int(value).bit_length() + 7) // 8


def gcd(a: int, b: int) -> int:
    return int(gmpy2.gcd(a, b))


def lcm(a: int, b: int) -> int:
    return int(gmpy2.lcm(a, b))


def random_unit(mod: int) -> int:
    """Draws a uniformly random element of [1, mod) coprime to `mod`.

    Args:
        mod: The modulus. Must be >= 2.

    Returns:
        A random unit modulo `mod`.
    """
    if mod < 2:
        raise ValueError("Modulus must be at least 2.")
    while True:
        r = secrets.randbelow(mod - 1) + 1
        if gmpy2.gcd(r, mod) == 1:
            return r


def mod_inverse(value: int, mod: int, consttime: bool = False) -> int:
    """Computes the inverse of `value` modulo `mod`.

    In constant-time mode the operand is multiplied by a random unit before inversion and the blind is removed
    afterward, so the inversion never sees the secret operand itself.

    Args:
        value: The value to invert.
        mod: The modulus. Must be >= 2.
        consttime: Whether `value` or `mod` is secret.

    Returns:
        The inverse in range [1, mod).

    Raises:
        ValueError: If no inverse exists.
    """
    value, mod = gmpy2.mpz(value), gmpy2.mpz(mod)
    if mod < 2:
        raise ValueError("Modulus must be at least 2.")
    try:
        if not consttime:
            return int(gmpy2.invert(value, mod))
        blind = random_unit(int(mod))
        return int(gmpy2.invert(value * blind % mod, mod) * blind % mod)
    except ZeroDivisionError as exc:
        raise ValueError("Value is not invertible for the given modulus.") from exc


def mod(value: int, modulus: int, consttime: bool = False) -> int:
    """Reduces `value` modulo `modulus`.

    Args:
        value: The value to reduce.
        modulus: The modulus. Must be positive.
        consttime: Whether `value` is secret. Adds a random multiple of the modulus before reducing.

    Returns:
        The non-negative residue.
    """
    value, modulus = gmpy2.mpz(value), gmpy2.mpz(modulus)
    if modulus < 1:
        raise ValueError("Modulus must be positive.")
    if consttime:
        value += modulus * secrets.randbits(_REDUCTION_BLIND_BITS)
    return int(gmpy2.f_mod(value, modulus))


def powmod(base: int, expo: int, modulus: int, consttime: bool = False) -> int:
    """Modular exponentiation.

    Args:
        base: The base.
        expo: The exponent. Must be positive in constant-time mode.
        modulus: The modulus. Must be odd in constant-time mode.
        consttime: Whether the exponent is secret.

    Returns:
        `base ** expo % modulus`.

    Raises:
        ValueError: If constant-time mode is requested for an even modulus or non-positive exponent.
    """
    if not consttime:
        return int(gmpy2.powmod(base, expo, modulus))
    if modulus % 2 == 0:
        raise ValueError("Constant-time exponentiation requires an odd modulus.")
    if expo <= 0:
        raise ValueError("Constant-time exponentiation requires a positive exponent.")
    return int(gmpy2.powmod_sec(gmpy2.mpz(base) % modulus, expo, modulus))
