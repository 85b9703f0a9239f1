"""PKCS#1 encoding methods wrapped around the raw RSA primitive.

Covers EMSA-PKCS1-v1_5 for signatures, RSAES-PKCS1-v1_5 and RSAES-OAEP for encryption, as well as the MGF1 mask
generation function they rely on. All functions operate on encoded messages of exactly `k` bytes, `k` being the
modulus length in bytes, and leave the exponentiation to the caller.

Typical usage example:

    em = oaep_pad(b"Hi there!", k)
    assert oaep_unpad(em, k) == b"Hi there!"
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import hashlib
from math import ceil
from secrets import token_bytes

from pyasn1.codec.der import encoder
from pyasn1.type import univ
from pyasn1_modules import rfc8017

from rsaengine import bignum
from rsaengine.errors import PrimitiveFailure
from rsaengine.errors import UnsupportedAlgorithm

HASH_TLL = {
    "sha1": (hashlib.sha1, 20, 2**61 - 1),
    "sha256": (hashlib.sha256, 32, 2**61 - 1),
    "sha384": (hashlib.sha384, 48, 2**125 - 1),
    "sha512": (hashlib.sha512, 64, 2**125 - 1),
}

# RIPEMD-160 lives outside the PKCS#1 arc (TeleTrusT), so pyasn1-modules does not carry it.
id_ripemd160 = univ.ObjectIdentifier("1.3.36.3.2.1")

DIGEST_OID = {
    "md5": rfc8017.id_md5,
    "ripemd160": id_ripemd160,
    "sha1": rfc8017.id_sha1,
    "sha224": rfc8017.id_sha224,
    "sha256": rfc8017.id_sha256,
    "sha384": rfc8017.id_sha384,
    "sha512": rfc8017.id_sha512,
}

PKCS1_OVERHEAD = 11
_MIN_PS_LEN = 8


def xorbytes(a: bytes, b: bytes) -> bytes:
    """XOR bitwise for bytes.

    Requires two byte strings of equal length.

    Args:
        a: byte string
        b: byte string

    Returns:
        xor byte string
    """
    return bytes(a ^ b for a, b in zip(a, b, strict=True))


def mgf1(mgfseed: bytes, masklen: int, hashf: str = "sha1") -> bytes:
    """The PKCS#1 v2.2 Mask Generation Function 1.

    Args:
        mgfseed: Seed for mask generation
        masklen: Intended length of mask
        hashf: Hash function (Implemented for sha1, sha256, sha384, sha512)

    Returns:
        The mask in form of bytes of length masklen.

    Raises:
        ValueError: If mask too long for the combination of values.
    """
    fun, hlen, _ = HASH_TLL[hashf]
    if masklen > 2**32 * hlen:
        raise ValueError("Mask too long for the specified hash function")
    t = b""
    for cnt in range(ceil(masklen / hlen)):
        c = bignum.integer_to_bytes(cnt, 4)
        t += fun(mgfseed + c).digest()
    return t[:masklen]


def digest_info(algorithm: str, digest: bytes) -> bytes:
    """DER encodes the DigestInfo structure binding a digest to its algorithm.

    Args:
        algorithm: Digest identifier, one of `DIGEST_OID`.
        digest: The precomputed digest.

    Returns:
        The encoded DigestInfo.

    Raises:
        UnsupportedAlgorithm: If the identifier is unknown.
    """
    try:
        ident = DIGEST_OID[algorithm]
    except (KeyError, TypeError) as exc:
        raise UnsupportedAlgorithm(f"Unsupported digest algorithm: {algorithm!r}") from exc
    algid = rfc8017.DigestAlgorithm()
    algid["algorithm"] = ident
    algid["parameters"] = univ.Null("")
    payload = rfc8017.DigestInfo()
    payload["digestAlgorithm"] = algid
    payload["digest"] = digest
    return encoder.encode(payload)


def emsa_pkcs1_v15_encode(algorithm: str, digest: bytes, k: int) -> bytes:
    """Builds the EMSA-PKCS1-v1_5 encoded message `00 01 FF..FF 00 DigestInfo`.

    Args:
        algorithm: Digest identifier, one of `DIGEST_OID`.
        digest: The precomputed digest.
        k: The modulus length in bytes.

    Returns:
        The encoded message of length `k`.

    Raises:
        UnsupportedAlgorithm: If the identifier is unknown.
        PrimitiveFailure: If the DigestInfo does not fit the modulus.
    """
    encoded = digest_info(algorithm, digest)
    if k < len(encoded) + PKCS1_OVERHEAD:
        raise PrimitiveFailure("Hash function too large for current key.")
    ps = b"\xFF" * (k - len(encoded) - 3)
    return b"\x00\x01" + ps + b"\x00" + encoded


def _nonzero_bytes(length: int) -> bytes:
    out = b""
    while len(out) < length:
        out += token_bytes(length - len(out)).replace(b"\x00", b"")
    return out


def pkcs1_v15_pad(message: bytes, k: int) -> bytes:
    """Encodes a message per RSAES-PKCS1-v1_5, `00 02 PS 00 M` with random non-zero PS.

    Args:
        message: Message to be encrypted.
        k: The modulus length in bytes.

    Returns:
        The encoded message of length `k`.

    Raises:
        PrimitiveFailure: If the message is too long for the modulus.
    """
    if len(message) > k - PKCS1_OVERHEAD:
        raise PrimitiveFailure("Message too long for the modulus.")
    ps = _nonzero_bytes(k - len(message) - 3)
    return b"\x00\x02" + ps + b"\x00" + message


def pkcs1_v15_unpad(em: bytes, k: int) -> bytes:
    """Decodes an RSAES-PKCS1-v1_5 encoded message.

    All checks are evaluated before failing, so the error does not reveal which one tripped.

    Args:
        em: The encoded message.
        k: The modulus length in bytes.

    Returns:
        The message.

    Raises:
        PrimitiveFailure: If decoding fails.
    """
    valid = len(em) == k and k >= PKCS1_OVERHEAD
    if em[0:2] != b"\x00\x02":
        valid = False
    mrkr = None
    for by in range(2, len(em)):
        if em[by] == 0 and mrkr is None:
            mrkr = by
    if mrkr is None or mrkr - 2 < _MIN_PS_LEN or not valid:
        raise PrimitiveFailure("Decryption error.")
    return em[mrkr + 1:]


def oaep_max_message(k: int, hashf: str = "sha1") -> int:
    return k - 2 * (HASH_TLL[hashf][1] + 1)


def oaep_pad(message: bytes, k: int, label: bytes = b"", hashf: str = "sha1") -> bytes:
    """Encodes a message according to the RSAES-OAEP encoding.

    Args:
        message: Message to be encrypted
        k: The modulus length in bytes.
        label: Optional label for the message
        hashf: Hash function (Implemented for sha1, sha256, sha384, sha512)

    Returns:
        The encoded message of length `k`.

    Raises:
        ValueError: If label too long for the hash function.
        PrimitiveFailure: If the message is too long for the modulus and hash function.
    """
    fun, hlen, hcap = HASH_TLL[hashf]
    if len(label) > hcap:
        raise ValueError("Label too long for the specified hash function")
    if len(message) > oaep_max_message(k, hashf):
        raise PrimitiveFailure("Message too long for the specified hash function")
    lh = fun(label).digest()
    pad = b"\x00" * (k - len(message) - 2 * (hlen + 1))
    db: bytes = lh + pad + b"\x01" + message
    seed = token_bytes(hlen)
    db_msk = mgf1(seed, k - hlen - 1, hashf)
    mdb = xorbytes(db, db_msk)
    seed_msk = mgf1(mdb, hlen, hashf)
    mseed = xorbytes(seed, seed_msk)
    return b"\x00" + mseed + mdb


def oaep_unpad(em: bytes, k: int, label: bytes = b"", hashf: str = "sha1") -> bytes:
    """Decodes an RSAES-OAEP encoded message.

    Args:
        em: The encoded message.
        k: The modulus length in bytes.
        label: Optional label for the message
        hashf: Hash function (Implemented for sha1, sha256, sha384, sha512)

    Returns:
        The message.

    Raises:
        PrimitiveFailure: If decoding fails.
    """
    fun, hlen, hcap = HASH_TLL[hashf]
    if len(label) > hcap or len(em) != k or k < 2 * (hlen + 1):
        raise PrimitiveFailure("Decryption error.")
    lh = fun(label).digest()
    valid = True
    if em[0:1] != b"\x00":
        valid = False
    mseed = em[1:hlen + 1]
    mdb = em[hlen + 1:]
    seed_msk = mgf1(mdb, hlen, hashf)
    seed = xorbytes(mseed, seed_msk)
    db_msk = mgf1(seed, k - hlen - 1, hashf)
    db = xorbytes(mdb, db_msk)
    if db[0:hlen] != lh:
        valid = False
    mrkr = None
    for by in range(hlen, len(db)):
        if db[by:by + 1] == b"\x01" and mrkr is None:
            mrkr = by
        if db[by:by + 1] != b"\x00" and mrkr is None:
            valid = False
    if mrkr is None or not valid:
        raise PrimitiveFailure("Decryption error.")
    return db[mrkr + 1:]
