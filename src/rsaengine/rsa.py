"""Provides the RSA operations: signing, verification, encryption and decryption.

Every operation checks its inputs, converts the caller's key material into a transient native key, runs the primitive
and releases the native key again before returning, whether the call succeeds or fails. Private key operations run
with base blinding switched on for the duration of the call only.

Typical usage example:

    priv = generate(3072)
    sig = sign("sha256", hashlib.sha256(b"Hi there!").digest(), priv)
    assert verify("sha256", hashlib.sha256(b"Hi there!").digest(), sig, priv.public())
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import contextlib
import hmac
import logging
from typing import Iterator

from rsaengine import bignum
from rsaengine import padding
from rsaengine import validate
from rsaengine.errors import InvalidKeyMaterial
from rsaengine.errors import PlaintextTooLong
from rsaengine.errors import PrimitiveFailure
from rsaengine.errors import RSAEngineError
from rsaengine.errors import UnsupportedAlgorithm
from rsaengine.material import KeyMaterial

logger = logging.getLogger(__name__)

BYTES_LIKE = (bytes, bytearray, memoryview)
MIN_DIGEST_LEN: int = 1
MAX_DIGEST_LEN: int = 64
MIN_SIGNATURE_LEN: int = 1
MAX_SIGNATURE_LEN: int = 3072

# Guard overhead per scheme. OAEP with SHA-1 actually needs 42 bytes, see `max_plaintext`.
SCHEME_OVERHEAD = {
    "pkcs1v1.5": padding.PKCS1_OVERHEAD,
    "oaep": 41,
}
OAEP_HASH = "sha1"


class RSAKey:
    """The native key shared by public and private keys.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        bsize: The modulus length in bytes.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo
        self.bsize = bignum.byte_length(self.mod)

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Verify).

        Args:
            message: The int-marshalled message.

        Returns:
            `message ** expo % mod`.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return bignum.powmod(message, self.expo, self.mod)

    def release(self) -> None:
        """Drops the key's integers. The key is unusable afterward."""
        self.mod = 0
        self.expo = 0


class RSAPubKey(RSAKey):
    """Native public key. Consists solely of a modulus and exponent."""

    @classmethod
    def from_material(cls, key: KeyMaterial) -> "RSAPubKey":
        return cls(bignum.bytes_to_integer(key.n), bignum.bytes_to_integer(key.e))


class RSAPrivKey(RSAKey):
    """Native private key running the CRT accelerated primitive.

    Exponentiations modulo the primes run in the substrate's constant-time mode. Inside a `blinding()` block the
    input is additionally multiplied by `r ** e` for a fresh random `r` before exponentiation, and the result by
    `r ** -1` afterward.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The public key of the key.
        p: Private Prime 1.
        q: Private Prime 2.
        exp1: CRT Component dmp1.
        exp2: CRT Component dmq1.
        coeff: CRT Component iqmp.
    """

    def __init__(self, mod: int, pub_exp: int, priv_exp: int, p: int, q: int, exp1: int, exp2: int,
                 coeff: int) -> None:
        super().__init__(mod, priv_exp)
        self.pub: RSAPubKey = RSAPubKey(mod, pub_exp)
        self.p = p
        self.q = q
        self.exp1 = exp1
        self.exp2 = exp2
        self.coeff = coeff
        self.blinded = False

    @classmethod
    def from_material(cls, key: KeyMaterial) -> "RSAPrivKey":
        n, e, d, p, q, dp, dq, qinv = key.to_ints()
        return cls(n, e, d, p, q, dp, dq, qinv)

    @contextlib.contextmanager
    def blinding(self) -> Iterator["RSAPrivKey"]:
        """Enables blinding for the body of the `with` block, switching it off on every exit."""
        self.blinded = True
        try:
            yield self
        finally:
            self.blinded = False

    def _crt(self, message: int) -> int:
        m_1 = bignum.powmod(message, self.exp1, self.p, consttime=True)
        m_2 = bignum.powmod(message, self.exp2, self.q, consttime=True)
        h = ((m_1 - m_2) * self.coeff) % self.p
        return m_2 + self.q * h

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation accelerated with CRT. (Decrypt/Sign)

        The result is checked against the public exponent before it is returned, so a faulty computation never leaks
        a value that would allow factoring the modulus.

        Args:
            message: The int-marshalled message.

        Returns:
            `message ** d % mod`.

        Raises:
            ValueError: If the message is out of range for the current key or the key cannot run the CRT primitive.
            PrimitiveFailure: If the result does not match under the public exponent.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        if self.blinded:
            r = bignum.random_unit(self.mod)
            blinded = message * bignum.powmod(r, self.pub.expo, self.mod) % self.mod
            result = self._crt(blinded) * bignum.mod_inverse(r, self.mod) % self.mod
        else:
            result = self._crt(message) % self.mod
        if self.pub.c_rsa(result) != message:
            raise PrimitiveFailure("Private key operation failed its consistency check.")
        return result

    def release(self) -> None:
        super().release()
        self.pub.release()
        self.p = self.q = self.exp1 = self.exp2 = self.coeff = 0
        self.blinded = False


@contextlib.contextmanager
def _native_public(key: KeyMaterial) -> Iterator[RSAPubKey]:
    pub = RSAPubKey.from_material(key)
    try:
        yield pub
    finally:
        pub.release()


@contextlib.contextmanager
def _native_private(key: KeyMaterial) -> Iterator[RSAPrivKey]:
    priv = RSAPrivKey.from_material(key)
    try:
        yield priv
    finally:
        priv.release()


def _scheme_overhead(scheme: str) -> int:
    try:
        return SCHEME_OVERHEAD[scheme]
    except (KeyError, TypeError) as exc:
        raise UnsupportedAlgorithm(f"Unsupported encryption scheme: {scheme!r}") from exc


def _private_op(priv: RSAPrivKey, message: int) -> int:
    try:
        with priv.blinding():
            return priv.c_rsa(message)
    except ValueError as exc:
        raise PrimitiveFailure("Private key operation failed.") from exc


def max_plaintext(scheme: str, modulus_bits: int) -> int:
    """The longest plaintext `encrypt` accepts and encodes for a modulus size.

    Args:
        scheme: `pkcs1v1.5` or `oaep`.
        modulus_bits: Bit length of the modulus.

    Returns:
        The capacity in bytes, never negative.

    Raises:
        UnsupportedAlgorithm: If the scheme is unknown.
    """
    _scheme_overhead(scheme)
    k = (modulus_bits + 7) // 8
    if scheme == "oaep":
        return max(padding.oaep_max_message(k, OAEP_HASH), 0)
    return max(k - padding.PKCS1_OVERHEAD, 0)


def sign(algorithm: str, message: bytes, key: KeyMaterial) -> bytes:
    """Signs a digest using the private key.

    The digest is wrapped in a DigestInfo structure naming `algorithm` and padded per EMSA-PKCS1-v1_5.

    Args:
        algorithm: One of md5, ripemd160, sha1, sha224, sha256, sha384, sha512.
        message: The precomputed digest, 1 to 64 bytes. Hash the data first.
        key: Private key material passing `is_valid_private`.

    Returns:
        The signature, as long as the modulus.

    Raises:
        UnsupportedAlgorithm: If the algorithm is unknown.
        ValueError: If the digest length is out of range.
        InvalidKeyMaterial: If the key is not a sane private key.
        PrimitiveFailure: If the digest does not fit the key or the private operation fails.
    """
    if not isinstance(algorithm, str) or algorithm not in padding.DIGEST_OID:
        raise UnsupportedAlgorithm(f"Unsupported digest algorithm: {algorithm!r}")
    if not isinstance(message, BYTES_LIKE) or not MIN_DIGEST_LEN <= len(message) <= MAX_DIGEST_LEN:
        raise ValueError(f"Digest must be {MIN_DIGEST_LEN} to {MAX_DIGEST_LEN} bytes long.")
    if not validate.is_valid_private(key):
        raise InvalidKeyMaterial("Signing requires a valid private key.")
    logger.debug("Signing %d byte %s digest", len(message), algorithm)
    with _native_private(key) as priv:
        em = padding.emsa_pkcs1_v15_encode(algorithm, bytes(message), priv.bsize)
        signature = _private_op(priv, bignum.bytes_to_integer(em))
        return bignum.integer_to_bytes(signature, priv.bsize)


def verify(algorithm: str, message: bytes, signature: bytes, key: KeyMaterial) -> bool:
    """Verifies a signature over a digest.

    Malformed input, an invalid key, an unknown algorithm and a wrong signature are deliberately indistinguishable.

    Args:
        algorithm: One of md5, ripemd160, sha1, sha224, sha256, sha384, sha512.
        message: The precomputed digest, 1 to 64 bytes.
        signature: The signature, 1 to 3072 bytes.
        key: Public key material.

    Returns:
        True if the signature is valid, False otherwise.
    """
    if not isinstance(algorithm, str) or algorithm not in padding.DIGEST_OID:
        return False
    if not isinstance(message, BYTES_LIKE) or not MIN_DIGEST_LEN <= len(message) <= MAX_DIGEST_LEN:
        return False
    if not isinstance(signature, BYTES_LIKE) or not MIN_SIGNATURE_LEN <= len(signature) <= MAX_SIGNATURE_LEN:
        return False
    if not validate.is_valid_public(key):
        return False
    with _native_public(key) as pub:
        if len(signature) != pub.bsize:
            return False
        try:
            recovered = pub.c_rsa(bignum.bytes_to_integer(signature))
            expected = padding.emsa_pkcs1_v15_encode(algorithm, bytes(message), pub.bsize)
        except (ValueError, RSAEngineError):
            return False
        return hmac.compare_digest(bignum.integer_to_bytes(recovered, pub.bsize), expected)


def encrypt(scheme: str, message: bytes, key: KeyMaterial) -> bytes:
    """Encrypts a message with the public key.

    Args:
        scheme: `pkcs1v1.5` or `oaep`. OAEP uses SHA-1 and MGF1-SHA-1 with an empty label.
        message: The plaintext, at least one byte.
        key: Public key material passing `is_valid_public`.

    Returns:
        The ciphertext, as long as the modulus.

    Raises:
        UnsupportedAlgorithm: If the scheme is unknown.
        ValueError: If the message is empty.
        InvalidKeyMaterial: If the key is not a sane public key.
        PlaintextTooLong: If the message exceeds the scheme's limit for the modulus.
        PrimitiveFailure: If padding or the public operation fails.
    """
    overhead = _scheme_overhead(scheme)
    if not isinstance(message, BYTES_LIKE) or not message:
        raise ValueError("Message must be a non-empty byte string.")
    if not validate.is_valid_public(key):
        raise InvalidKeyMaterial("Encryption requires a valid public key.")
    logger.debug("Encrypting %d bytes with %s", len(message), scheme)
    with _native_public(key) as pub:
        if len(message) > pub.bsize - overhead:
            raise PlaintextTooLong(f"Message too long for a {pub.bsize} byte modulus using {scheme}.")
        if scheme == "oaep":
            em = padding.oaep_pad(bytes(message), pub.bsize, hashf=OAEP_HASH)
        else:
            em = padding.pkcs1_v15_pad(bytes(message), pub.bsize)
        try:
            ciphertext = pub.c_rsa(bignum.bytes_to_integer(em))
        except ValueError as exc:
            raise PrimitiveFailure("Public key operation failed.") from exc
        return bignum.integer_to_bytes(ciphertext, pub.bsize)


def decrypt(scheme: str, ciphertext: bytes, key: KeyMaterial) -> bytes:
    """Decrypts a ciphertext with the private key.

    Args:
        scheme: `pkcs1v1.5` or `oaep`, matching the one used for encryption.
        ciphertext: The ciphertext, 1 byte up to the modulus length.
        key: Private key material passing `is_valid_private`.

    Returns:
        The plaintext.

    Raises:
        UnsupportedAlgorithm: If the scheme is unknown.
        ValueError: If the ciphertext is empty.
        InvalidKeyMaterial: If the key is not a sane private key.
        PrimitiveFailure: If the ciphertext is out of range, the private operation fails or the padding is invalid.
    """
    _scheme_overhead(scheme)
    if not isinstance(ciphertext, BYTES_LIKE) or not ciphertext:
        raise ValueError("Ciphertext must be a non-empty byte string.")
    if not validate.is_valid_private(key):
        raise InvalidKeyMaterial("Decryption requires a valid private key.")
    logger.debug("Decrypting %d bytes with %s", len(ciphertext), scheme)
    with _native_private(key) as priv:
        if len(ciphertext) > priv.bsize:
            raise PrimitiveFailure("Ciphertext longer than the modulus.")
        message = _private_op(priv, bignum.bytes_to_integer(ciphertext))
        em = bignum.integer_to_bytes(message, priv.bsize)
        if scheme == "oaep":
            return padding.oaep_unpad(em, priv.bsize, hashf=OAEP_HASH)
        return padding.pkcs1_v15_unpad(em, priv.bsize)
