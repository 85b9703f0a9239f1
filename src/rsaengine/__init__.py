"""RSA key material engine.

Validates, completes, serializes and uses RSA key components (modulus, exponents, prime factors and CRT parameters)
under strict bit-length invariants. Signing, verification, encryption and decryption run on transient native keys,
with blinding and constant-time arithmetic around every private key operation.

Typical usage example:

    priv = generate(3072)
    c = encrypt("oaep", b"Hi there!", priv.public())
    r = decrypt("oaep", c, priv)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsaengine.complete import complete
from rsaengine.encoding import decode_arena
from rsaengine.encoding import encode_arena
from rsaengine.encoding import export_private
from rsaengine.encoding import export_public
from rsaengine.encoding import import_private
from rsaengine.encoding import import_public
from rsaengine.errors import InvalidKeyMaterial
from rsaengine.errors import KeyCompletionFailed
from rsaengine.errors import MalformedEncoding
from rsaengine.errors import PlaintextTooLong
from rsaengine.errors import PrimitiveFailure
from rsaengine.errors import RSAEngineError
from rsaengine.errors import UnsupportedAlgorithm
from rsaengine.keygen import generate
from rsaengine.material import KeyMaterial
from rsaengine.rsa import decrypt
from rsaengine.rsa import encrypt
from rsaengine.rsa import max_plaintext
from rsaengine.rsa import sign
from rsaengine.rsa import verify
from rsaengine.validate import check_private
from rsaengine.validate import is_valid_for_completion
from rsaengine.validate import is_valid_private
from rsaengine.validate import is_valid_public
from rsaengine.validate import needs_completion

__version__ = "0.1.0"
__all__ = [
    "KeyMaterial",
    "is_valid_public",
    "is_valid_private",
    "is_valid_for_completion",
    "needs_completion",
    "check_private",
    "complete",
    "generate",
    "sign",
    "verify",
    "encrypt",
    "decrypt",
    "max_plaintext",
    "encode_arena",
    "decode_arena",
    "export_private",
    "import_private",
    "export_public",
    "import_public",
    "RSAEngineError",
    "InvalidKeyMaterial",
    "UnsupportedAlgorithm",
    "PlaintextTooLong",
    "MalformedEncoding",
    "KeyCompletionFailed",
    "PrimitiveFailure",
]
