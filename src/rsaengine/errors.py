"""Exception types raised by the engine.

Every error also derives from the builtin exception that was historically raised for the same situation, so callers
catching `ValueError` or `RuntimeError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAEngineError(Exception):
    """Base class of all engine errors."""


class InvalidKeyMaterial(RSAEngineError, ValueError):
    """The key components violate a structural or bit-length invariant."""


class UnsupportedAlgorithm(RSAEngineError, ValueError):
    """Unknown digest identifier or encryption scheme."""


class PlaintextTooLong(RSAEngineError, ValueError):
    """The plaintext exceeds the capacity of the modulus for the chosen scheme."""


class MalformedEncoding(RSAEngineError, ValueError):
    """Serialized key material could not be decoded."""


class KeyCompletionFailed(RSAEngineError, RuntimeError):
    """A missing key component could not be derived, e.g. a modular inverse does not exist."""


class PrimitiveFailure(RSAEngineError, RuntimeError):
    """The underlying RSA primitive, padding or generation step failed."""
