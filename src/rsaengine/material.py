"""The RSA key material record shared by every part of the engine.

A key is a set of up to eight big-endian component buffers. Public keys carry only the modulus and public exponent,
private keys may additionally carry the private exponent, both primes and the three CRT parameters. Absent components
are empty buffers.

Typical usage example:

    partial = KeyMaterial.from_ints(e=65537, p=p, q=q)
    has_update, delta = complete(partial)
    full = partial.merge(delta)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import dataclasses

from rsaengine import bignum

FIELDS: tuple[str, ...] = ("n", "e", "d", "p", "q", "dp", "dq", "qinv")
PUBLIC_FIELDS: tuple[str, ...] = ("n", "e")
PRIVATE_FIELDS: tuple[str, ...] = FIELDS[2:]


@dataclasses.dataclass(frozen=True)
class KeyMaterial:
    """RSA key components as owned big-endian byte strings.

    Leading zero bytes are stripped on construction, hence two records compare equal exactly when their components
    hold the same integers. Secret components are kept out of the repr.

    Attributes:
        n: The modulus.
        e: The public exponent.
        d: The private exponent.
        p: Private Prime 1.
        q: Private Prime 2.
        dp: CRT Component d mod (p - 1).
        dq: CRT Component d mod (q - 1).
        qinv: CRT Component q^-1 mod p.
    """
    n: bytes = b""
    e: bytes = b""
    d: bytes = dataclasses.field(default=b"", repr=False)
    p: bytes = dataclasses.field(default=b"", repr=False)
    q: bytes = dataclasses.field(default=b"", repr=False)
    dp: bytes = dataclasses.field(default=b"", repr=False)
    dq: bytes = dataclasses.field(default=b"", repr=False)
    qinv: bytes = dataclasses.field(default=b"", repr=False)

    def __post_init__(self) -> None:
        for name in FIELDS:
            value = getattr(self, name)
            if value is None:
                value = b""
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise TypeError(f"Component {name} must be a bytes-like object, not {type(value).__name__}.")
            object.__setattr__(self, name, bytes(value).lstrip(b"\x00"))

    @classmethod
    def from_ints(cls, **components: int) -> "KeyMaterial":
        """Builds key material from integer components.

        Args:
            **components: Any of the component names mapped to non-negative integers. Zero means absent.

        Returns:
            The key material.
        """
        unknown = set(components) - set(FIELDS)
        if unknown:
            raise TypeError(f"Unknown key components: {', '.join(sorted(unknown))}")
        return cls(**{name: bignum.integer_to_bytes(value) for name, value in components.items()})

    def to_ints(self) -> tuple[int, int, int, int, int, int, int, int]:
        """Returns all eight components as integers, absent ones as zero, in field order."""
        return tuple(bignum.bytes_to_integer(getattr(self, name)) for name in FIELDS)

    def bits(self, name: str) -> int:
        return bignum.count_bits(getattr(self, name))

    @property
    def is_private(self) -> bool:
        return any(getattr(self, name) for name in PRIVATE_FIELDS)

    def present(self) -> tuple[str, ...]:
        return tuple(name for name in FIELDS if getattr(self, name))

    def public(self) -> "KeyMaterial":
        """Projects the key onto its public components."""
        return KeyMaterial(n=self.n, e=self.e)

    def merge(self, delta: "KeyMaterial | None") -> "KeyMaterial":
        """Fills absent components from `delta`.

        Components already present are never overwritten, so caller-chosen values survive verbatim.

        Args:
            delta: Key material holding derived components, e.g. the second item returned by `complete`.

        Returns:
            A new record, or this one if `delta` is None.
        """
        if delta is None:
            return self
        return dataclasses.replace(
            self, **{name: getattr(delta, name) for name in FIELDS if not getattr(self, name) and getattr(delta, name)})
