# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import dataclasses
import math

import pytest
import sympy

from rsaengine import bignum
from rsaengine import validate
from rsaengine.material import KeyMaterial

MOD_512 = b"\x80" + b"\x00" * 62 + b"\x01"
E = bignum.integer_to_bytes(65537)


def alter(key: KeyMaterial, **components: int) -> KeyMaterial:
    return dataclasses.replace(key, **{k: bignum.integer_to_bytes(v) for k, v in components.items()})


@pytest.mark.parametrize("n,valid", [
    (b"\x7f" + b"\xff" * 63, False),
    (MOD_512, True),
    (b"\xff" * 2048, True),
    (b"\x01" + b"\x00" * 2048, False),
    (b"", False),
])
def test_public_modulus_bounds(n, valid):
    assert validate.is_valid_public(KeyMaterial(n=n, e=E)) == valid


@pytest.mark.parametrize("e,valid", [
    (0, False),
    (1, False),
    (2, False),
    (3, True),
    (65536, False),
    (65537, True),
    (2**33 - 1, True),
    (2**33 + 1, False),
])
def test_public_exponent_bounds(e, valid):
    key = KeyMaterial(n=MOD_512, e=bignum.integer_to_bytes(e))
    assert validate.is_valid_public(key) == valid


@pytest.mark.parametrize("key", [None, "key", (MOD_512, E), {"n": MOD_512, "e": E}])
def test_not_key_material(key):
    assert not validate.is_valid_public(key)
    assert not validate.is_valid_private(key)
    assert not validate.is_valid_for_completion(key)
    assert not validate.needs_completion(key)
    assert not validate.check_private(key)


def test_private_valid(keyset, small_key):
    assert validate.is_valid_private(keyset[1])
    assert validate.is_valid_private(small_key)
    assert validate.is_valid_public(small_key)


def test_private_rejects_public(small_key):
    assert not validate.is_valid_private(small_key.public())


@pytest.mark.parametrize("name", ["d", "p", "q", "dp", "dq", "qinv"])
def test_private_requires_component(small_key, name):
    assert not validate.is_valid_private(dataclasses.replace(small_key, **{name: b""}))


def test_private_prime_bits_must_add_up(small_key):
    _, _, _, p, q, _, _, _ = small_key.to_ints()
    assert not validate.is_valid_private(alter(small_key, p=p >> 1))
    assert not validate.is_valid_private(alter(small_key, q=q << 1))


def test_private_bounds(small_key):
    n, _, _, p, q, _, _, _ = small_key.to_ints()
    assert not validate.is_valid_private(alter(small_key, d=n << 1))
    assert not validate.is_valid_private(alter(small_key, dp=p << 1))
    assert not validate.is_valid_private(alter(small_key, dq=q << 1))
    assert not validate.is_valid_private(alter(small_key, qinv=p << 1))


@pytest.mark.parametrize("present,valid", [
    (("e", "p", "q"), True),
    (("d", "p", "q"), True),
    (("e", "d", "p", "q"), True),
    (("n", "e", "p", "q"), True),
    (("e", "p", "q", "dp", "dq", "qinv"), True),
    (("p", "q"), False),
    (("n", "e", "p"), False),
    (("n", "e", "q"), False),
    (("n", "e", "d"), False),
    ((), False),
])
def test_for_completion(small_key, present, valid):
    partial = KeyMaterial(**{name: getattr(small_key, name) for name in present})
    assert validate.is_valid_for_completion(partial) == valid


def test_for_completion_bounds(small_key):
    n, e, d, p, q, dp, dq, qinv = small_key.to_ints()
    partial = KeyMaterial.from_ints(e=e, p=p, q=q)
    assert not validate.is_valid_for_completion(alter(partial, n=n << 1))
    assert not validate.is_valid_for_completion(alter(partial, e=e + 1))
    assert not validate.is_valid_for_completion(alter(partial, d=n << 1))
    assert not validate.is_valid_for_completion(alter(partial, dp=p << 1))
    assert not validate.is_valid_for_completion(alter(partial, dq=q << 1))
    assert not validate.is_valid_for_completion(alter(partial, qinv=p << 1))
    assert validate.is_valid_for_completion(alter(partial, d=d, dp=dp, dq=dq, qinv=qinv))


def test_needs_completion(small_key):
    assert not validate.needs_completion(small_key)
    for name in ("n", "e", "d", "dp", "dq", "qinv"):
        assert validate.needs_completion(dataclasses.replace(small_key, **{name: b""}))


def test_check_private(keyset, small_key):
    assert validate.check_private(keyset[1])
    assert validate.check_private(small_key)


def test_check_private_rejects_inconsistent(small_key):
    n, e, d, p, q, dp, dq, qinv = small_key.to_ints()
    assert not validate.check_private(alter(small_key, d=d + 2))
    assert not validate.check_private(alter(small_key, dp=dp ^ 2))
    assert not validate.check_private(alter(small_key, dq=dq ^ 2))
    assert not validate.check_private(alter(small_key, qinv=qinv ^ 2))
    assert not validate.check_private(alter(small_key, e=e + 2))
    assert not validate.check_private(alter(small_key, n=n ^ 4))


def test_check_private_rejects_composite_factors():
    e = 65537
    a = int(sympy.nextprime(7 << 125))
    b = int(sympy.nextprime(a + (1 << 90)))
    p = a * b
    q = int(sympy.nextprime(3 << 254))
    while math.gcd(e, (a - 1) * (b - 1) * (q - 1)) != 1 or math.gcd(e, p - 1) != 1:
        q = int(sympy.nextprime(q))
        b = int(sympy.nextprime(b))
        p = a * b
    # A key that is consistent in every relation but built on a composite factor.
    lam = math.lcm(p - 1, q - 1)
    d = pow(e, -1, lam)
    key = KeyMaterial.from_ints(n=p * q, e=e, d=d, p=p, q=q, dp=d % (p - 1), dq=d % (q - 1), qinv=pow(q, -1, p))
    assert validate.is_valid_private(key)
    assert not validate.check_private(key)


def test_check_private_uses_primality(mocker, small_key):
    spy = mocker.patch("rsaengine.primes.check_prime", return_value=False)
    assert not validate.check_private(small_key)
    spy.assert_called_once()
