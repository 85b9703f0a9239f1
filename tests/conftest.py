"""Shared key fixtures for the test-suite."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest
import sympy

from rsaengine import KeyMaterial

E = 65537
TARGET_SIZES = [1024, 2048]
_known_keys = {}


def material_from(pk: rsa.RSAPrivateKey) -> KeyMaterial:
    """Converts a cryptography key into engine key material."""
    privs = pk.private_numbers()
    pubs = privs.public_numbers
    return KeyMaterial.from_ints(n=pubs.n,
                                 e=pubs.e,
                                 d=privs.d,
                                 p=privs.p,
                                 q=privs.q,
                                 dp=privs.dmp1,
                                 dq=privs.dmq1,
                                 qinv=privs.iqmp)


def small_primes() -> tuple[int, int]:
    """A fixed pair of 256 bit primes whose product has exactly 512 bits."""
    p = sympy.nextprime(3 << 254)
    while math.gcd(p - 1, E) != 1:
        p = sympy.nextprime(p)
    q = sympy.nextprime(p + (1 << 200))
    while math.gcd(q - 1, E) != 1:
        q = sympy.nextprime(q)
    return int(p), int(q)


def known_key(size: int) -> rsa.RSAPrivateKey:
    if size not in _known_keys:
        _known_keys[size] = rsa.generate_private_key(public_exponent=E, key_size=size)
    return _known_keys[size]


@pytest.fixture(scope="session", params=TARGET_SIZES)
def keyset(request) -> tuple[rsa.RSAPrivateKey, KeyMaterial]:
    template_key = known_key(request.param)
    return template_key, material_from(template_key)


@pytest.fixture(scope="session")
def key_1024() -> tuple[rsa.RSAPrivateKey, KeyMaterial]:
    template_key = known_key(1024)
    return template_key, material_from(template_key)


@pytest.fixture(scope="session")
def small_key() -> KeyMaterial:
    """512 bit key, below what the reference library is willing to generate."""
    p, q = small_primes()
    phi = (p - 1) * (q - 1)
    d = pow(E, -1, phi)
    return KeyMaterial.from_ints(n=p * q, e=E, d=d, p=p, q=q, dp=d % (p - 1), dq=d % (q - 1), qinv=pow(q, -1, p))


@pytest.fixture(scope="session")
def small_pair() -> tuple[int, int]:
    return small_primes()


@pytest.fixture(scope="session")
def key_2048() -> tuple[rsa.RSAPrivateKey, KeyMaterial]:
    template_key = known_key(2048)
    return template_key, material_from(template_key)
