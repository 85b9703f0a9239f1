# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import dataclasses

import pytest

from rsaengine.material import FIELDS
from rsaengine.material import KeyMaterial


def test_defaults_absent():
    key = KeyMaterial()
    assert key.present() == ()
    assert key.to_ints() == (0,) * len(FIELDS)
    assert not key.is_private


def test_strips_leading_zeros():
    key = KeyMaterial(n=b"\x00\x00\x01\x02", e=bytearray(b"\x00\x03"))
    assert key.n == b"\x01\x02"
    assert key.e == b"\x03"
    assert key == KeyMaterial(n=b"\x01\x02", e=b"\x03")


def test_none_is_absent():
    assert KeyMaterial(d=None) == KeyMaterial()


@pytest.mark.parametrize("value", [5, "abc", [1, 2]])
def test_rejects_non_bytes(value):
    with pytest.raises(TypeError):
        KeyMaterial(n=value)


def test_frozen():
    key = KeyMaterial(n=b"\x01")
    with pytest.raises(dataclasses.FrozenInstanceError):
        key.n = b"\x02"


def test_from_ints():
    key = KeyMaterial.from_ints(n=0x0102, e=3, d=0)
    assert key.n == b"\x01\x02"
    assert key.e == b"\x03"
    assert key.d == b""
    assert key.to_ints() == (0x0102, 3, 0, 0, 0, 0, 0, 0)


def test_from_ints_unknown():
    with pytest.raises(TypeError, match="phi"):
        KeyMaterial.from_ints(n=5, phi=4)


def test_bits():
    key = KeyMaterial.from_ints(n=2**511 + 1, e=65537)
    assert key.bits("n") == 512
    assert key.bits("e") == 17
    assert key.bits("d") == 0


def test_projection(small_key):
    assert small_key.is_private
    assert small_key.present() == FIELDS
    pub = small_key.public()
    assert not pub.is_private
    assert pub.present() == ("n", "e")
    assert pub.n == small_key.n
    assert pub.e == small_key.e


def test_repr_hides_secrets():
    text = repr(KeyMaterial.from_ints(n=77, e=7, d=43, p=11, q=7, dp=3, dq=1, qinv=8))
    assert text == "KeyMaterial(n=b'M', e=b'\\x07')"


def test_merge_fills_absent():
    partial = KeyMaterial.from_ints(e=3, p=11, q=7)
    delta = KeyMaterial.from_ints(n=77, d=7)
    merged = partial.merge(delta)
    assert merged.to_ints()[:5] == (77, 3, 7, 11, 7)
    assert partial.present() == ("e", "p", "q")


def test_merge_keeps_present():
    partial = KeyMaterial.from_ints(e=3, p=11, q=7)
    merged = partial.merge(KeyMaterial.from_ints(e=5, n=77))
    assert merged.e == b"\x03"
    assert merged.n == bytes([77])


def test_merge_none():
    partial = KeyMaterial.from_ints(e=3)
    assert partial.merge(None) is partial
