"""Unit tests for the Key model and address helpers."""

import uuid

import pytest

from shadowkey.core.models import Key, address_from_hex, address_to_hex


def test_key_new_assigns_fresh_uuid():
    a = Key.new(b"\x01" * 20, b"\x02" * 32)
    b = Key.new(b"\x01" * 20, b"\x02" * 32)
    assert isinstance(a.id, uuid.UUID)
    assert a.id != b.id


def test_key_repr_hides_private_key():
    key = Key.new(b"\x01" * 20, b"\xde\xad" * 16)
    assert "dead" not in repr(key)
    assert "private_key" not in repr(key)


def test_key_validation():
    with pytest.raises(ValueError):
        Key.new(b"\x01" * 19, b"\x02" * 32)
    with pytest.raises(ValueError):
        Key.new(b"\x01" * 20, b"")


def test_address_hex_helpers():
    raw = bytes(range(20))
    assert address_to_hex(raw) == raw.hex()
    assert address_from_hex(raw.hex()) == raw
    assert address_from_hex("0x" + raw.hex().upper()) == raw
    assert Key.new(raw, b"\x01").address_hex == raw.hex()


@pytest.mark.parametrize("value", ["", "zz" * 20, "aa" * 21, "0x"])
def test_address_from_hex_rejects(value):
    with pytest.raises(ValueError):
        address_from_hex(value)
