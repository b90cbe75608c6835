"""Unit tests for the Keccak-256 helper."""

from shadowkey.core.hashing import calculate_keccak256


def test_keccak256_empty_input():
    """Keccak-256 of the empty string (differs from NIST SHA3-256)."""
    assert calculate_keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_keccak256_concatenates_chunks():
    assert calculate_keccak256(b"ab", b"cd") == calculate_keccak256(b"abcd")
    assert len(calculate_keccak256(b"x")) == 32
