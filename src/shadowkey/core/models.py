"""
Base data model for a plaintext key held in memory
"""

from __future__ import annotations

from dataclasses import dataclass, field
import uuid


ADDRESS_LENGTH = 20


def address_to_hex(address: bytes) -> str:
    # lower-case hex without 0x prefix, the form used on disk and in file names
    return bytes(address).hex()


def address_from_hex(value: str) -> bytes:
    """Parse a hex address (optional ``0x`` prefix) into its raw bytes.

    Raises ``ValueError`` if the value is not hex or has the wrong length.
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    raw = bytes.fromhex(value)
    if len(raw) != ADDRESS_LENGTH:
        raise ValueError(f"address must be {ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw


@dataclass(frozen=True)
class Key:
    """A decrypted key: identifier, address and the private key bytes.

    Instances are never cached by the keystore; every retrieval rebuilds one
    from the key file.
    """

    id: uuid.UUID
    address: bytes
    private_key: bytes = field(repr=False)

    def __post_init__(self):
        if len(self.address) != ADDRESS_LENGTH:
            raise ValueError(f"address must be {ADDRESS_LENGTH} bytes, got {len(self.address)}")
        if not self.private_key:
            raise ValueError("private key must not be empty")

    @classmethod
    def new(cls, address: bytes, private_key: bytes) -> "Key":
        """Build a key with a fresh random UUID."""
        return cls(id=uuid.uuid4(), address=bytes(address), private_key=bytes(private_key))

    @property
    def address_hex(self) -> str:
        return address_to_hex(self.address)
