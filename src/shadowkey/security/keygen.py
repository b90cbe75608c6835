"""secp256k1 key material for new keys.

The private scalar is drawn from the caller's random source so that
``generate_new_key(rand=...)`` controls every random byte of a new key.
"""
from typing import Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from shadowkey.core.hashing import calculate_keccak256
from shadowkey.core.models import ADDRESS_LENGTH
from .crypto import RandomSource, read_random


SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
PRIVATE_KEY_LENGTH = 32


def generate_private_key(rand: Optional[RandomSource] = None) -> bytes:
    # rejection sampling keeps the scalar uniform in [1, order - 1]
    while True:
        candidate = read_random(PRIVATE_KEY_LENGTH, rand)
        if 1 <= int.from_bytes(candidate, "big") < SECP256K1_ORDER:
            return candidate


def public_key_bytes(private_key: bytes) -> bytes:
    """Return the 65-byte uncompressed SEC1 public key for ``private_key``."""
    scalar = int.from_bytes(private_key, "big")
    if not 1 <= scalar < SECP256K1_ORDER:
        raise ValueError("private key is out of range for secp256k1")
    pub = ec.derive_private_key(scalar, ec.SECP256K1()).public_key()
    return pub.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)


def address_from_private_key(private_key: bytes) -> bytes:
    # drop the 0x04 point prefix, keep the last 20 bytes of the hash
    return calculate_keccak256(public_key_bytes(private_key)[1:])[-ADDRESS_LENGTH:]


def generate_key_material(rand: Optional[RandomSource] = None) -> Tuple[bytes, bytes]:
    """Return ``(address, private_key)`` for a fresh secp256k1 key."""
    private_key = generate_private_key(rand)
    return address_from_private_key(private_key), private_key
