"""Cipher and MAC primitives for key files.

- AES-128 in CTR mode, no padding: encryption and decryption are the same
  XOR with the keystream, so output length always equals input length.
- The MAC is Keccak-256 over ``mac_key || ciphertext``. This is a plain hash
  of the concatenation, not HMAC; the byte layout is fixed by the key file
  format and must stay as is for existing files to verify.
"""
import hmac
import os
from typing import Callable, Optional, Tuple

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from shadowkey.core.exceptions import RandomSourceError
from shadowkey.core.hashing import calculate_keccak256


CIPHER_AES_128_CTR = "aes-128-ctr"
BLOCK_SIZE = 16
CIPHER_KEY_LENGTH = 16
MAC_LENGTH = 32

RandomSource = Callable[[int], bytes]


def read_random(n: int, rand: Optional[RandomSource] = None) -> bytes:
    """Read exactly ``n`` bytes from ``rand`` (default ``os.urandom``)."""
    rand = rand or os.urandom
    try:
        data = rand(n)
    except OSError as e:
        raise RandomSourceError(f"random source failed: {e}") from e
    if data is None or len(data) != n:
        got = 0 if data is None else len(data)
        raise RandomSourceError(f"random source returned {got} bytes, expected {n}")
    return bytes(data)


def split_derived_key(derived_key: bytes) -> Tuple[bytes, bytes]:
    # first half encrypts, second half authenticates
    if len(derived_key) != 2 * CIPHER_KEY_LENGTH:
        raise ValueError(f"derived key must be {2 * CIPHER_KEY_LENGTH} bytes")
    return derived_key[:CIPHER_KEY_LENGTH], derived_key[CIPHER_KEY_LENGTH:]


def aes_ctr_xor(key: bytes, data: bytes, iv: bytes) -> bytes:
    if len(key) != CIPHER_KEY_LENGTH:
        raise ValueError(f"cipher key must be {CIPHER_KEY_LENGTH} bytes, got {len(key)}")
    if len(iv) != BLOCK_SIZE:
        raise ValueError(f"iv must be {BLOCK_SIZE} bytes, got {len(iv)}")
    encryptor = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    return encryptor.update(data) + encryptor.finalize()


def compute_mac(mac_key: bytes, cipher_text: bytes) -> bytes:
    return calculate_keccak256(mac_key, cipher_text)


def verify_mac(mac_key: bytes, cipher_text: bytes, mac: bytes) -> bool:
    expected = compute_mac(mac_key, cipher_text)
    return hmac.compare_digest(expected, mac)
