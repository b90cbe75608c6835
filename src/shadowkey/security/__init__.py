"""Security package of ShadowKey: passphrase-encrypted key files.

This package provides:
- scrypt / PBKDF2 key derivation with fixed Standard and Light profiles
- AES-128-CTR encryption and the Keccak-256 key file MAC
- the version 3 JSON key file codec
- PassphraseKeyStore, which ties these to a key directory
"""

from .kdf import (
    KDFProfile,
    ScryptParams,
    Pbkdf2Params,
    generate_salt,
    derive_key,
)
from .crypto import aes_ctr_xor, compute_mac, verify_mac
from .keyfile import KeyFileEnvelope, CryptoParams, encode_keyfile, decode_keyfile
from .keygen import generate_key_material, address_from_private_key
from .keystore import KeyStore, PassphraseKeyStore, encrypt_key, decrypt_key

__all__ = [
    "KDFProfile",
    "ScryptParams",
    "Pbkdf2Params",
    "generate_salt",
    "derive_key",
    "aes_ctr_xor",
    "compute_mac",
    "verify_mac",
    "KeyFileEnvelope",
    "CryptoParams",
    "encode_keyfile",
    "decode_keyfile",
    "generate_key_material",
    "address_from_private_key",
    "KeyStore",
    "PassphraseKeyStore",
    "encrypt_key",
    "decrypt_key",
]
