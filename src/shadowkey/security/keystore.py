"""Passphrase-protected key store.

Keys are written as version 3 key files: scrypt (or, for files written
elsewhere, PBKDF2) stretches the passphrase into 32 bytes, the first half
drives AES-128-CTR over the private key and the second half feeds the
Keccak-256 MAC over the ciphertext.

Reading a key always goes: read file -> decode -> version / cipher / KDF
checks -> derive -> verify MAC -> decrypt. Decryption only runs after the
MAC matches, and any failure is raised to the caller untouched; there are
no retries.

The KDF is deliberately slow (up to ~1s and 256MB with the standard
profile). All calls block; run them in a worker thread from latency
sensitive code. There is no locking: callers serialize writes to the same
address.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Set, Tuple

from shadowkey.core.exceptions import AuthenticationError
from shadowkey.core.models import Key, address_to_hex
from shadowkey.core.storage import KeyDirectoryStorage
from .crypto import (
    BLOCK_SIZE,
    RandomSource,
    aes_ctr_xor,
    compute_mac,
    read_random,
    split_derived_key,
    verify_mac,
)
from .kdf import KDFParams, KDFProfile, derive_key, generate_salt
from .keyfile import CryptoParams, KeyFileEnvelope, decode_keyfile, encode_keyfile
from .keygen import generate_key_material


logger = logging.getLogger(__name__)

KeyGenerator = Callable[[Optional[RandomSource]], Tuple[bytes, bytes]]


def encrypt_key(
    key: Key,
    passphrase: bytes | str,
    kdf_params: KDFParams,
    rand: Optional[RandomSource] = None,
) -> KeyFileEnvelope:
    """Encrypt ``key`` under ``passphrase`` with the given KDF parameters (salt included)."""
    derived = derive_key(passphrase, kdf_params)
    encrypt_key_bytes, mac_key = split_derived_key(derived)

    iv = read_random(BLOCK_SIZE, rand)
    cipher_text = aes_ctr_xor(encrypt_key_bytes, key.private_key, iv)
    mac = compute_mac(mac_key, cipher_text)

    return KeyFileEnvelope(
        id=key.id,
        address=key.address,
        crypto=CryptoParams(cipher_text=cipher_text, iv=iv, kdf_params=kdf_params, mac=mac),
    )


def decrypt_key(envelope: KeyFileEnvelope, passphrase: bytes | str) -> bytes:
    """Return the private key bytes, or raise :class:`AuthenticationError` on MAC mismatch.

    The KDF comes from the envelope, never from the caller's profile.
    """
    c = envelope.crypto
    derived = derive_key(passphrase, c.kdf_params)
    encrypt_key_bytes, mac_key = split_derived_key(derived)

    if not verify_mac(mac_key, c.cipher_text, c.mac):
        raise AuthenticationError("could not decrypt key with given passphrase")

    return aes_ctr_xor(encrypt_key_bytes, c.cipher_text, c.iv)


class KeyStore(ABC):
    """Operations every key store backend provides."""

    @abstractmethod
    def generate_new_key(self, passphrase: bytes | str, rand: Optional[RandomSource] = None) -> Key:
        ...

    @abstractmethod
    def get_key(self, address: bytes, passphrase: bytes | str) -> Key:
        ...

    @abstractmethod
    def store_key(self, key: Key, passphrase: bytes | str) -> None:
        ...

    @abstractmethod
    def delete_key(self, address: bytes, passphrase: bytes | str) -> None:
        ...

    @abstractmethod
    def cleanup(self, address: bytes) -> None:
        ...

    @abstractmethod
    def get_key_addresses(self) -> Set[bytes]:
        ...


class PassphraseKeyStore(KeyStore):
    """
    Key store that encrypts every key with a passphrase.

    ``profile`` fixes the scrypt cost for every key this instance writes;
    files already on disk keep the parameters they were written with.
    """

    def __init__(
        self,
        storage: KeyDirectoryStorage,
        profile: KDFProfile = KDFProfile.STANDARD,
        rand: Optional[RandomSource] = None,
        key_generator: Optional[KeyGenerator] = None,
    ):
        self.storage = storage
        self.profile = profile
        self._rand = rand
        self._key_generator = key_generator or generate_key_material

    def generate_new_key(self, passphrase: bytes | str, rand: Optional[RandomSource] = None) -> Key:
        """Create a key from ``rand`` (or the store's source) and store it right away."""
        address, private_key = self._key_generator(rand or self._rand)
        key = Key.new(address, private_key)
        self.store_key(key, passphrase)
        logger.info("generated new key %s", key.address_hex)
        return key

    def store_key(self, key: Key, passphrase: bytes | str) -> None:
        salt = generate_salt(rand=self._rand)
        envelope = encrypt_key(key, passphrase, self.profile.scrypt_params(salt), rand=self._rand)
        self.storage.write(key.address, encode_keyfile(envelope))
        logger.debug("stored key %s (%s profile)", key.address_hex, self.profile.value)

    def get_key(self, address: bytes, passphrase: bytes | str) -> Key:
        envelope = self._read_envelope(address)
        private_key = self._decrypt(address, envelope, passphrase)
        return Key(id=envelope.id, address=bytes(address), private_key=private_key)

    def delete_key(self, address: bytes, passphrase: bytes | str) -> None:
        # only delete if the correct passphrase is given
        self._decrypt(address, self._read_envelope(address), passphrase)
        self.storage.delete(address)
        logger.info("deleted key %s", address_to_hex(address))

    def cleanup(self, address: bytes) -> None:
        """Remove the key file without checking the passphrase.

        Meant for rolling back a half-finished operation; never expose this
        to untrusted callers, :meth:`delete_key` is the authorized path.
        """
        self.storage.delete(address)
        logger.info("cleaned up key file for %s", address_to_hex(address))

    def get_key_addresses(self) -> Set[bytes]:
        return self.storage.list_addresses()

    def _read_envelope(self, address: bytes) -> KeyFileEnvelope:
        return decode_keyfile(self.storage.read(address))

    def _decrypt(self, address: bytes, envelope: KeyFileEnvelope, passphrase: bytes | str) -> bytes:
        try:
            return decrypt_key(envelope, passphrase)
        except AuthenticationError:
            logger.warning("MAC mismatch for key %s", address_to_hex(address))
            raise
