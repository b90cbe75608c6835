"""JSON codec for encrypted key files (format version 3).

On-disk layout::

    {
      "address": "<hex>",
      "crypto": {
        "cipher": "aes-128-ctr",
        "ciphertext": "<hex>",
        "cipherparams": {"iv": "<hex>"},
        "kdf": "scrypt" | "pbkdf2",
        "kdfparams": {...},
        "mac": "<hex>"
      },
      "id": "<uuid>",
      "version": 3
    }

Decoding checks, in order: JSON structure and required fields, version,
cipher, KDF name, then the remaining field values. Every problem is raised
as a specific :class:`~shadowkey.core.exceptions.KeyFileError` subclass;
nothing cryptographic happens here.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Dict

from shadowkey.core.exceptions import (
    MalformedKeyFileError,
    UnsupportedCipherError,
    UnsupportedKDFError,
    UnsupportedPRFError,
    UnsupportedVersionError,
)
from shadowkey.core.models import address_from_hex, address_to_hex
from .crypto import BLOCK_SIZE, CIPHER_AES_128_CTR, MAC_LENGTH
from .kdf import (
    KDF_SCRYPT,
    PRF_HMAC_SHA256,
    SUPPORTED_KDFS,
    KDFParams,
    Pbkdf2Params,
    ScryptParams,
)


VERSION = 3


@dataclass(frozen=True)
class CryptoParams:
    cipher_text: bytes
    iv: bytes
    kdf_params: KDFParams
    mac: bytes
    cipher: str = CIPHER_AES_128_CTR

    @property
    def kdf(self) -> str:
        return self.kdf_params.name


@dataclass(frozen=True)
class KeyFileEnvelope:
    id: uuid.UUID
    address: bytes
    crypto: CryptoParams
    version: int = VERSION


def coerce_int(value: Any, field: str) -> int:
    """Normalize a JSON number to ``int``.

    Generic JSON decoders may hand back ``4096.0`` for ``4096``; integral
    floats are accepted, anything else (bools, strings, fractions, inf/nan)
    is a malformed key file.
    """
    if isinstance(value, bool):
        raise MalformedKeyFileError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise MalformedKeyFileError(f"{field} must be an integer, got {value!r}")


def _require(obj: Dict[str, Any], key: str, where: str) -> Any:
    if key not in obj:
        raise MalformedKeyFileError(f"missing required field {where}{key}")
    return obj[key]


def _require_dict(obj: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    value = _require(obj, key, where)
    if not isinstance(value, dict):
        raise MalformedKeyFileError(f"{where}{key} must be an object")
    return value


def _require_str(obj: Dict[str, Any], key: str, where: str) -> str:
    value = _require(obj, key, where)
    if not isinstance(value, str):
        raise MalformedKeyFileError(f"{where}{key} must be a string")
    return value


def _hex_field(obj: Dict[str, Any], key: str, where: str) -> bytes:
    value = _require_str(obj, key, where)
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise MalformedKeyFileError(f"{where}{key} is not valid hex") from e


def _decode_kdf_params(kdf: str, raw: Dict[str, Any]) -> KDFParams:
    where = "crypto.kdfparams."
    try:
        if kdf == KDF_SCRYPT:
            return ScryptParams(
                salt=_hex_field(raw, "salt", where),
                n=coerce_int(_require(raw, "n", where), where + "n"),
                r=coerce_int(_require(raw, "r", where), where + "r"),
                p=coerce_int(_require(raw, "p", where), where + "p"),
                dklen=coerce_int(_require(raw, "dklen", where), where + "dklen"),
            )
        # pbkdf2: the PRF is checked first so an unknown PRF is never reported as malformed
        prf = _require_str(raw, "prf", where)
        if prf != PRF_HMAC_SHA256:
            raise UnsupportedPRFError(f"unsupported PBKDF2 PRF: {prf!r}")
        return Pbkdf2Params(
            prf=prf,
            salt=_hex_field(raw, "salt", where),
            c=coerce_int(_require(raw, "c", where), where + "c"),
            dklen=coerce_int(_require(raw, "dklen", where), where + "dklen"),
        )
    except ValueError as e:
        raise MalformedKeyFileError(f"invalid {kdf} parameters: {e}") from e


def envelope_from_dict(obj: Any) -> KeyFileEnvelope:
    if not isinstance(obj, dict):
        raise MalformedKeyFileError("key file must be a JSON object")

    raw_version = _require(obj, "version", "")
    raw_id = _require(obj, "id", "")
    raw_address = _require(obj, "address", "")
    crypto = _require_dict(obj, "crypto", "")
    cipher = _require(crypto, "cipher", "crypto.")
    kdf = _require(crypto, "kdf", "crypto.")

    version = coerce_int(raw_version, "version")
    if version != VERSION:
        raise UnsupportedVersionError(f"version not supported: {version}")

    if cipher != CIPHER_AES_128_CTR:
        raise UnsupportedCipherError(f"cipher not supported: {cipher!r}")

    if kdf not in SUPPORTED_KDFS:
        raise UnsupportedKDFError(f"unsupported KDF: {kdf!r}")

    if not isinstance(raw_id, str):
        raise MalformedKeyFileError("id must be a string")
    try:
        key_id = uuid.UUID(raw_id)
    except ValueError as e:
        raise MalformedKeyFileError(f"id is not a valid UUID: {raw_id!r}") from e

    if not isinstance(raw_address, str):
        raise MalformedKeyFileError("address must be a string")
    try:
        address = address_from_hex(raw_address)
    except ValueError as e:
        raise MalformedKeyFileError(f"invalid address: {e}") from e

    cipher_text = _hex_field(crypto, "ciphertext", "crypto.")
    if not cipher_text:
        raise MalformedKeyFileError("crypto.ciphertext is empty")
    iv = _hex_field(_require_dict(crypto, "cipherparams", "crypto."), "iv", "crypto.cipherparams.")
    if len(iv) != BLOCK_SIZE:
        raise MalformedKeyFileError(f"iv must be {BLOCK_SIZE} bytes, got {len(iv)}")
    mac = _hex_field(crypto, "mac", "crypto.")
    if len(mac) != MAC_LENGTH:
        raise MalformedKeyFileError(f"mac must be {MAC_LENGTH} bytes, got {len(mac)}")

    kdf_params = _decode_kdf_params(kdf, _require_dict(crypto, "kdfparams", "crypto."))

    return KeyFileEnvelope(
        id=key_id,
        address=address,
        crypto=CryptoParams(
            cipher_text=cipher_text,
            iv=iv,
            kdf_params=kdf_params,
            mac=mac,
            cipher=cipher,
        ),
        version=version,
    )


def envelope_to_dict(envelope: KeyFileEnvelope) -> Dict[str, Any]:
    c = envelope.crypto
    return {
        "address": address_to_hex(envelope.address),
        "crypto": {
            "cipher": c.cipher,
            "ciphertext": c.cipher_text.hex(),
            "cipherparams": {"iv": c.iv.hex()},
            "kdf": c.kdf,
            "kdfparams": c.kdf_params.to_dict(),
            "mac": c.mac.hex(),
        },
        "id": str(envelope.id),
        "version": envelope.version,
    }


def encode_keyfile(envelope: KeyFileEnvelope) -> bytes:
    return json.dumps(envelope_to_dict(envelope), sort_keys=True).encode("utf-8")


def decode_keyfile(data: bytes | str) -> KeyFileEnvelope:
    """Parse key file bytes into a :class:`KeyFileEnvelope`."""
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedKeyFileError("key file is not valid UTF-8") from e
    try:
        obj = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedKeyFileError(f"key file is not valid JSON: {e}") from e
    return envelope_from_dict(obj)
