"""Key derivation for key files: scrypt and PBKDF2-HMAC-SHA256.

Parameters travel as a tagged union, ``ScryptParams | Pbkdf2Params``; the
``kdf`` name written to disk comes from the class, so an unknown algorithm
can never reach :func:`derive_key`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from shadowkey.core.exceptions import UnsupportedKDFError, UnsupportedPRFError
from .crypto import RandomSource, read_random


logger = logging.getLogger(__name__)

KDF_SCRYPT = "scrypt"
KDF_PBKDF2 = "pbkdf2"
SUPPORTED_KDFS = (KDF_SCRYPT, KDF_PBKDF2)
PRF_HMAC_SHA256 = "hmac-sha256"

DKLEN = 32
SALT_LENGTH = 32

# n,r,p = 2^18, 8, 1 uses 256MB memory and approx 1s CPU time on a modern CPU.
STD_SCRYPT_N = 1 << 18
STD_SCRYPT_P = 1

# n,r,p = 2^12, 8, 6 uses 4MB memory and approx 100ms CPU time on a modern CPU.
LIGHT_SCRYPT_N = 1 << 12
LIGHT_SCRYPT_P = 6

SCRYPT_R = 8

# Upper bounds for parameters read from key files. 128 * r * (n + p) bytes is
# the scrypt working set; 1 GiB is four times the standard profile.
SCRYPT_MAX_MEMORY = 1 << 30
SCRYPT_MAX_PR = (1 << 30) - 1
PBKDF2_MAX_ITERATIONS = (1 << 32) - 1


def _check_positive(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class ScryptParams:
    salt: bytes
    n: int
    r: int = SCRYPT_R
    p: int = 1
    dklen: int = DKLEN

    name: ClassVar[str] = KDF_SCRYPT

    def __post_init__(self):
        _check_positive("n", self.n)
        if self.n < 2 or self.n & (self.n - 1):
            raise ValueError(f"n must be a power of two greater than 1, got {self.n}")
        _check_positive("r", self.r)
        _check_positive("p", self.p)
        if 128 * self.r * (self.n + self.p) > SCRYPT_MAX_MEMORY:
            raise ValueError(f"n={self.n}, r={self.r}, p={self.p} needs more than {SCRYPT_MAX_MEMORY} bytes of memory")
        if self.p * self.r > SCRYPT_MAX_PR:
            raise ValueError(f"p * r must not exceed {SCRYPT_MAX_PR}, got {self.p * self.r}")
        if self.dklen != DKLEN:
            raise ValueError(f"dklen must be {DKLEN}, got {self.dklen}")

    def to_dict(self) -> Dict:
        return {
            "n": self.n,
            "r": self.r,
            "p": self.p,
            "dklen": self.dklen,
            "salt": self.salt.hex(),
        }


@dataclass(frozen=True)
class Pbkdf2Params:
    salt: bytes
    c: int
    prf: str = PRF_HMAC_SHA256
    dklen: int = DKLEN

    name: ClassVar[str] = KDF_PBKDF2

    def __post_init__(self):
        if self.prf != PRF_HMAC_SHA256:
            raise UnsupportedPRFError(f"unsupported PBKDF2 PRF: {self.prf!r}")
        _check_positive("c", self.c)
        if self.c > PBKDF2_MAX_ITERATIONS:
            raise ValueError(f"c must not exceed {PBKDF2_MAX_ITERATIONS}, got {self.c}")
        if self.dklen != DKLEN:
            raise ValueError(f"dklen must be {DKLEN}, got {self.dklen}")

    def to_dict(self) -> Dict:
        return {
            "c": self.c,
            "dklen": self.dklen,
            "prf": self.prf,
            "salt": self.salt.hex(),
        }


KDFParams = Union[ScryptParams, Pbkdf2Params]


class KDFProfile(Enum):
    # scrypt cost applied to every key a store writes
    STANDARD = "standard"
    LIGHT = "light"

    @property
    def scrypt_n(self) -> int:
        return STD_SCRYPT_N if self is KDFProfile.STANDARD else LIGHT_SCRYPT_N

    @property
    def scrypt_p(self) -> int:
        return STD_SCRYPT_P if self is KDFProfile.STANDARD else LIGHT_SCRYPT_P

    def scrypt_params(self, salt: bytes) -> ScryptParams:
        return ScryptParams(salt=salt, n=self.scrypt_n, r=SCRYPT_R, p=self.scrypt_p, dklen=DKLEN)


def generate_salt(length: int = SALT_LENGTH, rand: Optional[RandomSource] = None) -> bytes:
    """Return a fresh random salt."""
    return read_random(length, rand)


def derive_key(passphrase: bytes | str, params: KDFParams) -> bytes:
    """
    Derive the 32-byte key-file key from a passphrase.
    Deterministic: the same passphrase and params always give the same bytes.
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    if isinstance(params, ScryptParams):
        logger.debug("deriving key with scrypt n=%d r=%d p=%d", params.n, params.r, params.p)
        kdf = Scrypt(salt=params.salt, length=params.dklen, n=params.n, r=params.r, p=params.p)
        return kdf.derive(passphrase)

    if isinstance(params, Pbkdf2Params):
        logger.debug("deriving key with pbkdf2 c=%d", params.c)
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=params.dklen,
            salt=params.salt,
            iterations=params.c,
        )
        return kdf.derive(passphrase)

    raise UnsupportedKDFError(f"unsupported KDF: {type(params).__name__}")
