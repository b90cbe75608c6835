"""Unit tests for the Key Derivation Function (KDF) module."""

import pytest

from shadowkey.core.exceptions import RandomSourceError, UnsupportedKDFError, UnsupportedPRFError
from shadowkey.security.kdf import (
    KDFProfile,
    Pbkdf2Params,
    ScryptParams,
    derive_key,
    generate_salt,
)


def test_generate_salt_defaults():
    """Salt is 32 random bytes by default."""
    salt = generate_salt()
    assert isinstance(salt, bytes)
    assert len(salt) == 32


def test_generate_salt_uses_given_source():
    salt = generate_salt(length=8, rand=lambda n: b"\x07" * n)
    assert salt == b"\x07" * 8


def test_generate_salt_short_read():
    with pytest.raises(RandomSourceError):
        generate_salt(rand=lambda n: b"\x00" * (n - 1))


def test_generate_salt_source_oserror():
    def broken(n):
        raise OSError("entropy source unavailable")

    with pytest.raises(RandomSourceError):
        generate_salt(rand=broken)


def test_profiles():
    """Standard and Light profiles carry the fixed scrypt costs."""
    salt = b"\x01" * 32
    std = KDFProfile.STANDARD.scrypt_params(salt)
    light = KDFProfile.LIGHT.scrypt_params(salt)

    assert (std.n, std.r, std.p, std.dklen) == (1 << 18, 8, 1, 32)
    assert (light.n, light.r, light.p, light.dklen) == (4096, 8, 6, 32)
    assert light.salt == salt


def test_scrypt_is_deterministic():
    params = ScryptParams(salt=b"\xaa" * 32, n=16, r=8, p=1)
    first = derive_key("correct horse", params)
    second = derive_key(b"correct horse", params)

    assert first == second
    assert len(first) == 32


def test_scrypt_depends_on_salt_and_passphrase():
    a = derive_key("pass", ScryptParams(salt=b"\x01" * 32, n=16))
    b = derive_key("pass", ScryptParams(salt=b"\x02" * 32, n=16))
    c = derive_key("other", ScryptParams(salt=b"\x01" * 32, n=16))
    assert len({a, b, c}) == 3


def test_pbkdf2_known_vector():
    """PBKDF2-HMAC-SHA256("passwd", "salt", 1): first 32 bytes of the RFC 7914 vector."""
    key = derive_key("passwd", Pbkdf2Params(salt=b"salt", c=1))
    assert key.hex() == "55ac046e56e3089fec1691c22544b605f94185216dde0465e68b9d57c20dacbc"


@pytest.mark.parametrize("n", [0, 1, 3, 1000])
def test_scrypt_params_reject_bad_n(n):
    with pytest.raises(ValueError):
        ScryptParams(salt=b"s", n=n)


@pytest.mark.parametrize("n, r, p", [
    (1 << 40, 8, 1),
    (1 << 20, 8, 1),
    (16, 1 << 30, 1 << 30),
    (16, 8, 1 << 27),
])
def test_scrypt_params_reject_oversized_costs(n, r, p):
    with pytest.raises(ValueError):
        ScryptParams(salt=b"s", n=n, r=r, p=p)


def test_scrypt_params_accept_published_costs():
    """n=2^18 with r=8,p=1 (standard) and r=1,p=8 (other writers) stay in bounds."""
    ScryptParams(salt=b"s", n=1 << 18, r=8, p=1)
    ScryptParams(salt=b"s", n=1 << 18, r=1, p=8)


def test_pbkdf2_params_reject_oversized_iterations():
    with pytest.raises(ValueError):
        Pbkdf2Params(salt=b"s", c=1 << 70)


def test_params_reject_other_dklen():
    with pytest.raises(ValueError):
        ScryptParams(salt=b"s", n=16, dklen=64)
    with pytest.raises(ValueError):
        Pbkdf2Params(salt=b"s", c=1, dklen=16)


def test_pbkdf2_rejects_other_prf():
    with pytest.raises(UnsupportedPRFError):
        Pbkdf2Params(salt=b"s", c=1, prf="hmac-sha512")


def test_params_to_dict():
    salt = b"\xaa" * 4
    assert ScryptParams(salt=salt, n=4096, p=6).to_dict() == {
        "n": 4096, "r": 8, "p": 6, "dklen": 32, "salt": "aaaaaaaa",
    }
    assert Pbkdf2Params(salt=salt, c=10).to_dict() == {
        "c": 10, "dklen": 32, "prf": "hmac-sha256", "salt": "aaaaaaaa",
    }


def test_derive_key_unknown_params_type():
    with pytest.raises(UnsupportedKDFError):
        derive_key("pass", {"kdf": "argon2id"})
