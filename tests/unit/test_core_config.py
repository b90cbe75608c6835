"""Unit tests for environment driven configuration."""

import logging
from pathlib import Path

import pytest

from shadowkey.core.config import KeyStoreConfig, parse_profile
from shadowkey.core.exceptions import ConfigError
from shadowkey.core.storage import KeyDirectoryStorage
from shadowkey.security.kdf import KDFProfile


def test_defaults():
    cfg = KeyStoreConfig.from_env({})
    assert cfg.keys_dir == Path.home() / ".shadowkey" / "keystore"
    assert cfg.profile is KDFProfile.STANDARD
    assert cfg.log_level == logging.WARNING


def test_from_env(tmp_path):
    cfg = KeyStoreConfig.from_env({
        "SHADOWKEY_HOME": str(tmp_path),
        "SHADOWKEY_KDF": "Light",
        "SHADOWKEY_LOG_LEVEL": "debug",
    })
    assert cfg.keys_dir == tmp_path
    assert cfg.profile is KDFProfile.LIGHT
    assert cfg.log_level == logging.DEBUG


def test_reads_os_environ(monkeypatch, tmp_path):
    monkeypatch.setenv("SHADOWKEY_HOME", str(tmp_path))
    monkeypatch.delenv("SHADOWKEY_KDF", raising=False)
    assert KeyStoreConfig.from_env().keys_dir == tmp_path


def test_bad_profile():
    with pytest.raises(ConfigError):
        parse_profile("paranoid")


def test_bad_log_level():
    with pytest.raises(ConfigError):
        KeyStoreConfig.from_env({"SHADOWKEY_LOG_LEVEL": "chatty"})


def test_default_matches_storage_default():
    assert KeyStoreConfig().keys_dir == KeyDirectoryStorage().root
