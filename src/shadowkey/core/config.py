"""Runtime configuration for ShadowKey, driven by environment variables."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import logging
import os

from .exceptions import ConfigError
from .storage import default_keys_dir
from ..security.kdf import KDFProfile


ENV_HOME = "SHADOWKEY_HOME"
ENV_KDF = "SHADOWKEY_KDF"
ENV_LOG_LEVEL = "SHADOWKEY_LOG_LEVEL"
ENV_PASSPHRASE = "SHADOWKEY_PASSPHRASE"


def parse_profile(value: str) -> KDFProfile:
    try:
        return KDFProfile(value.strip().lower())
    except ValueError as e:
        choices = ", ".join(p.value for p in KDFProfile)
        raise ConfigError(f"unknown KDF profile {value!r} (expected one of: {choices})") from e


def parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"unknown log level {value!r}")
    return level


@dataclass
class KeyStoreConfig:
    """Where keys live, how hard new ones are encrypted, how loud we log."""

    keys_dir: Path = field(default_factory=default_keys_dir)
    profile: KDFProfile = KDFProfile.STANDARD
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "KeyStoreConfig":
        """
        Build a config from ``SHADOWKEY_HOME``, ``SHADOWKEY_KDF`` and
        ``SHADOWKEY_LOG_LEVEL``; unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        cfg = cls()
        home = env.get(ENV_HOME)
        if home:
            cfg.keys_dir = Path(home).expanduser()
        kdf = env.get(ENV_KDF)
        if kdf:
            cfg.profile = parse_profile(kdf)
        level = env.get(ENV_LOG_LEVEL)
        if level:
            cfg.log_level = parse_log_level(level)
        return cfg
