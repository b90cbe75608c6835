"""Small helper to build a ShadowKey app context for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import getpass
import os

from shadowkey.core.config import ENV_PASSPHRASE, KeyStoreConfig
from shadowkey.core.storage import KeyDirectoryStorage
from shadowkey.security.kdf import KDFProfile
from shadowkey.security.keystore import PassphraseKeyStore


@dataclass
class AppContext:
    """Container for runtime objects the commands need."""

    config: KeyStoreConfig
    storage: KeyDirectoryStorage
    store: PassphraseKeyStore


def build_context(
    keys_dir: Optional[str | Path] = None,
    profile: Optional[KDFProfile] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppContext:
    """
    Load configuration from the environment and wire up the key store.

    Explicit arguments (from command line flags) win over environment
    variables, which win over the defaults in :class:`KeyStoreConfig`.
    """
    config = KeyStoreConfig.from_env(environ)
    if keys_dir is not None:
        config.keys_dir = Path(keys_dir).expanduser()
    if profile is not None:
        config.profile = profile

    storage = KeyDirectoryStorage(config.keys_dir)
    store = PassphraseKeyStore(storage, profile=config.profile)
    return AppContext(config=config, storage=storage, store=store)


def read_passphrase(
    prompt: str = "Passphrase: ",
    confirm: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return ``SHADOWKEY_PASSPHRASE`` if set, otherwise prompt without echo."""
    env = os.environ if environ is None else environ
    value = env.get(ENV_PASSPHRASE)
    if value is not None:
        return value

    passphrase = getpass.getpass(prompt)
    if confirm and getpass.getpass("Repeat passphrase: ") != passphrase:
        raise ValueError("passphrases do not match")
    return passphrase
