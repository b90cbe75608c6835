"""
Storage module for encrypted key files

Structure Map for reference:
==============================
 - <keys_dir>/
      - {address_hex}.json   (one encrypted key file per address)
==============================
For reference:
> Files are opaque bytes at this layer; encoding and encryption live in security/
> Writes go through a temp file in the same directory and os.replace, so a
  reader never sees a half-written key file
> No locking: callers serialize writes to the same address

"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Set

from .exceptions import KeyNotFoundError, StorageError
from .models import address_to_hex


logger = logging.getLogger(__name__)

KEYFILE_SUFFIX = ".json"
_KEYFILE_RE = re.compile(r"^[0-9a-f]{40}\.json$")


def default_keys_dir() -> Path:
    return Path.home() / ".shadowkey" / "keystore"


class KeyDirectoryStorage:
    """Flat directory of key files, one per address"""

    def __init__(self, root_path: Optional[str | Path] = None):
        self.root = Path(root_path).expanduser() if root_path else default_keys_dir()

    def ensure_root(self) -> Path:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create key directory {self.root}: {e}") from e
        return self.root

    def path_for(self, address: bytes) -> Path:
        return self.root / f"{address_to_hex(address)}{KEYFILE_SUFFIX}"

    def exists(self, address: bytes) -> bool:
        return self.path_for(address).is_file()

    def write(self, address: bytes, data: bytes) -> Path:
        """Create or overwrite the key file for ``address``."""
        self.ensure_root()
        target = self.path_for(address)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=KEYFILE_SUFFIX)
        except OSError as e:
            raise StorageError(f"failed to create temp file in {self.root}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise StorageError(f"failed to write key file {target}: {e}") from e
        logger.debug("wrote key file %s", target)
        return target

    def read(self, address: bytes) -> bytes:
        p = self.path_for(address)
        try:
            with open(p, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise KeyNotFoundError(f"no key file for address {address_to_hex(address)}") from e
        except OSError as e:
            raise StorageError(f"failed to read key file {p}: {e}") from e

    def delete(self, address: bytes) -> None:
        p = self.path_for(address)
        try:
            p.unlink()
        except FileNotFoundError as e:
            raise KeyNotFoundError(f"no key file for address {address_to_hex(address)}") from e
        except OSError as e:
            raise StorageError(f"failed to delete key file {p}: {e}") from e
        logger.debug("deleted key file %s", p)

    def list_addresses(self) -> Set[bytes]:
        """Return the addresses that have a key file; unrelated files are skipped."""
        if not self.root.exists():
            return set()
        try:
            names = os.listdir(self.root)
        except OSError as e:
            raise StorageError(f"failed to list key directory {self.root}: {e}") from e
        addresses = set()
        for name in names:
            if not _KEYFILE_RE.match(name):
                continue
            if not (self.root / name).is_file():
                continue
            addresses.add(bytes.fromhex(name[: -len(KEYFILE_SUFFIX)]))
        return addresses
