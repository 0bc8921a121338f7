"""Loading of the user's key material from a secrets directory.

Only the key files are read here; signing and decryption belong to the
client libraries that consume a ``Factotum``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from .errors import ConfigError, Kind

PUBLIC_KEY_FILE = "public.upspinkey"
SECRET_KEY_FILE = "secret.upspinkey"
ARCHIVE_KEY_FILE = "secret2.upspinkey"


@dataclass(frozen=True)
class Factotum:
    """Holder of the signing key pair found in a secrets directory."""

    directory: Path
    public_key: str
    secret_key: str = ""
    archived_keys: Tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"Factotum(directory={str(self.directory)!r}, public_key={self.public_key!r})"


def _read_key(path: Path, op: str) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"no key file {path}", op=op, kind=Kind.NOT_EXIST) from exc
    except OSError as exc:
        raise ConfigError(f"reading {path}: {exc}", op=op, kind=Kind.IO) from exc
    text = text.strip()
    if not text:
        raise ConfigError(f"empty key file {path}", op=op, kind=Kind.INVALID)
    return text


def new_from_dir(directory: Union[str, Path]) -> Factotum:
    """Load the key pair stored in ``directory``."""

    op = "factotum.new_from_dir"
    path = Path(directory)
    if not path.is_dir():
        raise ConfigError(f"no secrets directory {path}", op=op, kind=Kind.NOT_EXIST)
    public_key = _read_key(path / PUBLIC_KEY_FILE, op)
    secret_key = _read_key(path / SECRET_KEY_FILE, op)

    archived: Tuple[str, ...] = ()
    archive = path / ARCHIVE_KEY_FILE
    if archive.exists():
        # Blocks of old keys are separated by blank lines.
        blocks = _read_key(archive, op).split("\n\n")
        archived = tuple(block.strip() for block in blocks if block.strip())
    return Factotum(path, public_key, secret_key, archived)
