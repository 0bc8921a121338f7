"""Locating the user's home directory and conventional subdirectories."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from .errors import ConfigError, Kind

HomeProvider = Callable[[], Path]


def is_dir(path: Path) -> None:
    """Raise ``ConfigError`` unless ``path`` exists and is a directory."""

    try:
        is_directory = path.is_dir()
        exists = is_directory or path.exists()
    except OSError as exc:
        raise ConfigError(str(exc), kind=Kind.IO) from exc
    if not exists:
        raise ConfigError(f"stat {path}: no such file or directory", kind=Kind.IO)
    if not is_directory:
        raise ConfigError(str(path), kind=Kind.NOT_DIR)


def homedir() -> Path:
    """Return the home directory of the logged-in user."""

    try:
        home = Path.home()
    except (KeyError, RuntimeError) as exc:
        raise ConfigError(f"lookup of current user failed: {exc}") from exc
    if not str(home) or str(home) == ".":
        raise ConfigError("user home directory not found", kind=Kind.NOT_EXIST)
    is_dir(home)
    return home


def sshdir(home: HomeProvider = homedir) -> Path:
    """Return ``<home>/.ssh``, which must be a directory."""

    path = home() / ".ssh"
    is_dir(path)
    return path
