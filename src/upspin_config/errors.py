"""Error kinds raised (or returned) while building a configuration."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Kind(Enum):
    """Classification of a configuration failure."""

    OTHER = "other"
    INVALID = "invalid operation"
    NOT_EXIST = "item does not exist"
    IO = "I/O error"
    NOT_DIR = "item is not a directory"


class ConfigError(Exception):
    """Raised when a configuration cannot be built or applied.

    ``op`` names the operation that failed (e.g. ``config.init_config``) and
    ``kind`` classifies the failure so callers can react without parsing
    the message.
    """

    def __init__(self, message: str, *, op: str = "", kind: Kind = Kind.OTHER) -> None:
        super().__init__(message)
        self.op = op
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        parts = []
        if self.op:
            parts.append(self.op)
        if self.kind is not Kind.OTHER:
            parts.append(self.kind.value)
        if self.message:
            parts.append(self.message)
        return ": ".join(parts)

    def with_op(self, op: str) -> "ConfigError":
        """Return a copy of this error attributed to ``op``."""

        if self.op:
            return ConfigError(f"{self.op}: {self.message}", op=op, kind=self.kind)
        return ConfigError(self.message, op=op, kind=self.kind)


def wrap(op: str, exc: BaseException, kind: Optional[Kind] = None) -> ConfigError:
    """Convert an arbitrary exception into a ``ConfigError`` for ``op``."""

    if isinstance(exc, ConfigError):
        err = exc.with_op(op)
        if kind is not None and err.kind is Kind.OTHER:
            err.kind = kind
        return err
    if kind is None:
        if isinstance(exc, FileNotFoundError):
            kind = Kind.NOT_EXIST
        elif isinstance(exc, NotADirectoryError):
            kind = Kind.NOT_DIR
        elif isinstance(exc, OSError):
            kind = Kind.IO
        else:
            kind = Kind.OTHER
    return ConfigError(str(exc), op=op, kind=kind)


# Returned alongside an otherwise usable configuration when the user asked
# for no key material by setting ``secrets: none``.
ERR_NO_FACTOTUM = ConfigError("factotum not initialized: no secrets provided")
