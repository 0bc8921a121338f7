"""Immutable client configuration built from a chain of single-field overlays.

A ``Config`` is either the base, which answers every accessor with a
default, or an overlay node that answers one field and forwards everything
else to the node it wraps::

    cfg = set_key_endpoint(new(), parse_endpoint("key.example.com"))
    cfg = set_user_name(cfg, "ann@example.com")

Nodes are never modified, so one node may be shared by any number of
chains and read from any number of threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .endpoint import Endpoint, Transport
from .factotum import Factotum
from .packing import DEFAULT_PACKING, Packing

DEFAULT_USER_NAME = "noone@nowhere.org"
DEFAULT_KEY_ENDPOINT = Endpoint(Transport.REMOTE, "key.upspin.io:443")


class Field(Enum):
    """The accessor an overlay node answers."""

    USER_NAME = "user_name"
    FACTOTUM = "factotum"
    PACKING = "packing"
    KEY_ENDPOINT = "key_endpoint"
    DIR_ENDPOINT = "dir_endpoint"
    STORE_ENDPOINT = "store_endpoint"
    CACHE_ENDPOINT = "cache_endpoint"
    VALUE = "value"
    VALUE_MAP = "value_map"


_DEFAULTS: Dict[Field, Any] = {
    Field.USER_NAME: DEFAULT_USER_NAME,
    Field.FACTOTUM: None,
    Field.PACKING: DEFAULT_PACKING,
    Field.KEY_ENDPOINT: DEFAULT_KEY_ENDPOINT,
    Field.DIR_ENDPOINT: Endpoint(),
    Field.STORE_ENDPOINT: Endpoint(),
    Field.CACHE_ENDPOINT: Endpoint(),
}


@dataclass(frozen=True, eq=False)
class Config:
    """Client configuration. Build one with ``new()`` and the ``set_*`` helpers."""

    _field: Optional[Field] = None
    _value: Any = None
    _parent: Optional["Config"] = None

    def _lookup(self, field: Field) -> Any:
        node: Optional[Config] = self
        while node is not None and node._field is not None:
            if node._field is field:
                return node._value
            node = node._parent
        return _DEFAULTS[field]

    @property
    def user_name(self) -> str:
        return self._lookup(Field.USER_NAME)

    @property
    def factotum(self) -> Optional[Factotum]:
        return self._lookup(Field.FACTOTUM)

    @property
    def packing(self) -> Packing:
        return self._lookup(Field.PACKING)

    @property
    def key_endpoint(self) -> Endpoint:
        return self._lookup(Field.KEY_ENDPOINT)

    @property
    def dir_endpoint(self) -> Endpoint:
        return self._lookup(Field.DIR_ENDPOINT)

    @property
    def store_endpoint(self) -> Endpoint:
        return self._lookup(Field.STORE_ENDPOINT)

    @property
    def cache_endpoint(self) -> Endpoint:
        return self._lookup(Field.CACHE_ENDPOINT)

    def value(self, key: str) -> str:
        """Return the extension value stored under ``key``, or ``""``."""

        node: Optional[Config] = self
        while node is not None and node._field is not None:
            if node._field is Field.VALUE:
                node_key, node_val = node._value
                if node_key == key:
                    return node_val
            elif node._field is Field.VALUE_MAP and key in node._value:
                return node._value[key]
            node = node._parent
        return ""

    def values(self) -> Dict[str, str]:
        """Return every extension value visible through this configuration."""

        layers = []
        node: Optional[Config] = self
        while node is not None and node._field is not None:
            if node._field is Field.VALUE:
                layers.append(dict([node._value]))
            elif node._field is Field.VALUE_MAP:
                layers.append(dict(node._value))
            node = node._parent
        merged: Dict[str, str] = {}
        for layer in reversed(layers):
            merged.update(layer)
        return merged

    def as_dict(self) -> Dict[str, Any]:
        """Return a plain mapping of every resolved field."""

        factotum = self.factotum
        return {
            "username": self.user_name,
            "packing": str(self.packing),
            "keyserver": str(self.key_endpoint),
            "dirserver": str(self.dir_endpoint),
            "storeserver": str(self.store_endpoint),
            "cacheserver": str(self.cache_endpoint),
            "secrets": _secrets_text(factotum),
            "values": self.values(),
        }

    def logging_dict(self) -> Dict[str, Any]:
        """Return a sanitized mapping suitable for structured logging."""

        data = self.as_dict()
        data["factotum"] = "***REDACTED***" if self.factotum is not None else None
        return data

    def __repr__(self) -> str:
        return f"Config(user_name={self.user_name!r}, packing={self.packing!s})"


_BASE = Config()


def _secrets_text(factotum: Any) -> Optional[str]:
    directory = getattr(factotum, "directory", None)
    return None if directory is None else str(directory)


def new() -> Config:
    """Return a configuration with every field at its default."""

    return _BASE


def _overlay(cfg: Config, field: Field, value: Any) -> Config:
    return Config(field, value, cfg)


def set_user_name(cfg: Config, user_name: str) -> Config:
    """Return a config derived from ``cfg`` with the given user name."""

    return _overlay(cfg, Field.USER_NAME, user_name)


def set_factotum(cfg: Config, factotum: Optional[Factotum]) -> Config:
    """Return a config derived from ``cfg`` with the given factotum."""

    return _overlay(cfg, Field.FACTOTUM, factotum)


def set_packing(cfg: Config, packing: Packing) -> Config:
    """Return a config derived from ``cfg`` with the given packing."""

    return _overlay(cfg, Field.PACKING, packing)


def set_key_endpoint(cfg: Config, endpoint: Endpoint) -> Config:
    """Return a config derived from ``cfg`` with the given key endpoint."""

    return _overlay(cfg, Field.KEY_ENDPOINT, endpoint)


def set_dir_endpoint(cfg: Config, endpoint: Endpoint) -> Config:
    """Return a config derived from ``cfg`` with the given dir endpoint."""

    return _overlay(cfg, Field.DIR_ENDPOINT, endpoint)


def set_store_endpoint(cfg: Config, endpoint: Endpoint) -> Config:
    """Return a config derived from ``cfg`` with the given store endpoint."""

    return _overlay(cfg, Field.STORE_ENDPOINT, endpoint)


def set_cache_endpoint(cfg: Config, endpoint: Endpoint) -> Config:
    """Return a config derived from ``cfg`` with the given cache endpoint."""

    return _overlay(cfg, Field.CACHE_ENDPOINT, endpoint)


def set_value(cfg: Config, key: str, value: str) -> Config:
    """Return a config derived from ``cfg`` that contains the key/value pair."""

    return _overlay(cfg, Field.VALUE, (key, value))


def set_value_map(cfg: Config, values: Mapping[str, str]) -> Config:
    """Return a config derived from ``cfg`` that answers ``value()`` from ``values``.

    Keys missing from ``values`` fall through to ``cfg``. The mapping is
    copied, so later changes to ``values`` are not seen.
    """

    return _overlay(cfg, Field.VALUE_MAP, MappingProxyType(dict(values)))
