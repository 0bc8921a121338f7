"""Building a configuration from a configuration file.

A configuration file is YAML of the form::

    # lines that begin with a hash are ignored
    username: ann@example.com
    keyserver: remote,key.example.com
    dirserver: dir.example.com
    storeserver: store.example.com:8443
    packing: ee
    secrets: /home/ann/.ssh

``key = value`` lines are accepted as well. Any other key is kept as an
extension value and can be read with ``Config.value``.

Endpoints that are not set are unassigned, except the key server, which
defaults to ``remote,key.upspin.io:443``. An endpoint written without a
transport is remote, and a remote endpoint written without a port uses
port 443. The default packing is ``ee``.

The secrets directory defaults to ``$HOME/.ssh``. The value ``none`` means
there are no keys to load: the returned config has no factotum and the
returned error is ``ERR_NO_FACTOTUM``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable, Dict, NamedTuple, Optional, Union

from . import factotum as factotum_module
from . import packing as packing_module
from . import user as user_module
from .config import (
    DEFAULT_KEY_ENDPOINT,
    DEFAULT_USER_NAME,
    Config,
    new,
    set_dir_endpoint,
    set_factotum,
    set_key_endpoint,
    set_packing,
    set_store_endpoint,
    set_user_name,
    set_value_map,
)
from .endpoint import Endpoint, parse_endpoint
from .errors import ERR_NO_FACTOTUM, ConfigError, Kind, wrap
from .factotum import Factotum
from .home import HomeProvider, homedir, sshdir
from .logging import get_logger
from .packing import DEFAULT_PACKING, Packing
from .values import as_string, canonical_text, resolve

# Known keys.
USERNAME = "username"
KEYSERVER = "keyserver"
DIRSERVER = "dirserver"
STORESERVER = "storeserver"
PACKING = "packing"
SECRETS = "secrets"

NO_SECRETS = "none"
CONFIG_DIR = "upspin"
CONFIG_FILE = "config"

Source = Union[IO[bytes], IO[str], bytes, str]

_LOGGER = get_logger("upspin.config")


class LoadResult(NamedTuple):
    """A usable configuration and the first non-fatal error met building it."""

    config: Config
    error: Optional[ConfigError] = None


class _FirstError:
    """Remembers the first error recorded and ignores the rest."""

    def __init__(self) -> None:
        self.error: Optional[ConfigError] = None

    def record(self, error: ConfigError) -> None:
        if self.error is None:
            self.error = error


def _read_source(source: Source) -> Union[bytes, str]:
    if isinstance(source, (bytes, str)):
        return source
    return source.read()


@dataclass(frozen=True)
class Loader:
    """Builds configurations using the given collaborators."""

    homedir: HomeProvider = homedir
    clean_user: Callable[[str], str] = user_module.clean
    lookup_packing: Callable[[str], Optional[Packing]] = packing_module.lookup_by_name
    load_factotum: Callable[[Path], Factotum] = factotum_module.new_from_dir

    def from_file(self, name: Union[str, Path]) -> LoadResult:
        """Build a config from the named file.

        If a relative ``name`` does not exist, ``$HOME/upspin/<name>`` is
        tried instead.
        """

        op = "config.from_file"
        path = Path(name)
        try:
            f = path.open("rb")
        except FileNotFoundError as exc:
            if path.is_absolute():
                raise wrap(op, exc, Kind.NOT_EXIST) from exc
            try:
                fallback = self.homedir() / CONFIG_DIR / path
            except ConfigError:
                raise wrap(op, exc, Kind.NOT_EXIST) from exc
            try:
                f = fallback.open("rb")
            except FileNotFoundError as fallback_exc:
                raise wrap(op, fallback_exc, Kind.NOT_EXIST) from fallback_exc
            except OSError as fallback_exc:
                raise wrap(op, fallback_exc) from fallback_exc
        except OSError as exc:
            raise wrap(op, exc) from exc
        with f:
            _LOGGER.debug("Reading configuration", extra={"path": f.name})
            return self.init_config(f)

    def init_config(self, source: Optional[Source] = None) -> LoadResult:
        """Build a config from ``source``, or from ``$HOME/upspin/config``.

        Raises ``ConfigError`` when no usable config can be built. Problems
        that leave a usable config are returned in ``LoadResult.error``;
        only the first is kept.
        """

        op = "config.init_config"
        defaults = {
            USERNAME: DEFAULT_USER_NAME,
            PACKING: str(DEFAULT_PACKING),
            KEYSERVER: str(DEFAULT_KEY_ENDPOINT),
            DIRSERVER: "",
            STORESERVER: "",
        }
        try:
            data = self._read(source)
            vals, other = resolve(defaults, data)
        except (ConfigError, OSError) as exc:
            raise wrap(op, exc) from exc

        errors = _FirstError()
        cfg = new()

        try:
            user_name = self.clean_user(vals[USERNAME])
        except ConfigError as exc:
            raise wrap(op, exc) from exc
        cfg = set_user_name(cfg, user_name)

        packing = self.lookup_packing(vals[PACKING])
        if packing is None:
            raise ConfigError(f"unknown packing {vals[PACKING]!r}", op=op, kind=Kind.INVALID)
        cfg = set_packing(cfg, packing)

        secrets = self._secrets_dir(op, other)
        if secrets == NO_SECRETS:
            _LOGGER.debug("Skipping key material; secrets set to none")
            errors.record(ERR_NO_FACTOTUM)
        else:
            try:
                factotum = self.load_factotum(Path(secrets))
            except (ConfigError, OSError) as exc:
                raise wrap(op, exc) from exc
            cfg = set_factotum(cfg, factotum)

        cfg = set_key_endpoint(cfg, self._endpoint(op, vals, KEYSERVER, errors))
        cfg = set_store_endpoint(cfg, self._endpoint(op, vals, STORESERVER, errors))
        cfg = set_dir_endpoint(cfg, self._endpoint(op, vals, DIRSERVER, errors))

        value_map: Dict[str, str] = {}
        for key, value in other.items():
            try:
                name = as_string(key)
            except ConfigError as exc:
                raise ConfigError(exc.message, op=op, kind=Kind.INVALID) from exc
            try:
                value_map[name] = canonical_text(value)
            except ConfigError as exc:
                raise ConfigError(
                    f"bad value for config key {name}: {exc.message}", op=op, kind=Kind.INVALID
                ) from exc
        cfg = set_value_map(cfg, value_map)

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Configuration loaded", extra={"config": cfg.logging_dict()})
        return LoadResult(cfg, errors.error)

    def _read(self, source: Optional[Source]) -> Union[bytes, str]:
        if source is not None:
            return _read_source(source)
        path = self.homedir() / CONFIG_DIR / CONFIG_FILE
        with path.open("rb") as f:
            return f.read()

    def _secrets_dir(self, op: str, other: Dict[Any, Any]) -> str:
        directory = ""
        if SECRETS in other:
            directory = other[SECRETS]
            if not isinstance(directory, str):
                raise ConfigError(
                    f"invalid type for secrets: {type(directory).__name__}", op=op, kind=Kind.INVALID
                )
        if directory:
            return directory
        try:
            return str(sshdir(self.homedir))
        except ConfigError as exc:
            raise ConfigError(
                f"cannot find .ssh directory: {exc}", op=op, kind=exc.kind
            ) from exc

    def _endpoint(self, op: str, vals: Dict[str, str], key: str, errors: _FirstError) -> Endpoint:
        text = vals.get(key, "")
        try:
            return parse_endpoint(text)
        except ConfigError as exc:
            err = ConfigError(f"{key}: {exc.message}", op=op, kind=Kind.INVALID)
            _LOGGER.error(str(err), extra={"config_key": key, "endpoint": text})
            errors.record(err)
            return Endpoint()


_DEFAULT_LOADER = Loader()


def init_config(source: Optional[Source] = None) -> LoadResult:
    """Build a config from ``source`` using the default collaborators."""

    return _DEFAULT_LOADER.init_config(source)


def from_file(name: Union[str, Path]) -> LoadResult:
    """Build a config from the named file using the default collaborators."""

    return _DEFAULT_LOADER.from_file(name)
