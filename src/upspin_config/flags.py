"""Applying per-command flag values stored in a configuration.

A configuration may carry a ``cmdflags`` value mapping command names to
flag settings::

    cmdflags:
      show:
        output: yaml
        log-level: debug

A setting is applied only while the flag still holds its default, so a
flag given on the command line always wins over the configuration file.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional, Protocol

from .config import Config
from .errors import ConfigError, Kind
from .logging import get_logger
from .values import as_string, load_yaml

CMDFLAGS = "cmdflags"

_LOGGER = get_logger("upspin.flags")


class FlagHandle(Protocol):
    """A single registered command-line flag."""

    def current_string(self) -> str:
        ...

    def default_string(self) -> str:
        ...

    def set(self, text: str) -> None:
        """Set the flag from text, raising ``ValueError`` if it is rejected."""
        ...


class FlagRegistry(Protocol):
    def lookup(self, name: str) -> Optional[FlagHandle]:
        ...


def set_flag_values(cfg: Config, command: str, flags: FlagRegistry) -> None:
    """Update every flag of ``command`` that is still at its default value.

    Unknown flag names raise ``ConfigError``; flags handled before the bad
    name keep their new values. Values the flag itself rejects are skipped.
    """

    op = "config.set_flag_values"
    flag_yaml = cfg.value(CMDFLAGS)
    if not flag_yaml:
        return
    try:
        cmdflags = load_yaml(flag_yaml)
    except ConfigError as exc:
        raise ConfigError(f"bad cmdflags value: {exc.message}", op=op, kind=Kind.INVALID) from exc
    entry = cmdflags.get(command) if isinstance(cmdflags, dict) else None
    if not isinstance(entry, dict):
        raise ConfigError(
            f"bad cmdflags for {command}: {type(entry).__name__}", op=op, kind=Kind.INVALID
        )

    for key, value in entry.items():
        try:
            name = as_string(key)
        except ConfigError as exc:
            raise ConfigError(f"bad flag name {key}: {exc.message}", op=op, kind=Kind.INVALID) from exc
        try:
            text = as_string(value)
        except ConfigError as exc:
            raise ConfigError(
                f"bad flag value for {name}: {exc.message}", op=op, kind=Kind.INVALID
            ) from exc

        handle = flags.lookup(name)
        if handle is None:
            raise ConfigError(f"unknown flag {name!r}", op=op, kind=Kind.INVALID)
        if handle.current_string() != handle.default_string():
            _LOGGER.debug("Flag set on command line; ignoring config", extra={"flag": name})
            continue
        try:
            handle.set(text)
        except ValueError:
            _LOGGER.debug("Config value rejected by flag", extra={"flag": name, "value": text})
            continue


def _flag_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in {"1", "t", "true", "yes", "on"}:
        return True
    if lowered in {"0", "f", "false", "no", "off"}:
        return False
    raise ValueError(f"invalid boolean value {text!r}")


class _ArgparseFlag:
    def __init__(
        self, parser: argparse.ArgumentParser, namespace: argparse.Namespace, action: argparse.Action
    ) -> None:
        self._parser = parser
        self._namespace = namespace
        self._action = action

    def current_string(self) -> str:
        return _flag_string(getattr(self._namespace, self._action.dest, None))

    def default_string(self) -> str:
        default = self._parser.get_default(self._action.dest)
        # argparse passes string defaults through the flag's type.
        if isinstance(default, str) and callable(self._action.type):
            try:
                default = self._action.type(default)
            except (TypeError, ValueError, argparse.ArgumentTypeError):
                # Not convertible; argparse would have rejected it as well.
                return _flag_string(default)
        return _flag_string(default)

    def set(self, text: str) -> None:
        action = self._action
        if action.nargs == 0:
            value: Any = _parse_bool(text)
            if not isinstance(action.const, bool):
                value = action.const if value else self._parser.get_default(action.dest)
        elif callable(action.type):
            try:
                value = action.type(text)
            except (TypeError, argparse.ArgumentTypeError) as exc:
                raise ValueError(str(exc)) from exc
        else:
            value = text
        if action.choices is not None and value not in action.choices:
            raise ValueError(f"invalid choice {value!r} for {action.dest}")
        setattr(self._namespace, action.dest, value)


class ArgparseFlags:
    """Exposes an argparse parser and its parsed namespace as a flag registry.

    Flags are found by option name, with or without leading dashes, or by
    their ``dest``.
    """

    def __init__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace) -> None:
        self._parser = parser
        self._namespace = namespace
        self._actions: Dict[str, argparse.Action] = {}
        for action in parser._actions:
            if not action.option_strings or isinstance(action, argparse._HelpAction):
                continue
            self._actions.setdefault(action.dest, action)
            for option in action.option_strings:
                self._actions.setdefault(option.lstrip("-"), action)

    def lookup(self, name: str) -> Optional[_ArgparseFlag]:
        action = self._actions.get(name.lstrip("-"))
        if action is None:
            return None
        return _ArgparseFlag(self._parser, self._namespace, action)
