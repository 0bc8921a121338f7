"""Decoding of configuration text into known settings and extension values."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Tuple, Union

import yaml

from .errors import ConfigError, Kind

_SCALARS = (str, int, float)

# Accept the older "key = value" spelling alongside YAML's "key: value".
_ASSIGNMENT = re.compile(r"^(?P<key>[A-Za-z_][\w.-]*)[ \t]*=[ \t]*(?P<value>.*)$", re.MULTILINE)


class _Loader(yaml.SafeLoader):
    """Safe loader that leaves timestamps as plain strings."""


_Loader.yaml_implicit_resolvers = {
    first: [resolver for resolver in resolvers if resolver[0] != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(data: Union[bytes, str]) -> Any:
    """Decode a YAML document, raising ``ConfigError`` when it is malformed."""

    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(f"parsing YAML file: {exc}", kind=Kind.INVALID) from exc
    try:
        return yaml.load(data, Loader=_Loader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"parsing YAML file: {exc}", kind=Kind.INVALID) from exc


def as_string(value: Any) -> str:
    """Convert a decoded scalar back to the text it was written as."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        # Whole numbers print without a fractional part: 1.0 is "1".
        return str(int(value))
    if isinstance(value, _SCALARS):
        return str(value)
    raise ConfigError(f"unrecognized value {type(value).__name__}", kind=Kind.INVALID)


def canonical_text(value: Any) -> str:
    """Render any decoded value as the string stored in the extension bag."""

    if value is None:
        return "null"
    if isinstance(value, (bool,) + _SCALARS):
        return as_string(value)
    try:
        dumped = yaml.safe_dump(value, default_flow_style=False, sort_keys=True)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc), kind=Kind.INVALID) from exc
    return dumped.strip()


def resolve(
    known_defaults: Mapping[str, str], raw: Union[bytes, str]
) -> Tuple[Dict[str, str], Dict[Any, Any]]:
    """Split a configuration document into known values and everything else.

    Keys in ``known_defaults`` must hold scalars and replace the matching
    default. Every other key is passed through untouched in the second
    mapping.
    """

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(f"parsing YAML file: {exc}", kind=Kind.INVALID) from exc
    decoded = load_yaml(_ASSIGNMENT.sub(r"\g<key>: \g<value>", raw))
    if decoded is None:
        decoded = {}
    if not isinstance(decoded, dict):
        raise ConfigError(
            f"parsing YAML file: expected a mapping, got {type(decoded).__name__}",
            kind=Kind.INVALID,
        )

    known = dict(known_defaults)
    other: Dict[Any, Any] = {}
    for key, value in decoded.items():
        if key in known:
            try:
                known[key] = as_string(value)
            except ConfigError as exc:
                raise ConfigError(f"{key!r}: {exc.message}", kind=Kind.INVALID) from exc
            continue
        other[key] = value
    return known, other
