"""Validation and canonicalization of user names."""

from __future__ import annotations

import re

from .errors import ConfigError, Kind

_DOMAIN_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
_USER_CHARS = re.compile(r"^[\w.!#$%&'*+=?^`{|}~-]+$")


def clean(name: str) -> str:
    """Return the canonical form of ``name`` (``user[+suffix]@domain``).

    Both halves are case-folded. Raises ``ConfigError`` with kind
    ``INVALID`` if the name is malformed.
    """

    op = "user.clean"
    name = name.strip()
    if name.count("@") != 1:
        raise ConfigError(f"user name {name!r} must contain one @ symbol", op=op, kind=Kind.INVALID)
    user, domain = name.split("@")
    user, domain = user.lower(), domain.lower()
    if not user:
        raise ConfigError(f"user name {name!r} has an empty user", op=op, kind=Kind.INVALID)
    if not _USER_CHARS.match(user):
        raise ConfigError(f"user name {name!r} has bad characters", op=op, kind=Kind.INVALID)
    if "+" in user:
        base, _, suffix = user.partition("+")
        if not base or not suffix or "+" in suffix:
            raise ConfigError(f"user name {name!r} has a bad suffix", op=op, kind=Kind.INVALID)
    if "*" in user and user != "*":
        raise ConfigError(f"user name {name!r} has a bad wildcard", op=op, kind=Kind.INVALID)

    labels = domain.split(".")
    if len(labels) < 2 or not all(_DOMAIN_LABEL.match(label) for label in labels):
        raise ConfigError(f"user name {name!r} has a bad domain", op=op, kind=Kind.INVALID)
    return f"{user}@{domain}"
