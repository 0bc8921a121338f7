"""Registry of packing policies known to the client."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Optional


class Packing(IntEnum):
    """Identifier of the data-encoding policy applied to stored content."""

    UNASSIGNED = 0
    PLAIN = 1
    EE = 20
    EEINTEGRITY = 21

    def __str__(self) -> str:
        return _NAMES.get(self, f"packing({int(self)})")


DEFAULT_PACKING = Packing.EE

# Registry of packings selectable by name in a configuration file.
_PACKINGS: Dict[str, Packing] = {
    "plain": Packing.PLAIN,
    "ee": Packing.EE,
    "eeintegrity": Packing.EEINTEGRITY,
}
_NAMES: Dict[Packing, str] = {packing: name for name, packing in _PACKINGS.items()}


def lookup_by_name(name: str) -> Optional[Packing]:
    """Return the packing registered under ``name``, or ``None``."""

    return _PACKINGS.get(name)


def register(name: str, packing: Packing) -> None:
    """Make ``packing`` selectable by ``name``.

    Raises:
        ValueError: If ``name`` is already registered to another packing.
    """
    existing = _PACKINGS.get(name)
    if existing is not None and existing is not packing:
        raise ValueError(f"Packing name {name!r} is already registered to {existing!r}")
    _PACKINGS[name] = packing
    _NAMES.setdefault(packing, name)


def get_supported_packings() -> List[str]:
    """Get list of registered packing names."""
    return list(_PACKINGS.keys())
