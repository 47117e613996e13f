"""Static lookup tables for roles, maps and map shorthands."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

VALID_ROLES = frozenset({"tank", "dps", "support"})

VALID_MAPS = frozenset(
    {
        "Blizzard World",
        "Busan",
        "Dorado",
        "Eichenwalde",
        "Hanamura",
        "Havana",
        "Hollywood",
        "Horizon Lunar Colony",
        "Ilios",
        "Junkertown",
        "King's Row",
        "Lijiang Tower",
        "Nepal",
        "Numbani",
        "Oasis",
        "Paris",
        "Rialto",
        "Route 66",
        "Temple of Anubis",
        "Volskaya Industries",
        "Watchpoint: Gibraltar",
    }
)

_ALIASES = {
    "bw": "Blizzard World",
    "bworld": "Blizzard World",
    "blizzworld": "Blizzard World",
    "eich": "Eichenwalde",
    "eichen": "Eichenwalde",
    "hana": "Hanamura",
    "hlc": "Horizon Lunar Colony",
    "horizon": "Horizon Lunar Colony",
    "lunar": "Horizon Lunar Colony",
    "junk": "Junkertown",
    "kr": "King's Row",
    "kings": "King's Row",
    "kingsrow": "King's Row",
    "kings row": "King's Row",
    "lt": "Lijiang Tower",
    "lijiang": "Lijiang Tower",
    "r66": "Route 66",
    "route": "Route 66",
    "route66": "Route 66",
    "anubis": "Temple of Anubis",
    "temple": "Temple of Anubis",
    "volskaya": "Volskaya Industries",
    "vi": "Volskaya Industries",
    "gib": "Watchpoint: Gibraltar",
    "gibraltar": "Watchpoint: Gibraltar",
    "watchpoint": "Watchpoint: Gibraltar",
}

# Canonical names are looked up case-insensitively through the same table.
_LOOKUP = {name.lower(): name for name in VALID_MAPS}
_LOOKUP.update(_ALIASES)

MAP_ALIASES: Mapping[str, str] = MappingProxyType(_ALIASES)


def is_valid_role(role: str) -> bool:
    return isinstance(role, str) and role.lower() in VALID_ROLES


def is_valid_map(name: str) -> bool:
    return name in VALID_MAPS


def resolve_map_alias(name: str) -> str:
    """Return the canonical map name for ``name``.

    Shorthands and any casing of a canonical name resolve to the canonical
    spelling. Unknown input is returned unchanged so the validator can
    report it.
    """

    if not isinstance(name, str):
        return name
    return _LOOKUP.get(name.strip().lower(), name)


__all__ = [
    "MAP_ALIASES",
    "VALID_MAPS",
    "VALID_ROLES",
    "is_valid_map",
    "is_valid_role",
    "resolve_map_alias",
]
