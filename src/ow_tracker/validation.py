"""Domain checks applied to a match record before the store is touched."""

from __future__ import annotations

import os
from typing import Optional

from .models import ErrorKind, MatchRecord, TrackerError
from .reference import VALID_ROLES, is_valid_map

MIN_RATING = 0
MAX_RATING = 6000


def _error(message: str) -> TrackerError:
    return TrackerError(ErrorKind.VALIDATION, message)


def validate_player_name(name: str) -> Optional[TrackerError]:
    """Reject names that cannot be used as a store file name."""

    if not isinstance(name, str) or not name.strip():
        return _error("Player name must not be empty.")
    separators = {os.sep, "/", "\\"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in name for sep in separators) or name in {".", ".."}:
        return _error(f"Invalid player name '{name}': path separators are not allowed.")
    return None


def validate_role(role: str) -> Optional[TrackerError]:
    # Callers pass roles already lower-cased; table names are exact.
    if role not in VALID_ROLES:
        valid = ", ".join(sorted(VALID_ROLES))
        return _error(f"Invalid role '{role}'. Use one of: {valid}.")
    return None


def validate(record: MatchRecord, store_exists: bool) -> Optional[TrackerError]:
    """Return the first rule ``record`` breaks, or None when it is valid.

    Checks run in a fixed order: role, map, rating, then whether a store
    may be created for a player that has none yet.
    """

    error = validate_role(record.role)
    if error is not None:
        return error

    if not is_valid_map(record.map):
        return _error(
            f"Invalid map '{record.map}'. Use a full map name or a known shorthand."
        )

    if not MIN_RATING <= record.rating <= MAX_RATING:
        return _error(
            f"Invalid rating {record.rating}: must be between {MIN_RATING} and {MAX_RATING}."
        )

    if not store_exists and not record.new_player:
        return TrackerError(
            ErrorKind.STORE_STATE,
            f"No match history database has been created for player "
            f"'{record.player_name}'. Use the '-n' flag to create it.",
        )

    return None


__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "validate",
    "validate_player_name",
    "validate_role",
]
