"""Record Overwatch match results per player and role in local SQLite files."""

from .db import MatchStore
from .models import MatchRecord, TrackerError
from .validation import validate

__all__ = [
    "MatchRecord",
    "MatchStore",
    "TrackerError",
    "validate",
]
