"""Summary helpers over a player's stored matches."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .db import MatchStore
from .models import StoredMatch


def average_rating(
    store: MatchStore,
    role: str,
    *,
    outcome: Optional[str] = None,
    include_count: bool = False,
) -> Dict[str, Any]:
    """Return the mean rating of ``role`` matches, optionally filtered by outcome."""

    matches = store.fetch_matches(role, outcome)
    average: Optional[float] = None
    if matches:
        average = round(sum(m.rating for m in matches) / len(matches), 2)
    result: Dict[str, Any] = {
        "role": role,
        "outcome": outcome,
        "average": average,
    }
    if include_count:
        result["count"] = len(matches)
    return result


def _extreme(matches: List[StoredMatch], *, highest: bool) -> Optional[StoredMatch]:
    if not matches:
        return None
    # Ties resolve to the earliest match.
    pick = max if highest else min
    return pick(matches, key=lambda m: m.rating)


def peak_rating(store: MatchStore, role: str) -> Optional[Dict[str, Any]]:
    """Return the highest-rated stored match for ``role``."""

    match = _extreme(store.fetch_matches(role), highest=True)
    return match.as_dict() if match is not None else None


def valley_rating(store: MatchStore, role: str) -> Optional[Dict[str, Any]]:
    """Return the lowest-rated stored match for ``role``."""

    match = _extreme(store.fetch_matches(role), highest=False)
    return match.as_dict() if match is not None else None


def match_history(
    store: MatchStore, role: str, *, outcome: Optional[str] = None
) -> List[Dict[str, Any]]:
    return [m.as_dict() for m in store.fetch_matches(role, outcome)]


__all__ = ["average_rating", "match_history", "peak_rating", "valley_rating"]
