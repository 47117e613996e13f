"""Value types passed between the tracker workflow steps."""

from __future__ import annotations

import argparse
import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .reference import resolve_map_alias

WIN = "win"
LOSS = "loss"
OUTCOMES = (WIN, LOSS)


class ErrorKind(enum.Enum):
    VALIDATION = "validation"
    STORE_STATE = "store_state"
    STORAGE = "storage"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class TrackerError:
    """A failed workflow step, carrying the message shown to the user."""

    kind: ErrorKind
    message: str

    @property
    def exit_code(self) -> int:
        if self.kind in (ErrorKind.VALIDATION, ErrorKind.STORE_STATE):
            return 1
        return 2


@dataclass(frozen=True)
class MatchRecord:
    player_name: str
    role: str
    rating: int
    map: str
    comment: Optional[str] = None
    new_player: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "MatchRecord":
        """Build a normalized record from parsed ``match`` arguments.

        The role is lower-cased and the map shorthand resolved here, once,
        so later steps only deal with canonical values.
        """

        return cls(
            player_name=args.player,
            role=args.role.lower(),
            rating=args.rating,
            map=resolve_map_alias(args.map),
            comment=args.comment,
            new_player=bool(args.new),
        )


@dataclass(frozen=True)
class StoredMatch:
    role: str
    timestamp: str
    rating: int
    map: str
    comment: Optional[str]
    outcome: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "timestamp": self.timestamp,
            "rating": self.rating,
            "map": self.map,
            "comment": self.comment,
            "outcome": self.outcome,
        }


__all__ = [
    "ErrorKind",
    "LOSS",
    "MatchRecord",
    "OUTCOMES",
    "StoredMatch",
    "TrackerError",
    "WIN",
]
