"""SQLite persistence layer: one database file per player, one table per role."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .models import LOSS, WIN, StoredMatch
from .reference import VALID_MAPS, VALID_ROLES
from .validation import MAX_RATING, MIN_RATING

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

STORE_SUFFIX = ".sqlite"

# (name, declared type, not null) as reported by PRAGMA table_info
EXPECTED_COLUMNS: Tuple[Tuple[str, str, int], ...] = (
    ("timestamp", "TEXT", 1),
    ("rating", "INTEGER", 1),
    ("map", "TEXT", 1),
    ("comment", "TEXT", 0),
)


class StorageError(Exception):
    """Raised when the underlying SQLite database rejects an operation."""


class StoreMissingError(StorageError):
    """Raised when a player has no database and creation was not allowed."""


class SchemaMismatchError(StorageError):
    """Raised when an existing role table does not have the expected layout."""


class ConstraintError(StorageError):
    """Raised when a row violates a CHECK or NOT NULL constraint."""


def store_path(data_dir: Union[str, Path], player: str) -> Path:
    return Path(data_dir) / f"{player}{STORE_SUFFIX}"


def store_exists(data_dir: Union[str, Path], player: str) -> bool:
    return store_path(data_dir, player).is_file()


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _table_name(role: str) -> str:
    # Role names are interpolated into SQL, so only the fixed set is allowed.
    if role not in VALID_ROLES:
        raise ValueError(f"Unknown role table: {role!r}")
    return role


def _role_table_ddl(role: str) -> str:
    valid_maps = ", ".join(_sql_literal(name) for name in sorted(VALID_MAPS))
    return f"""
        CREATE TABLE {_table_name(role)} (
            timestamp TEXT NOT NULL,
            rating INTEGER NOT NULL CHECK (rating >= {MIN_RATING} AND rating <= {MAX_RATING}),
            map TEXT NOT NULL CHECK (map IN ({valid_maps})),
            comment TEXT
        )
    """


class MatchStore:
    """SQLite-backed match history for a single player."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(path)
        try:
            self.connection = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open database '{self.path}': {exc}") from exc
        self.connection.row_factory = sqlite3.Row

    @classmethod
    def open(
        cls, data_dir: Union[str, Path], player: str, *, create: bool = False
    ) -> "MatchStore":
        """Open the store for ``player``.

        Refuses to create a missing file unless ``create`` is set, so that
        read commands and rejected matches never leave an empty database
        behind.
        """

        path = store_path(data_dir, player)
        if not path.is_file():
            if not create:
                raise StoreMissingError(
                    f"No match history database has been created for player '{player}'."
                )
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Creating database %s", path)
        return cls(path)

    def __enter__(self) -> "MatchStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        cur = self.connection.cursor()
        try:
            yield cur
        except sqlite3.IntegrityError as exc:
            self.connection.rollback()
            raise ConstraintError(f"Database rejected the match: {exc}") from exc
        except sqlite3.DatabaseError as exc:
            self.connection.rollback()
            raise StorageError(f"Database error in '{self.path}': {exc}") from exc
        finally:
            cur.close()

    def has_role_table(self, role: str) -> bool:
        with self.cursor() as cur:
            cur.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
                (_table_name(role),),
            )
            return cur.fetchone() is not None

    def existing_roles(self) -> List[str]:
        with self.cursor() as cur:
            cur.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            names = {row["name"] for row in cur.fetchall()}
        return sorted(names & VALID_ROLES)

    def ensure_role_table(self, role: str) -> None:
        """Create the table for ``role`` when absent, else verify its columns."""

        if not self.has_role_table(role):
            with self.cursor() as cur:
                cur.execute(_role_table_ddl(role))
                self.connection.commit()
            logger.debug("Created table '%s' in %s", role, self.path)
            return

        self._verify_role_table(role)

    def _verify_role_table(self, role: str) -> None:
        with self.cursor() as cur:
            cur.execute(f"PRAGMA table_info('{_table_name(role)}')")
            columns = tuple(
                (row["name"], str(row["type"]).upper(), int(row["notnull"]))
                for row in cur.fetchall()
            )
        if columns != EXPECTED_COLUMNS:
            raise SchemaMismatchError(
                f"Table '{role}' in '{self.path}' has an unexpected layout; "
                "the database may be corrupt or from an older version."
            )

    def insert_match(
        self, role: str, rating: int, map_name: str, comment: Optional[str]
    ) -> None:
        with self.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO {_table_name(role)} (timestamp, rating, map, comment)
                VALUES (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'), :rating, :map, :comment)
                """,
                {"rating": rating, "map": map_name, "comment": comment},
            )
            self.connection.commit()

    def fetch_matches(
        self, role: str, outcome: Optional[str] = None
    ) -> List[StoredMatch]:
        """Return rows of ``role`` in insertion order with derived outcomes.

        A match is a win when its rating rose compared to the previous match
        of the same role and a loss when it fell. The first match and
        unchanged ratings have no outcome.
        """

        if not self.has_role_table(role):
            return []
        self._verify_role_table(role)
        with self.cursor() as cur:
            cur.execute(
                f"SELECT timestamp, rating, map, comment FROM {_table_name(role)} ORDER BY rowid"
            )
            rows = cur.fetchall()

        matches: List[StoredMatch] = []
        previous: Optional[int] = None
        for row in rows:
            rating = int(row["rating"])
            result: Optional[str] = None
            if previous is not None and rating > previous:
                result = WIN
            elif previous is not None and rating < previous:
                result = LOSS
            previous = rating
            matches.append(
                StoredMatch(
                    role=role,
                    timestamp=row["timestamp"],
                    rating=rating,
                    map=row["map"],
                    comment=row["comment"],
                    outcome=result,
                )
            )
        if outcome is None:
            return matches
        return [match for match in matches if match.outcome == outcome]


__all__ = [
    "ConstraintError",
    "MatchStore",
    "SchemaMismatchError",
    "StorageError",
    "StoreMissingError",
    "store_exists",
    "store_path",
]
