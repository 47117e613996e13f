import sqlite3

import pytest

from ow_tracker.db import (
    ConstraintError,
    MatchStore,
    SchemaMismatchError,
    StorageError,
    StoreMissingError,
    store_exists,
    store_path,
)


def test_open_refuses_to_create_without_flag(tmp_path):
    with pytest.raises(StoreMissingError):
        MatchStore.open(tmp_path, "nobody")
    assert not store_path(tmp_path, "nobody").exists()
    assert list(tmp_path.iterdir()) == []


def test_open_with_create_makes_one_file(tmp_path):
    with MatchStore.open(tmp_path / "nested", "aaad", create=True) as s:
        s.ensure_role_table("support")
    assert store_exists(tmp_path / "nested", "aaad")
    assert [p.name for p in (tmp_path / "nested").iterdir()] == ["aaad.sqlite"]


def test_insert_and_read_back(store):
    store.ensure_role_table("support")
    store.insert_match("support", 2500, "King's Row", None)

    rows = store.fetch_matches("support")
    assert len(rows) == 1
    assert rows[0].rating == 2500
    assert rows[0].map == "King's Row"
    assert rows[0].comment is None
    assert rows[0].timestamp
    assert rows[0].timestamp.endswith("Z")


def test_ensure_role_table_is_idempotent(store):
    store.ensure_role_table("tank")
    before = store.connection.execute(
        "SELECT sql FROM sqlite_master WHERE name = 'tank'"
    ).fetchone()[0]
    store.ensure_role_table("tank")
    after = store.connection.execute(
        "SELECT sql FROM sqlite_master WHERE name = 'tank'"
    ).fetchone()[0]

    assert before == after
    count = store.connection.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table'"
    ).fetchone()[0]
    assert count == 1
    assert store.existing_roles() == ["tank"]


def test_constraints_enforced_by_storage(store):
    store.ensure_role_table("dps")
    with pytest.raises(ConstraintError):
        store.insert_match("dps", 7000, "Busan", None)
    with pytest.raises(ConstraintError):
        store.insert_match("dps", 2000, "Atlantis", None)
    assert store.fetch_matches("dps") == []


def test_schema_mismatch_is_detected(tmp_path):
    path = store_path(tmp_path, "legacy")
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE support (timestamp TEXT NOT NULL, sr INT NOT NULL)")
    conn.commit()
    conn.close()

    with MatchStore.open(tmp_path, "legacy") as s:
        with pytest.raises(SchemaMismatchError):
            s.ensure_role_table("support")


def test_not_a_database_raises_storage_error(tmp_path):
    store_path(tmp_path, "broken").write_bytes(b"this is not sqlite" * 100)
    with MatchStore.open(tmp_path, "broken") as s:
        with pytest.raises(StorageError):
            s.ensure_role_table("tank")


def test_unknown_role_is_never_interpolated(store):
    with pytest.raises(ValueError):
        store.ensure_role_table("tank; DROP TABLE dps")


def test_outcomes_follow_rating_changes(store, add_matches):
    add_matches(
        store,
        "support",
        [
            (2500, "Hanamura", None),
            (2525, "Busan", "climb"),
            (2500, "Ilios", None),
            (2500, "Nepal", None),
            (2530, "Oasis", None),
        ],
    )
    outcomes = [m.outcome for m in store.fetch_matches("support")]
    assert outcomes == [None, "win", "loss", None, "win"]
    assert [m.rating for m in store.fetch_matches("support", "win")] == [2525, 2530]
    assert [m.map for m in store.fetch_matches("support", "loss")] == ["Ilios"]


def test_missing_role_table_reads_empty(store):
    assert store.fetch_matches("tank") == []


def test_reads_detect_outdated_table(tmp_path):
    path = store_path(tmp_path, "legacy")
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE support (timestamp TEXT NOT NULL, sr INT NOT NULL)")
    conn.commit()
    conn.close()

    with MatchStore.open(tmp_path, "legacy") as s:
        with pytest.raises(SchemaMismatchError):
            s.fetch_matches("support")


class _CommitFails:
    """Connection stand-in whose commit fails like a locked database."""

    def __init__(self, connection):
        self._connection = connection

    def __getattr__(self, name):
        return getattr(self._connection, name)

    def commit(self):
        raise sqlite3.OperationalError("database is locked")


def test_commit_failures_raise_storage_error(store):
    store.ensure_role_table("tank")
    store.connection = _CommitFails(store.connection)

    with pytest.raises(StorageError):
        store.ensure_role_table("dps")
    with pytest.raises(StorageError):
        store.insert_match("tank", 2500, "Busan", None)
