import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest

# Make tests robust to both flat and src/ layouts without requiring installation
_HERE = Path(__file__).resolve()
_ROOT = _HERE.parents[1]
_SRC = _ROOT / "src"
for _p in (_SRC, _ROOT):
    if _p.exists() and str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

from ow_tracker.db import MatchStore  # noqa: E402

PLAYER_NAME = "aaad"


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path


@pytest.fixture
def store(data_dir):
    s = MatchStore.open(data_dir, PLAYER_NAME, create=True)
    try:
        yield s
    finally:
        s.close()


def _add_matches(
    store: MatchStore,
    role: str,
    entries: Iterable[Tuple[int, str, Optional[str]]],
) -> None:
    store.ensure_role_table(role)
    for rating, map_name, comment in entries:
        store.insert_match(role, rating, map_name, comment)


@pytest.fixture(name="add_matches")
def add_matches_fixture():
    return _add_matches
