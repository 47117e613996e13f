"""Export stored matches to external file formats."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .db import MatchStore

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

EXPORT_FORMATS = ("parquet", "json", "csv")
EXPORT_COLUMNS = ("role", "timestamp", "rating", "map", "comment", "outcome")


def collect_rows(
    store: MatchStore, roles: Optional[Iterable[str]] = None
) -> List[Dict[str, Any]]:
    """Gather rows of the requested roles, or of every role table present."""

    selected = list(roles) if roles else store.existing_roles()
    rows: List[Dict[str, Any]] = []
    for role in selected:
        rows.extend(m.as_dict() for m in store.fetch_matches(role))
    return rows


def _write_json(rows: List[Dict[str, Any]], path: Path) -> int:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(rows, fh, indent=2, ensure_ascii=False)
        fh.write("\n")
    return len(rows)


def _write_csv(rows: List[Dict[str, Any]], path: Path) -> int:
    with path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)


def export_matches(
    store: MatchStore,
    path: Path,
    *,
    fmt: str = "parquet",
    roles: Optional[Iterable[str]] = None,
) -> int:
    """Write the player's matches to ``path`` and return the row count."""

    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    rows = collect_rows(store, roles)
    path = Path(path)
    logger.debug("Exporting %d rows to %s as %s", len(rows), path, fmt)
    if fmt == "parquet":
        from .parquet_export import write_parquet

        return write_parquet(rows, path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "json":
        return _write_json(rows, path)
    return _write_csv(rows, path)


__all__ = ["EXPORT_FORMATS", "collect_rows", "export_matches"]
