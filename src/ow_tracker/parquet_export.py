"""Parquet export of stored matches.

Writes one file holding the rows of every exported role, with a fixed
schema so files written at different times read back with the same types.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pyarrow as pa
import pyarrow.parquet as pq

MATCH_SCHEMA = pa.schema(
    [
        pa.field("role", pa.string()),
        pa.field("timestamp", pa.string()),
        pa.field("rating", pa.int32()),
        pa.field("map", pa.string()),
        pa.field("comment", pa.string()),
        pa.field("outcome", pa.string()),
    ]
)


def write_parquet(
    rows: List[Dict[str, Any]],
    path: Path,
    *,
    compression: Optional[str] = "zstd",
) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    columns = {name: [r.get(name) for r in rows] for name in MATCH_SCHEMA.names}
    table = pa.table(columns, schema=MATCH_SCHEMA)
    pq.write_table(
        table,
        path,
        compression=compression,
        use_dictionary=["role", "map"],
    )
    return table.num_rows


__all__ = ["MATCH_SCHEMA", "write_parquet"]
