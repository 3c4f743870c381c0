"""
Snapshot writer for collected data.

Writes the lease statistics, host reservations and events held by an
in-memory store into a directory of Parquet files, along with a small JSON
summary describing what was written.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

import polars as pl

from ..models.config import SnapshotConfig
from ..utils import utc_now
from .memory_store import InMemoryStore

logger = logging.getLogger(__name__)


def _write_table(frame: pl.DataFrame, path: Path, compression: str) -> None:
    try:
        frame.write_parquet(path, compression=compression)
    except Exception as e:
        logger.error(f"Failed to write snapshot table {path}: {e}")
        raise
    logger.debug(f"Wrote {len(frame)} rows to {path}")


def _write_summary(summary: Dict[str, Any], path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)


def write_snapshot(store: InMemoryStore, config: SnapshotConfig) -> Dict[str, Path]:
    """
    Write a snapshot of the store.

    Empty tables are not written. The snapshot directory is created when
    missing.

    Args:
        store: Store to export
        config: Snapshot settings (directory and compression)

    Returns:
        Mapping of table name to the written file
    """
    output_dir = Path(config.directory)
    output_dir.mkdir(parents=True, exist_ok=True)

    frames = {
        "lease_stats": store.lease_stats_frame(),
        "hosts": store.hosts_frame(),
        "events": store.events_frame(),
    }

    written: Dict[str, Path] = {}
    for name, frame in frames.items():
        if frame.is_empty():
            logger.debug(f"Snapshot table {name} is empty, skipping")
            continue
        path = output_dir / f"{name}.parquet"
        _write_table(frame, path, config.compression)
        written[name] = path

    summary = {
        "written_at": utc_now().isoformat(),
        "compression": config.compression,
        "tables": {name: len(frame) for name, frame in frames.items()},
    }
    _write_summary(summary, output_dir / "summary.json")

    logger.info(f"Wrote snapshot of {len(written)} tables to {output_dir}")
    return written
