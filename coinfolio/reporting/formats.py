"""Output writers for CSV and Parquet reports."""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

LOGGER = logging.getLogger(__name__)


def write_csv(path: Path, frame: pd.DataFrame) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)


def write_parquet(path: Path, frame: pd.DataFrame) -> None:
    try:
        import pyarrow  # noqa: F401
    except ImportError as exc:
        raise RuntimeError("Parquet support requires the 'parquet' extra (pyarrow)") from exc
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_parquet(path, index=False)


def export_reports(outdir: Path, frames: dict[str, pd.DataFrame], *, fmt: str = "csv") -> list[Path]:
    """Write each frame in ``frames`` as ``<name>.<ext>`` under ``outdir``."""

    if fmt not in ("csv", "parquet", "both"):
        raise ValueError(f"Unsupported report format: {fmt}")
    outdir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, frame in frames.items():
        if fmt in ("csv", "both"):
            path = outdir / f"{name}.csv"
            write_csv(path, frame)
            written.append(path)
        if fmt in ("parquet", "both"):
            path = outdir / f"{name}.parquet"
            write_parquet(path, frame)
            written.append(path)
    LOGGER.info("Wrote %d report file(s) to %s", len(written), outdir)
    return written
