"""Persisted JSON and CSV reports."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from saturator._internal.logging import get_logger
from saturator.metrics.models import CSV_FIELDS, SummaryStatistics

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger("report.files")

REPORT_PREFIX = "saturator_report"


def write_json(summary: SummaryStatistics, path: Path) -> Path:
    """Write the JSON report, including the status code distribution.

    Args:
        summary: Statistics to persist.
        path: Destination file.

    Returns:
        The written path.
    """
    path.write_text(json.dumps(summary.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path


def write_csv(summary: SummaryStatistics, path: Path) -> Path:
    """Write the CSV report: a header row and a single data row.

    Undefined latency percentiles are written as empty cells.
    """
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerow(summary.to_record())
    return path


def read_json(path: Path) -> SummaryStatistics:
    """Load statistics from a JSON report written by ``write_json``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or misses fields.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    try:
        return SummaryStatistics.from_dict(data)
    except (KeyError, TypeError) as exc:
        msg = f"{path} is not a saturator JSON report: {exc}"
        raise ValueError(msg) from exc


def save_reports(
    summary: SummaryStatistics,
    output_dir: Path,
    *,
    now: Callable[[], datetime] = datetime.now,
) -> tuple[Path, Path]:
    """Write both reports with a timestamped file name.

    Args:
        summary: Statistics to persist.
        output_dir: Directory to write into; created if missing.
        now: Clock used for the file name.

    Returns:
        The (json_path, csv_path) pair.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{REPORT_PREFIX}_{now().strftime('%Y%m%d_%H%M%S')}"
    json_path = write_json(summary, output_dir / f"{stem}.json")
    csv_path = write_csv(summary, output_dir / f"{stem}.csv")
    logger.info("Reports written: %s, %s", json_path, csv_path)
    return json_path, csv_path
