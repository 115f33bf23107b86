"""CSV export of the current record set."""

import csv
import io
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from .config import EXPORT_BASENAME, NO_DATA_MESSAGE

logger = logging.getLogger(__name__)

Records = pd.DataFrame | Sequence[Mapping[str, Any]] | None


@dataclass(frozen=True)
class CsvExport:
    """A rendered CSV artifact ready to be downloaded or written."""

    filename: str
    content: str

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")


def _as_records(records: Records) -> list[Mapping[str, Any]]:
    if records is None:
        return []
    if isinstance(records, pd.DataFrame):
        frame = records.astype(object).where(records.notna(), None)
        return frame.to_dict(orient="records")
    return list(records)


def _render_row(values: Sequence[Any]) -> str:
    # A "\r\n" terminator makes the writer quote fields holding either character
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\r\n").writerow(values)
    return buffer.getvalue().removesuffix("\r\n")


def render_csv(records: Records) -> str:
    """Render records as comma-separated text.

    The header row is the key set of the first record. Values containing
    a comma, quote, carriage return or newline are quoted with inner quotes
    doubled. None renders as an empty field, except in single-column rows
    where the csv module writes ``""`` so the row is not read back as a
    blank line. Rows are joined with ``\\n`` and there is no trailing
    newline.
    """
    rows = _as_records(records)
    if not rows:
        return ""

    headers = list(rows[0].keys())
    lines = [_render_row(headers)]
    lines.extend(_render_row([row.get(header) for header in headers]) for row in rows)
    return "\n".join(lines)


def build_export_filename(base: str = EXPORT_BASENAME, now: datetime | None = None) -> str:
    """Return ``<base>-<ISO 8601 UTC timestamp>.csv``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"
    return f"{base}-{stamp}.csv"


def prepare_export(records: Records, filename: str = EXPORT_BASENAME) -> CsvExport | None:
    """Render records for download.

    Returns None, without rendering anything, when there is nothing to
    export; callers show the 'No data to export' notice.
    """
    rows = _as_records(records)
    if not rows:
        logger.info(NO_DATA_MESSAGE)
        return None

    export = CsvExport(filename=build_export_filename(filename), content=render_csv(rows))
    logger.info("Prepared export %s with %d rows", export.filename, len(rows))
    return export


def write_export(export: CsvExport, directory: Path) -> Path:
    """Write a rendered export into ``directory`` and return its path.

    Raises:
        OSError: If the directory or file cannot be written
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export.filename
    path.write_text(export.content, encoding="utf-8")
    logger.info("Wrote export to %s", path)
    return path
