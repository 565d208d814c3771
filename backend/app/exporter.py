# app/exporter.py
"""
Export orchestration: fetch -> parse every result -> assemble -> CSV.

Each run gets its own HeaderRegistry, so two runs never share dynamic
columns. A failed fetch aborts the run before any parsing happens.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from app import config
from app.coveo_client import ExportError, RequestCapture, fetch_results
from app.header_registry import HeaderRegistry
from app.logging_utils import setup_logger, log_kv
from app.models import CapturedRequest, ExportStatus, SearchResult
from app.ranking_info import parse_ranking_info
from app.table import Pair, assemble_table
from app.timing import timed_block


class NoCaptureError(ExportError):
    """Export requested before any search request was captured."""


class ExportBusyError(ExportError):
    """Another export run is still in flight."""


@dataclass
class ExportResult:
    csv_text: str
    filename: str
    row_count: int
    columns: List[str]


# -------------------------------
# File naming / saving
# -------------------------------
def export_filename(now: Optional[datetime] = None) -> str:
    """
    coveo_export_<UTC ISO-8601 with milliseconds>.csv, with ':' and '.'
    replaced by '-', e.g. coveo_export_2024-05-01T09-30-00-123Z.csv
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return "coveo_export_" + stamp.replace(":", "-").replace(".", "-") + ".csv"


def save_csv(
    csv_text: str,
    out_dir: Optional[str] = None,
    filename: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Write the CSV as UTF-8 under out_dir (EXPORT_DIR by default) and return its path."""
    out_dir = out_dir or config.export_dir()
    os.makedirs(out_dir, exist_ok=True)
    path = Path(out_dir) / (filename or export_filename(now))
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(csv_text)
    return path


# -------------------------------
# Core pipeline
# -------------------------------
def parse_batch(raw_results: Iterable[Any], registry: HeaderRegistry) -> List[Pair]:
    pairs: List[Pair] = []
    for i, raw in enumerate(raw_results):
        # oddly typed fields are coerced by SearchResult; only a non-object ends the run
        if not isinstance(raw, dict):
            raise ExportError(f"Malformed result at index {i}: not an object")
        result = SearchResult.model_validate(raw)
        pairs.append((result, parse_ranking_info(result.ranking_info, registry)))
    return pairs


def export_results(raw_results: List[Any], now: Optional[datetime] = None) -> ExportResult:
    """Turn already-decoded result dicts into the CSV export."""
    registry = HeaderRegistry()

    with timed_block("parse-ranking-info", results=len(raw_results)):
        pairs = parse_batch(raw_results, registry)
    registry.freeze()

    with timed_block("assemble-table"):
        table = assemble_table(pairs, registry)
        csv_text = table.to_csv()

    return ExportResult(
        csv_text=csv_text,
        filename=export_filename(now),
        row_count=len(table.rows),
        columns=table.header,
    )


def run_export(captured: CapturedRequest, count: int, now: Optional[datetime] = None) -> ExportResult:
    with timed_block("fetch-results", count=count):
        raw_results = fetch_results(captured, count)
    return export_results(raw_results, now)


# -------------------------------
# Session: capture + status + serialized runs
# -------------------------------
class ExportSession:
    """
    What the on-page panel talks to: it records captured search requests,
    runs one export at a time, and keeps the last status message.
    """

    def __init__(self) -> None:
        self.capture = RequestCapture()
        self.status = ExportStatus(message="Waiting for search...")
        self._lock = threading.Lock()
        self._log = setup_logger("export")

    def notify(self, message: str, status: str = "info") -> ExportStatus:
        self.status = ExportStatus(message=message, status=status)
        return self.status

    def record_request(self, url: str, headers: Optional[Dict[str, str]] = None, body: Optional[str] = None) -> bool:
        kept = self.capture.capture(url, headers, body)
        if kept:
            self.notify("Ready to export (Request captured)")
        return kept

    def export(self, count: int, now: Optional[datetime] = None) -> ExportResult:
        captured = self.capture.last
        if captured is None:
            self.notify("No search detected yet. Please search first.", "error")
            raise NoCaptureError("No search detected yet. Please search first.")

        if not self._lock.acquire(blocking=False):
            raise ExportBusyError("An export is already running")
        try:
            self.notify(f"Fetching {count} records with Debug info...")
            result = run_export(captured, count, now)
        except ExportError as e:
            self.notify(f"Error: {e}", "error")
            log_kv(self._log, level=logging.ERROR, event="export-failed", error=e)
            raise
        finally:
            self._lock.release()

        self.notify("Export Complete!", "success")
        log_kv(self._log, event="export-done", rows=result.row_count, columns=len(result.columns), filename=result.filename)
        return result
