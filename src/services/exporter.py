"""Export of analyzed listing pages.

A page of listings with their metrics is flattened to records; records go to
CSV (download button) or to a timestamped JSON file together with the query
and assumptions that produced them.
"""

import io
import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from src.core.logging import get_logger
from src.services.evaluator import AnalyzedListing

log = get_logger(__name__)


def to_records(analyzed: List[AnalyzedListing]) -> List[Dict[str, Any]]:
    return [item.to_row() for item in analyzed]


def to_csv_bytes(analyzed: List[AnalyzedListing]) -> bytes:
    """UTF-8 CSV with one row per listing and camelCase headers."""
    buffer = io.StringIO()
    pd.DataFrame(to_records(analyzed)).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8")


class ResultExporter:
    """Writes analyzed pages as JSON snapshots under one directory."""

    def __init__(self, output_dir: str = "results"):
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

    def save_results(
        self,
        analyzed: List[AnalyzedListing],
        prefix: str = "listings",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Write one snapshot file.

        Args:
            analyzed: Listings with metrics
            prefix: File name prefix, followed by a timestamp
            metadata: Query and assumptions stored under ``metadata``

        Returns:
            Path of the written file

        Raises:
            OSError: If the file cannot be written
        """
        now = datetime.now()
        filepath = os.path.join(self.output_dir, f"{prefix}_{now:%Y%m%d_%H%M%S}.json")
        snapshot = {
            "metadata": {**(metadata or {}), "exportedAt": now.isoformat(), "count": len(analyzed)},
            "listings": to_records(analyzed),
        }

        try:
            with open(filepath, "w", encoding="utf-8") as fh:
                json.dump(snapshot, fh, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            log.error("snapshot_write_failed", path=filepath, error=str(e))
            raise

        log.info("snapshot_written", path=filepath, listings=len(analyzed))
        return filepath
