"""
Drywell Pipeline - Shortage Report Ingester

Reads the household water shortage report table (spreadsheet, no geometry).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from drywell_pipeline.datasets.base import BaseIngester
from drywell_pipeline.shared.config import Settings
from drywell_pipeline.shared.exceptions import LoadError

logger = logging.getLogger(__name__)


class ShortageReportIngester(BaseIngester):
    """Ingester for the shortage report spreadsheet."""

    def __init__(self, config: Settings | None = None, path: str | Path | None = None):
        super().__init__(config)
        self.path = Path(path or self.config.paths.reports)

    def get_dataset_name(self) -> str:
        return "shortage_reports"

    def get_primary_key(self) -> str:
        return self.config.columns.report_id

    def get_source_path(self) -> str:
        return str(self.path)

    def get_required_columns(self) -> list[str]:
        columns = self.config.columns
        return [
            columns.report_id,
            self.config.normalization.category_column,
            columns.report_issue_date,
            columns.report_creation_date,
        ]

    def fetch_data(self) -> pd.DataFrame:
        """Read the report table; .csv files are accepted alongside Excel workbooks."""
        if not self.path.is_file():
            raise LoadError(f"Shortage report table not found: {self.path}")

        logger.info(f"Reading shortage reports from {self.path}")
        try:
            if self.path.suffix.lower() == ".csv":
                return pd.read_csv(self.path)
            return pd.read_excel(self.path)
        except Exception as e:
            raise LoadError(f"Could not read shortage report table {self.path}: {e}") from e


def ingest_shortage_reports(
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """Convenience function for loading shortage reports."""
    ingester = ShortageReportIngester(config)
    result = ingester.run(execution_date)
    return result.to_dict()
