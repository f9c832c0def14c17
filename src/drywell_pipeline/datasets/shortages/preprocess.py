"""
Drywell Pipeline - Shortage Report Preprocessor

Normalizes the shortage report table before it is joined to the drywell points.

Transformations:
    - Ad-hoc shortage phrasings replaced by the canonical category label
    - Date columns renamed to issue_date / report_date
    - Both dates parsed to calendar dates (time of day dropped)
    - Missing issue dates imputed from report dates

Usage:
    from drywell_pipeline.datasets.shortages.preprocess import ShortageReportPreprocessor

    preprocessor = ShortageReportPreprocessor()
    result = preprocessor.run(raw_df, execution_date="2024-01-15")
    reports_df = preprocessor.get_data()
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from drywell_pipeline.datasets.base import BasePreprocessor
from drywell_pipeline.shared.config import Settings

logger = logging.getLogger(__name__)

ISSUE_DATE = "issue_date"
REPORT_DATE = "report_date"


class ShortageReportPreprocessor(BasePreprocessor):
    """
    Preprocessor for shortage reports.

    Records with neither an issue date nor a report date keep a missing
    issue_date; the date-window filter drops them later.
    """

    def __init__(self, config: Settings | None = None):
        """Initialize shortage report preprocessor."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shortage_reports"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return [
            self.config.columns.report_id,
            self.config.normalization.category_column,
            ISSUE_DATE,
            REPORT_DATE,
        ]

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings."""
        return {
            self.config.columns.report_issue_date: ISSUE_DATE,
            self.config.columns.report_creation_date: REPORT_DATE,
        }

    def get_dtype_mappings(self) -> dict[str, str]:
        """Return data type mappings."""
        return {ISSUE_DATE: "date", REPORT_DATE: "date"}

    def get_substitutions(self) -> dict[str, str]:
        """Return the shortage phrase -> canonical label mapping."""
        return self.config.normalization.substitutions

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply shortage-report transformations.

        Args:
            df: Report table with renamed, date-typed columns

        Returns:
            Normalized report table
        """
        category = self.config.normalization.category_column
        if category in df.columns:
            df = self.replace_substrings(df, category, self.get_substitutions())

        df = self.fill_missing(df, ISSUE_DATE, REPORT_DATE)

        still_missing = int(df[ISSUE_DATE].isna().sum())
        if still_missing > 0:
            logger.warning(f"{still_missing} reports have neither an issue date nor a report date")

        return df


# =============================================================================
# Convenience Functions
# =============================================================================


def preprocess_shortage_reports(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for preprocessing shortage reports.

    Returns result dictionary suitable for logging.
    """
    preprocessor = ShortageReportPreprocessor(config)
    result = preprocessor.run(df, execution_date)
    return result.to_dict()
