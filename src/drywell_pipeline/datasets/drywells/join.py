"""
Drywell Pipeline - Report Join and Issue-Date Window

Attaches normalized shortage reports to the spatially filtered drywell points
and keeps the points whose resolved issue date falls in the configured
issue-year window.

Steps:
    1. Coerce report identifiers to numeric, then restrict reports to the
       issue-year window (smaller join)
    2. Coerce point identifiers to numeric
    3. Left join points -> reports on the identifier; other shared column
       names keep the point value and suffix the report value with "_report",
       except issue_date, which always comes from the reports
    4. Fill still-missing issue dates from the point layer's own report date
       (Report_Dat). This field is sourced independently of the report table's
       report_date and the two are kept separate.
    5. Keep points whose issue year is inside the window

Usage:
    joiner = DrywellReportJoiner(config)
    result = joiner.run(points_gdf, reports_df, execution_date="2024-01-15")
    final_gdf = joiner.get_data()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import geopandas as gpd
import pandas as pd

from drywell_pipeline.datasets.shortages.preprocess import ISSUE_DATE
from drywell_pipeline.shared.config import Settings, get_config
from drywell_pipeline.shared.exceptions import JoinKeyError, warn_if_empty
from drywell_pipeline.shared.temporal import (
    blank_to_na,
    impute_dates,
    parse_calendar_dates,
    year_in_window,
)

logger = logging.getLogger(__name__)

REPORT_SUFFIX = "_report"


@dataclass
class JoinResult:
    """Result of the join and date-window filter."""

    dataset: str
    execution_date: str
    rows_input: int
    reports_input: int
    reports_in_window: int
    rows_matched: int
    rows_imputed: int
    rows_output: int
    start_year: int
    end_year: int
    duration_seconds: float = 0.0
    drop_reasons: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "reports_input": self.reports_input,
            "reports_in_window": self.reports_in_window,
            "rows_matched": self.rows_matched,
            "rows_imputed": self.rows_imputed,
            "rows_output": self.rows_output,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "duration_seconds": self.duration_seconds,
            "drop_reasons": self.drop_reasons,
        }


def coerce_ids(values: pd.Series, column: str) -> pd.Series:
    """
    Convert identifier values to numbers.

    Whole-number identifiers become nullable Int64 so both sides of the join
    share a key type. Blank values become missing.

    Raises:
        JoinKeyError: If a non-missing value is not numeric
    """
    cleaned = blank_to_na(values)
    numeric = pd.to_numeric(cleaned, errors="coerce")

    invalid = cleaned.notna() & numeric.isna()
    if invalid.any():
        raise JoinKeyError(column, cleaned[invalid])

    if numeric.dropna().mod(1).eq(0).all():
        numeric = numeric.astype("Int64")
    return numeric


class DrywellReportJoiner:
    """Joins shortage reports onto drywell points and applies the date window."""

    def __init__(self, config: Settings | None = None):
        self.config = config or get_config()
        self._drop_reasons: dict[str, int] = {}

    @property
    def start_year(self) -> int:
        return self.config.date_window.start_year

    @property
    def end_year(self) -> int:
        return self.config.date_window.end_year

    def run(
        self,
        points: gpd.GeoDataFrame,
        reports: pd.DataFrame,
        execution_date: str,
    ) -> JoinResult:
        """
        Join, impute and filter.

        Args:
            points: Spatially filtered drywell points
            reports: Normalized shortage reports
            execution_date: Execution date in YYYY-MM-DD format

        Returns:
            JoinResult with row counts for every step

        Raises:
            JoinKeyError: If either identifier column is not numeric
            ParseError: If the point layer's report date holds bad values
        """
        start_time = time.time()
        self._drop_reasons = {}
        columns = self.config.columns

        logger.info(
            "Starting report join",
            extra={
                "execution_date": execution_date,
                "rows_input": len(points),
                "reports_input": len(reports),
            },
        )

        try:
            window_reports = self._restrict_reports(reports)

            joined = self._left_join(points, window_reports)
            rows_matched = int(joined.pop("_merge").eq("both").sum())

            point_report_dates = parse_calendar_dates(
                joined[columns.point_report_date], columns.point_report_date
            )
            imputable = joined[ISSUE_DATE].isna() & point_report_dates.notna()
            joined[ISSUE_DATE] = impute_dates(joined[ISSUE_DATE], point_report_dates)

            in_window = year_in_window(joined[ISSUE_DATE], self.start_year, self.end_year)
            self._log_dropped("issue_date_outside_window", int((~in_window).sum()))
            final = joined.loc[in_window].reset_index(drop=True)

        except Exception as e:
            logger.error(f"Report join failed: {e}", extra={"error": str(e)}, exc_info=True)
            raise

        final = gpd.GeoDataFrame(final, geometry=points.geometry.name, crs=points.crs)

        result = JoinResult(
            dataset="drywells",
            execution_date=execution_date,
            rows_input=len(points),
            reports_input=len(reports),
            reports_in_window=len(window_reports),
            rows_matched=rows_matched,
            rows_imputed=int(imputable.sum()),
            rows_output=len(final),
            start_year=self.start_year,
            end_year=self.end_year,
            duration_seconds=time.time() - start_time,
            drop_reasons=self._drop_reasons,
        )
        logger.info(
            f"Report join complete: {len(points)} -> {len(final)} points",
            extra=result.to_dict(),
        )
        if warn_if_empty(len(final), "Date-window filter"):
            logger.warning(
                f"No points have an issue date in {self.start_year}-{self.end_year}"
            )

        self._data = final
        return result

    def get_data(self) -> gpd.GeoDataFrame | None:
        """Get the most recently joined data."""
        return getattr(self, "_data", None)

    def _restrict_reports(self, reports: pd.DataFrame) -> pd.DataFrame:
        """Key-coerce, window and de-duplicate the report table."""
        report_id = self.config.columns.report_id

        # Every identifier is checked, including those about to be windowed out
        reports = reports.copy()
        reports[report_id] = coerce_ids(reports[report_id], report_id)

        in_window = year_in_window(reports[ISSUE_DATE], self.start_year, self.end_year)
        self._log_dropped("report_outside_window", int((~in_window).sum()))
        window_reports = reports.loc[in_window]

        missing_id = window_reports[report_id].isna()
        self._log_dropped("report_missing_identifier", int(missing_id.sum()))
        window_reports = window_reports.loc[~missing_id]

        # One report per drywell keeps the left join from multiplying points
        before = len(window_reports)
        window_reports = window_reports.sort_values(ISSUE_DATE, kind="stable").drop_duplicates(
            subset=[report_id], keep="first"
        )
        self._log_dropped("report_duplicate_identifier", before - len(window_reports))

        return window_reports

    def _left_join(self, points: gpd.GeoDataFrame, reports: pd.DataFrame) -> gpd.GeoDataFrame:
        """Left join reports onto points; every point survives."""
        point_id = self.config.columns.point_id
        report_id = self.config.columns.report_id

        left = points.copy()
        left[point_id] = coerce_ids(left[point_id], point_id)

        # issue_date is resolved from the reports; a point-side copy would shadow it
        if ISSUE_DATE in left.columns:
            logger.warning(
                f"Point layer already has an '{ISSUE_DATE}' column; "
                "it is replaced by the resolved issue date"
            )
            left = left.drop(columns=[ISSUE_DATE])

        return left.merge(
            reports,
            how="left",
            left_on=point_id,
            right_on=report_id,
            suffixes=("", REPORT_SUFFIX),
            indicator=True,
        )

    def _log_dropped(self, reason: str, count: int) -> None:
        if count > 0:
            self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count


def join_reports(
    points: gpd.GeoDataFrame,
    reports: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """Convenience function for the join stage."""
    joiner = DrywellReportJoiner(config)
    result = joiner.run(points, reports, execution_date)
    return result.to_dict()
