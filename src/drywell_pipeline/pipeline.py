"""
Drywell Pipeline - Orchestration

Runs the stages strictly in order:

    points + boundary (load, reproject)
        -> spatial filter
        -> shortage reports (load, normalize)
        -> join + issue-date window
        -> export

Each stage consumes the full output of the previous one. Any error stops the
run before the export is written; an EmptyResultWarning does not.

Usage:
    from drywell_pipeline.pipeline import DrywellPipeline

    result = DrywellPipeline().run()
    print(result.to_dict())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import geopandas as gpd

from drywell_pipeline.datasets.base import IngestionResult, PreprocessingResult
from drywell_pipeline.datasets.drywells import (
    BoundaryIngester,
    DrywellExporter,
    DrywellIngester,
    DrywellReportJoiner,
    ExportResult,
    JoinResult,
)
from drywell_pipeline.datasets.shortages import (
    ISSUE_DATE,
    ShortageReportIngester,
    ShortageReportPreprocessor,
)
from drywell_pipeline.shared.config import Settings, get_config
from drywell_pipeline.shared.exceptions import WriteError
from drywell_pipeline.shared.geo import filter_within

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Aggregated results of one pipeline run."""

    execution_date: str
    ingestion: dict[str, IngestionResult] = field(default_factory=dict)
    preprocessing: PreprocessingResult | None = None
    rows_in_study_area: int = 0
    join: JoinResult | None = None
    export: ExportResult | None = None
    statistics: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging and the JSON summary."""
        return {
            "execution_date": self.execution_date,
            "ingestion": {name: r.to_dict() for name, r in self.ingestion.items()},
            "preprocessing": self.preprocessing.to_dict() if self.preprocessing else None,
            "rows_in_study_area": self.rows_in_study_area,
            "join": self.join.to_dict() if self.join else None,
            "export": self.export.to_dict() if self.export else None,
            "statistics": self.statistics,
        }


def generate_statistics(gdf: gpd.GeoDataFrame, category_column: str) -> dict[str, Any]:
    """Summary statistics of the exported layer."""
    stats: dict[str, Any] = {
        "total_records": len(gdf),
        "issue_date_range": {"start": None, "end": None},
        "issue_year_distribution": {},
        "category_distribution": {},
    }

    if ISSUE_DATE in gdf.columns and gdf[ISSUE_DATE].notna().any():
        dates = gdf[ISSUE_DATE].dropna()
        stats["issue_date_range"] = {
            "start": str(dates.min().date()),
            "end": str(dates.max().date()),
        }
        stats["issue_year_distribution"] = {
            int(year): int(count)
            for year, count in dates.dt.year.value_counts().sort_index().items()
        }

    if category_column in gdf.columns:
        stats["category_distribution"] = {
            str(category): int(count)
            for category, count in gdf[category_column].value_counts().items()
        }

    return stats


class DrywellPipeline:
    """Linear drywell preparation pipeline."""

    def __init__(self, config: Settings | None = None):
        self.config = config or get_config()

    def run(self, execution_date: str | None = None) -> PipelineResult:
        """
        Run every stage and write the final layer.

        Args:
            execution_date: Run date in YYYY-MM-DD format (defaults to today)

        Returns:
            PipelineResult with per-stage results and output statistics

        Raises:
            DrywellPipelineError: From the first failing stage
        """
        execution_date = execution_date or datetime.now().strftime("%Y-%m-%d")
        result = PipelineResult(execution_date=execution_date)

        logger.info(f"Starting drywell pipeline for {execution_date}")

        # 1. Geometry
        points_ingester = DrywellIngester(self.config)
        boundary_ingester = BoundaryIngester(self.config)
        result.ingestion["drywells"] = points_ingester.run(execution_date)
        result.ingestion["boundary"] = boundary_ingester.run(execution_date)

        # 2. Study area
        in_area = filter_within(points_ingester.get_data(), boundary_ingester.get_data())
        result.rows_in_study_area = len(in_area)

        # 3. Reports
        report_ingester = ShortageReportIngester(self.config)
        result.ingestion["shortage_reports"] = report_ingester.run(execution_date)

        preprocessor = ShortageReportPreprocessor(self.config)
        result.preprocessing = preprocessor.run(report_ingester.get_data(), execution_date)

        # 4. Join and date window
        joiner = DrywellReportJoiner(self.config)
        result.join = joiner.run(in_area, preprocessor.get_data(), execution_date)
        final = joiner.get_data()

        # 5. Export
        result.export = DrywellExporter(self.config).run(final)

        result.statistics = generate_statistics(
            final, self.config.normalization.category_column
        )
        self._write_summary(result)

        logger.info(
            f"Drywell pipeline complete: {result.export.rows_written} points written",
            extra={"statistics": result.statistics},
        )
        return result

    def _write_summary(self, result: PipelineResult) -> None:
        summary_path = self.config.paths.summary
        if not summary_path:
            return
        path = Path(summary_path)
        try:
            with open(path, "w") as f:
                json.dump(result.to_dict(), f, indent=2, default=str)
        except OSError as e:
            raise WriteError(f"Could not write run summary {path}: {e}") from e
        logger.info(f"Run summary written to {path}")


def configure_logging(config: Settings | None = None) -> None:
    """Configure root logging from the logging section of the settings."""
    config = config or get_config()
    logging.basicConfig(
        level=config.logging.level.upper(),
        format=config.logging.format,
    )


def run_pipeline(
    execution_date: str | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """Convenience function for running the whole pipeline."""
    return DrywellPipeline(config).run(execution_date).to_dict()
