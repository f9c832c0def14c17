"""
Drywell Pipeline - Shortage Report Dataset

Household water supply shortage reports (tabular, keyed by drywell id).

Components:
    - ShortageReportIngester: Reads the report spreadsheet
    - ShortageReportPreprocessor: Normalizes categories and dates

Usage:
    from drywell_pipeline.datasets.shortages import (
        ShortageReportIngester,
        ShortageReportPreprocessor,
    )

    ingester = ShortageReportIngester()
    ingester.run(execution_date="2024-01-15")

    preprocessor = ShortageReportPreprocessor()
    preprocessor.run(ingester.get_data(), execution_date="2024-01-15")
    reports_df = preprocessor.get_data()
"""

from drywell_pipeline.datasets.shortages.ingest import (
    ShortageReportIngester,
    ingest_shortage_reports,
)
from drywell_pipeline.datasets.shortages.preprocess import (
    ISSUE_DATE,
    REPORT_DATE,
    ShortageReportPreprocessor,
    preprocess_shortage_reports,
)

__all__ = [
    "ShortageReportIngester",
    "ShortageReportPreprocessor",
    "ingest_shortage_reports",
    "preprocess_shortage_reports",
    "ISSUE_DATE",
    "REPORT_DATE",
]
