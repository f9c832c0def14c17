"""
Drywell Pipeline - Base Classes for Datasets

Abstract base classes that all dataset implementations inherit from.
These provide a consistent interface for:
- Data ingestion (BaseIngester)
- Data preprocessing (BasePreprocessor)

Usage:
    from drywell_pipeline.datasets.base import BaseIngester, BasePreprocessor

    class ShortageReportIngester(BaseIngester):
        def fetch_data(self) -> pd.DataFrame:
            ...
"""

from drywell_pipeline.datasets.base.ingester import BaseIngester, IngestionResult
from drywell_pipeline.datasets.base.preprocessor import BasePreprocessor, PreprocessingResult

__all__ = [
    "BaseIngester",
    "IngestionResult",
    "BasePreprocessor",
    "PreprocessingResult",
]
