"""
Drywell Pipeline - Base Ingester

Abstract base class for all source loaders. Provides a consistent interface
for reading a file-based source with:
- Required column checks
- Error logging with fail-fast propagation
- Structured result reporting

Usage:
    class DrywellIngester(BaseIngester):
        def fetch_data(self) -> pd.DataFrame:
            ...
        def get_primary_key(self) -> str:
            return "Drywell_ID"
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from drywell_pipeline.shared.config import Settings, get_config
from drywell_pipeline.shared.exceptions import LoadError

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Result of a data ingestion operation."""

    dataset: str
    execution_date: str
    rows_fetched: int
    source_path: str
    crs: str | None = None
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_fetched": self.rows_fetched,
            "source_path": self.source_path,
            "crs": self.crs,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "metadata": self.metadata,
        }


class BaseIngester(ABC):
    """
    Abstract base class for dataset ingestion.

    Subclasses must implement:
    - fetch_data(): Read the source into a DataFrame
    - get_primary_key(): Return the identifier field
    - get_dataset_name(): Return the dataset name
    - get_source_path(): Return the file being read

    Subclasses may override transform() to post-process the loaded frame
    (e.g. reprojection) and get_required_columns() to declare mandatory fields.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the ingester.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def fetch_data(self) -> pd.DataFrame:
        """
        Read data from the source.

        Returns:
            DataFrame containing the loaded records

        Raises:
            LoadError: If the source is missing or unreadable
        """
        pass

    @abstractmethod
    def get_primary_key(self) -> str:
        """
        Get the primary key field name.

        Returns:
            Column name that identifies each record
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "drywells", "shortage_reports")
        """
        pass

    @abstractmethod
    def get_source_path(self) -> str:
        """Get the path of the file this ingester reads."""
        pass

    def get_required_columns(self) -> list[str]:
        """Columns that must be present in the loaded data."""
        return [self.get_primary_key()]

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Post-process the loaded data. Default is a no-op."""
        return df

    def run(self, execution_date: str) -> IngestionResult:
        """
        Run the ingestion process.

        Args:
            execution_date: Execution date in YYYY-MM-DD format

        Returns:
            IngestionResult with details about the ingestion

        Raises:
            DrywellPipelineError: Any loader failure, after logging it
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        source_path = self.get_source_path()

        logger.info(
            f"Starting ingestion for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "source_path": source_path,
            },
        )

        try:
            df = self.fetch_data()

            is_valid, errors = self.validate_schema(df)
            if not is_valid:
                raise LoadError(f"{dataset_name} ({source_path}): {'; '.join(errors)}")

            df = self.transform(df)

            result = IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_fetched=len(df),
                source_path=source_path,
                crs=self._describe_crs(df),
                duration_seconds=time.time() - start_time,
                success=True,
                metadata={
                    "primary_key": self.get_primary_key(),
                    "columns": list(df.columns),
                },
            )

            logger.info(
                f"Ingestion complete for {dataset_name}: {len(df)} rows",
                extra=result.to_dict(),
            )

            # Store the dataframe for downstream access
            self._data = df

            return result

        except Exception as e:
            logger.error(
                f"Ingestion failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )
            raise

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently loaded data."""
        return getattr(self, "_data", None)

    def validate_schema(self, df: pd.DataFrame) -> tuple[bool, list[str]]:
        """
        Perform basic schema validation on loaded data.

        Args:
            df: DataFrame to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        missing = [c for c in self.get_required_columns() if c not in df.columns]
        if missing:
            errors.append(
                f"missing required field(s): {missing}. Available fields: {sorted(map(str, df.columns))}"
            )

        return len(errors) == 0, errors

    @staticmethod
    def _describe_crs(df: pd.DataFrame) -> str | None:
        crs = getattr(df, "crs", None)
        return crs.to_string() if crs is not None else None
