"""
Drywell Pipeline - Base Preprocessor

Abstract base class for tabular preprocessors. Provides a consistent interface
for data cleaning and transformation with:
- Column standardization
- Strict data type conversion
- Transformation and drop-reason tracking

The input frame is never modified; every run works on its own copy.

Usage:
    class ShortageReportPreprocessor(BasePreprocessor):
        def transform(self, df: pd.DataFrame) -> pd.DataFrame:
            ...
        def get_column_mappings(self) -> dict[str, str]:
            return {"Record Creation Date": "report_date"}
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
from drywell_pipeline.shared.temporal import impute_dates, parse_calendar_dates

logger = logging.getLogger(__name__)


@dataclass
class PreprocessingResult:
    """Result of a preprocessing operation."""

    dataset: str
    execution_date: str
    rows_input: int
    rows_output: int
    rows_dropped: int
    columns_input: int
    columns_output: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    transformations_applied: list[str] = field(default_factory=list)
    drop_reasons: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "rows_dropped": self.rows_dropped,
            "columns_input": self.columns_input,
            "columns_output": self.columns_output,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "transformations_applied": self.transformations_applied,
            "drop_reasons": self.drop_reasons,
        }


class BasePreprocessor(ABC):
    """
    Abstract base class for dataset preprocessing.

    Subclasses must implement:
    - transform(): Apply dataset-specific transformations
    - get_dataset_name(): Return the dataset name
    - get_required_columns(): Return list of required output columns
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the preprocessor.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._transformations: list[str] = []
        self._drop_reasons: dict[str, int] = {}

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply dataset-specific transformations.

        Args:
            df: DataFrame with renamed and converted columns

        Returns:
            Transformed DataFrame
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "shortage_reports")
        """
        pass

    @abstractmethod
    def get_required_columns(self) -> list[str]:
        """
        Get list of required columns in the output.

        Returns:
            List of column names that must be present after preprocessing
        """
        pass

    def get_column_mappings(self) -> dict[str, str]:
        """
        Get column name mappings (old -> new).

        Override this method to rename columns during preprocessing.
        """
        return {}

    def get_dtype_mappings(self) -> dict[str, str]:
        """
        Get data type mappings for columns, applied after renaming.

        The only supported type is "date" (strict calendar date).
        """
        return {}

    def run(
        self,
        df: pd.DataFrame,
        execution_date: str,
    ) -> PreprocessingResult:
        """
        Run the preprocessing pipeline.

        Args:
            df: Raw DataFrame to preprocess
            execution_date: Execution date in YYYY-MM-DD format

        Returns:
            PreprocessingResult with details about the preprocessing

        Raises:
            DrywellPipelineError: Any preprocessing failure, after logging it
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)
        columns_input = len(df.columns)

        logger.info(
            f"Starting preprocessing for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            # Reset tracking
            self._transformations = []
            self._drop_reasons = {}

            df = df.copy()

            df = self._apply_column_mappings(df)
            df = self._apply_dtype_conversions(df)
            df = self.transform(df)

            self._validate_required_columns(df)

            rows_output = len(df)
            result = PreprocessingResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=rows_output,
                rows_dropped=rows_input - rows_output,
                columns_input=columns_input,
                columns_output=len(df.columns),
                duration_seconds=time.time() - start_time,
                success=True,
                transformations_applied=self._transformations,
                drop_reasons=self._drop_reasons,
            )

            logger.info(
                f"Preprocessing complete for {dataset_name}: {rows_input} -> {rows_output} rows",
                extra=result.to_dict(),
            )

            # Store processed data
            self._data = df

            return result

        except Exception as e:
            logger.error(
                f"Preprocessing failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )
            raise

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently processed data."""
        return getattr(self, "_data", None)

    def _apply_column_mappings(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply column name mappings."""
        mappings = self.get_column_mappings()
        if mappings:
            df = df.rename(columns=mappings)
            self._transformations.append(f"renamed_columns: {list(mappings.keys())}")
        return df

    def _apply_dtype_conversions(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply data type conversions.

        Conversion failures propagate; nothing is silently coerced to missing.
        """
        for col, dtype in self.get_dtype_mappings().items():
            if col not in df.columns:
                continue
            if dtype != "date":
                raise ValueError(f"Unsupported dtype mapping for {col}: {dtype!r}")
            df[col] = parse_calendar_dates(df[col], col)
            self._transformations.append(f"converted_{col}_to_{dtype}")
        return df

    def _validate_required_columns(self, df: pd.DataFrame) -> None:
        """Validate that all required columns are present."""
        missing = set(self.get_required_columns()) - set(df.columns)
        if missing:
            raise LoadError(f"{self.get_dataset_name()}: missing required columns {sorted(missing)}")

    def log_transformation(self, name: str) -> None:
        """Log a transformation that was applied."""
        self._transformations.append(name)

    def log_dropped_rows(self, reason: str, count: int) -> None:
        """Log rows that were dropped."""
        self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count

    # ==========================================================================
    # Common Preprocessing Utilities
    # ==========================================================================

    def replace_substrings(
        self,
        df: pd.DataFrame,
        col: str,
        substitutions: dict[str, str],
    ) -> pd.DataFrame:
        """
        Apply exact, case-sensitive substring replacements in order.

        Non-string values (including missing) pass through unchanged.
        """
        values = df[col]
        text_mask = values.map(lambda v: isinstance(v, str)).astype(bool)
        replaced = values[text_mask].astype(str)
        for source, target in substitutions.items():
            replaced = replaced.str.replace(source, target, regex=False)

        changed = int((replaced != values[text_mask]).sum())
        df[col] = values.where(~text_mask, replaced)

        if changed > 0:
            self.log_transformation(f"replace_substrings_{col}")
        logger.debug(f"Normalized {changed} values in {col}")
        return df

    def fill_missing(
        self,
        df: pd.DataFrame,
        col: str,
        fallback_col: str,
    ) -> pd.DataFrame:
        """Fill missing dates in a column from another date column."""
        missing_count = int((df[col].isna() & df[fallback_col].notna()).sum())
        df[col] = impute_dates(df[col], df[fallback_col])
        if missing_count > 0:
            self.log_transformation(f"fill_missing_{col}_from_{fallback_col}")
        return df
