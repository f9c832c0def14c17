"""
Drywell Pipeline - Exceptions

Every failure except EmptyResultWarning halts the pipeline at the failing stage.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable
from typing import Any


def _sample(values: Iterable[Any], limit: int = 5) -> list[str]:
    """First few distinct offending values, as strings."""
    seen: list[str] = []
    for value in values:
        text = repr(value)
        if text not in seen:
            seen.append(text)
        if len(seen) >= limit:
            break
    return seen


class DrywellPipelineError(Exception):
    """Base class for pipeline failures."""


class LoadError(DrywellPipelineError):
    """Raised when a geometry source or report table is missing or unreadable."""


class ProjectionError(DrywellPipelineError):
    """Raised when CRS metadata is absent or a transform cannot be built."""


class ParseError(DrywellPipelineError):
    """Raised when a date column contains values that are not calendar dates."""

    def __init__(self, column: str, values: Iterable[Any]):
        self.column = column
        self.values = _sample(values)
        super().__init__(f"Unparseable date values in '{column}': {', '.join(self.values)}")


class JoinKeyError(DrywellPipelineError):
    """Raised when an identifier column cannot be coerced to numeric."""

    def __init__(self, column: str, values: Iterable[Any]):
        self.column = column
        self.values = _sample(values)
        super().__init__(f"Non-numeric identifiers in '{column}': {', '.join(self.values)}")


class WriteError(DrywellPipelineError):
    """Raised when the export destination cannot be written."""


class EmptyResultWarning(UserWarning):
    """Issued when an intermediate stage leaves zero rows."""


def warn_if_empty(rows: int, stage: str) -> bool:
    """
    Surface an EmptyResultWarning when a stage produced no rows.

    Returns True when the warning was issued.
    """
    if rows > 0:
        return False
    warnings.warn(
        f"{stage} produced an empty result; downstream stages will receive no rows",
        EmptyResultWarning,
        stacklevel=3,
    )
    return True
