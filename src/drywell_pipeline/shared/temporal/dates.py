"""
Drywell Pipeline - Calendar Date Utilities

Strict calendar-date parsing, fallback imputation and year-window masks.

Parsing never coerces bad text to missing: a value that is present but is not
a year-month-day date raises ParseError so data-quality problems do not show
up later as silent date-window exclusions.
"""

from __future__ import annotations

import datetime

import numpy as np
import pandas as pd

from drywell_pipeline.shared.exceptions import ParseError


def blank_to_na(values: pd.Series) -> pd.Series:
    """Treat empty or whitespace-only strings as missing."""
    if values.dtype != object and not pd.api.types.is_string_dtype(values):
        return values
    cleaned = values.map(lambda v: v.strip() if isinstance(v, str) else v)
    return cleaned.mask(cleaned.map(lambda v: isinstance(v, str) and v == "").astype(bool))


def _is_date_like(value: object) -> bool:
    return isinstance(value, str | datetime.date | np.datetime64)


def parse_calendar_dates(values: pd.Series, column: str) -> pd.Series:
    """
    Parse a column to datetime64 at day granularity.

    Accepts ISO year-month-day text (with or without a time part) and values
    that are already timestamps. Any time-of-day component is discarded.

    Raises:
        ParseError: If a non-missing value cannot be parsed
    """
    if pd.api.types.is_datetime64_any_dtype(values):
        parsed = values
        if parsed.dt.tz is not None:
            parsed = parsed.dt.tz_localize(None)
        return parsed.dt.normalize().astype("datetime64[ns]")

    values = blank_to_na(values)
    present = values.notna()

    wrong_type = present & ~values.map(_is_date_like).astype(bool)
    if wrong_type.any():
        raise ParseError(column, values[wrong_type])

    try:
        parsed = pd.to_datetime(values, errors="coerce", format="ISO8601")
    except (TypeError, ValueError) as e:
        raise ParseError(column, values[present]) from e

    if not pd.api.types.is_datetime64_any_dtype(parsed):
        # Mixed UTC offsets come back as object dtype
        raise ParseError(column, values[present])

    unparsed = present & parsed.isna()
    if unparsed.any():
        raise ParseError(column, values[unparsed])

    if parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize().astype("datetime64[ns]")


def impute_dates(target: pd.Series, fallback: pd.Series) -> pd.Series:
    """Fill missing target dates from the fallback, then re-normalize to days."""
    return target.fillna(fallback).astype("datetime64[ns]").dt.normalize()


def year_in_window(dates: pd.Series, start_year: int, end_year: int) -> pd.Series:
    """Boolean mask of dates whose year is in [start_year, end_year]; missing is False."""
    years = dates.dt.year
    return years.between(start_year, end_year, inclusive="both").fillna(False).astype(bool)
