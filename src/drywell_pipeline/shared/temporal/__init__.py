"""
Drywell Pipeline - Temporal Utilities

- Strict calendar-date parsing
- Missing-date imputation
- Issue-year window masks
"""

from drywell_pipeline.shared.temporal.dates import (
    blank_to_na,
    impute_dates,
    parse_calendar_dates,
    year_in_window,
)

__all__ = ["blank_to_na", "parse_calendar_dates", "impute_dates", "year_in_window"]
