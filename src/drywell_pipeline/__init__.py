"""
Drywell Pipeline

Prepares reported domestic well failures for model calibration: loads the
drywell point layer and study-area boundary, filters points to the boundary,
joins shortage reports, resolves issue dates and exports the points inside the
configured issue-year window.
"""

__version__ = "0.1.0"
