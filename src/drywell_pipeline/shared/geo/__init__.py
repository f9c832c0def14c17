"""
Drywell Pipeline - Geographic Utilities

- Reprojection into the shared planar CRS
- Point-in-polygon filtering against the study area
"""

from drywell_pipeline.shared.geo.projection import reproject, resolve_crs
from drywell_pipeline.shared.geo.spatial_filter import filter_within

__all__ = ["reproject", "resolve_crs", "filter_within"]
