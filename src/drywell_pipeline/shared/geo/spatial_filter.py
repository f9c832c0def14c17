"""
Drywell Pipeline - Spatial Filter

Point-in-polygon filtering against the study-area boundary. Points lying on
the boundary edge count as inside.
"""

from __future__ import annotations

import logging

import geopandas as gpd
import pandas as pd

from drywell_pipeline.shared.exceptions import ProjectionError, warn_if_empty

logger = logging.getLogger(__name__)


def filter_within(points: gpd.GeoDataFrame, boundary: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Keep the points covered by the boundary polygon(s).

    Multiple boundary rows are dissolved into one area first. Input order is
    preserved and attributes are left untouched.

    Args:
        points: Point layer
        boundary: Polygon or multipolygon layer in the same CRS

    Returns:
        New GeoDataFrame holding the retained points

    Raises:
        ProjectionError: If the two layers are in different CRSs
    """
    if points.crs != boundary.crs:
        raise ProjectionError(
            f"Points ({points.crs}) and boundary ({boundary.crs}) are in different CRSs"
        )

    if boundary.empty:
        mask = pd.Series(False, index=points.index)
    else:
        area = boundary.geometry.union_all()
        mask = points.geometry.covered_by(area)

    kept = points.loc[mask].copy()
    dropped = len(points) - len(kept)

    logger.info(
        f"Spatial filter kept {len(kept)} of {len(points)} points",
        extra={"rows_input": len(points), "rows_output": len(kept), "rows_outside": dropped},
    )
    if warn_if_empty(len(kept), "Spatial filter"):
        logger.warning("No points fall within the study area")

    return kept
