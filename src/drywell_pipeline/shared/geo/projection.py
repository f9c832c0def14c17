"""
Drywell Pipeline - Coordinate Reference Systems

Reprojection of layers into the shared planar CRS.
"""

from __future__ import annotations

import logging

import geopandas as gpd
from pyproj import CRS
from pyproj.exceptions import CRSError

from drywell_pipeline.shared.exceptions import ProjectionError

logger = logging.getLogger(__name__)


def resolve_crs(crs_input: str | CRS) -> CRS:
    """Build a pyproj CRS from a PROJ string, EPSG code or WKT."""
    try:
        return CRS.from_user_input(crs_input)
    except CRSError as e:
        raise ProjectionError(f"Invalid CRS definition {crs_input!r}: {e}") from e


def reproject(gdf: gpd.GeoDataFrame, target_crs: str | CRS, label: str = "layer") -> gpd.GeoDataFrame:
    """
    Reproject a layer into the target CRS.

    Features keep their order and count. A layer already in the target CRS is
    returned as an unchanged copy.

    Raises:
        ProjectionError: If the layer has no CRS or the transform fails
    """
    if gdf.crs is None:
        raise ProjectionError(f"{label} has no CRS metadata; cannot reproject")

    target = resolve_crs(target_crs)
    if gdf.crs == target:
        logger.debug(f"{label} already in target CRS")
        return gdf.copy()

    try:
        projected = gdf.to_crs(target)
    except (CRSError, ValueError) as e:
        raise ProjectionError(f"Failed to reproject {label} from {gdf.crs} to {target}: {e}") from e

    logger.info(
        f"Reprojected {label}: {len(projected)} features",
        extra={"source_crs": gdf.crs.to_string(), "target_crs": target.to_string()},
    )
    return projected
