"""
Drywell Pipeline - Geometry Loaders

Reads the drywell point layer and the study-area boundary, then reprojects
both into the shared planar CRS. Features are never dropped or reordered here.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd

from drywell_pipeline.datasets.base import BaseIngester
from drywell_pipeline.shared.config import Settings
from drywell_pipeline.shared.exceptions import LoadError
from drywell_pipeline.shared.geo import reproject

logger = logging.getLogger(__name__)

POINT_TYPES = frozenset({"Point", "MultiPoint"})
POLYGON_TYPES = frozenset({"Polygon", "MultiPolygon"})


def read_layer(path: Path, allowed_types: frozenset[str], label: str) -> gpd.GeoDataFrame:
    """
    Read a vector layer and check its geometry types.

    Raises:
        LoadError: If the file is missing, unreadable, has no geometry column
            or holds geometries outside allowed_types
    """
    if not path.exists():
        raise LoadError(f"{label} not found: {path}")

    try:
        gdf = gpd.read_file(path)
    except Exception as e:
        raise LoadError(f"Could not read {label} {path}: {e}") from e

    if not isinstance(gdf, gpd.GeoDataFrame):
        raise LoadError(f"{label} {path} has no geometry column")

    found = set(gdf.geometry.dropna().geom_type.unique())
    unexpected = found - allowed_types
    if unexpected:
        raise LoadError(
            f"{label} {path} has unrecognized geometry type(s) {sorted(unexpected)}; "
            f"expected {sorted(allowed_types)}"
        )

    return gdf


class _LayerIngester(BaseIngester):
    """Shared behaviour for vector layers loaded into the target CRS."""

    allowed_types: frozenset[str] = frozenset()
    label: str = "layer"

    def __init__(self, config: Settings | None = None, path: str | Path | None = None):
        super().__init__(config)
        self.path = Path(path or self._default_path())

    @abstractmethod
    def _default_path(self) -> str:
        """Configured path used when none is passed in."""
        pass

    def get_source_path(self) -> str:
        return str(self.path)

    def fetch_data(self) -> pd.DataFrame:
        return read_layer(self.path, self.allowed_types, self.label)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Reproject into the configured target CRS."""
        return reproject(df, self.config.projection.target_crs, label=self.label)


class DrywellIngester(_LayerIngester):
    """Ingester for the reported drywell point layer."""

    allowed_types = POINT_TYPES
    label = "drywell points"

    def _default_path(self) -> str:
        return self.config.paths.points

    def get_dataset_name(self) -> str:
        return "drywells"

    def get_primary_key(self) -> str:
        return self.config.columns.point_id

    def get_required_columns(self) -> list[str]:
        return [self.config.columns.point_id, self.config.columns.point_report_date]


class BoundaryIngester(_LayerIngester):
    """Ingester for the study-area boundary polygon."""

    allowed_types = POLYGON_TYPES
    label = "study area boundary"

    def _default_path(self) -> str:
        return self.config.paths.boundary

    def get_dataset_name(self) -> str:
        return "boundary"

    def get_primary_key(self) -> str:
        return "geometry"

    def get_required_columns(self) -> list[str]:
        return []


def ingest_drywells(execution_date: str, config: Settings | None = None) -> dict[str, Any]:
    """Convenience function for loading the drywell layer."""
    ingester = DrywellIngester(config)
    result = ingester.run(execution_date)
    return result.to_dict()
