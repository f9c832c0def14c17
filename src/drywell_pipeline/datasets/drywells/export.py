"""
Drywell Pipeline - Exporter

Writes the final point layer for the calibration step. The layer keeps the
pipeline CRS and every accumulated attribute column.

Date columns are written as calendar-date fields. Drivers with a field-name
length limit (shapefile) get explicit, unique short names; the renames are
reported in ExportResult.field_names.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import geopandas as gpd
import numpy as np
import pandas as pd
from pyogrio.raw import write as write_layer

from drywell_pipeline.shared.config import Settings, get_config
from drywell_pipeline.shared.exceptions import WriteError

logger = logging.getLogger(__name__)

DRIVERS_BY_SUFFIX = {
    ".shp": "ESRI Shapefile",
    ".gpkg": "GPKG",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".fgb": "FlatGeobuf",
}

FIELD_NAME_LIMITS = {"ESRI Shapefile": 10}

SHAPEFILE_SIDECARS = (".shp", ".shx", ".dbf", ".prj", ".cpg", ".qix", ".sbn", ".sbx")


def infer_driver(path: str | Path) -> str:
    """Map a file suffix to its OGR driver name."""
    suffix = Path(path).suffix.lower()
    try:
        return DRIVERS_BY_SUFFIX[suffix]
    except KeyError:
        raise WriteError(f"No vector driver known for '{suffix}' files ({path})") from None


def limit_field_names(
    columns: list[str],
    limit: int,
    overrides: dict[str, str] | None = None,
) -> dict[str, str]:
    """
    Map column names to unique names of at most `limit` characters.

    Overrides are applied first. Names are compared case-insensitively, as
    dBASE does; a clash is resolved with a numbered suffix.

    Returns:
        Mapping of the renamed columns only (old -> new)

    Raises:
        WriteError: If an override is too long or two overrides clash
    """
    overrides = overrides or {}
    renamed: dict[str, str] = {}
    taken: set[str] = set()

    for column, short in overrides.items():
        if column not in columns:
            continue
        if len(short) > limit or short.lower() in taken:
            raise WriteError(f"Invalid short field name {short!r} for column {column!r}")
        renamed[column] = short
        taken.add(short.lower())

    for column in columns:
        if column in renamed:
            continue
        name = column[:limit]
        counter = 1
        while name.lower() in taken:
            tag = f"_{counter}"
            name = f"{column[: limit - len(tag)]}{tag}"
            counter += 1
        taken.add(name.lower())
        if name != column:
            renamed[column] = name

    return renamed


def _field_array(values: pd.Series) -> tuple[np.ndarray, np.ndarray | None]:
    """Column values and null mask in the form the OGR writer expects."""
    if pd.api.types.is_datetime64_any_dtype(values):
        if values.dt.tz is not None:
            values = values.dt.tz_localize(None)
        # Day resolution is written as an OGR Date field; NaT becomes null
        return values.to_numpy(dtype="datetime64[D]"), None
    if isinstance(values.dtype, pd.api.extensions.ExtensionDtype):
        mask = values.isna().to_numpy()
        if pd.api.types.is_integer_dtype(values):
            return values.to_numpy(dtype="int64", na_value=0), mask
        if pd.api.types.is_float_dtype(values):
            return values.to_numpy(dtype="float64", na_value=np.nan), mask
        return values.to_numpy(dtype=object, na_value=None), mask
    return values.to_numpy(), None


def _layer_geometry_type(gdf: gpd.GeoDataFrame) -> tuple[str, bool]:
    types = set(gdf.geometry.dropna().geom_type)
    if not types:
        return "Point", False
    if len(types) == 1:
        return types.pop(), False
    if types == {"Point", "MultiPoint"}:
        return "MultiPoint", True
    return "Unknown", False


@dataclass
class ExportResult:
    """Result of writing the final layer."""

    output_path: str
    driver: str
    rows_written: int
    columns_written: list[str]
    crs: str | None
    field_names: dict[str, str] = field(default_factory=dict)
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "output_path": self.output_path,
            "driver": self.driver,
            "rows_written": self.rows_written,
            "columns_written": self.columns_written,
            "crs": self.crs,
            "field_names": self.field_names,
            "duration_seconds": self.duration_seconds,
        }


class DrywellExporter:
    """Writes the filtered drywell layer to disk."""

    def __init__(
        self,
        config: Settings | None = None,
        path: str | Path | None = None,
        driver: str | None = None,
    ):
        self.config = config or get_config()
        self.path = Path(path or self.config.paths.output)
        self.driver = driver or self.config.export.driver or infer_driver(self.path)

    def _check_destination(self) -> None:
        parent = self.path.parent
        if not parent.is_dir():
            raise WriteError(f"Destination directory does not exist: {parent}")
        if not os.access(parent, os.W_OK):
            raise WriteError(f"Destination directory is not writable: {parent}")

    def field_names(self, gdf: gpd.GeoDataFrame) -> dict[str, str]:
        """Renames needed for the driver's field-name limit, if it has one."""
        limit = FIELD_NAME_LIMITS.get(self.driver)
        if limit is None:
            return {}
        columns = [str(c) for c in gdf.columns if c != gdf.geometry.name]
        return limit_field_names(columns, limit, self.config.export.short_field_names)

    def _output_files(self) -> list[Path]:
        if self.driver == "ESRI Shapefile":
            return [self.path.with_suffix(ext) for ext in SHAPEFILE_SIDECARS]
        return [self.path]

    def _remove_partial_output(self) -> None:
        for path in self._output_files():
            if path.exists():
                path.unlink()
                logger.debug(f"Removed partial output {path}")

    def _write(self, gdf: gpd.GeoDataFrame, renamed: dict[str, str]) -> list[str]:
        """Write geometry and attributes; returns the field names on disk."""
        columns = [c for c in gdf.columns if c != gdf.geometry.name]
        fields = [renamed.get(str(c), str(c)) for c in columns]

        field_data = []
        field_mask = []
        for column in columns:
            data, mask = _field_array(gdf[column])
            field_data.append(data)
            field_mask.append(mask)

        crs = None
        if gdf.crs is not None:
            epsg = gdf.crs.to_epsg()
            crs = f"EPSG:{epsg}" if epsg is not None else gdf.crs.to_wkt("WKT1_GDAL")

        geometry_type, promote_to_multi = _layer_geometry_type(gdf)
        write_layer(
            str(self.path),
            geometry=gdf.geometry.to_wkb().to_numpy(),
            field_data=field_data,
            fields=fields,
            field_mask=field_mask,
            driver=self.driver,
            geometry_type=geometry_type,
            promote_to_multi=promote_to_multi,
            crs=crs,
        )
        return fields

    def run(self, gdf: gpd.GeoDataFrame) -> ExportResult:
        """
        Write the layer.

        Raises:
            WriteError: If the destination is missing, not writable or the
                driver rejects the data
        """
        start_time = time.time()
        try:
            self._check_destination()
        except WriteError:
            logger.error(f"Export to {self.path} refused", exc_info=True)
            raise

        renamed = self.field_names(gdf)
        try:
            fields = self._write(gdf, renamed)
        except Exception as e:
            logger.error(f"Export to {self.path} failed: {e}", exc_info=True)
            self._remove_partial_output()
            raise WriteError(f"Could not write {self.path}: {e}") from e

        if renamed:
            logger.info(f"Shortened field names for {self.driver}: {renamed}")

        result = ExportResult(
            output_path=str(self.path),
            driver=self.driver,
            rows_written=len(gdf),
            columns_written=[*fields, gdf.geometry.name],
            crs=gdf.crs.to_string() if gdf.crs is not None else None,
            field_names=renamed,
            duration_seconds=time.time() - start_time,
        )
        logger.info(f"Wrote {len(gdf)} drywells to {self.path}", extra=result.to_dict())
        return result


def export_drywells(
    gdf: gpd.GeoDataFrame,
    config: Settings | None = None,
    path: str | Path | None = None,
) -> dict[str, Any]:
    """Convenience function for the export stage."""
    exporter = DrywellExporter(config, path=path)
    return exporter.run(gdf).to_dict()
