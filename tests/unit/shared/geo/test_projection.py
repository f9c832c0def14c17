"""
Tests for reprojection into the shared CRS.
"""

import geopandas as gpd
import numpy as np
import pytest
from pyproj import CRS
from shapely.geometry import Point

from drywell_pipeline.shared.config import WORLD_MERCATOR
from drywell_pipeline.shared.exceptions import ProjectionError
from drywell_pipeline.shared.geo import reproject, resolve_crs


@pytest.fixture
def wgs84_points():
    return gpd.GeoDataFrame(
        {"Drywell_ID": ["1", "2", "3"]},
        geometry=[Point(-119.5, 36.5), Point(0, 0), Point(-120.0, 37.0)],
        crs="EPSG:4326",
    )


class TestResolveCrs:
    def test_proj_string(self):
        crs = resolve_crs(WORLD_MERCATOR)
        assert crs.is_projected

    def test_epsg_code(self):
        assert resolve_crs("EPSG:3395").to_epsg() == 3395

    def test_invalid_definition(self):
        with pytest.raises(ProjectionError):
            resolve_crs("+proj=not_a_projection")


class TestReproject:
    def test_reprojects_to_target(self, wgs84_points):
        projected = reproject(wgs84_points, WORLD_MERCATOR)

        assert projected.crs == CRS.from_user_input(WORLD_MERCATOR)
        # Origin maps to origin in Mercator
        assert projected.geometry.iloc[1].x == pytest.approx(0.0, abs=1e-6)
        assert projected.geometry.iloc[1].y == pytest.approx(0.0, abs=1e-6)

    def test_keeps_order_and_count(self, wgs84_points):
        projected = reproject(wgs84_points, WORLD_MERCATOR)

        assert len(projected) == len(wgs84_points)
        assert list(projected["Drywell_ID"]) == ["1", "2", "3"]

    def test_does_not_modify_input(self, wgs84_points):
        before = wgs84_points.geometry.to_wkt().tolist()
        reproject(wgs84_points, WORLD_MERCATOR)

        assert wgs84_points.crs.to_epsg() == 4326
        assert wgs84_points.geometry.to_wkt().tolist() == before

    def test_idempotent_in_target_crs(self, wgs84_points):
        once = reproject(wgs84_points, WORLD_MERCATOR)
        twice = reproject(once, WORLD_MERCATOR)

        np.testing.assert_allclose(
            np.column_stack([twice.geometry.x, twice.geometry.y]),
            np.column_stack([once.geometry.x, once.geometry.y]),
        )
        assert twice is not once

    def test_equivalent_crs_keeps_coordinates(self, wgs84_points):
        once = reproject(wgs84_points, "EPSG:3395")
        again = reproject(once, "EPSG:3395")

        np.testing.assert_allclose(again.geometry.x, once.geometry.x, atol=1e-6)
        np.testing.assert_allclose(again.geometry.y, once.geometry.y, atol=1e-6)

    def test_missing_crs(self, wgs84_points):
        no_crs = gpd.GeoDataFrame(
            {"Drywell_ID": ["1"]}, geometry=[Point(-119.5, 36.5)]
        )

        with pytest.raises(ProjectionError, match="no CRS"):
            reproject(no_crs, WORLD_MERCATOR)

    def test_invalid_target(self, wgs84_points):
        with pytest.raises(ProjectionError):
            reproject(wgs84_points, "EPSG:0")
