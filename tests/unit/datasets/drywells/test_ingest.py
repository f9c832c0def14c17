"""
Unit tests for the drywell and boundary geometry loaders.
"""

import geopandas as gpd
import pytest
from pyproj import CRS
from shapely.geometry import Point

from drywell_pipeline.datasets.drywells.ingest import (
    POINT_TYPES,
    BoundaryIngester,
    DrywellIngester,
    _LayerIngester,
)
from drywell_pipeline.shared.exceptions import LoadError, ProjectionError


class TestDrywellIngester:
    """Test cases for DrywellIngester."""

    @pytest.fixture
    def points_path(self, tmp_path, points_gdf):
        path = tmp_path / "drywells.shp"
        points_gdf.to_file(path)
        return path

    def test_get_dataset_name(self, pipeline_config):
        assert DrywellIngester(pipeline_config).get_dataset_name() == "drywells"

    def test_default_path_from_config(self, pipeline_config):
        ingester = DrywellIngester(pipeline_config)
        assert ingester.get_source_path() == pipeline_config.paths.points

    def test_run_success(self, pipeline_config, points_path, points_gdf):
        ingester = DrywellIngester(pipeline_config, path=points_path)
        result = ingester.run(execution_date="2024-01-15")

        assert result.success
        assert result.dataset == "drywells"
        assert result.rows_fetched == len(points_gdf)

    def test_reprojects_to_target_crs(self, pipeline_config, points_path):
        ingester = DrywellIngester(pipeline_config, path=points_path)
        ingester.run(execution_date="2024-01-15")
        gdf = ingester.get_data()

        assert gdf.crs == CRS.from_user_input(pipeline_config.projection.target_crs)
        # Mercator coordinates are in metres, far outside the degree range
        assert abs(gdf.geometry.iloc[0].x) > 1000

    def test_keeps_feature_order(self, pipeline_config, points_path, points_gdf):
        ingester = DrywellIngester(pipeline_config, path=points_path)
        ingester.run(execution_date="2024-01-15")

        assert list(ingester.get_data()["Drywell_ID"]) == list(points_gdf["Drywell_ID"])

    def test_missing_file(self, pipeline_config, tmp_path):
        ingester = DrywellIngester(pipeline_config, path=tmp_path / "nope.shp")

        with pytest.raises(LoadError, match="not found"):
            ingester.run(execution_date="2024-01-15")

    def test_corrupt_file(self, pipeline_config, tmp_path):
        path = tmp_path / "broken.shp"
        path.write_bytes(b"not a shapefile")

        with pytest.raises(LoadError):
            DrywellIngester(pipeline_config, path=path).run(execution_date="2024-01-15")

    def test_file_without_geometry(self, pipeline_config, tmp_path):
        path = tmp_path / "table.csv"
        path.write_text("Drywell_ID,Report_Dat\n1,2014-01-01\n")

        with pytest.raises(LoadError, match="no geometry"):
            DrywellIngester(pipeline_config, path=path).run(execution_date="2024-01-15")

    def test_wrong_geometry_type(self, pipeline_config, tmp_path, boundary_gdf):
        path = tmp_path / "polygons.shp"
        boundary_gdf.assign(Drywell_ID="1", Report_Dat="2014-01-01").to_file(path)

        with pytest.raises(LoadError, match="geometry type"):
            DrywellIngester(pipeline_config, path=path).run(execution_date="2024-01-15")

    def test_missing_required_field(self, pipeline_config, tmp_path, points_gdf):
        path = tmp_path / "no_report_date.shp"
        points_gdf.drop(columns=["Report_Dat"]).to_file(path)

        with pytest.raises(LoadError, match="Report_Dat"):
            DrywellIngester(pipeline_config, path=path).run(execution_date="2024-01-15")

    def test_missing_crs(self, pipeline_config, tmp_path):
        path = tmp_path / "no_crs.shp"
        gpd.GeoDataFrame(
            {"Drywell_ID": ["1"], "Report_Dat": ["2014-01-01"]},
            geometry=[Point(-119.5, 36.5)],
        ).to_file(path)

        with pytest.raises(ProjectionError):
            DrywellIngester(pipeline_config, path=path).run(execution_date="2024-01-15")


class TestBoundaryIngester:
    """Test cases for BoundaryIngester."""

    def test_run_success(self, pipeline_config, tmp_path, boundary_gdf):
        path = tmp_path / "boundary.shp"
        boundary_gdf.to_file(path)

        ingester = BoundaryIngester(pipeline_config, path=path)
        result = ingester.run(execution_date="2024-01-15")
        gdf = ingester.get_data()

        assert result.success
        assert len(gdf) == 1
        assert gdf.crs == CRS.from_user_input(pipeline_config.projection.target_crs)
        assert result.crs == gdf.crs.to_string()

    def test_rejects_points(self, pipeline_config, tmp_path, points_gdf):
        path = tmp_path / "points.shp"
        points_gdf.to_file(path)

        with pytest.raises(LoadError, match="geometry type"):
            BoundaryIngester(pipeline_config, path=path).run(execution_date="2024-01-15")


def test_layer_ingester_needs_default_path(pipeline_config):
    class WellsWithoutPath(_LayerIngester):
        allowed_types = POINT_TYPES

        def get_dataset_name(self) -> str:
            return "wells"

        def get_primary_key(self) -> str:
            return "Drywell_ID"

    with pytest.raises(TypeError, match="_default_path"):
        WellsWithoutPath(pipeline_config)
