"""
Drywell Pipeline - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Small synthetic point/boundary layers and report tables
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point, Polygon

# Set test environment
os.environ["DW_ENVIRONMENT"] = "dev"

WGS84 = "EPSG:4326"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from drywell_pipeline.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


@pytest.fixture
def pipeline_config(tmp_path: Path) -> Any:
    """Settings pointing every path into tmp_path."""
    from drywell_pipeline.shared.config import PathsConfig, Settings

    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return Settings(
        paths=PathsConfig(
            points=str(tmp_path / "drywells.shp"),
            boundary=str(tmp_path / "boundary.shp"),
            reports=str(tmp_path / "reports.xlsx"),
            output=str(out_dir / "drywells_filtered.shp"),
            summary=str(out_dir / "summary.json"),
        )
    )


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def boundary_gdf() -> gpd.GeoDataFrame:
    """One-degree square study area in WGS84."""
    square = Polygon([(-120, 36), (-119, 36), (-119, 37), (-120, 37)])
    return gpd.GeoDataFrame({"name": ["study_area"]}, geometry=[square], crs=WGS84)


@pytest.fixture
def points_gdf() -> gpd.GeoDataFrame:
    """Drywell points: four inside (one on the west edge), one outside."""
    return gpd.GeoDataFrame(
        {
            "Drywell_ID": ["101", "102", "103", "104", "105"],
            "Report_Dat": ["2014-05-01", "2013-06-01", "2017-02-01", "2017-01-15", "2014-01-01"],
            "County": ["Tulare", "Tulare", "Tulare", "Tulare", "Fresno"],
        },
        geometry=[
            Point(-119.5, 36.5),
            Point(-119.2, 36.2),
            Point(-119.8, 36.8),
            Point(-120.0, 36.5),
            Point(-118.5, 36.5),
        ],
        crs=WGS84,
    )


@pytest.fixture
def raw_reports_df() -> pd.DataFrame:
    """Shortage reports as read from the spreadsheet."""
    return pd.DataFrame(
        {
            "Drywell ID": [101, 103, 104, 999],
            "Shortages": [
                "Pump not working",
                "Water quality",
                "Dry Well (groundwater)",
                "Well went dry",
            ],
            "Approximate Issue Start Date": ["2014-04-15 08:30:00", None, "2011-12-01", "2015-01-01"],
            "Record Creation Date": ["2014-05-01", "2015-03-10", "2016-02-02", "2015-01-05"],
        }
    )


@pytest.fixture
def source_files(
    pipeline_config: Any,
    points_gdf: gpd.GeoDataFrame,
    boundary_gdf: gpd.GeoDataFrame,
    raw_reports_df: pd.DataFrame,
) -> Any:
    """Write the synthetic sources where pipeline_config expects them."""
    points_gdf.to_file(pipeline_config.paths.points)
    boundary_gdf.to_file(pipeline_config.paths.boundary)
    raw_reports_df.to_excel(pipeline_config.paths.reports, index=False)
    return pipeline_config


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
