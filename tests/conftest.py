"""
trackenv Test Configuration

Shared pytest fixtures for all tests.
"""

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
import rasterio
from rasterio.transform import from_origin

CRS = "EPSG:32633"
NODATA = -9999.0
TRANSFORM = from_origin(500000.0, 4600100.0, 10.0, 10.0)


def cell_centre(row: int, col: int) -> tuple[float, float]:
    """Centre of a cell of the test raster"""
    return 500005.0 + 10.0 * col, 4600095.0 - 10.0 * row


def band_values(band: int) -> np.ndarray:
    """Band k holds 100 * k + 10 * row + col; band 2 has nodata at (0, 0)"""
    rows, cols = np.mgrid[0:10, 0:10]
    data = (100 * band + 10 * rows + cols).astype(np.float32)
    if band == 2:
        data[0, 0] = NODATA
    return data


@pytest.fixture
def layer_dates():
    """Acquisition dates of the four test layers (days 1, 4, 9, 20)"""
    return pd.to_datetime(["2024-01-01", "2024-01-04", "2024-01-09", "2024-01-20"])


@pytest.fixture
def raster_file(tmp_path):
    """4-band 10x10 GeoTIFF in EPSG:32633"""
    path = tmp_path / "stack.tif"
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=10,
        width=10,
        count=4,
        dtype=np.float32,
        crs=CRS,
        transform=TRANSFORM,
        nodata=NODATA,
    ) as dst:
        for band in range(1, 5):
            dst.write(band_values(band), band)
    return str(path)


@pytest.fixture
def raster_files(tmp_path):
    """Four single-band GeoTIFFs with the same content as raster_file"""
    paths = []
    for band in range(1, 5):
        path = tmp_path / f"ndvi_2024-01-{band:02d}.tif"
        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            height=10,
            width=10,
            count=1,
            dtype=np.float32,
            crs=CRS,
            transform=TRANSFORM,
            nodata=NODATA,
        ) as dst:
            dst.write(band_values(band), 1)
        paths.append(str(path))
    return paths


@pytest.fixture
def tracks():
    """Three samples: inside at cell (2, 3), at cell (0, 0), outside the raster"""
    xs, ys = zip(cell_centre(2, 3), cell_centre(0, 0), (499000.0, 4600050.0))
    return gpd.GeoDataFrame(
        {"date": pd.to_datetime(["2024-01-05", "2024-01-05", "2024-01-05"])},
        geometry=gpd.points_from_xy(xs, ys),
        crs=CRS,
    )


@pytest.fixture
def centre():
    """Cell-centre lookup for the test raster"""
    return cell_centre


@pytest.fixture
def band():
    """Band value lookup for the test raster"""
    return band_values
