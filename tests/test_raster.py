"""Tests for loading masks from rasters.

All rasters are small synthetic GeoTIFFs written to tmp_path.
"""

import numpy as np
import pytest
import rasterio
from rasterio.windows import Window

from bitmask.config import RasterConfig
from bitmask.data.raster import read_mask_raster, mask_from_raster


def _write_raster(path, bands, nodata=None):
    """Write a (B, H, W) uint8 array as a B-band GeoTIFF."""
    bands = np.asarray(bands, dtype=np.uint8)
    count, height, width = bands.shape
    with rasterio.open(
        path, "w", driver="GTiff",
        height=height, width=width, count=count,
        dtype="uint8", nodata=nodata,
    ) as dst:
        dst.write(bands)
    return path


@pytest.fixture
def raster_path(tmp_path):
    data = np.zeros((2, 6, 100), dtype=np.uint8)
    data[0, 1, 2] = 1
    data[0, 4, 80] = 50
    data[1, 5, 99] = 200
    return _write_raster(tmp_path / "mask.tif", data)


class TestReadMaskRaster:
    def test_default_threshold(self, raster_path):
        cells = read_mask_raster(raster_path)
        assert cells.shape == (6, 100)
        assert cells.dtype == bool
        assert cells.sum() == 2
        assert cells[1, 2] and cells[4, 80]

    def test_threshold_is_strict(self, raster_path):
        cells = read_mask_raster(raster_path, RasterConfig(threshold=1))
        assert cells.sum() == 1
        assert cells[4, 80]

    def test_second_band(self, raster_path):
        cells = read_mask_raster(raster_path, RasterConfig(band=2))
        assert cells.sum() == 1
        assert cells[5, 99]

    def test_window(self, raster_path):
        cells = read_mask_raster(raster_path, window=Window(70, 2, 20, 4))
        assert cells.shape == (4, 20)
        assert cells[2, 10]
        assert cells.sum() == 1

    def test_open_src(self, raster_path):
        with rasterio.open(raster_path) as src:
            cells = read_mask_raster(None, open_src=src)
        assert cells.sum() == 2

    def test_nodata_never_occupied(self, tmp_path):
        data = np.full((1, 3, 3), 255, dtype=np.uint8)
        data[0, 1, 1] = 7
        path = _write_raster(tmp_path / "nodata.tif", data, nodata=255)
        cells = read_mask_raster(path)
        assert cells.sum() == 1
        assert cells[1, 1]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            read_mask_raster(tmp_path / "missing.tif")

    @pytest.mark.parametrize("band", [0, 3])
    def test_band_out_of_range_raises(self, raster_path, band):
        with pytest.raises(ValueError, match="out of range"):
            read_mask_raster(raster_path, RasterConfig(band=band))


class TestMaskFromRaster:
    def test_mask_matches_raster(self, raster_path):
        mask = mask_from_raster(raster_path)
        assert (mask.width, mask.height) == (100, 6)
        assert mask.count() == 2
        assert mask.is_set(2, 1)
        assert mask.is_set(80, 4)
        assert mask.overlaps_ray(0, 4, 99, 4) == (80, 4)
        assert mask.overlaps_rect(0, 0, 3, 2)
