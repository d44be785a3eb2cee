"""Raster-backed mask loader.

Reads one band of a raster (GeoTIFF or anything else rasterio opens) and
thresholds it into occupied cells. Nodata cells are never occupied.
"""

import logging
from pathlib import Path

import numpy as np
import rasterio
from rasterio.windows import Window

from bitmask.config import RasterConfig
from bitmask.mask import Mask

log = logging.getLogger(__name__)


def _read_band(src, config: RasterConfig, window: Window | None) -> np.ndarray:
    if not 1 <= config.band <= src.count:
        raise ValueError(
            f"Band {config.band} out of range for {src.name} ({src.count} bands)"
        )
    data = src.read(config.band, window=window, masked=True)
    return np.ma.filled(data > config.threshold, False)


def read_mask_raster(
    path: Path,
    config: RasterConfig = RasterConfig(),
    window: Window | None = None,
    open_src=None,
) -> np.ndarray:
    """Read a thresholded band from a raster as an occupancy array.

    Args:
        path: Path to the raster file.
        config: Band and threshold selection.
        window: Optional rasterio Window; the full band is read when None.
        open_src: Optional already-open rasterio Dataset. When provided,
            the file open is skipped and path is ignored. Caller owns the handle.

    Returns:
        (H, W) boolean array (True = occupied cell).
    """
    if open_src is not None:
        return _read_band(open_src, config, window)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mask raster not found: {path}")
    with rasterio.open(path) as src:
        return _read_band(src, config, window)


def mask_from_raster(
    path: Path,
    config: RasterConfig = RasterConfig(),
    window: Window | None = None,
) -> Mask:
    """Load a raster band into a packed Mask (x = column, y = row)."""
    cells = read_mask_raster(path, config, window=window)
    mask = Mask.from_array(cells)
    log.info(
        f"Loaded mask {path} band {config.band}: "
        f"{mask.width}x{mask.height}, {mask.count():,} occupied"
    )
    return mask
