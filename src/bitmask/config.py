"""Configuration dataclasses for bitmask."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RasterConfig:
    """How raster cells are turned into occupied mask cells."""
    band: int = 1  # 1-based, as in rasterio
    threshold: float = 0.0  # Cells strictly above are occupied


@dataclass(frozen=True)
class LogConfig:
    """Logging setup used by the CLI."""
    level: str = "INFO"
    format: str = "%(asctime)s %(name)s %(levelname)s %(message)s"
