"""CLI entry point for bitmask queries against raster masks."""

import logging

import click
from pathlib import Path

# Lets negative coordinates through as arguments instead of unknown options
_NUMERIC_ARGS = {"ignore_unknown_options": True}


def _load(path, band, threshold):
    from bitmask.config import RasterConfig
    from bitmask.data.raster import mask_from_raster

    return mask_from_raster(Path(path), RasterConfig(band=band, threshold=threshold))


def _raster_options(func):
    func = click.option("--threshold", type=float, default=0.0,
                        help="Cells with values strictly above this are occupied.")(func)
    func = click.option("--band", type=int, default=1, help="1-based raster band.")(func)
    func = click.argument("path", type=click.Path(exists=True, dir_okay=False))(func)
    return func


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose):
    """bitmask: pixel-accurate collision queries on raster masks."""
    from bitmask.config import LogConfig

    config = LogConfig(level="DEBUG") if verbose else LogConfig()
    logging.basicConfig(level=config.level, format=config.format)


@main.command()
@_raster_options
def info(path, band, threshold):
    """Print mask dimensions and occupied cell count."""
    mask = _load(path, band, threshold)
    print(f"width: {mask.width}")
    print(f"height: {mask.height}")
    print(f"occupied: {mask.count()}")


@main.command("is-set", context_settings=_NUMERIC_ARGS)
@_raster_options
@click.argument("x", type=int)
@click.argument("y", type=int)
def is_set(path, band, threshold, x, y):
    """Report whether cell (X, Y) is occupied."""
    mask = _load(path, band, threshold)
    print("true" if mask.is_set(x, y) else "false")


@main.command(context_settings=_NUMERIC_ARGS)
@_raster_options
@click.argument("x", type=int)
@click.argument("y", type=int)
@click.argument("w", type=int)
@click.argument("h", type=int)
def rect(path, band, threshold, x, y, w, h):
    """Report whether the rectangle at (X, Y) of size W x H overlaps the mask."""
    mask = _load(path, band, threshold)
    print("true" if mask.overlaps_rect(x, y, w, h) else "false")


@main.command(context_settings=_NUMERIC_ARGS)
@_raster_options
@click.argument("x0", type=int)
@click.argument("y0", type=int)
@click.argument("x1", type=int)
@click.argument("y1", type=int)
def ray(path, band, threshold, x0, y0, x1, y1):
    """Print the first occupied cell from (X0, Y0) toward (X1, Y1)."""
    mask = _load(path, band, threshold)
    hit = mask.overlaps_ray(x0, y0, x1, y1)
    print("none" if hit is None else f"{hit.x} {hit.y}")


if __name__ == "__main__":
    main()
