"""Helper functions for the simulated occurrence world."""

import numpy as np
import xarray as xr


def make_grid(values, lons, lats, name=None):
    """
    Wrap a 2D array into a raster grid.

    Args:
        values: Array of shape (len(lats), len(lons))
        lons: Longitudes of the cell centres (x coordinate)
        lats: Latitudes of the cell centres (y coordinate)
        name: Optional layer name

    Returns:
        xarray.DataArray with dims ("y", "x")
    """
    values = np.asarray(values, dtype=np.float64)
    if values.shape != (len(lats), len(lons)):
        raise ValueError(
            f"Grid values have shape {values.shape}, expected {(len(lats), len(lons))}"
        )
    return xr.DataArray(
        values,
        dims=("y", "x"),
        coords={"x": np.asarray(lons, dtype=np.float64), "y": np.asarray(lats, dtype=np.float64)},
        name=name
    )


def constant_grid(value, lons, lats, name=None):
    """Build a grid holding the same value in every cell."""
    return make_grid(np.full((len(lats), len(lons)), value, dtype=np.float64), lons, lats, name)


def check_same_grid(layers):
    """
    Make sure a set of layers share extent, resolution and coordinates.

    Args:
        layers: Mapping of layer name to xarray.DataArray

    Raises:
        ValueError: If any layer is not 2D or the layers are not co-registered
    """
    for name, layer in layers.items():
        if layer.ndim != 2:
            raise ValueError(f"Layer '{name}' must be 2D, got dims {layer.dims}")

    names = list(layers)
    reference = layers[names[0]]
    for name in names[1:]:
        layer = layers[name]
        if layer.shape != reference.shape:
            raise ValueError(
                f"Layer '{name}' has shape {layer.shape}, "
                f"expected {reference.shape} (from '{names[0]}')"
            )
        try:
            xr.align(reference, layer, join="exact")
        except ValueError as e:
            raise ValueError(f"Layer '{name}' is not co-registered with '{names[0]}': {e}") from e


def cell_centres(grid, rows, cols):
    """
    Convert (row, col) indices into cell centre coordinates.

    Args:
        grid: Raster grid with "x" and "y" coordinates
        rows: Row indices
        cols: Column indices

    Returns:
        Tuple of (lon, lat) arrays
    """
    lons = grid["x"].values[np.asarray(cols, dtype=int)]
    lats = grid["y"].values[np.asarray(rows, dtype=int)]
    return lons, lats


def make_generators(seed=None, n=3):
    """
    Spawn independent random generators from a single seed.

    Returns:
        List of numpy.random.Generator objects
    """
    children = np.random.SeedSequence(seed).spawn(n)
    return [np.random.default_rng(child) for child in children]
