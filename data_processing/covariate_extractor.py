"""Module for extracting covariate values at occurrence points."""

import logging

import numpy as np
import pandas as pd
import xarray as xr

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class CovariateExtractor:
    """Class for extracting raster values for points."""

    def __init__(self, layers):
        """
        Initialize the extractor.

        Args:
            layers: Mapping of output column name to xarray.DataArray
        """
        self.layers = dict(layers)

    def extract_variables_for_point(self, lat, lon):
        """
        Extract every layer for a single point.

        Returns:
            Dictionary with one value per layer
        """
        return {
            name: float(data_array.sel(x=lon, y=lat, method="nearest").values)
            for name, data_array in self.layers.items()
        }

    def extract_variables_for_points(self, lons, lats):
        """
        Extract every layer for a set of points.

        Args:
            lons: Longitudes of the points
            lats: Latitudes of the points

        Returns:
            DataFrame with one column per layer and one row per point
        """
        x = xr.DataArray(np.asarray(lons, dtype=np.float64), dims="points")
        y = xr.DataArray(np.asarray(lats, dtype=np.float64), dims="points")

        result = {}
        for name, data_array in self.layers.items():
            # Pointwise selection of the nearest cell
            result[name] = data_array.sel(x=x, y=y, method="nearest").values

        result_df = pd.DataFrame(result, columns=list(self.layers))
        n_missing = int(result_df.isna().any(axis=1).sum())
        if n_missing:
            logger.warning(f"{n_missing} point(s) fell on cells without data")
        return result_df

    def extract_variables_for_cells(self, rows, cols):
        """
        Extract every layer at grid cells given by their indices.

        Args:
            rows: Row indices of the cells
            cols: Column indices of the cells

        Returns:
            DataFrame with one column per layer and one row per cell
        """
        y = xr.DataArray(np.asarray(rows, dtype=int), dims="points")
        x = xr.DataArray(np.asarray(cols, dtype=int), dims="points")

        result = {name: data_array.isel(y=y, x=x).values for name, data_array in self.layers.items()}
        return pd.DataFrame(result, columns=list(self.layers))
