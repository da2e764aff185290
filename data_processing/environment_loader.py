"""Module for acquiring the yearly environmental layers."""

import logging
import os

import numpy as np
import rioxarray

from utils.helpers import check_same_grid

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

LAYER_NAMES = ["sst", "mld", "zoo", "chla_surface"]


class MissingRasterError(FileNotFoundError):
    """Raised when a raster folder is missing or does not hold one file per year."""


class SnapshotAlignmentError(ValueError):
    """Raised when the layers of one year are not co-registered."""


class ChlorophyllDomainError(ValueError):
    """Raised when chlorophyll cannot be log-transformed."""


def log_chlorophyll(chla):
    """
    Log-transform surface chlorophyll.

    Args:
        chla: xarray.DataArray of chlorophyll concentrations (NaN allowed for no-data)

    Returns:
        xarray.DataArray of log(chlorophyll)

    Raises:
        ChlorophyllDomainError: If any cell with data is zero or negative
    """
    values = chla.values
    bad = np.isfinite(values) & (values <= 0)
    if bad.any():
        raise ChlorophyllDomainError(
            f"Chlorophyll must be strictly positive before the log transform; "
            f"{int(bad.sum())} cell(s) are <= 0 (min {float(values[bad].min())})"
        )
    if np.isinf(values).any():
        raise ChlorophyllDomainError("Chlorophyll contains infinite values")
    return np.log(chla)


class EnvironmentalSnapshot:
    """The four co-registered environmental layers of one year."""

    def __init__(self, year, sst, mld, zoo, chla_surface):
        """
        Args:
            year: Calendar year
            sst, mld, zoo: Raster grids in their native units
            chla_surface: Surface chlorophyll, already in log-space
        """
        self.year = year
        self.sst = sst
        self.mld = mld
        self.zoo = zoo
        self.chla_surface = chla_surface

        try:
            check_same_grid(self.layers())
        except ValueError as e:
            raise SnapshotAlignmentError(f"Year {year}: {e}") from e

    @classmethod
    def from_raw(cls, year, sst, mld, zoo, chla_surface):
        """Build a snapshot from raw layers, log-transforming chlorophyll first."""
        return cls(year, sst, mld, zoo, log_chlorophyll(chla_surface))

    def layers(self):
        return {name: getattr(self, name) for name in LAYER_NAMES}

    def __getitem__(self, name):
        if name not in LAYER_NAMES:
            raise KeyError(f"Unknown environmental layer '{name}'")
        return getattr(self, name)


class SnapshotSeries:
    """In-memory environment source; one snapshot per year, in chronological order."""

    def __init__(self, snapshots):
        self.snapshots = list(snapshots)
        self.years = [snapshot.year for snapshot in self.snapshots]
        if self.years != sorted(self.years):
            raise ValueError("Snapshots must be in chronological order")

    def __len__(self):
        return len(self.snapshots)

    def load_snapshot(self, index):
        return self.snapshots[index]


class EnvironmentLoader:
    """Class for loading the yearly raster files of each environmental layer."""

    def __init__(self, directory, folders, years, pattern=".grd"):
        """
        Initialize the loader and index the raster files.

        Args:
            directory: Local directory holding one sub-folder per layer
            folders: Mapping of layer name (sst, mld, zoo, chla_surface) to sub-folder
            years: Calendar years to load, one file per year in each folder
            pattern: File extension of the raster files
        """
        missing = [name for name in LAYER_NAMES if name not in folders]
        if missing:
            raise ValueError(f"No folder configured for layers {missing}")

        self.directory = directory
        self.folders = folders
        self.years = list(years)
        self.pattern = pattern
        self.files = {name: self.list_files(name) for name in LAYER_NAMES}

    def __len__(self):
        return len(self.years)

    def list_files(self, name):
        """
        List the raster files of one layer in chronological (sorted) order.

        Raises:
            MissingRasterError: If the folder does not exist or the count does not match the years
        """
        folder = os.path.join(self.directory, self.folders[name])
        if not os.path.isdir(folder):
            raise MissingRasterError(f"Raster folder for '{name}' not found: {folder}")

        files = sorted(
            os.path.join(folder, f) for f in os.listdir(folder) if f.endswith(self.pattern)
        )
        if len(files) != len(self.years):
            raise MissingRasterError(
                f"Expected {len(self.years)} '{self.pattern}' files for '{name}' in {folder}, "
                f"found {len(files)}"
            )
        logger.info(f"Found {len(files)} files for {name}")
        return files

    def read_layer(self, path):
        """Read a single-band raster as a 2D grid with x/y coordinates."""
        data_array = rioxarray.open_rasterio(path, masked=True)
        if isinstance(data_array, list):
            data_array = data_array[0]
        if "band" in data_array.dims:
            if data_array.sizes["band"] != 1:
                raise SnapshotAlignmentError(f"{path} has {data_array.sizes['band']} bands, expected 1")
            data_array = data_array.squeeze("band", drop=True)
        elif "band" in data_array.coords:
            data_array = data_array.drop_vars("band")
        data_array = data_array.drop_vars("spatial_ref", errors="ignore")
        return data_array.astype(np.float64).load()

    def load_snapshot(self, index):
        """
        Load the environmental snapshot of one year.

        Args:
            index: Position of the year in self.years

        Returns:
            EnvironmentalSnapshot with log-transformed chlorophyll
        """
        year = self.years[index]
        try:
            layers = {name: self.read_layer(self.files[name][index]) for name in LAYER_NAMES}
            return EnvironmentalSnapshot.from_raw(year, **layers)
        except Exception as e:
            logger.error(f"Error loading environmental layers for {year}: {str(e)}")
            raise
