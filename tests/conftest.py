"""Shared fixtures for the simulated world tests."""

import numpy as np
import pytest

from data_processing.environment_loader import EnvironmentalSnapshot, SnapshotSeries
from utils.helpers import constant_grid

LONS = np.array([-125.0, -124.5, -124.0, -123.5])
LATS = np.array([40.0, 39.5, 39.0, 38.5])


def make_snapshot(year, sst=15.0, mld=50.0, zoo=50.0, chla=np.e, lons=LONS, lats=LATS):
    """Constant-valued snapshot over a small grid."""
    return EnvironmentalSnapshot.from_raw(
        year,
        sst=constant_grid(sst, lons, lats, "sst"),
        mld=constant_grid(mld, lons, lats, "mld"),
        zoo=constant_grid(zoo, lons, lats, "zoo"),
        chla_surface=constant_grid(chla, lons, lats, "chla_surface")
    )


@pytest.fixture
def constant_snapshot():
    return make_snapshot(1980)


@pytest.fixture
def three_year_series():
    return SnapshotSeries([make_snapshot(year) for year in (1980, 1981, 1982)])
