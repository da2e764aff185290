"""
Tests for the response curve library.

Covers the Gaussian and logistic curves, their elementwise application to
raster grids and the reference values used for rescaling.
"""

import math

import numpy as np
import pytest

from data_processing.response_functions import (
    ResponseFunction,
    format_functions,
    gaussian_response,
    logistic_response
)
from utils.helpers import make_grid


def test_gaussian_peaks_at_mean():
    """The Gaussian density is highest at its mean."""
    peak = gaussian_response(15, 15, 5)

    assert peak == pytest.approx(1 / (5 * math.sqrt(2 * math.pi)))
    assert gaussian_response(10, 15, 5) < peak
    assert gaussian_response(20, 15, 5) == pytest.approx(gaussian_response(10, 15, 5))


def test_logistic_midpoint_is_half():
    """The logistic curve equals 0.5 at beta."""
    assert logistic_response(50, -6, 50) == pytest.approx(0.5)
    assert logistic_response(0.5, -0.05, 0.5) == pytest.approx(0.5)


def test_logistic_alpha_sign_sets_direction():
    """Negative alpha increases with x, positive alpha decreases."""
    assert logistic_response(60, -6, 50) > logistic_response(40, -6, 50)
    assert logistic_response(60, 6, 50) < logistic_response(40, 6, 50)


def test_logistic_matches_closed_form():
    """Values agree with 1 / (1 + exp((x - beta) / alpha))."""
    x = 47.0
    expected = 1 / (1 + math.exp((x - 50) / -6))

    assert logistic_response(x, -6, 50) == pytest.approx(expected)


def test_logistic_extreme_values_do_not_overflow():
    """Very steep curves saturate at 0 and 1."""
    assert logistic_response(1e6, -0.05, 0.5) == pytest.approx(1.0)
    assert logistic_response(-1e6, -0.05, 0.5) == pytest.approx(0.0)


def test_response_on_grid_keeps_shape_and_coords():
    """Applying a curve to a grid returns a grid of equal shape and coordinates."""
    grid = make_grid([[10.0, 15.0, 20.0], [12.0, 14.0, np.nan]], [0.0, 1.0, 2.0], [1.0, 0.0])
    fun = ResponseFunction("dnorm", mean=15, sd=5)

    result = fun(grid)

    assert result.shape == grid.shape
    np.testing.assert_array_equal(result["x"].values, grid["x"].values)
    np.testing.assert_array_equal(result["y"].values, grid["y"].values)
    assert np.isnan(result.values[1, 2])
    assert result.values[0, 1] == pytest.approx(gaussian_response(15, 15, 5))


def test_gaussian_reference_is_density_at_mean():
    """Gaussian references ignore the data."""
    fun = ResponseFunction("dnorm", mean=17, sd=5)

    assert fun.reference_value(np.array([0.0, 1.0])) == pytest.approx(gaussian_response(17, 17, 5))


def test_logistic_reference_uses_observed_maximum():
    """Logistic references are evaluated at the layer's maximum, ignoring missing cells."""
    fun = ResponseFunction("logistic", alpha=-6, beta=50)
    layer = np.array([[10.0, 70.0], [np.nan, 30.0]])

    assert fun.reference_value(layer) == pytest.approx(logistic_response(70.0, -6, 50))


def test_format_functions_builds_in_order():
    """Configuration dictionaries become response functions keyed by covariate."""
    parameters = format_functions(
        sst={"fun": "dnorm", "mean": 15, "sd": 5},
        zoo={"fun": "logistic", "alpha": -6, "beta": 50}
    )

    assert list(parameters) == ["sst", "zoo"]
    assert parameters["sst"] == ResponseFunction("dnorm", mean=15, sd=5)
    assert parameters["zoo"].kind == "logistic"
    assert dict(parameters["zoo"].params) == {"alpha": -6.0, "beta": 50.0}


@pytest.mark.parametrize("spec", [
    {"fun": "dunif", "min": 0, "max": 1},
    {"fun": "dnorm", "mean": 15},
    {"fun": "dnorm", "mean": 15, "sd": 0},
    {"fun": "logistic", "alpha": 0, "beta": 1},
    {"mean": 15, "sd": 5},
])
def test_format_functions_rejects_invalid_specs(spec):
    """Unknown curves and bad parameters fail at construction."""
    with pytest.raises(ValueError):
        format_functions(sst=spec)


def test_response_function_is_immutable():
    """Response functions cannot be modified after creation."""
    fun = ResponseFunction("dnorm", mean=15, sd=5)

    with pytest.raises(AttributeError):
        fun.kind = "logistic"
    with pytest.raises(TypeError):
        fun.params["sd"] = -1.0

    assert fun.params["sd"] == 5.0
    assert fun.evaluate(15) == pytest.approx(gaussian_response(15, 15, 5))


def test_equal_response_functions_share_hash():
    first = ResponseFunction("logistic", alpha=-6, beta=50)
    second = format_functions(zoo={"fun": "logistic", "alpha": -6, "beta": 50})["zoo"]

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1
