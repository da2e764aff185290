"""
Tests for the prey-to-predator coupling.
"""

import math

import numpy as np
import pytest

from config import PREDATOR_PARAMS, PREY_PARAMS
from data_processing.trophic_coupling import TrophicCoupling
from conftest import make_snapshot


def test_constant_world_has_hand_derived_surfaces(constant_snapshot):
    """Prey at its optimum is 1; predator only loses the sst mismatch (15 vs 17)."""
    coupling = TrophicCoupling(PREY_PARAMS, PREDATOR_PARAMS)

    prey, predator = coupling.compute(constant_snapshot)

    np.testing.assert_allclose(prey.values, 1.0)
    np.testing.assert_allclose(predator.values, math.exp(-0.08))


def test_predator_depends_on_prey_surface():
    """Lower prey suitability lowers predator suitability in those cells."""
    coupling = TrophicCoupling(PREY_PARAMS, PREDATOR_PARAMS)
    snapshot = make_snapshot(1980)
    snapshot.zoo.values[0, 0] = 70.0

    prey, predator = coupling.compute(snapshot)

    assert prey.values[0, 0] == pytest.approx(1.0)
    assert prey.values[1, 1] < 1.0
    assert predator.values[0, 0] > predator.values[1, 1]


def test_prey_surface_is_finished_before_predator(constant_snapshot):
    """The predator stack receives the rescaled prey surface."""
    coupling = TrophicCoupling(PREY_PARAMS, PREDATOR_PARAMS)

    prey = coupling.prey_suitability(constant_snapshot)
    predator = coupling.predator_suitability(constant_snapshot, prey)
    _, combined = coupling.compute(constant_snapshot)

    np.testing.assert_array_equal(predator.values, combined.values)


def test_predator_must_use_prey_layer():
    """A predator without the prey layer is not a coupled model."""
    predator = {key: value for key, value in PREDATOR_PARAMS.items() if key != "spA"}

    with pytest.raises(ValueError):
        TrophicCoupling(PREY_PARAMS, predator)


def test_prey_cannot_depend_on_prey_layer():
    prey = dict(PREY_PARAMS, spA={"fun": "logistic", "alpha": -0.05, "beta": 0.5})

    with pytest.raises(ValueError):
        TrophicCoupling(prey, PREDATOR_PARAMS)
