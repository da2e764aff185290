"""Module for converting suitability into a presence-absence realisation."""

import logging

import numpy as np

from data_processing.response_functions import logistic_response

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class PresenceAbsenceConverter:
    """Class drawing presence (1) or absence (0) for every cell of a suitability surface."""

    def __init__(self, method="probability", alpha=-0.05, beta=0.5):
        """
        Initialize the converter.

        Args:
            method: "probability" for a logistic draw, "threshold" for a cut at beta
            alpha: Logistic slope; negative so probability increases with suitability
            beta: Logistic midpoint, or the threshold for the "threshold" method
        """
        valid_methods = ["probability", "threshold"]
        if method not in valid_methods:
            raise ValueError(f"method must be one of {valid_methods}")
        if method == "probability" and alpha == 0:
            raise ValueError("alpha must be non-zero")

        self.method = method
        self.alpha = alpha
        self.beta = beta

    def probability_of_occurrence(self, suitability):
        """Per-cell probability of presence."""
        if self.method == "threshold":
            probability = (suitability >= self.beta).astype(np.float64)
            return probability.where(np.isfinite(suitability))
        return suitability.copy(data=logistic_response(suitability.values, self.alpha, self.beta))

    def convert(self, suitability, rng):
        """
        Convert a suitability surface to a presence-absence field.

        Args:
            suitability: xarray.DataArray of suitability
            rng: numpy.random.Generator used for the Bernoulli draws

        Returns:
            Tuple of (presence-absence field, probability of occurrence); cells
            without suitability stay NaN in both
        """
        probability = self.probability_of_occurrence(suitability)
        p = probability.values
        valid = np.isfinite(p)

        draws = np.full(p.shape, np.nan)
        if self.method == "threshold":
            draws[valid] = p[valid]
        else:
            draws[valid] = (rng.random(int(valid.sum())) < p[valid]).astype(np.float64)

        pa = probability.copy(data=draws)
        pa.name = "presence_absence"

        if valid.any():
            logger.info(f"Realised prevalence: {np.nanmean(draws):.3f} over {int(valid.sum())} cells")
        else:
            logger.warning("Suitability surface has no valid cells")
        return pa, probability
