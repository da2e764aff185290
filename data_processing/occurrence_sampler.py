"""Module for drawing presence-absence occurrence samples from a simulated field."""

import logging

import numpy as np
import pandas as pd

from utils.helpers import cell_centres

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ["x", "y", "row", "col", "Real", "Observed"]


class InsufficientStratumError(ValueError):
    """Raised when a stratum cannot provide the points the policy requires."""


class OccurrenceSampler:
    """Class for stratified sampling of presence and absence cells."""

    def __init__(self, n_samples=100, sample_prevalence=0.5, detection_probability=1.0,
                 error_probability=0.0, stratum_policy="replace", coord_precision=1):
        """
        Initialize the occurrence sampler.

        Args:
            n_samples: Number of points drawn per call
            sample_prevalence: Fraction of points drawn from presence cells
            detection_probability: Chance that a sampled presence is observed as presence
            error_probability: Chance that an observed label is flipped
            stratum_policy: What to do when a stratum is too small:
                "replace" samples it with replacement and hands the quota of an
                empty stratum to the other one, "underfill" returns fewer
                points, "error" raises InsufficientStratumError
            coord_precision: Decimals kept when rounding coordinates
        """
        valid_policies = ["replace", "underfill", "error"]
        if stratum_policy not in valid_policies:
            raise ValueError(f"stratum_policy must be one of {valid_policies}")
        if int(n_samples) < 1:
            raise ValueError(f"n_samples must be at least 1, got {n_samples}")
        for label, value in [("sample_prevalence", sample_prevalence),
                             ("detection_probability", detection_probability),
                             ("error_probability", error_probability)]:
            if not 0 <= value <= 1:
                raise ValueError(f"{label} must be between 0 and 1, got {value}")

        self.n_samples = int(n_samples)
        self.sample_prevalence = sample_prevalence
        self.detection_probability = detection_probability
        self.error_probability = error_probability
        self.stratum_policy = stratum_policy
        self.coord_precision = coord_precision

    def stratum_targets(self):
        """Number of presence and absence points requested."""
        n_presence = int(round(self.n_samples * self.sample_prevalence))
        return n_presence, self.n_samples - n_presence

    def _draw(self, cells, target, label, rng, notes):
        """Pick target cells from one stratum, applying the stratum policy."""
        available = len(cells)
        if target == 0:
            return cells[:0]
        if available >= target:
            return rng.choice(cells, size=target, replace=False)

        message = f"Only {available} {label} cells available for {target} requested"
        if self.stratum_policy == "error":
            raise InsufficientStratumError(message)
        if self.stratum_policy == "underfill" or available == 0:
            logger.warning(f"{message}; keeping {available}")
            notes.append(f"underfilled {label}: {available}/{target}")
            return cells.copy()

        logger.warning(f"{message}; sampling with replacement")
        notes.append(f"{label} sampled with replacement: {available} cells for {target} points")
        return rng.choice(cells, size=target, replace=True)

    def sample(self, pa_field, rng):
        """
        Draw the occurrence sample.

        Args:
            pa_field: Presence-absence xarray.DataArray of 0/1 (NaN cells are skipped)
            rng: numpy.random.Generator used for every draw

        Returns:
            DataFrame with columns x, y (rounded cell centres), row, col, Real
            (true cell value) and Observed; fallbacks are listed in
            attrs["sampling_notes"]
        """
        values = pa_field.values
        flat = values.ravel()
        presence_cells = np.flatnonzero(flat == 1)
        absence_cells = np.flatnonzero(flat == 0)

        if len(presence_cells) == 0 and len(absence_cells) == 0:
            raise InsufficientStratumError("Presence-absence field has no valid cells to sample")

        n_presence, n_absence = self.stratum_targets()
        notes = []

        # An empty stratum hands its quota over so the year keeps its full size
        if self.stratum_policy == "replace":
            if len(presence_cells) == 0 and n_presence > 0:
                logger.warning(f"No presence cells; drawing all {self.n_samples} points from absences")
                notes.append(f"no presence cells: {n_presence} points moved to absences")
                n_presence, n_absence = 0, self.n_samples
            elif len(absence_cells) == 0 and n_absence > 0:
                logger.warning(f"No absence cells; drawing all {self.n_samples} points from presences")
                notes.append(f"no absence cells: {n_absence} points moved to presences")
                n_presence, n_absence = self.n_samples, 0

        chosen = np.concatenate([
            self._draw(presence_cells, n_presence, "presence", rng, notes),
            self._draw(absence_cells, n_absence, "absence", rng, notes)
        ]).astype(int)

        rows, cols = np.unravel_index(chosen, values.shape)
        lons, lats = cell_centres(pa_field, rows, cols)
        real = flat[chosen].astype(int)

        samples = pd.DataFrame({
            "x": np.round(lons, self.coord_precision),
            "y": np.round(lats, self.coord_precision),
            "row": rows,
            "col": cols,
            "Real": real,
            "Observed": self.observe(real, rng)
        }, columns=SAMPLE_COLUMNS)
        samples.attrs["sampling_notes"] = notes
        return samples

    def observe(self, real, rng):
        """Apply imperfect detection and labelling errors to the true labels."""
        observed = real.copy()
        if self.detection_probability < 1:
            missed = (observed == 1) & (rng.random(len(observed)) >= self.detection_probability)
            observed[missed] = 0
        if self.error_probability > 0:
            flipped = rng.random(len(observed)) < self.error_probability
            observed[flipped] = 1 - observed[flipped]
        return observed
