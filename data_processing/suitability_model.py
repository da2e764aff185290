"""Module for building habitat suitability surfaces from environmental layers."""

import logging
from functools import reduce

import numpy as np

from data_processing.response_functions import format_functions
from utils.helpers import check_same_grid

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class RasterAlignmentError(ValueError):
    """Raised when the layers of a stack do not line up with their response functions or each other."""


class SuitabilityModel:
    """Class combining per-covariate response curves into one suitability surface."""

    def __init__(self, parameters, name="species"):
        """
        Initialize the suitability model.

        Args:
            parameters: Mapping of covariate name to ResponseFunction or config dict
            name: Species label used in log messages
        """
        if not parameters:
            raise ValueError("At least one response function is required")
        self.parameters = format_functions(**parameters)
        self.name = name

    def check_stack(self, stack):
        """
        Validate a stack before any computation.

        Args:
            stack: Mapping of covariate name to xarray.DataArray

        Raises:
            RasterAlignmentError: If names differ from the parameters or grids are not co-registered
        """
        missing = [key for key in self.parameters if key not in stack]
        extra = [key for key in stack if key not in self.parameters]
        if missing or extra:
            raise RasterAlignmentError(
                f"Stack for {self.name} does not match its response functions "
                f"(missing: {missing}, unexpected: {extra})"
            )
        try:
            check_same_grid({key: stack[key] for key in self.parameters})
        except ValueError as e:
            raise RasterAlignmentError(str(e)) from e

    def responses(self, stack):
        """
        Pass every layer through its response function.

        Returns:
            Dictionary of covariate name to contribution grid
        """
        self.check_stack(stack)
        return {key: fun(stack[key]) for key, fun in self.parameters.items()}

    def raw_suitability(self, stack):
        """Elementwise product of all contribution grids, before rescaling."""
        contributions = self.responses(stack)
        return reduce(lambda a, b: a * b, contributions.values())

    def reference_max(self, stack):
        """
        Potential maximum suitability under the optimum of each response curve.

        Recomputed on every call: logistic references depend on the stack's
        observed maximum.
        """
        references = {
            key: fun.reference_value(stack[key].values)
            for key, fun in self.parameters.items()
        }
        reference = float(np.prod(list(references.values())))
        logger.debug(f"Reference maxima for {self.name}: {references} -> {reference}")
        if not np.isfinite(reference) or reference <= 0:
            raise ValueError(f"Reference maximum for {self.name} must be positive, got {reference}")
        return reference

    def generate(self, stack, rescale=True):
        """
        Generate the suitability surface for a stack.

        Args:
            stack: Mapping of covariate name to xarray.DataArray
            rescale: Divide by the reference maximum so 1.0 marks the joint optimum

        Returns:
            xarray.DataArray of suitability (not clipped to [0, 1])
        """
        suitability = self.raw_suitability(stack)
        if rescale:
            suitability = suitability / self.reference_max(stack)
        suitability.name = f"{self.name}_suitability"
        return suitability
