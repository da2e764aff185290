"""Module for the prey-to-predator suitability coupling."""

import logging

from data_processing.suitability_model import SuitabilityModel

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

PREY_LAYER = "spA"


class TrophicCoupling:
    """Class computing prey suitability, then predator suitability on top of it."""

    def __init__(self, prey_params, predator_params, prey_layer=PREY_LAYER):
        """
        Initialize the coupled models.

        Args:
            prey_params: Response functions for the prey, keyed by snapshot layer names
            predator_params: Response functions for the predator; must include prey_layer
            prey_layer: Name under which the prey surface enters the predator stack
        """
        if prey_layer not in predator_params:
            raise ValueError(f"Predator parameters must include the prey layer '{prey_layer}'")
        if prey_layer in prey_params:
            raise ValueError(f"Prey parameters cannot depend on '{prey_layer}'")

        self.prey_layer = prey_layer
        self.prey_model = SuitabilityModel(prey_params, name="prey")
        self.predator_model = SuitabilityModel(predator_params, name="predator")

    def prey_suitability(self, snapshot):
        """Rescaled prey suitability from the snapshot's environmental layers."""
        stack = {key: snapshot[key] for key in self.prey_model.parameters}
        return self.prey_model.generate(stack)

    def predator_suitability(self, snapshot, prey_suitability):
        """Rescaled predator suitability; the finished prey surface is one of its layers."""
        stack = {}
        for key in self.predator_model.parameters:
            stack[key] = prey_suitability if key == self.prey_layer else snapshot[key]
        return self.predator_model.generate(stack)

    def compute(self, snapshot):
        """
        Run both phases for one year.

        Returns:
            Tuple of (prey suitability, predator suitability)
        """
        prey = self.prey_suitability(snapshot)
        predator = self.predator_suitability(snapshot, prey)
        logger.debug(
            f"Year {snapshot.year}: prey max {float(prey.max()):.3f}, "
            f"predator max {float(predator.max()):.3f}"
        )
        return prey, predator
