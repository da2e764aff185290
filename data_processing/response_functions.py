"""Response curves mapping an environmental value to a suitability contribution."""

from types import MappingProxyType

import numpy as np
import xarray as xr
from scipy.special import expit
from scipy.stats import norm

VALID_FUNCTIONS = ["dnorm", "logistic"]


def gaussian_response(x, mean, sd):
    """Normal density of x; highest at the mean."""
    return norm.pdf(x, loc=mean, scale=sd)


def logistic_response(x, alpha, beta):
    """
    Logistic curve 1 / (1 + exp((x - beta) / alpha)).

    A negative alpha gives a curve increasing with x, a positive alpha a
    decreasing one. beta is the midpoint where the curve equals 0.5.
    """
    return expit(-(np.asarray(x, dtype=np.float64) - beta) / alpha)


class ResponseFunction:
    """A response curve and its parameters, defined once per species and covariate."""

    __slots__ = ("kind", "params")

    def __init__(self, kind, **params):
        if kind not in VALID_FUNCTIONS:
            raise ValueError(f"fun must be one of {VALID_FUNCTIONS}, got '{kind}'")

        if kind == "dnorm":
            required = ("mean", "sd")
        else:
            required = ("alpha", "beta")
        missing = [key for key in required if key not in params]
        if missing:
            raise ValueError(f"Missing parameters {missing} for '{kind}' response")
        extra = sorted(set(params) - set(required))
        if extra:
            raise ValueError(f"Unexpected parameters {extra} for '{kind}' response")

        params = {key: float(params[key]) for key in required}
        if kind == "dnorm" and params["sd"] <= 0:
            raise ValueError(f"sd must be positive, got {params['sd']}")
        if kind == "logistic" and params["alpha"] == 0:
            raise ValueError("alpha must be non-zero")

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "params", MappingProxyType(params))

    def __setattr__(self, name, value):
        raise AttributeError("ResponseFunction is immutable")

    def __eq__(self, other):
        if not isinstance(other, ResponseFunction):
            return NotImplemented
        return self.kind == other.kind and dict(self.params) == dict(other.params)

    def __hash__(self):
        return hash((self.kind, frozenset(self.params.items())))

    def __repr__(self):
        args = ", ".join(f"{key}={value}" for key, value in self.params.items())
        return f"ResponseFunction('{self.kind}', {args})"

    def evaluate(self, x):
        """Evaluate the curve on a scalar or array."""
        if self.kind == "dnorm":
            return gaussian_response(x, self.params["mean"], self.params["sd"])
        return logistic_response(x, self.params["alpha"], self.params["beta"])

    def __call__(self, layer):
        """
        Apply the curve elementwise.

        Args:
            layer: xarray.DataArray, numpy array or scalar

        Returns:
            Contribution of the same shape (and coordinates for a DataArray)
        """
        if isinstance(layer, xr.DataArray):
            return layer.copy(data=self.evaluate(layer.values))
        return self.evaluate(layer)

    def reference_value(self, layer):
        """
        Highest contribution used as the rescaling reference.

        Gaussian curves peak at their own mean. Logistic curves have no finite
        maximum, so they are evaluated at the layer's observed maximum.
        """
        if self.kind == "dnorm":
            return float(self.evaluate(self.params["mean"]))

        observed_max = float(np.nanmax(np.asarray(layer, dtype=np.float64)))
        return float(self.evaluate(observed_max))


def format_functions(**specs):
    """
    Build response functions from configuration dictionaries.

    Args:
        **specs: Covariate name mapped to a dict such as
            {"fun": "dnorm", "mean": 15, "sd": 5}

    Returns:
        Dictionary of covariate name to ResponseFunction, in argument order
    """
    parameters = {}
    for name, spec in specs.items():
        if isinstance(spec, ResponseFunction):
            parameters[name] = spec
            continue
        spec = dict(spec)
        if "fun" not in spec:
            raise ValueError(f"Response for '{name}' must define 'fun'")
        kind = spec.pop("fun")
        parameters[name] = ResponseFunction(kind, **spec)
    return parameters
