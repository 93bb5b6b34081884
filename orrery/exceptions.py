"""
Exceptions raised by the orbital position engine.
"""


class OrreryError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(OrreryError, ValueError):
    """
    The planet catalog or engine configuration violates an invariant.

    Raised while loading the catalog or constructing an engine, never from a
    position query.
    """


class ConvergenceError(OrreryError, RuntimeError):
    """
    Kepler's equation did not converge within the iteration cap.

    Attributes:
        names: Names of the planets whose eccentric anomaly did not converge.
        max_iter: Iteration cap that was reached.
    """

    def __init__(self, names, max_iter):
        self.names = tuple(names)
        self.max_iter = max_iter
        super().__init__(
            f"Kepler's equation did not converge in {max_iter} iterations for: "
            f"{', '.join(self.names)}"
        )
