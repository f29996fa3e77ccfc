"""
Exception hierarchy for the Heston Monte Carlo engine.

ConfigurationError is fatal and raised at construction time. A failed
verification is reported as data (see simulation.aggregator.VerificationMismatch),
never raised.
"""


class HestonEngineError(Exception):
    """Base class for engine errors."""

    pass


class ConfigurationError(HestonEngineError, ValueError):
    """Raised when parameters or engine settings are invalid."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value {value!r} for '{field}': {reason}")


class NumericDomainError(HestonEngineError, ArithmeticError):
    """Raised when a uniform draw falls outside the Box-Muller domain (0, 1]."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Uniform draw {value!r} is outside (0, 1]; ln(u1) is undefined")
