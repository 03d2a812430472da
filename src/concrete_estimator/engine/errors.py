"""
Error types raised by validation and by the engine.
"""


class EstimationError(Exception):
    """Base class for estimator errors."""


class ValidationError(EstimationError):
    """Caller-facing rejection carrying every validation message."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input parameters")


class InvalidInput(EstimationError, ValueError):
    """Raised by the engine itself for non-positive volume, mix parts or densities."""
