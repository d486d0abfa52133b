"""
Engine Exceptions
ERCOT BESS Revenue Engine

All errors raised by the dispatch engine derive from BessEngineError, which
is a ValueError so callers catching bad-input ValueErrors keep working.
"""


class BessEngineError(ValueError):
    """Base class for dispatch engine errors."""


class InvalidConfigurationError(BessEngineError):
    """Raised when a battery configuration cannot be simulated."""


class ArithmeticDegenerateError(InvalidConfigurationError):
    """Raised when a configuration value would cause a division by zero."""


class MalformedInputError(BessEngineError):
    """Raised when a price series or interval record is not well formed."""
