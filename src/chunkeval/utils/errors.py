"""Typed exceptions for configuration, input layout and input formats."""


class ConfigurationError(ValueError):
    """Raised when evaluator settings are invalid (unknown scheme, bad counts)."""


class InputShapeError(ValueError):
    """Raised when inference/label arrays or batch offsets are inconsistent."""


class InputFormatError(ValueError):
    """Raised when an input record cannot be parsed."""
