"""Exceptions raised for invalid analysis inputs."""


class ColonArrayError(ValueError):
    """Base class for input validation errors."""


class ShapeMismatchError(ColonArrayError):
    """Label vector length does not match the matrix row count."""


class InvalidGroupCountError(ColonArrayError):
    """Labels do not encode exactly two groups."""


class UnknownCorrectionMethodError(ColonArrayError):
    """Requested p-value correction method is not supported."""
