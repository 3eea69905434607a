"""Exceptions and message helpers for geokriging.

Every error carries the offending option (or data description) in
``details`` so callers can react programmatically; ``str(error)`` gives the
human readable form.

Linear-algebra trouble at solve time is never raised from here: a failed
factorization is reported as a status on the fitted estimator so that batch
loops can keep going past individual locations.
"""

from typing import Any, Iterable, Optional


class GeoKrigingError(Exception):
    """Base exception for geokriging errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class DataValidationError(GeoKrigingError):
    """Coordinates, values or tables are malformed or inconsistent."""


class ParameterError(GeoKrigingError):
    """A parameter value is out of range or of the wrong kind."""


class ConfigurationError(ParameterError):
    """An estimator or solver is configured inconsistently.

    Raised at construction or preprocessing time, before any system is
    assembled.
    """


def _compose(lines: Iterable[Optional[str]]) -> str:
    return "\n".join(line for line in lines if line)


def format_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> str:
    """Render a data validation message.

    Example:
        >>> print(format_validation_error("Bad coordinates", expected="2D array",
        ...                               received="1D array"))
        Bad coordinates
        Expected: 2D array
        Received: 1D array
    """
    return _compose(
        [
            message,
            expected and f"Expected: {expected}",
            received and f"Received: {received}",
            suggestion and f"Suggestion: {suggestion}",
        ]
    )


def format_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[Iterable[Any]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> str:
    """Render a message for an invalid parameter or configuration option."""
    choices = None
    if valid_values is not None:
        choices = f"Valid values: {', '.join(map(str, valid_values))}"
    return _compose(
        [
            f"Invalid value for parameter '{parameter_name}': {value!r}",
            choices,
            constraint and f"Constraint: {constraint}",
            suggestion and f"Suggestion: {suggestion}",
        ]
    )


def raise_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise :class:`DataValidationError` with a formatted message."""
    raise DataValidationError(
        format_validation_error(message, expected, received),
        suggestion=suggestion,
        details={"expected": expected, "received": received},
    )


def _parameter_details(parameter_name, value, valid_values, constraint):
    return {
        "parameter": parameter_name,
        "value": value,
        "valid_values": None if valid_values is None else list(valid_values),
        "constraint": constraint,
    }


def raise_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[Iterable[Any]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise :class:`ParameterError` for ``parameter_name``.

    Args:
        parameter_name: Name of the invalid parameter.
        value: Value that was provided.
        valid_values: Accepted values, when the parameter is an enumeration.
        constraint: Constraint that was violated.
        suggestion: How to fix the error.
    """
    valid_values = None if valid_values is None else list(valid_values)
    raise ParameterError(
        format_parameter_error(parameter_name, value, valid_values, constraint),
        suggestion=suggestion,
        details=_parameter_details(parameter_name, value, valid_values, constraint),
    )


def raise_configuration_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[Iterable[Any]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise :class:`ConfigurationError`; same arguments as
    :func:`raise_parameter_error`."""
    valid_values = None if valid_values is None else list(valid_values)
    raise ConfigurationError(
        format_parameter_error(parameter_name, value, valid_values, constraint),
        suggestion=suggestion,
        details=_parameter_details(parameter_name, value, valid_values, constraint),
    )
