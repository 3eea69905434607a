"""Utility modules for geokriging."""

from geokriging.utils.errors import (
    ConfigurationError,
    DataValidationError,
    GeoKrigingError,
    ParameterError,
    format_parameter_error,
    format_validation_error,
    raise_configuration_error,
    raise_parameter_error,
    raise_validation_error,
)

__all__ = [
    "GeoKrigingError",
    "DataValidationError",
    "ParameterError",
    "ConfigurationError",
    "format_validation_error",
    "format_parameter_error",
    "raise_validation_error",
    "raise_parameter_error",
    "raise_configuration_error",
]
