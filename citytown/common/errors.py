"""Domain errors and failure typing."""


class LocationError(Exception):
    """Base class for location record failures."""

    error_code = "LOCATION_ERROR"


class ConfigError(LocationError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ValidationError(LocationError):
    """Raised when a required identifier is missing at submission time."""

    error_code = "VALIDATION_ERROR"


class ReferenceLoadError(LocationError):
    """Raised when reference data is unreachable or malformed."""

    error_code = "REFERENCE_LOAD_ERROR"


class StoreError(LocationError):
    """Raised when a persistence operation fails."""

    error_code = "STORE_ERROR"


class RecordNotFoundError(StoreError):
    error_code = "RECORD_NOT_FOUND"
