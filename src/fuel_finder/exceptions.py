class FuelFinderError(Exception):
    """Base exception for station lookup errors."""


class ExternalServiceError(FuelFinderError):
    """Raised when an upstream API call fails or returns an unusable payload."""


class InvalidLocationError(FuelFinderError):
    """Raised when a coordinate cannot be resolved to a place."""


class NoRouteFoundError(FuelFinderError):
    """Raised when a drivable route cannot be generated."""
