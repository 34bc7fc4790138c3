"""Exception types raised by route safety analysis."""


class RouteSafetyError(Exception):
    """Base class for all route safety errors."""


class InvalidRouteInput(RouteSafetyError, ValueError):
    """A route or waypoint failed validation before scoring."""

    def __init__(self, message: str, route_index=None):
        self.route_index = route_index
        if route_index is not None:
            message = f"Route {route_index + 1}: {message}"
        super().__init__(message)


class InvalidReviewRecord(RouteSafetyError, ValueError):
    """A review record from a store could not be parsed."""


class ConfigError(RouteSafetyError, ValueError):
    """Invalid analysis configuration."""


class ReviewStoreError(RouteSafetyError):
    """The review store could not deliver reviews."""
