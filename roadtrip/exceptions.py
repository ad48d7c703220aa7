"""
Planner exceptions.

Stage errors that abort a build (``LocationNotFound``, ``RouteNotFound``) carry a
user-facing message. The remaining stage errors are absorbed by the planner and
only leave their section of the plan empty.
"""


class TripPlannerError(Exception):
    """Base exception for the road trip planner."""


class InvalidTripRequest(TripPlannerError):
    """Origin or destination is empty."""


class UpstreamError(TripPlannerError):
    """An upstream HTTP call failed."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"[{service}] {message}")


class LocationNotFound(TripPlannerError):
    """A place name could not be resolved to coordinates."""

    def __init__(self, place_name: str, reason: str = "no matching location"):
        self.place_name = place_name
        self.reason = reason
        super().__init__(f"Could not locate '{place_name}': {reason}")


class RouteNotFound(TripPlannerError):
    """No driving route exists between the two places."""


class RenderFailed(TripPlannerError):
    """The static map image could not be produced."""


class WeatherUnavailable(TripPlannerError):
    """Current conditions could not be fetched."""


class AuthFailed(TripPlannerError):
    """The music provider did not issue a token."""


class SearchFailed(TripPlannerError):
    """A music search page could not be fetched."""


class MissingCredential(TripPlannerError):
    """Required secrets are not configured."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(
            f"Missing required credential(s): {', '.join(self.names)} (configure them in .env)"
        )
