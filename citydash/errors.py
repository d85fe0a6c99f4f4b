"""Exception taxonomy for the city data endpoints.

Only `MissingParameter` ever reaches a client. The other two are raised below
the request handler and recovered there: a provider failure falls through to
synthetic data and a synthesis failure falls through to the static fallback.
"""


class DashboardError(Exception):
    """Base class for city dashboard errors."""


class MissingParameter(DashboardError):
    """A required query parameter was absent or blank."""

    def __init__(self, parameter: str = "city", message: str = "City is required") -> None:
        super().__init__(message)
        self.parameter = parameter
        self.message = message


class ProviderUnavailable(DashboardError):
    """The live provider could not supply data (no key, unknown city, HTTP or network error)."""


class SynthesisFailure(DashboardError):
    """Synthetic data generation raised unexpectedly."""
