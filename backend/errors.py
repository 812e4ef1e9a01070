class LeaderboardError(Exception):
    """Base class for failures that turn into a 500 response."""


class UpstreamUnavailableError(LeaderboardError):
    """Upstream could not be reached, timed out, or answered with an error."""


class UpstreamDataError(LeaderboardError):
    """Upstream answered with JSON of an unexpected shape."""
