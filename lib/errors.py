"""Failure taxonomy shared by both oracle units.

Every failure aborts the invocation; nothing in ``lib`` catches these.  The
simulation harness is the only place that turns them into an error string.
"""


class OracleError(Exception):
    """Base class for failures a unit reports back to its caller."""


class ConfigError(OracleError):
    """A required secret, argument or configuration value is missing or bad."""


class UpstreamError(OracleError):
    """The flight feed could not be fetched or returned no usable payload."""


class NotFoundError(OracleError):
    """The claim query matched no flight in the feed."""


class ValidationError(OracleError):
    """A matched record is malformed, or a result cannot be encoded."""
