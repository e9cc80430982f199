"""Exception types raised by the analytics functions.

The engine (``AnalyticsEngine``) catches these at its public boundary and
reports them through the configured error callback instead of raising.
"""


class AnalyticsError(Exception):
    """Base class for analytics failures."""


class InvalidRecordError(AnalyticsError, ValueError):
    """A metric record could not be parsed."""


class ConfigurationError(AnalyticsError, ValueError):
    """Analytics options are malformed or out of range."""


class AlgorithmNotFoundError(AnalyticsError, LookupError):
    """An algorithm name is absent from the aggregated statistics."""

    def __init__(self, missing):
        self.missing = list(missing)
        names = ", ".join(repr(name) for name in self.missing)
        super().__init__(f"Algorithm(s) not found in statistics: {names}")
