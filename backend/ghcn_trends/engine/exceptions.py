"""
Exceptions for station record processing.
"""


class GHCNTrendsError(Exception):
    """Base exception for station record processing errors."""

    pass


class FormatError(GHCNTrendsError, ValueError):
    """Malformed station record, date/value token, or truncated fixed-width line."""

    pass


class MissingFileError(GHCNTrendsError, FileNotFoundError):
    """Expected per-station/variable observation file is absent."""

    pass


class InsufficientDataError(GHCNTrendsError, ValueError):
    """Too little usable data for the requested computation."""

    pass
