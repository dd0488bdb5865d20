"""
Exception types.

Only configuration problems are raised. Failures while applying changes to
individual entries are reported through ``SyncOutcome`` values instead.
"""


class MatchMakerError(Exception):
    """Base class for all errors raised by the synchronizer."""


class ConfigurationError(MatchMakerError):
    """A run cannot start: bad roots, overlapping trees and the like."""


class ScanError(ConfigurationError):
    """The scan root is malformed, missing, or not a directory."""
