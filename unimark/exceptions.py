"""
Exception hierarchy for unimark.

Source errors describe a single browser source failing during an import run.
They are caught by the import orchestrator and reported, never raised to the
caller of ``run_import``.
"""


class UnimarkError(Exception):
    """Base class for all unimark errors."""


class SourceError(UnimarkError):
    """A single browser source could not be imported."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ReadError(SourceError):
    """Source file exists but could not be read."""


class FormatError(SourceError):
    """Source was read but does not have the expected structure."""


class OpenError(SourceError):
    """Browser database could not be opened."""


class QueryError(SourceError):
    """Extraction query could not be executed against a browser database."""


class RowDecodeError(SourceError):
    """A single database row could not be decoded. Always recoverable."""


class StoreError(UnimarkError):
    """The bookmark store could not be loaded or saved."""


class LaunchError(UnimarkError):
    """An external browser command could not be started."""


class ConfigError(UnimarkError):
    """A configuration file or setting is invalid."""
