# services/exceptions.py
#
# Fatal run-level errors. Database connectivity failures use the built-in
# ConnectionError raised by db.connector.

class SyncError(Exception):
    """Base exception for errors that abort a sync run."""

class ConfigurationError(SyncError):
    """Raised for invalid parameters or when the target list cannot be verified."""

class NoDataError(SyncError):
    """Raised when the source query succeeds but returns no rows."""
