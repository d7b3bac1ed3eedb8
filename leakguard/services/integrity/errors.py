"""Integrity engine errors."""


class IntegrityStorageError(RuntimeError):
    """A read or write against the backing store failed.

    The message names the failing operation (e.g. ``Failed to log integrity
    signal: ...``); the original SQLAlchemy error is chained as ``__cause__``.
    """
