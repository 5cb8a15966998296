"""
app/services/errors.py

Systemic feed sync failures. Anything raised from here aborts the whole run;
per-record problems are reported in the sync result instead.
"""

from __future__ import annotations


class FeedSyncError(RuntimeError):
    """
    Base class for failures that abort a feed sync run.
    """


class FeedFetchError(FeedSyncError):
    """
    Raised when the source document cannot be fetched or is not tabular data.
    """


class DatastoreUnavailableError(FeedSyncError):
    """
    Raised when the datastore cannot be read or reached at all.
    """


class UnknownFeedError(KeyError):
    """
    Raised when a caller asks for a feed name that is not registered.
    """
