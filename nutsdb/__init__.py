"""Building blocks of an embedded key/value store: entries, a file handle cache, errors and data structures."""

__version__ = "0.1.0"