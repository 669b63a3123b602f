"""Error types raised by the database and helpers to classify them."""

from __future__ import annotations


class NutsDBError(Exception):
    """Base class of every error raised by the package."""

    default_message = "nutsdb error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class DBClosedError(NutsDBError):
    """The database has been closed."""

    default_message = "db is closed"


class KeyNotFoundError(NutsDBError):
    """The key was not found."""

    default_message = "key not found"


class BucketNotFoundError(NutsDBError):
    """The bucket does not exist."""

    default_message = "bucket not found"


class BucketEmptyError(NutsDBError):
    """The bucket is empty."""

    default_message = "bucket is empty"


class KeyEmptyError(NutsDBError):
    """The key is empty."""

    default_message = "key can not be empty"


class PrefixScanError(NutsDBError):
    """A prefix scan found nothing."""

    default_message = "prefix scans not found"


class PrefixSearchScanError(NutsDBError):
    """A prefix and regular-expression scan found nothing."""

    default_message = "prefix and search scans not found"


def _chain(err: BaseException | None):
    """Yield the error and every error it was raised from or during."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__ if err.__cause__ is not None else err.__context__


def _matches(err: BaseException | None, kind: type[BaseException]) -> bool:
    return any(isinstance(e, kind) for e in _chain(err))


def is_db_closed(err: BaseException | None) -> bool:
    """True if the error indicates the db was closed."""
    return _matches(err, DBClosedError)


def is_key_not_found(err: BaseException | None) -> bool:
    """True if the error indicates the key is not found."""
    return _matches(err, KeyNotFoundError)


def is_bucket_not_found(err: BaseException | None) -> bool:
    """True if the error indicates the bucket does not exist."""
    return _matches(err, BucketNotFoundError)


def is_bucket_empty(err: BaseException | None) -> bool:
    """True if the error indicates the bucket is empty."""
    return _matches(err, BucketEmptyError)


def is_key_empty(err: BaseException | None) -> bool:
    """True if the error indicates the key is empty."""
    return _matches(err, KeyEmptyError)


def is_prefix_scan(err: BaseException | None) -> bool:
    """True if a prefix scan found no result."""
    return _matches(err, PrefixScanError)


def is_prefix_search_scan(err: BaseException | None) -> bool:
    """True if a prefix and search scan found no result."""
    return _matches(err, PrefixSearchScanError)