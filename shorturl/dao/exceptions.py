"""Exceptions related to Data Access Objects (DAO) operations.

"Not found" is not an error for the DAOs: lookups return None instead.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    UrlRecordAlreadyExistsError:
        Raised when creating a record for a URL that already has one.

    ConcurrentWriteError:
        Raised when a concurrent write invalidated an optimistic transaction.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from shorturl.dao.exceptions import ConcurrentWriteError
    >>> raise ConcurrentWriteError("Index bucket changed while creating a record.")
    Traceback (most recent call last):
        ...
    shorturl.dao.exceptions.ConcurrentWriteError: Index bucket changed while creating a record.
"""

from shorturl.exceptions import ShortURLError


class DAOError(ShortURLError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class UrlRecordAlreadyExistsError(DAOError):
    """Raised when creating a UrlRecordModel for a URL that already has one."""

    error_code = 'dao:url_record_already_exists_error'


class ConcurrentWriteError(DAOError):
    """Raised when a concurrent write invalidates an optimistic transaction.

    The DAO never retries; retrying is the caller's decision.
    """

    error_code = 'dao:concurrent_write_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'
