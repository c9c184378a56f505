"""Abstract base class for UrlRecord data access objects (DAOs).

This class establishes a consistent contract for all UrlRecord DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Allocate ids and persist new UrlRecordModel objects.
    - Look records up by id and by long URL (for deduplication).
    - Atomically record a redirect (count + last access).
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shorturl.dao.redis import UrlRecordRedisDAO

        >>> dao = UrlRecordRedisDAO(...)

        >>> record = dao.create('https://example.com/blog/article-123')
        >>> record.id, record.count
        (1, 0)

        >>> dao.find_by_url('https://example.com/blog/article-123').id
        1

        >>> dao.increment_and_touch(1).count
        1

        >>> print(dao.get(999))
        None
"""

from abc import ABC, abstractmethod

from shorturl.models import UrlRecordModel


class UrlRecordBaseDAO(ABC):
    """Interface for UrlRecord data access objects (DAOs).

    Methods:
        create(url: str, **kwargs) -> UrlRecordModel:
            Allocate a fresh id and persist a new record (count=0, last_access=now).
            Raises UrlRecordAlreadyExistsError if the URL already has a record.
            Raises ConcurrentWriteError if a concurrent write interfered.
            Raises DataStoreError on connection or write failure.

        get(record_id: int, **kwargs) -> UrlRecordModel | None:
            Retrieve a record by id. Returns None if not found.

        find_by_url(url: str, **kwargs) -> UrlRecordModel | None:
            Retrieve a record by exact long URL. Returns None if not found.

        list_all(**kwargs) -> list[UrlRecordModel]:
            Return every stored record. Order is unspecified.

        increment_and_touch(record_id: int, **kwargs) -> UrlRecordModel | None:
            Atomically increment the redirect count and refresh last access.
            Returns the updated record, or None if not found.

    Subclassing:
        Datastore-specific implementations (e.g., UrlRecordRedisDAO) must
        extend this class and implement all abstract methods.

    NOTE:
        - Records are never deleted, so the DAO does not provide a delete operation.
        - Implementations must never expose a partially written record.
    """

    @abstractmethod
    def create(self, url: str, **kwargs) -> UrlRecordModel:
        """Persist a new record for a long URL.

        Args:
            url (str):
                The long URL to store.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            UrlRecordModel: the new record (count=0, last_access=creation time).

        Raises:
            UrlRecordAlreadyExistsError:
                If a record for the same URL already exists.

            ConcurrentWriteError:
                If a concurrent write invalidated the creation.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        """Retrieve a record by its id.

        Returns:
            UrlRecordModel | None: The record if found, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def find_by_url(self, url: str, **kwargs) -> UrlRecordModel | None:
        """Retrieve a record by its exact long URL.

        Returns:
            UrlRecordModel | None: The record if found, otherwise None.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_all(self, **kwargs) -> list[UrlRecordModel]:
        """Return every stored record (unspecified order).

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def increment_and_touch(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        """Atomically increment a record's count by 1 and set its last access to now.

        Concurrent calls must never lose an increment, and readers must never
        observe a new count without the matching last access (or vice versa).

        Returns:
            UrlRecordModel | None: The updated record, or None if no record has this id.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
