"""Data Access Object (DAO) implementation for managing URL records in Redis

This module provides a Redis-based implementation of UrlRecordBaseDAO.

Responsibilities:
    - Allocate record ids from the global counter;
    - Insert records together with their dedup index entry and last access;
    - Look records up by id and by long URL;
    - Record redirects (count + last access) atomically;
    - Provide defensive error handling and raise appropriate DAO exceptions.

Classes:
    UrlRecordRedisDAO:
        DAO for storing and retrieving UrlRecordModel in a Redis datastore.

Example:
    >>> from shorturl.dao.redis import UrlRecordRedisDAO

    >>> dao = UrlRecordRedisDAO(prefix="shorturl:dev")

    >>> record = dao.create("https://example.com/page")
    >>> record.id, record.count
    (1, 0)

    >>> dao.increment_and_touch(1).count
    1

    >>> dao.find_by_url("https://example.com/page").id
    1
"""

import logging
from datetime import datetime, UTC

import redis
from beartype import beartype

from shorturl.models import UrlRecordModel
from shorturl.dao.base import UrlRecordBaseDAO
from shorturl.dao.redis.mixins import RedisClientMixin
from shorturl.dao.redis.helpers import handle_redis_connection_error
from shorturl.dao.exceptions import UrlRecordAlreadyExistsError, ConcurrentWriteError
from shorturl.utils.helpers import epoch_millis, from_epoch_millis


logger = logging.getLogger(__name__)


class UrlRecordRedisDAO(RedisClientMixin, UrlRecordBaseDAO):
    """Redis-based Data Access Object (DAO) for managing URL records

    This class implements the UrlRecordBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        create(url: str, **kwargs) -> UrlRecordModel:
            Allocate an id (INCR) and store the record, its index entry and last access.
            Raises UrlRecordAlreadyExistsError when the URL is already indexed.
            Raises ConcurrentWriteError when the URL's index bucket changed mid-transaction.
            Raises DataStoreError on connectivity issues with Redis.

        get(record_id: int, **kwargs) -> UrlRecordModel | None:
            Retrieve a record by id.

        find_by_url(url: str, **kwargs) -> UrlRecordModel | None:
            Retrieve a record by long URL via the dedup index.

        list_all(**kwargs) -> list[UrlRecordModel]:
            Retrieve every record (ordered by last access; callers must not rely on it).

        increment_and_touch(record_id: int, **kwargs) -> UrlRecordModel | None:
            Increment the redirect count and move last access forward in one transaction.

    NOTE:
        Last access lives in a sorted set (member: id, score: epoch milliseconds)
        and is only ever updated with ZADD GT. A redirect that commits after a
        later one therefore can't move last access backwards.
    """

    @handle_redis_connection_error
    @beartype
    def create(self, url: str, **kwargs) -> UrlRecordModel:
        """Store a new record for a long URL

        The index bucket of the URL is WATCHed while the id is allocated, so
        two concurrent creations for the same URL can't both commit: the
        second one fails with ConcurrentWriteError (or sees the first one's
        index entry and fails with UrlRecordAlreadyExistsError).

        An id consumed by an aborted transaction is never handed out again.

        Args:
            url (str):
                The long URL, stored verbatim.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            UrlRecordModel: the new record with count=0 and last_access=now.

        Raises:
            UrlRecordAlreadyExistsError:
                If the URL already has a record.
            ConcurrentWriteError:
                If another writer modified the URL's index bucket meanwhile.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.

        Example:
            >>> dao.create('https://example.com')
            UrlRecordModel(id=1, url='https://example.com', count=0, ...)
        """
        index_key = self.keys.url_index_key(url)
        last_access_key = self.keys.last_access_key()

        with self.redis.pipeline(transaction=True) as pipe:
            try:
                # Immediate mode until multi(): WATCH, HEXISTS and INCR run right away
                pipe.watch(index_key)
                if pipe.hexists(index_key, url):
                    raise UrlRecordAlreadyExistsError(f"A record for URL '{url}' already exists.")

                record_id = int(pipe.incr(self.keys.counter_key()))
                last_access = from_epoch_millis(epoch_millis(datetime.now(UTC)))

                # NOTE: The record hash, its last access and its index entry are
                #       written in one MULTI/EXEC. Readers can never see a record
                #       without a last access, and find_by_url() can never return
                #       an id whose record hash doesn't exist yet.
                pipe.multi()
                pipe.hset(self.keys.record_key(record_id), mapping={'url': url, 'count': 0})
                pipe.zadd(last_access_key, {str(record_id): epoch_millis(last_access)})
                pipe.hset(index_key, url, record_id)
                pipe.execute()
            except redis.exceptions.WatchError as e:
                raise ConcurrentWriteError(f"Concurrent write while creating a record for URL '{url}'.") from e

        logger.debug('Created record %s.', record_id, extra={'record_id': record_id})
        return UrlRecordModel(id=record_id, url=url, count=0, last_access=last_access)

    @handle_redis_connection_error
    @beartype
    def get(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        """Retrieve a stored record by id

        Fetches the record hash and its last access in a single transaction.

        Returns:
            UrlRecordModel | None:
                The record if found, otherwise None.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get(1)
            UrlRecordModel(id=1, url='https://example.com', count=3, ...)
        """
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hgetall(self.keys.record_key(record_id))
            pipe.zscore(self.keys.last_access_key(), str(record_id))
            fields, score = pipe.execute()

        return self._to_model(record_id, fields, score)

    @handle_redis_connection_error
    @beartype
    def find_by_url(self, url: str, **kwargs) -> UrlRecordModel | None:
        """Retrieve a stored record by its exact long URL

        Returns:
            UrlRecordModel | None:
                The record if the URL is indexed, otherwise None.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        record_id = self.redis.hget(self.keys.url_index_key(url), url)
        if record_id is None:
            return None
        return self.get(int(record_id))

    @handle_redis_connection_error
    @beartype
    def list_all(self, **kwargs) -> list[UrlRecordModel]:
        """Retrieve every stored record

        The sorted set of last accesses doubles as the list of existing ids.
        All records are then read in one transaction.

        Returns:
            list[UrlRecordModel]:
                All records, ordered by last access (oldest first).

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        ids = [int(member) for member in self.redis.zrange(self.keys.last_access_key(), 0, -1)]
        if not ids:
            return []

        last_access_key = self.keys.last_access_key()
        with self.redis.pipeline(transaction=True) as pipe:
            for record_id in ids:
                pipe.hgetall(self.keys.record_key(record_id))
                pipe.zscore(last_access_key, str(record_id))
            results = pipe.execute()

        records = []
        for i, record_id in enumerate(ids):
            record = self._to_model(record_id, results[2 * i], results[2 * i + 1])
            if record is not None:
                records.append(record)
        return records

    @handle_redis_connection_error
    @beartype
    def increment_and_touch(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        """Record a redirect: increment the count and set last access to now

        Args:
            record_id (int):
                Id of the record being redirected through.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            UrlRecordModel | None:
                The record as written by this redirect, or None if no record has this id.

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.increment_and_touch(1)
            UrlRecordModel(id=1, url='https://example.com', count=4, ...)
        """
        record_key = self.keys.record_key(record_id)
        last_access_key = self.keys.last_access_key()

        # Records are never deleted, so a record seen here still exists inside the transaction
        if not self.redis.exists(record_key):
            return None

        # NOTE: HINCRBY and ZADD run in one MULTI/EXEC. Concurrent increments
        #       are never lost, and no reader can see the new count together
        #       with the previous last access (or the other way around).
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hincrby(record_key, 'count', 1)
            pipe.zadd(last_access_key, {str(record_id): epoch_millis(datetime.now(UTC))}, gt=True)
            pipe.hgetall(record_key)
            pipe.zscore(last_access_key, str(record_id))
            _, _, fields, score = pipe.execute()

        return self._to_model(record_id, fields, score)

    @staticmethod
    def _to_model(record_id: int, fields: dict | None, score: float | None) -> UrlRecordModel | None:
        if not fields or 'url' not in fields or 'count' not in fields or score is None:
            return None
        return UrlRecordModel(
            id=record_id,
            url=fields['url'],
            count=int(fields['count']),
            last_access=from_epoch_millis(score),
        )
