"""Client setup shared by the Redis-backed DAOs.

A DAO built on RedisClientMixin owns a `redis` client and a `keys` schema, and
refuses to start against a server it can't use: one that doesn't answer PING,
or one older than Limits.MIN_REDIS_VERSION (ZADD GT arrived in Redis 6.2).

Example:
    >>> class UrlRecordRedisDAO(RedisClientMixin, UrlRecordBaseDAO):
    ...     pass
    ...
    >>> dao = UrlRecordRedisDAO(redis_host='redis.internal', prefix='shorturl:prod')
    >>> dao.keys.counter_key()
    'shorturl:prod:links:counter'
"""

import redis

from shorturl.constants import Limits
from shorturl.dao.exceptions import DataStoreError
from shorturl.dao.redis.helpers import connection_info, server_version
from shorturl.dao.redis.redis_key_schema import RedisKeySchema


def _format_version(version: tuple[int, ...]) -> str:
    return '.'.join(str(part) for part in version)


class RedisClientMixin:
    """Connect a DAO to Redis and verify the server before first use

    Attributes:
        redis (redis.Redis):
            Client every DAO command goes through. Responses must be decoded to str.
        keys (RedisKeySchema):
            Key names under the DAO's namespace prefix.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float | None = None,
        redis_decode_responses: bool = True,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        """Build (or adopt) a client and check the server it points to

        The `redis_*` keyword arguments mirror a Lambda's 'redis' configuration
        section (see shorturl.utils.redis_config). They are ignored when
        `redis_client` is given; ports and db indexes may arrive as strings.

        Raises:
            DataStoreError:
                If the server is unreachable or too old.
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
                decode_responses=redis_decode_responses,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """Check that the server answers and supports every command the DAOs send

        Returns False instead of raising DataStoreError when `raise_error` is False.
        """
        try:
            self._check_server()
        except DataStoreError:
            if raise_error:
                raise
            return False
        return True

    def _check_server(self) -> None:
        target = connection_info(self.redis)
        try:
            self.redis.ping()
            version = server_version(self.redis)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {target}. Check the provided configuration parameters.") from e

        if version is None:
            raise DataStoreError(f'Redis at {target} did not report a usable server version.')
        if version < Limits.MIN_REDIS_VERSION:
            raise DataStoreError(
                f'Redis at {target} runs {_format_version(version)}; '
                f'{_format_version(Limits.MIN_REDIS_VERSION)} or newer is required.'
            )
