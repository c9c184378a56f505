import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from shorturl.dao.exceptions import DataStoreError


__all__ = ['handle_redis_connection_error', 'connection_info', 'server_version']

F = TypeVar('F', bound=Callable[..., Any])


def connection_info(client: redis.Redis) -> str:
    """Describe a Redis client's target as '<host>:<port>/<db>' for error messages"""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def server_version(client: redis.Redis) -> tuple[int, ...] | None:
    """Read the server version from INFO, e.g. (7, 2, 4) for '7.2.4'

    Returns None when the server doesn't report a version or reports one that isn't
    dot-separated integers.
    """
    version = client.info('server').get('redis_version')
    try:
        return tuple(int(part) for part in str(version).split('.'))
    except ValueError:
        return None


def handle_redis_connection_error(method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Both connection failures and socket timeouts are reported as DataStoreError.

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise
            redis.exceptions.ConnectionError or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get_counter(self):
        ...     return self.redis.get('links:counter')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise DataStoreError(f"Can't connect to Redis at {connection_info(self.redis)}.") from e

    return wrapper
