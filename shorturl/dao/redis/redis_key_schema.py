import functools
from collections.abc import Callable

import xxhash


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing URL records.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "shorturl:prod" or "shorturl:dev".

    Layout:
        links:counter               string      id allocator (INCR)
        links:<id>                  hash        url, count
        links:last_access           sorted set  member <id>, score = last access (epoch ms)
        links:index:<xxh64(url)>    hash        field <url> -> <id> (dedup index bucket)
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def counter_key(self) -> str:
        return 'links:counter'

    @prefix_key
    def record_key(self, record_id: int | str) -> str:
        return f'links:{record_id}'

    @prefix_key
    def last_access_key(self) -> str:
        return 'links:last_access'

    @prefix_key
    def url_index_key(self, url: str) -> str:
        # Bucket by hash: keys stay short for long URLs, and a WATCH on the
        # bucket only conflicts with writers of URLs sharing the same hash
        return f'links:index:{xxhash.xxh64_hexdigest(url)}'
