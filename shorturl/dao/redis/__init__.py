from shorturl.dao.redis.redis_key_schema import RedisKeySchema
from shorturl.dao.redis.mixins import RedisClientMixin
from shorturl.dao.redis.url_record_redis_dao import UrlRecordRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'UrlRecordRedisDAO',
]
