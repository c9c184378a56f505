"""Smoke-test the URL shortener against the Redis running on your local machine

Connection details:
- redis: 127.0.0.1:6379
- redisinsight: 127.0.0.1:5540

Shortens a URL, follows its short URL once and prints the resulting statistics.
Keys are written under the 'shorturl:healthcheck' prefix, which you can inspect
in the Redis Insight UI at localhost:5540.
"""

import json

from shorturl.dao.redis import UrlRecordRedisDAO
from shorturl.services import ShortenerService, RedirectorService, StatisticsService


BASE = 'http://localhost:3000/my'


def main():
    dao = UrlRecordRedisDAO(redis_host='localhost', redis_port=6379, redis_db=0, prefix='shorturl:healthcheck')

    result = ShortenerService(dao, BASE).shorten('https://redis.io/docs/latest/')
    print(f'Shortened {result.url} to {result.short_url}')

    record = RedirectorService(dao, BASE).resolve(result.record.shortcode)
    print(f'Redirected to {record.url} ({record.count} redirects so far)')

    stats = StatisticsService(dao, BASE).list_stats()
    print(json.dumps([stat.to_dict() for stat in stats], indent=2))


if __name__ == '__main__':
    main()
