"""Unit tests for RedisClientMixin.

Test coverage includes:
    1. Client construction
       - Builds a client from `redis_*` keyword arguments (string ports included).
       - Adopts a ready-made client and ignores connection arguments.
    2. Server checks
       - Unreachable servers raise DataStoreError naming the target.
       - Servers older than 6.2 (no ZADD GT) are refused.
       - Missing or unparsable versions are refused.
       - raise_error=False reports failures with False.
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from shorturl.dao.exceptions import DataStoreError
from shorturl.dao.redis import RedisKeySchema
from shorturl.dao.redis.helpers import server_version
from shorturl.dao.redis.mixins import RedisClientMixin


@pytest.fixture
def patched_redis():
    with patch('shorturl.dao.redis.mixins.redis.Redis', autospec=True) as redis_cls:
        instance = redis_cls.return_value
        instance.connection_pool = MagicMock(connection_kwargs={'host': '203.0.113.1', 'port': 18000, 'db': 5})
        instance.info.return_value = {'redis_version': '7.2.4'}
        yield redis_cls


# -------------------------------
# 1. Client construction
# -------------------------------


def test_builds_client_from_configuration(patched_redis):
    mixin = RedisClientMixin(
        redis_host='203.0.113.1',
        redis_port='18000',
        redis_db='5',
        redis_username='default',
        redis_password='secret',
        redis_socket_timeout=2.5,
        prefix='testapp:test',
    )

    patched_redis.assert_called_once_with(
        host='203.0.113.1',
        port=18000,
        db=5,
        username='default',
        password='secret',
        socket_timeout=2.5,
        decode_responses=True,
    )
    assert mixin.redis is patched_redis.return_value
    assert mixin.keys.counter_key() == 'testapp:test:links:counter'


def test_adopts_existing_client(redis_client, app_prefix):
    """A supplied client wins over connection arguments."""
    with patch('shorturl.dao.redis.mixins.redis.Redis', autospec=True) as redis_cls:
        mixin = RedisClientMixin(redis_host='elsewhere', redis_client=redis_client, prefix=app_prefix)

    redis_cls.assert_not_called()
    assert mixin.redis is redis_client
    assert isinstance(mixin.keys, RedisKeySchema)
    assert mixin.keys.prefix == app_prefix


# -------------------------------
# 2. Server checks
# -------------------------------


def test_checks_server_on_construction(redis_client):
    RedisClientMixin(redis_client=redis_client)

    redis_client.ping.assert_called_once()
    redis_client.info.assert_called_once_with('server')


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('refused'), redis.exceptions.TimeoutError('timeout')])
def test_unreachable_server(patched_redis, error):
    patched_redis.return_value.ping.side_effect = error

    with pytest.raises(DataStoreError, match="Can't connect to Redis at 203.0.113.1:18000/5"):
        RedisClientMixin(redis_host='203.0.113.1', redis_port=18000, redis_db=5)


@pytest.mark.parametrize('version', ['6.2.0', '6.2.14', '7.2.4', '8.0.2'])
def test_supported_server_versions(redis_client, version):
    redis_client.info.return_value = {'redis_version': version}

    mixin = RedisClientMixin(redis_client=redis_client)

    assert mixin._healthcheck() is True


@pytest.mark.parametrize('version', ['5.0.14', '6.0.16', '6.1.9'])
def test_server_without_zadd_gt(redis_client, version):
    redis_client.info.return_value = {'redis_version': version}

    with pytest.raises(DataStoreError, match=f'runs {version}; 6.2.0 or newer is required'):
        RedisClientMixin(redis_client=redis_client)


@pytest.mark.parametrize('info', [{}, {'redis_version': ''}, {'redis_version': '7.2-rc1'}])
def test_server_without_usable_version(redis_client, info):
    redis_client.info.return_value = info

    with pytest.raises(DataStoreError, match='did not report a usable server version'):
        RedisClientMixin(redis_client=redis_client)


def test_healthcheck_without_raising(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client)

    redis_client.info.return_value = {'redis_version': '6.0.16'}
    assert mixin._healthcheck(raise_error=False) is False

    redis_client.info.return_value = {'redis_version': '7.2.4'}
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
    assert mixin._healthcheck(raise_error=False) is False


def test_server_version(redis_client):
    redis_client.info.return_value = {'redis_version': '7.2.4', 'redis_mode': 'standalone'}

    assert server_version(redis_client) == (7, 2, 4)
