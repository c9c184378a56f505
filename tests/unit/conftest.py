import threading
from dataclasses import replace
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
import redis
from pytest import MonkeyPatch

from shorturl.models import UrlRecordModel
from shorturl.dao.base import UrlRecordBaseDAO
from shorturl.dao.exceptions import UrlRecordAlreadyExistsError
from shorturl.utils.helpers import epoch_millis, from_epoch_millis


class InMemoryUrlRecordDAO(UrlRecordBaseDAO):
    """Thread-safe in-memory record store for service tests"""

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = 0
        self._records: dict[int, UrlRecordModel] = {}
        self._index: dict[str, int] = {}
        self.create_calls = 0

    @staticmethod
    def _now() -> datetime:
        return from_epoch_millis(epoch_millis(datetime.now(UTC)))

    def create(self, url: str, **kwargs) -> UrlRecordModel:
        with self._lock:
            self.create_calls += 1
            if url in self._index:
                raise UrlRecordAlreadyExistsError(f"A record for URL '{url}' already exists.")
            self._counter += 1
            record = UrlRecordModel(id=self._counter, url=url, count=0, last_access=self._now())
            self._records[record.id] = record
            self._index[url] = record.id
            return record

    def get(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        with self._lock:
            return self._records.get(record_id)

    def find_by_url(self, url: str, **kwargs) -> UrlRecordModel | None:
        with self._lock:
            record_id = self._index.get(url)
            return None if record_id is None else self._records[record_id]

    def list_all(self, **kwargs) -> list[UrlRecordModel]:
        with self._lock:
            return list(self._records.values())

    def increment_and_touch(self, record_id: int, **kwargs) -> UrlRecordModel | None:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                return None
            record = replace(record, count=record.count + 1, last_access=max(record.last_access, self._now()))
            self._records[record_id] = record
            return record


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture(autouse=True)
def _env(monkeypatch: MonkeyPatch) -> None:
    # Keep guarantee_500_response in its deployed behavior and short URLs deterministic
    monkeypatch.setenv('APP_ENV', 'test')
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
    monkeypatch.delenv('APP_NAME', raising=False)
    monkeypatch.delenv('PUBLIC_BASE_URL', raising=False)
    monkeypatch.delenv('REDIRECT_PATH_PREFIX', raising=False)


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client."""
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.ping.return_value = True
    client.info.return_value = {'redis_version': '7.2.4'}
    client.exists.return_value = False
    client.hexists.return_value = False
    client.hget.return_value = None
    client.zrange.return_value = []
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    return client


@pytest.fixture
def memory_dao() -> InMemoryUrlRecordDAO:
    return InMemoryUrlRecordDAO()
