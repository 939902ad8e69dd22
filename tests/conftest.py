"""Shared fixtures: in-memory Redis and queue doubles and a wired uploader."""
import itertools
import re
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from photo_uploader.config.config import Settings
from photo_uploader.uploader import create_persistence_worker, create_photo_uploader


def _glob_to_regex(pattern: str) -> re.Pattern:
    out = []
    chars = iter(pattern)
    for c in chars:
        if c == "\\":
            out.append(re.escape(next(chars, "\\")))
        elif c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        else:
            out.append(re.escape(c))
    return re.compile("^" + "".join(out) + "$")


class FakeRedis:
    """The subset of ``redis.asyncio.Redis`` the uploader uses."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = False
        self.on_get = None
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("Connection refused")

    async def set(self, name, value, ex=None):
        self._check()
        self.store[name] = value
        if ex is not None:
            self.ttls[name] = ex
        return True

    async def get(self, name):
        self._check()
        if self.on_get is not None:
            self.on_get(name)
        return self.store.get(name)

    async def delete(self, *names):
        self._check()
        removed = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed

    async def scan_iter(self, match=None):
        self._check()
        regex = _glob_to_regex(match or "*")
        for key in list(self.store):
            if regex.match(key):
                yield key

    async def aclose(self):
        self.closed = True

    def keys_matching(self, pattern: str) -> list[str]:
        regex = _glob_to_regex(pattern)
        return [k for k in self.store if regex.match(k)]


class FakeQueue:
    """Records ``bullmq.Queue.add`` calls instead of writing them to Redis."""

    def __init__(self, name="test_uploads"):
        self.name = name
        self.jobs: list[dict] = []
        self.fail = False
        self.closed = False
        self._ids = itertools.count(1)

    async def add(self, name, data, opts=None):
        if self.fail:
            raise RedisConnectionError("Connection refused")
        job = SimpleNamespace(id=str(next(self._ids)), name=name, data=data, opts=opts or {}, attemptsMade=0)
        self.jobs.append({"name": name, "data": data, "opts": opts or {}})
        return job

    async def close(self):
        self.closed = True


def _make_job(data, attempts=1, job_id="1"):
    return SimpleNamespace(id=job_id, name="upload_photo", data=data, opts={"attempts": attempts}, attemptsMade=0)


async def _run_job(worker, job):
    """Drive a job through the worker the way bullmq does, retries included."""
    attempts = job.opts.get("attempts", 1)
    while job.attemptsMade < attempts:
        try:
            result = await worker.upload_photo(job, "token")
        except Exception as e:
            job.attemptsMade += 1
            worker._on_failed(job, e)
        else:
            job.attemptsMade += 1
            worker._on_completed(job, result)
            return result
    return None


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_queue():
    return FakeQueue()


@pytest.fixture
def settings():
    return Settings(
        STORAGE_ENDPOINT="http://localhost:9000",
        STORAGE_BUCKET_NAME="test-bucket",
        QUEUE_NAME="test_uploads",
        START_WORKER=False,
    )


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def uploader(settings, fake_redis, fake_queue, logger):
    return create_photo_uploader(settings, redis_client=fake_redis, queue=fake_queue, logger=logger)


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.write = MagicMock(return_value={"success": True})
    return storage


@pytest.fixture
def persistence_worker(settings, mock_storage, logger):
    return create_persistence_worker(settings, storage=mock_storage, logger=logger)


@pytest.fixture
def make_job():
    return _make_job


@pytest.fixture
def run_job():
    return _run_job


@pytest.fixture
def queued_jobs(fake_queue):
    """Jobs added to the test queue, oldest first."""
    def _jobs():
        return list(fake_queue.jobs)
    return _jobs
