"""Pytest configuration and fixtures for chapter-api tests."""

import fnmatch
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from chapter_api.app import create_app
from chapter_api.common.cache.client import CacheManager
from chapter_api.common.config.settings import Settings
from chapter_api.common.database.connection import DatabaseManager
from chapter_api.common.dependencies import get_chapter_repository
from chapter_api.features.chapters.models.domain import Chapter, ChapterFields, ChapterStatus

ADMIN_TOKEN = "test-admin-token"


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` with decoded responses."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.store[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: Optional[str] = None):
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def incrby(self, key: str, amount: int = 1) -> int:
        value = int(self.store.get(key, "0")) + amount
        self.store[key] = str(value)
        return value

    async def expire(self, key: str, ttl: int) -> bool:
        if key not in self.store:
            return False
        self.ttls[key] = ttl
        return True

    async def aclose(self) -> None:
        self.closed = True


class FailingRedis:
    """A Redis client whose server has gone away."""

    def __init__(self):
        self.closed = False

    async def _fail(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    ping = get = set = setex = delete = incrby = expire = _fail

    async def scan_iter(self, match: Optional[str] = None):
        raise RedisConnectionError("Connection refused")
        yield  # pragma: no cover

    async def aclose(self) -> None:
        self.closed = True


class InMemoryChapterRepository:
    """Dict-backed chapter repository with the same contract as ``ChapterRepository``."""

    def __init__(self):
        self.chapters: Dict[str, Chapter] = {}
        self.find_calls = 0
        self.get_calls = 0
        self.aggregate_calls = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _build(self, chapter_id: str, data: ChapterFields, created_at: datetime) -> Chapter:
        return Chapter(
            id=chapter_id,
            subject=data.subject,
            chapter=data.chapter,
            class_name=data.class_name,
            unit=data.unit,
            year_wise_question_count=data.year_wise_question_count,
            question_solved=data.question_solved,
            status=data.status,
            is_weak_chapter=data.is_weak_chapter,
            created_at=created_at,
            updated_at=self._tick(),
        )

    def _matching(self, filters: Optional[Dict[str, Any]]) -> List[Chapter]:
        filters = filters or {}
        return [
            chapter for chapter in self.chapters.values()
            if all(getattr(chapter, column) == value for column, value in filters.items())
        ]

    async def ensure_schema(self) -> None:
        return None

    async def find(self, filters=None, limit: int = 10, offset: int = 0) -> List[Chapter]:
        self.find_calls += 1
        ordered = sorted(
            self._matching(filters),
            key=lambda chapter: (chapter.created_at, chapter.id),
            reverse=True,
        )
        return ordered[offset:offset + limit]

    async def count(self, filters=None) -> int:
        return len(self._matching(filters))

    async def get_by_id(self, chapter_id: str) -> Optional[Chapter]:
        self.get_calls += 1
        return self.chapters.get(chapter_id)

    async def create(self, data: ChapterFields) -> Chapter:
        chapter = self._build(str(uuid4()), data, self._tick())
        self.chapters[chapter.id] = chapter
        return chapter

    async def update(self, chapter_id: str, data: ChapterFields) -> Optional[Chapter]:
        existing = self.chapters.get(chapter_id)
        if existing is None:
            return None
        chapter = self._build(chapter_id, data, existing.created_at)
        self.chapters[chapter_id] = chapter
        return chapter

    async def delete(self, chapter_id: str) -> bool:
        return self.chapters.pop(chapter_id, None) is not None

    async def delete_all(self) -> int:
        removed = len(self.chapters)
        self.chapters.clear()
        return removed

    async def get_status_counts(self) -> Dict[str, int]:
        self.aggregate_calls += 1
        chapters = list(self.chapters.values())
        return {
            "total": len(chapters),
            "completed": sum(1 for c in chapters if c.status == ChapterStatus.COMPLETED.value),
            "in_progress": sum(1 for c in chapters if c.status == ChapterStatus.IN_PROGRESS.value),
            "not_started": sum(1 for c in chapters if c.status == ChapterStatus.NOT_STARTED.value),
            "weak": sum(1 for c in chapters if c.is_weak_chapter),
        }

    async def get_subject_distribution(self) -> List[Dict[str, Any]]:
        rows = []
        for subject in sorted({c.subject for c in self.chapters.values()}):
            chapters = [c for c in self.chapters.values() if c.subject == subject]
            rows.append({
                "subject": subject,
                "count": len(chapters),
                "completed": sum(1 for c in chapters if c.status == ChapterStatus.COMPLETED.value),
                "weak_chapters": sum(1 for c in chapters if c.is_weak_chapter),
            })
        return rows

    async def get_distinct_values(self, column: str) -> List[Any]:
        self.aggregate_calls += 1
        return sorted({getattr(c, column) for c in self.chapters.values()})


@pytest.fixture
def settings():
    """Settings for tests: no external services, rate limiting off."""
    return Settings(
        environment="testing",
        redis_url=None,
        admin_secret_key=ADMIN_TOKEN,
        rate_limit_enabled=False,
        db_auto_migrate=False,
    )


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(settings, fake_redis):
    """CacheManager backed by the in-memory Redis."""
    return CacheManager(settings, client=fake_redis)


@pytest.fixture
def repository():
    return InMemoryChapterRepository()


@pytest.fixture
def mock_database():
    """Database manager that never opens a connection."""
    database = AsyncMock(spec=DatabaseManager)
    database.health_check.return_value = True
    return database


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def chapter_payload():
    """Factory for valid wire-format chapter payloads."""

    def make(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "subject": "Physics",
            "chapter": "Kinematics",
            "class": "Class 11",
            "unit": "Mechanics 1",
            "yearWiseQuestionCount": {"2019": 4, "2020": 6},
            "questionSolved": 5,
            "status": "In Progress",
            "isWeakChapter": False,
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def make_app(mock_database, repository):
    """Build an application wired to in-memory collaborators."""

    def make(settings: Settings, cache: CacheManager):
        app = create_app(settings, database=mock_database, cache=cache)
        app.dependency_overrides[get_chapter_repository] = lambda: repository
        return app

    return make


@pytest.fixture
def client(make_app, settings, cache):
    """Test client for the application, with lifespan events."""
    app = make_app(settings, cache)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def failing_cache(settings):
    """CacheManager whose Redis connection is broken."""
    return CacheManager(settings, client=FailingRedis())
