"""Shared fixtures and fakes for the Contact Form API test-suite."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from contact_api.config.settings import Settings
from contact_api.core.errors import StoreError, UploadError
from contact_api.core.pipeline import ContactPipeline
from contact_api.core.submission_store import SubmissionStore
from contact_api.models.base import Base
from contact_api.models.dtos import SubmissionDTO

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_BUCKET = "test-bucket"
TEST_REGION = "eu-west-1"


class FakeTelemetry:
    """Records telemetry calls in memory instead of sending them anywhere."""

    def __init__(self):
        self.requests: List[Tuple[str, float]] = []
        self.errors: List[str] = []

    def record_request(self, endpoint: str, duration_ms: float) -> None:
        self.requests.append((endpoint, duration_ms))

    def record_error(self, error_type: str) -> None:
        self.errors.append(error_type)

    async def drain(self) -> None:
        return None


class FakeObjectStore:
    """In-memory object store; set ``fail_with`` to make uploads fail."""

    def __init__(self, events: Optional[list] = None, bucket: str = TEST_BUCKET, region: str = TEST_REGION):
        self.bucket = bucket
        self.region = region
        self.objects: dict = {}
        self.events = events if events is not None else []
        self.fail_with: Optional[str] = None

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        self.events.append(("upload", key))
        if self.fail_with:
            raise UploadError(self.fail_with)
        self.objects[key] = (data, content_type)
        return self.public_url(key)


class FakeStore:
    """In-memory submission store; set ``fail_with`` to make every call fail."""

    def __init__(self, events: Optional[list] = None):
        self.rows: List[SubmissionDTO] = []
        self.events = events if events is not None else []
        self.fail_with: Optional[str] = None

    async def insert(self, name, email, message, image_url=None) -> int:
        self.events.append(("insert", image_url))
        if self.fail_with:
            raise StoreError(self.fail_with)
        row = SubmissionDTO(
            id=len(self.rows) + 1,
            name=name,
            email=email,
            message=message,
            image_url=image_url,
            created_at=datetime.now(timezone.utc),
        )
        self.rows.append(row)
        return row.id

    async def list_all(self) -> List[SubmissionDTO]:
        self.events.append(("list_all", None))
        if self.fail_with:
            raise StoreError(self.fail_with)
        return sorted(self.rows, key=lambda r: (r.created_at, r.id), reverse=True)


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        AWS_S3_BUCKET=TEST_BUCKET,
        AWS_REGION=TEST_REGION,
        METRICS_ENABLED=False,
        DATABASE_URL=TEST_DATABASE_URL,
    )


@pytest.fixture
def events() -> list:
    """Ordered log of calls made to the fake collaborators."""
    return []


@pytest.fixture
def telemetry() -> FakeTelemetry:
    return FakeTelemetry()


@pytest.fixture
def object_store(events) -> FakeObjectStore:
    return FakeObjectStore(events)


@pytest.fixture
def fake_store(events) -> FakeStore:
    return FakeStore(events)


@pytest.fixture
def pipeline(fake_store, object_store, telemetry) -> ContactPipeline:
    """Pipeline wired to in-memory fakes."""
    return ContactPipeline(store=fake_store, object_store=object_store, telemetry=telemetry)


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the submissions table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def store(session_factory) -> SubmissionStore:
    """SubmissionStore backed by the in-memory SQLite database."""
    return SubmissionStore(session_factory)
