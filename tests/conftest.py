import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Must be set before app.config is imported
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.mkdtemp(), 'test.sqlite3')}",
)
os.environ["OPENAI_API_KEY"] = ""

from app.database import Base  # noqa: E402
from app.dependencies import get_report_store, get_triage_client  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.triage import AnalysisResult  # noqa: E402
from app.services.report_store import ReportStore  # noqa: E402
from app.utils.exceptions import TriageUnavailable  # noqa: E402

LIMPING_DOG = {
    "animalType": "dog",
    "condition": "injured",
    "severity": "high",
    "description": "visible limp",
    "priorityScore": 7,
}

TINY_JPEG = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAP//"


class FakeTriage:
    """In-process stand-in for TriageClient that records every call."""

    def __init__(self, analysis=None, guidance="Keep the animal warm and still.",
                 classify_error=None, guidance_error=None):
        self.analysis = analysis if analysis is not None else dict(LIMPING_DOG)
        self.guidance_text = guidance
        self.classify_error = classify_error
        self.guidance_error = guidance_error
        self.calls: list[tuple[str, str]] = []

    async def classify(self, image: str) -> AnalysisResult:
        self.calls.append(("classify", image))
        if self.classify_error is not None:
            raise self.classify_error
        return AnalysisResult.model_validate(self.analysis)

    async def guidance(self, condition: str) -> str:
        self.calls.append(("guidance", condition))
        if self.guidance_error is not None:
            raise self.guidance_error
        return self.guidance_text


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        from app.models import report, user, adoption  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory):
    return ReportStore(session_factory)


@pytest.fixture
def fake_triage():
    return FakeTriage()


@pytest.fixture
def failing_triage():
    return FakeTriage(classify_error=TriageUnavailable("Triage model timed out"))


@pytest_asyncio.fixture
async def client(store, fake_triage):
    app.dependency_overrides[get_report_store] = lambda: store
    app.dependency_overrides[get_triage_client] = lambda: fake_triage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
