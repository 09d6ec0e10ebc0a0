from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, List

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_catalog, get_runner, get_store
from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.clients.store import SubmissionStore
from app.main import app
from app.schemas.contest import Contest
from app.schemas.problem import Problem
from app.schemas.user import UserContext

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_contest(contest_id: str, title: str, start: timedelta, end: timedelta, created: timedelta,
                 type: str = "individual", difficulties: List[str] = (), participants=None) -> Contest:
    return Contest(
        id=contest_id,
        title=title,
        start_time=NOW + start,
        end_time=NOW + end,
        created_at=NOW + created,
        type=type,
        problems=[{"_id": f"{contest_id}-p{i}", "title": f"P{i}", "difficulty": d}
                  for i, d in enumerate(difficulties)],
        participant_count=participants,
    )


@pytest.fixture
def user() -> UserContext:
    return UserContext(email="test@example.com", display_name="Test User")


@pytest.fixture
def problem() -> Problem:
    return Problem.model_validate({
        "_id": "sum-two",
        "title": "Sum Two",
        "description": "Print a + b.",
        "difficulty": "Easy",
        "category": "Math",
        "languages": ["javascript", "python"],
        "starterCode": {"python": "a, b = map(int, input().split())\n"},
        "testCases": [
            {"input": "2 3", "expectedOutput": "5"},
            {"input": "10 20", "expectedOutput": "30"},
        ],
    })


@pytest.fixture
def contests() -> List[Contest]:
    h = timedelta(hours=1)
    return [
        make_contest("c1", "Weekly Sprint", -2 * h, 1 * h, -10 * h, difficulties=["easy", "medium"], participants=4),
        make_contest("c2", "Team Marathon", 1 * h, 2 * h, -1 * h, type="team", difficulties=["hard"]),
        make_contest("c3", "Archive Round", -5 * h, -3 * h, -20 * h, difficulties=["easy"], participants=12),
        make_contest("c4", "Sprint Finals", 3 * h, 4 * h, -5 * h, type="team", participants=7),
    ]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def contest_factory():
    return make_contest


@pytest.fixture
def mock_http():
    """Builds an httpx client whose requests are answered by ``handler``."""
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def runner(mocker) -> RunnerClient:
    return mocker.AsyncMock(spec=RunnerClient)


@pytest.fixture
def store(mocker) -> SubmissionStore:
    return mocker.AsyncMock(spec=SubmissionStore)


@pytest.fixture
def catalog(mocker) -> CatalogClient:
    return mocker.AsyncMock(spec=CatalogClient)


@pytest.fixture
async def client(runner, store, catalog) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_runner] = lambda: runner
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: catalog
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
