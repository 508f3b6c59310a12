"""Pytest configuration and fixtures."""
import os

# Settings are read at import time; tests never talk to a real server.
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


@pytest.fixture
def make_game():
    """Factory for GameRecord objects, one day apart by default."""
    from app.models.game import GameRecord

    start = datetime(2025, 1, 1, 18, 0)

    def _make_game(total_score=150, strikes=0, spares=0, index=0, created_at=None):
        return GameRecord(
            _id=f"game{index}",
            total_score=total_score,
            strikes=strikes,
            spares=spares,
            is_complete=True,
            created_at=created_at or start + timedelta(days=index),
        )

    return _make_game


@pytest.fixture
def make_games(make_game):
    """Factory building an oldest-first history from a list of scores."""

    def _make_games(scores, strikes=0, spares=0):
        return [
            make_game(total_score=score, strikes=strikes, spares=spares, index=i)
            for i, score in enumerate(scores)
        ]

    return _make_games


@pytest.fixture
def make_goal():
    """Factory for stored Goal objects."""
    from app.models.goal import Goal

    counter = {"n": 0}

    def _make_goal(**overrides):
        counter["n"] += 1
        fields = {
            "id": f"goal{counter['n']}",
            "title": "Break 200",
            "description": "",
            "type": "score",
            "target": 200,
            "deadline": date(2030, 1, 1),
            "created_at": datetime(2025, 1, 1),
        }
        fields.update(overrides)
        return Goal(**fields)

    return _make_goal


@pytest.fixture
def mock_goal_service():
    """A GoalService stand-in with async methods."""
    service = MagicMock()
    service.list_goals = AsyncMock()
    service.get_stats = AsyncMock()
    service.get_goal = AsyncMock()
    service.create_goal = AsyncMock()
    service.update_goal = AsyncMock()
    service.delete_goal = AsyncMock()
    service.recompute = AsyncMock()
    return service


@pytest.fixture
def auth_headers():
    """Bearer headers for a test bowler."""
    from app.utils.auth import create_access_token

    token = create_access_token(user_id="bowler1")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def app_client(mock_goal_service):
    """
    Create a test client with the goal service replaced by a mock.

    This fixture:
    - Overrides the GoalService dependency
    - Yields an async HTTP client for testing
    - Clears the overrides afterwards
    """
    from app.main import app
    from app.routers.goals import get_goal_service

    app.dependency_overrides[get_goal_service] = lambda: mock_goal_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
