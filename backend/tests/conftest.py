import json
from datetime import date, datetime, timedelta, timezone

import pytest

from travel_planner.core.config import Settings
from travel_planner.llm.client import LLMClient
from travel_planner.models.schemas import PlanRequestSchema
from travel_planner.services.planning_service import PlanningService
from travel_planner.storage.repository import InMemoryRepository

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeBackend:
    """Returns canned replies in order and records every prompt it was sent."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FailingRepository(InMemoryRepository):
    def save_plan(self, plan):
        raise OSError("disk full")


def model_reply(day_count: int, start: date = date(2025, 3, 1), **extra) -> str:
    days = [
        {
            "dayNumber": i + 1,
            "date": (start + timedelta(days=i)).isoformat(),
            "theme": f"Day {i + 1}",
            "activities": [
                {"time": "9:00 AM", "name": "Old town walk", "description": "Stroll the centre."},
                {"time": "2:00 PM", "name": "Museum", "description": "Main collection.", "cost": 15},
            ],
            "restaurants": [{"name": "Cafe Central", "time": "Lunch", "priceRange": "$$"}],
            "hiddenGems": ["Rooftop garden"],
            "tip": "Go early",
            "estimatedDailyCost": "$120",
        }
        for i in range(day_count)
    ]
    reply = {
        "displayName": "Lisbon",
        "countryCode": "pt",
        "days": days,
        "highlights": ["Belém", "Alfama"],
        "localTips": ["Buy a Viva Viagem card"],
        "totalEstimatedCost": "$900",
    }
    reply.update(extra)
    return json.dumps(reply)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, llm_provider="mock", storage_backend="memory")


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def fixed_request() -> PlanRequestSchema:
    return PlanRequestSchema(
        destination="Lisbon",
        start_date="2025-03-01",
        end_date="2025-03-04",
        budget="Moderate",
    )


@pytest.fixture
def make_service(repository, settings):
    def _make(*replies, repo=None, clock=lambda: NOW):
        backend = FakeBackend(*replies)
        service = PlanningService(
            repository=repo or repository,
            llm_client=LLMClient(backend=backend),
            settings=settings,
            clock=clock,
        )
        service.backend = backend
        return service

    return _make
