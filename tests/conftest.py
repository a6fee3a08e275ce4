import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from peerlink.models import (
    ActivityLevel,
    Demographics,
    MatchingPreferences,
    UserProfile,
)
from peerlink.store import JsonDocumentStore

# Path to tests/fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixture data timestamps are relative to this instant
FIXTURE_NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> Path:
    """
    Exposes the fixtures directory in case a test needs direct file access.
    """
    return FIXTURES_DIR


@pytest.fixture
def load_text(fixtures_dir):
    """
    Fixture that returns a function: load_text("file.ext") -> str
    """
    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def load_json(load_text):
    """
    Fixture that returns a function: load_json("file.json") -> dict
    Built on load_text so there's one source of truth for file IO.
    """
    def _load(name: str) -> dict:
        return json.loads(load_text(name))
    return _load


@pytest.fixture
def now() -> datetime:
    return FIXTURE_NOW


@pytest.fixture
def store(fixtures_dir) -> JsonDocumentStore:
    """Read-only store over tests/fixtures/store."""
    return JsonDocumentStore(fixtures_dir / "store")


def make_profile(
        user_id="u-1",
        *,
        symptoms=(),
        interests=(),
        support_types=(),
        communication_style="occasional",
        experience_level=None,
        engagement_score=0.0,
        response_rate=0.0,
        journal_entries=(),
) -> UserProfile:
    return UserProfile(
        user_id=user_id,
        symptoms=list(symptoms),
        journal_entries=list(journal_entries),
        demographics=Demographics(experience_level=experience_level),
        preferences=MatchingPreferences(
            support_types=list(support_types),
            interests=list(interests),
            communication_style=communication_style,
        ),
        activity=ActivityLevel(
            last_active=FIXTURE_NOW,
            engagement_score=engagement_score,
            response_rate=response_rate,
        ),
    )


@pytest.fixture
def profile_factory():
    return make_profile
