"""
Shared fixtures: an isolated in-memory database, a key-value store on top of
it, and scripted stand-ins for the tutor service.
"""
from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
BACKEND = ROOT / "backend"
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

# Keep the real environment out of the tests
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("OPENROUTER_API_KEY", None)

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from lingua_tutor.db import Base  # noqa: E402
from lingua_tutor.llm_client import TutorServiceError  # noqa: E402
from lingua_tutor.settings import settings  # noqa: E402
from lingua_tutor.store import KeyValueStore  # noqa: E402


@pytest.fixture(autouse=True)
def no_configured_key(monkeypatch):
    """Tests decide themselves whether the tutor service is configured."""
    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "openrouter_api_key", None)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db) -> KeyValueStore:
    return KeyValueStore(db)


class ScriptedTutor:
    """Tutor service double that replays canned replies and records calls."""

    def __init__(self, replies: Sequence[str | Exception]) -> None:
        self.replies: List[str | Exception] = list(replies)
        self.calls: List[Dict[str, object]] = []
        self.closed = False

    async def complete(self, system_prompt: str, prior_turns, user_turn: str) -> str:
        self.calls.append({"system": system_prompt, "prior": list(prior_turns), "user": user_turn})
        if not self.replies:
            raise TutorServiceError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_tutor():
    return ScriptedTutor
