"""
Shared pytest fixtures: in-memory SQLite, a scripted LLM client, the
intake service, and a TestClient over the full app.
"""
from typing import Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from preopd.config import Settings
from preopd.db import make_session_factory
from preopd.intake.summarizer import SummarizationService
from preopd.llm import LLMClient
from preopd.main import create_app
from preopd.services import IntakeSessionService, init_db


class FakeLLMClient(LLMClient):
    """Returns a canned reply and records every request."""

    def __init__(self, reply: str = "**Summary**\n- Stable patient"):
        self.reply = reply
        self.error: Optional[Exception] = None
        self.on_call: Optional[Callable[[], None]] = None
        self.calls: List[List[Dict[str, str]]] = []

    def chat(self, messages, temperature=0.2, model=None):
        self.calls.append(messages)
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return self.reply

    @property
    def last_user_content(self) -> str:
        return self.calls[-1][1]["content"]


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", RECORDED_BY="Nurse Station 3")


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def service(engine, llm, settings):
    return IntakeSessionService(
        session_factory=make_session_factory(engine),
        summarizer=SummarizationService(llm),
        settings=settings,
    )


@pytest.fixture
def patient(service):
    return service.register_patient(
        uhid="UHID-0001",
        full_name="Asha Verma",
        age=54,
        gender="Female",
        chronic_conditions=["Hypertension"],
    )


@pytest.fixture
def client(settings, engine, llm):
    app = create_app(settings=settings, engine=engine, llm_client=llm)
    with TestClient(app) as test_client:
        yield test_client
