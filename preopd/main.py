# preopd/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from preopd.api.routes import router as api_router
from preopd.config import Settings, get_settings
from preopd.db import make_engine, make_session_factory
from preopd.intake.summarizer import SummarizationService
from preopd.llm import LLMClient, OpenAILLMClient
from preopd.logging_config import configure_logging
from preopd.services import IntakeSessionService, init_db


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    llm_client: Optional[LLMClient] = None,
) -> FastAPI:
    """
    Build the app with its collaborators. Anything not passed in is built
    from settings once, here, and shared through app.state.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    engine = engine or make_engine(settings.database_url)
    llm_client = llm_client or OpenAILLMClient(settings)

    service = IntakeSessionService(
        session_factory=make_session_factory(engine),
        summarizer=SummarizationService(llm_client),
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(title="Pre-OPD Intake API", version="1.0.0", lifespan=lifespan)
    app.state.intake_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # for dev; tighten in prod
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    @app.get("/")
    def root():
        return {"message": "Pre-OPD Intake API is running"}

    app.include_router(api_router, prefix="/api")
    return app
