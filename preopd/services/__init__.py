# preopd/services/__init__.py
from .intake_session import IntakeSessionService, db_session, init_db

__all__ = ["IntakeSessionService", "db_session", "init_db"]
