import os

os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite://")
os.environ.setdefault("LEDGER_LOG_JSON", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app import models  # noqa: F401

@pytest.fixture
def engine():
    engine = create_engine("sqlite://", future=True, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

@pytest.fixture
def db(session_factory):
    db = session_factory()
    yield db
    db.close()
