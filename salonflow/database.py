from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool

from .config import settings

# Registers every table on SQLModel.metadata
from .db import models  # noqa: F401


def build_engine(db_url: str, echo: bool = False):
    """Create an engine with options matching the database scheme."""
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind=None):
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
