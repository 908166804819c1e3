from collections.abc import Iterator
from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import SQLITE_FILE, Settings

Base = declarative_base()


def make_engine(settings: Settings) -> Engine:
    # Dev: SQLite (zero config), Prod: PostgreSQL
    if settings.is_prod:
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL must be set in production")
        return create_engine(
            settings.database_url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
        )

    database_url = settings.database_url or f"sqlite:///{Path.cwd() / SQLITE_FILE}"
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # needed for SQLite + FastAPI
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
