import json
from functools import partial

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from showcase.core import config


Base = declarative_base()


def build_engine(database_url: str | None = None) -> Engine:
    url = database_url or config.DATABASE_URL
    # JSON columns keep non-ASCII text as-is so searches over them match.
    options: dict = {
        "echo": config.DATABASE_ECHO,
        "json_serializer": partial(json.dumps, ensure_ascii=False),
    }

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        # In-memory databases live and die with their connection.
        if url in {"sqlite://", "sqlite:///:memory:"}:
            options["poolclass"] = StaticPool

    return create_engine(url, **options)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def create_schema(engine: Engine) -> None:
    from showcase.models import project, user  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
