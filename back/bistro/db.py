import logging
from collections.abc import Iterator

from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine

from .settings import settings

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs):
    """Create an engine for the given URL (SQLite gets thread-safe connect args)."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(url, connect_args=connect_args, **kwargs)
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.database_url)


def create_db_and_tables(bind=None) -> None:
    # Import models so every table is registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def check_db_connection(bind=None) -> None:
    with (bind or engine).connect() as conn:
        conn.execute(text("SELECT 1"))


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
