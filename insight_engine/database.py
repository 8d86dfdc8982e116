"""Database session and base model setup."""
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from insight_engine.config import get_settings


def build_engine(database_url: str, timeout_seconds: float, echo: bool = False) -> Engine:
    """Create an engine whose connections give up after ``timeout_seconds``."""

    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"timeout": timeout_seconds, "check_same_thread": False}}
        if ":memory:" in database_url or database_url in {"sqlite://", "sqlite+pysqlite://"}:
            # A single shared connection keeps an in-memory database alive across sessions.
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {"pool_timeout": timeout_seconds, "pool_pre_ping": True}
    return create_engine(database_url, echo=echo, future=True, **kwargs)


settings = get_settings()
engine = build_engine(settings.database_url, settings.store_timeout_seconds, echo=settings.debug)


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite."""
    if type(dbapi_conn).__module__.split(".")[0] not in {"sqlite3", "pysqlite2"}:
        return
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _alembic_config() -> Config:
    """Return a configured Alembic Config instance."""

    root = Path(__file__).resolve().parent.parent
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "migrations"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def run_migrations(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the specified revision."""

    cfg = _alembic_config()
    command.upgrade(cfg, target_revision)
