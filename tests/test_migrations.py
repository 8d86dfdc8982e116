"""Alembic migrations build the same schema as the ORM models."""
from __future__ import annotations

from sqlalchemy import create_engine, inspect

from insight_engine import database
from insight_engine.database import Base


def test_upgrade_creates_all_tables(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'insights.db'}"
    monkeypatch.setattr(database.settings, "database_url", url)

    database.run_migrations()

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables
