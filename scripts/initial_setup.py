"""Create the database schema and load default rules and exercises."""
from pathlib import Path

from insight_engine.config import get_settings
from insight_engine.database import SessionLocal, run_migrations
from insight_engine.logging_config import configure_logging
from insight_engine.services.reference_data import seed_reference_data
from insight_engine.store.sqlalchemy_store import SqlAlchemyRecordStore


def main() -> None:
    configure_logging()
    settings = get_settings()
    data_dir = Path("data")
    data_dir.mkdir(exist_ok=True)
    run_migrations()
    summary = seed_reference_data(SqlAlchemyRecordStore(SessionLocal), settings.reference_data_path)
    print("Database initialised at", settings.database_url)
    print("Reference data:", summary)


if __name__ == "__main__":
    main()
