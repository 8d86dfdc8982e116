"""FastAPI dependencies."""
from insight_engine.database import SessionLocal
from insight_engine.store.base import RecordStore
from insight_engine.store.sqlalchemy_store import SqlAlchemyRecordStore


def get_store() -> RecordStore:
    """Record store bound to the application database."""
    return SqlAlchemyRecordStore(SessionLocal)
