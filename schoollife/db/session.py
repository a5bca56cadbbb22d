from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from schoollife.core.config import settings
from schoollife.db.base import Base
from schoollife.models.shared_value import SharedValue  # noqa: F401  registers the table


def make_engine(url: str):
    # both processes open the same SQLite file; the API also hops threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind=None) -> None:
    Base.metadata.create_all(bind=bind or engine)
