import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from office_hours.core import config


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./office_hours.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def init_db(bind=None) -> None:
    # Model modules register their tables on Base when imported.
    from office_hours.models import document, principal  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
