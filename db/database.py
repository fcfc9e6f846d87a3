from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from env import DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # sqlite connections are shared across the threadpool used by sync routes
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables, called once from app startup."""
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
