# madking/database.py
import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Default to a SQLite file at the project root (the directory holding madking/).
BASE_DIR = Path(__file__).resolve().parents[1]
DB_PATH = BASE_DIR / "madking.db"

DATABASE_URL = os.environ.get("MADKING_DATABASE_URL", f"sqlite:///{DB_PATH}")

# check_same_thread lets FastAPI's threadpool share the SQLite connection.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
