import logging
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.config import settings

log = logging.getLogger("inventory.db")
log.setLevel(settings.LOG_LEVEL.upper())
if not log.handlers:
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("[DB] %(levelname)s %(message)s"))
    log.addHandler(h)
    log.propagate = False


def _connect_args(url: str) -> dict:
    # sqlite connections are handed across FastAPI's threadpool workers
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


DATABASE_URL = settings.DATABASE_URL
engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=settings.SQL_ECHO,
    connect_args=_connect_args(DATABASE_URL),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(reset: bool = False, bind=None):
    """
    Initialize DB schema.

    Behavior:
      - If `reset` is true (or RESET_DB is set in settings), drop & recreate the products table.
      - Otherwise, leave existing tables in place and create any that are missing.

    The model module is imported here so metadata is populated before create_all.
    """
    import app.models.product  # noqa: F401

    bind = bind or engine
    if reset or settings.RESET_DB:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=bind)

    Base.metadata.create_all(bind=bind)
    log.debug("Database initialized (%s)", bind.url)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
