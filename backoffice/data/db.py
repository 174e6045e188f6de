"""Engine and session factories for the billing database."""

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from backoffice.adapters.outbound.sqlalchemy_models import Base

BACKOFFICE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_URL = "sqlite:///" + os.path.join(BACKOFFICE_DIR, "data", "billing.db")

_SQLITE_PREFIX = "sqlite:///"


def resolve_database_url(url: str | None = None) -> str:
    """Pick *url*, then $DATABASE_URL, then the bundled SQLite file.

    Relative SQLite paths are anchored at the backoffice directory so the
    same config works whatever the working directory; the parent folder is
    created on the way. In-memory URLs pass through untouched.
    """
    url = url or os.environ.get("DATABASE_URL") or DEFAULT_URL
    if not url.startswith(_SQLITE_PREFIX):
        return url
    path = url[len(_SQLITE_PREFIX):]
    if path in ("", ":memory:") or os.path.isabs(path):
        return url
    path = os.path.join(BACKOFFICE_DIR, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return _SQLITE_PREFIX + path


def get_engine(url: str | None = None):
    return create_engine(resolve_database_url(url), echo=False)


def init_db(engine=None):
    """Create any missing tables and return the engine."""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    return engine


def get_session(engine=None) -> Session:
    factory = sessionmaker(bind=engine or get_engine())
    return factory()
