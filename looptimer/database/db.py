"""Database connection, session management and key-value access."""

from contextlib import contextmanager

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker, Session as OrmSession
from sqlalchemy.pool import StaticPool

from ..settings import APP_SUPPORT_DIR
from .models import Base, StoredValue

# ── paths ────────────────────────────────────────────────────────────────────

DB_PATH = APP_SUPPORT_DIR / "looptimer.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _create(url: str):
    kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
    if ":memory:" in url:
        # One shared connection, so worker threads see the same database.
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _create(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database instead of the real one on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    if _engine is not None:
        _engine.dispose()
    _engine = _create(url)


def init_db() -> None:
    """Create all tables."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_item(key: str) -> str | None:
    """Return the stored text for *key*, or ``None`` if absent."""
    with get_session() as db:
        return db.scalar(select(StoredValue.value).where(StoredValue.key == key))


def set_item(key: str, value: str) -> None:
    with get_session() as db:
        record = db.get(StoredValue, key)
        if record is None:
            db.add(StoredValue(key=key, value=value))
        else:
            record.value = value


def remove_item(key: str) -> None:
    with get_session() as db:
        record = db.get(StoredValue, key)
        if record is not None:
            db.delete(record)
