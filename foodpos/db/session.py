"""
db/session.py – Engine factory + Session helper.

One Engine is cached per database URL.
db_session() is a contextmanager that commits, rolls back and closes.

SQLite: pysqlite's implicit BEGIN is disabled and every transaction starts
with BEGIN IMMEDIATE, so the write lock is taken before the first read.
Code generation (read max → insert) is serialized across processes this way.
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


# ── Engine cache (1 engine / URL) ─────────────────────────────────────────────

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def get_engine(url: str) -> Engine:
    if url not in _engines:
        if _is_sqlite(url):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False, "timeout": 30},
                echo=False,
            )

            @event.listens_for(engine, "connect")
            def set_pragmas(conn, _):
                conn.isolation_level = None
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
                conn.execute("PRAGMA foreign_keys=ON")

            @event.listens_for(engine, "begin")
            def begin_immediate(conn):
                conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            engine = create_engine(url, pool_pre_ping=True, echo=False)

        _engines[url] = engine
        _session_factories[url] = sessionmaker(bind=engine, expire_on_commit=False)
    return _engines[url]


def get_session_factory(url: str) -> sessionmaker:
    get_engine(url)
    return _session_factories[url]


def init_db(url: str) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(get_engine(url))


@contextmanager
def db_session(url: str) -> Generator[Session, None, None]:
    """Context manager yielding a Session; commit on success, rollback on error."""
    factory = get_session_factory(url)
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
