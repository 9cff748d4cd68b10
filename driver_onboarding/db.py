# driver_onboarding/db.py
from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as SATimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings
from .errors import TemporaryFailure
from .models.base import Base

logger = logging.getLogger(__name__)

# ---------- Engine / Session ----------
DATABASE_URL = settings.DATABASE_URL


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # in-memory sqlite must share one connection between threads
        if url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                future=True,
            )
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": settings.DB_LOCK_TIMEOUT_SEC},
            pool_pre_ping=True,
            future=True,
        )
    # lock_timeout turns a stuck row lock into an OperationalError (-> TemporaryFailure)
    return create_engine(
        url,
        connect_args={"options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_SEC * 1000}"},
        pool_pre_ping=True,
        pool_timeout=settings.DB_LOCK_TIMEOUT_SEC,
        future=True,
    )


engine = _make_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def init_db() -> None:
    # register every table before create_all
    from .models import driver, document, vehicle  # noqa: F401

    Base.metadata.create_all(bind=engine)


# ---------- Dependency ----------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_unique_violation(e: IntegrityError) -> bool:
    """True when the error is a duplicate key (another writer got there first)."""
    orig = getattr(e, "orig", None)
    # postgres reports unique_violation as SQLSTATE 23505
    if getattr(orig, "sqlstate", None) == "23505" or getattr(orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def transaction(db: Session):
    """
    Commit on success, roll back on any error.
    Timeouts and lost uniqueness races surface as TemporaryFailure so the
    caller may retry. Other integrity errors and domain errors pass through.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not is_unique_violation(e):
            raise
        logger.warning("Unique constraint race: %s", e.orig)
        raise TemporaryFailure("Storage is temporarily unavailable, retry the request") from e
    except (OperationalError, SATimeoutError) as e:
        db.rollback()
        logger.exception("Database operation failed")
        raise TemporaryFailure("Storage is temporarily unavailable, retry the request") from e
    except Exception:
        db.rollback()
        raise
