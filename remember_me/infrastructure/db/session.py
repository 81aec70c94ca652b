# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from remember_me.shared.config import DatabaseConfig, load_config
from remember_me.shared.logging import logger


class Base(DeclarativeBase):
    pass


def build_engine(config: DatabaseConfig) -> Engine:
    if config.url.startswith("sqlite"):
        # SQLite gets its own pool class; the sizing options do not apply.
        return create_engine(
            config.url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": int(config.pool_timeout)},
        )
    return create_engine(
        config.url,
        echo=False,
        pool_pre_ping=True,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
    )


ENGINE: Engine = build_engine(load_config().database)

SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception:
        logger.exception("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db() -> None:
    # Register mapped classes before creating tables.
    from remember_me.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema ensured")
