# tests/conftest.py
from __future__ import annotations

import os
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ============================================================
# 在 import shiprates.main 之前固定 DSN：测试只用内存 sqlite
# ============================================================
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from shiprates.db.base import Base, init_models  # noqa: E402
from shiprates.db.session import get_db  # noqa: E402
from shiprates.main import app  # noqa: E402

from tests.factories import make_method, make_zone  # noqa: E402


# =========================================
# 每用例独立内存库（StaticPool：所有 Session 共用同一连接）
# =========================================
@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    init_models()
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: Engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture(scope="function")
def db(session_maker) -> Generator[Session, None, None]:
    sess = session_maker()
    try:
        yield sess
    finally:
        sess.close()


# =========================================
# 最小种子：2 个 method + 3 个 zone
# =========================================
@pytest.fixture(scope="function")
def seed(db: Session) -> Dict[str, int]:
    standard = make_method(db, name="Standard", carrier="Royal Mail", display_order=1, days=(3, 5))
    express = make_method(db, name="Express", carrier="DPD", display_order=2, days=(1, 2))
    uk = make_zone(db, name="UK", countries=["GB"])
    eu = make_zone(db, name="EU", countries=["FR", "DE"])
    us = make_zone(db, name="US", countries=["US"])
    db.commit()
    return {
        "standard": int(standard.id),
        "express": int(express.id),
        "uk": int(uk.id),
        "eu": int(eu.id),
        "us": int(us.id),
    }


@pytest.fixture(scope="function")
def client(session_maker, seed) -> Generator[TestClient, None, None]:
    def _override_get_db() -> Generator[Session, None, None]:
        sess = session_maker()
        try:
            yield sess
        finally:
            sess.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)
