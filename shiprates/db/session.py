# shiprates/db/session.py
# 同步会话工厂 + FastAPI 依赖（get_db）
from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shiprates.core.config import get_settings


def _normalize_dsn(url: str) -> str:
    url = (url or "").strip()
    # 有些环境会把值写成 '"postgresql://..."'，统一剥掉两侧引号
    if len(url) >= 2 and url[0] == url[-1] and url[0] in ("'", '"'):
        url = url[1:-1].strip()
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str, *, echo: bool = False) -> Engine:
    dsn = _normalize_dsn(url)
    is_sqlite = dsn.startswith("sqlite")
    return create_engine(
        dsn,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=True,
        future=True,
    )


_settings = get_settings()

engine = build_engine(_settings.DATABASE_URL, echo=_settings.SQL_ECHO)
SessionLocal: sessionmaker[Session] = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    class_=Session,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yield a Session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
