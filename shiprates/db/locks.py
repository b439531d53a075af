# shiprates/db/locks.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

PairKey = Tuple[int, int]

_registry_guard = threading.Lock()
_local_locks: Dict[str, threading.Lock] = {}


def pair_lock_key(method_id: int, zone_id: int) -> str:
    return f"shipping_rates:{int(method_id)}:{int(zone_id)}"


def _local_lock(key: str) -> threading.Lock:
    with _registry_guard:
        lk = _local_locks.get(key)
        if lk is None:
            lk = threading.Lock()
            _local_locks[key] = lk
        return lk


@contextmanager
def rate_pair_locks(db: Session, pairs: Iterable[PairKey]) -> Iterator[None]:
    """
    事务级并发护栏：同一 (method, zone) 的 validate-then-insert 串行化。

    - PostgreSQL：pg_advisory_xact_lock(hashtext(key))，随事务结束自动释放
    - 其它后端（sqlite dev/test）：进程内 keyed lock，退出上下文时释放
      调用方必须在上下文内完成 commit / rollback。
    - key 排序后依次加锁，避免交叉死锁
    """
    keys: List[str] = sorted({pair_lock_key(m, z) for m, z in pairs})

    if db.get_bind().dialect.name == "postgresql":
        for k in keys:
            db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:k))"), {"k": k})
        yield
        return

    held: List[threading.Lock] = []
    try:
        for k in keys:
            lk = _local_lock(k)
            lk.acquire()
            held.append(lk)
        yield
    finally:
        for lk in reversed(held):
            lk.release()
