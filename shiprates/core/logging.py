# shiprates/core/logging.py
from __future__ import annotations

import logging
import sys

import structlog
from structlog.processors import JSONRenderer, TimeStamper

_PLAIN_FMT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# 标准 logging 记录进入 structlog 渲染前的字段补齐
_PRE_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    TimeStamper(fmt="iso", utc=True, key="ts"),
]


def build_formatter(json: bool = False) -> logging.Formatter:
    """
    json=True：structlog ProcessorFormatter + JSONRenderer，一行一个对象
      字段：event / logger / level / ts（+ exception）
    json=False：普通文本行
    """
    if not json:
        return logging.Formatter(_PLAIN_FMT)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            JSONRenderer(ensure_ascii=False),
        ],
    )


def setup_logging(level: str = "INFO", json: bool = False) -> None:
    """
    进程级日志初始化（main 启动时调用一次）：
    - 根 logger 只保留一个 stdout handler
    - json 渲染交给 structlog（只作 formatter，代码里仍用标准 logging）
    - sqlalchemy.engine 仅在 DEBUG 时打开
    """
    lvl = (level or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(lvl)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json))
    root.addHandler(handler)

    logging.getLogger("shiprates").setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if lvl == "DEBUG" else logging.WARNING)
