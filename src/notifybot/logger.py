"""日志模块

先调用 setup_logging 配置日志，之后各模块 `from notifybot.logger import logger` 直接写日志
存储语句用 TRACE, 收发消息与生命周期用 INFO, 失败用 ERROR 并附带 exc_info
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Literal, Union

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"

# python-telegram-bot 底层的 httpx 每次长轮询都会写一条 INFO
_NOISY_LIBRARY_LOGGERS = ("httpx", "httpcore", "telegram")


def _rotating_file(path: Path, level: str, retention: str) -> dict:
    return dict(
        sink=path,
        level=level,
        format=FILE_FORMAT,
        rotation="10 MB",
        retention=retention,
        compression="zip",
        encoding="utf-8",
    )


def setup_logging(
    log_level: Union[str, LogLevel],
    log_file: Union[str, Path],
    console_level: Union[str, LogLevel] = "INFO",
) -> None:
    """控制台 + 全量日志文件 + 仅 ERROR 以上的 <name>_error 文件"""
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    error_log_file = log_file.with_name(f"{log_file.stem}_error{log_file.suffix}")

    logger.configure(
        handlers=[
            dict(sink=sys.stderr, level=str(console_level).upper(), format=CONSOLE_FORMAT, colorize=True),
            _rotating_file(log_file, str(log_level).upper(), "30 days"),
            _rotating_file(error_log_file, "ERROR", "90 days"),
        ]
    )

    for name in _NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging", "logger"]
