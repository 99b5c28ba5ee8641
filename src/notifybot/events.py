"""事件总线模块，定义了事件总线类 Bus 及事件名集合 E

事件只用于旁路观察 (日志、指标)，主流程不依赖任何处理器的执行结果
"""

from __future__ import annotations
from pyee.asyncio import AsyncIOEventEmitter
from typing import Callable

from notifybot.logger import logger

Handler = Callable[..., object]

# 事件名集中定义
class E:
    MESSAGE_RECEIVED = "message.received"
    TASK_CREATED = "task.created"
    TASK_SENT = "task.sent"
    TASK_SEND_FAILED = "task.send_failed"


class Bus(AsyncIOEventEmitter):
    def on(self, event: str) -> Callable[[Handler], Handler]:
        """注册事件处理器装饰器"""
        def decorator(handler: Handler) -> Handler:
            logger.debug(f"注册事件处理器: {event} -> {handler.__name__}")
            super(Bus, self).on(event, handler)
            return handler

        return decorator


bus = Bus()

__all__ = ["bus", "E", "Bus"]
