"""
一个简单的运行时指标收集类，通过事件总线统计消息流量与提醒投递情况
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from notifybot.events import bus, E


@dataclass
class RuntimeMetrics:
    msg_in_count: int = 0
    task_created_count: int = 0
    task_sent_count: int = 0
    task_send_failed_count: int = 0
    last_task_sent_at: float | None = None

    def record_msg_in(self) -> None:
        self.msg_in_count += 1

    def record_task_created(self) -> None:
        self.task_created_count += 1

    def record_task_sent(self) -> None:
        self.task_sent_count += 1
        self.last_task_sent_at = time.time()

    def record_task_send_failed(self) -> None:
        self.task_send_failed_count += 1

    def snapshot(self) -> dict:
        return {
            "msg_in_count": self.msg_in_count,
            "task_created_count": self.task_created_count,
            "task_sent_count": self.task_sent_count,
            "task_send_failed_count": self.task_send_failed_count,
            "last_task_sent_at_epoch": self.last_task_sent_at,
        }


runtime_metrics = RuntimeMetrics()


@bus.on(E.MESSAGE_RECEIVED)
def _on_message_received(*args, **kwargs) -> None:
    runtime_metrics.record_msg_in()

@bus.on(E.TASK_CREATED)
def _on_task_created(*args, **kwargs) -> None:
    runtime_metrics.record_task_created()

@bus.on(E.TASK_SENT)
def _on_task_sent(*args, **kwargs) -> None:
    runtime_metrics.record_task_sent()

@bus.on(E.TASK_SEND_FAILED)
def _on_task_send_failed(*args, **kwargs) -> None:
    runtime_metrics.record_task_send_failed()


__all__ = ["RuntimeMetrics", "runtime_metrics"]
