"""
提醒投递循环

每分钟检查一次 notify_time 恰好等于当前分钟的任务 (不是 "小于等于": 停机期间错过的分钟不会补发)
投递语义为至多一次: 发送 (失败时重试一次) 之后无论结果如何都删除任务, 发送失败会以 ERROR 记录并发出 TASK_SEND_FAILED
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime

from notifybot.channels.base import ChatTransport
from notifybot.datamodel import ReminderTask
from notifybot.errors import StoreError, TransportError
from notifybot.events import bus, E
from notifybot.logger import logger
from notifybot.storage.base import TaskStore
from notifybot.utils import truncate_to_minute, to_min_str
from notifybot.world.clock import Clock, SystemClock


@dataclass
class TickResult:
    due: int = 0
    sent: int = 0
    failed: int = 0


class ReminderNotifier:
    def __init__(
        self,
        store: TaskStore,
        transport: ChatTransport,
        clock: Clock | None = None,
        retry_delay: float = 5.0,
    ):
        self.store = store
        self.transport = transport
        self.clock = clock or SystemClock()
        self.retry_delay = retry_delay
        self._shutdown_event: asyncio.Event | None = None
        self._last_check_at: datetime | None = None
        self._last_result: TickResult | None = None

    def get_status(self) -> dict[str, object]:
        running = self._shutdown_event is not None and not self._shutdown_event.is_set()
        return {
            "running": running,
            "last_check_at": self._last_check_at,
            "last_result": self._last_result,
        }

    async def _send_with_retry(self, task: ReminderTask) -> bool:
        try:
            await self.transport.send_message(task.chat_id, task.message)
            return True
        except TransportError as e:
            logger.warning(f"投递任务 {task.task_id} 失败: {e}, {self.retry_delay} 秒后重试")

        await asyncio.sleep(self.retry_delay)
        try:
            await self.transport.send_message(task.chat_id, task.message)
            return True
        except TransportError as e:
            logger.error(f"[重试] 投递任务 {task.task_id} 失败, 该提醒将被丢弃: chat_id={task.chat_id}, message={task.message!r}", exc_info=e)
            return False

    async def _deliver(self, task: ReminderTask) -> bool:
        """发送并删除单个任务，返回是否发送成功"""
        sent = await self._send_with_retry(task)
        if sent:
            bus.emit(E.TASK_SENT, task=task)
        else:
            bus.emit(E.TASK_SEND_FAILED, task=task)

        try:
            if not await self.store.delete(task):
                logger.warning(f"任务 {task.task_id} 在删除前已不存在")
        except StoreError as e:
            logger.error(f"删除任务 {task.task_id} 失败: {e}", exc_info=e)
        return sent

    async def tick(self, now: datetime | None = None) -> TickResult:
        now = truncate_to_minute(now or self.clock.now())
        self._last_check_at = now

        due = await self.store.find_by_notify_time(now)
        result = TickResult(due=len(due))
        if not due:
            self._last_result = result
            return result

        logger.info(f"{to_min_str(now)} 有 {len(due)} 个到期任务")
        outcomes = await asyncio.gather(*(self._deliver(task) for task in due), return_exceptions=True)
        for task, outcome in zip(due, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"投递任务 {task.task_id} 时发生预期外的错误: {outcome}", exc_info=outcome)
                result.failed += 1
            elif outcome:
                result.sent += 1
            else:
                result.failed += 1

        self._last_result = result
        return result

    async def main_loop(self, shutdown_event: asyncio.Event) -> None:
        self._shutdown_event = shutdown_event
        logger.info("提醒投递循环已启动")

        while not shutdown_event.is_set():
            await self.clock.wait_until_next_tick(shutdown_event)
            if shutdown_event.is_set():
                break
            try:
                await self.tick()
            except StoreError as e:
                logger.error(f"本轮检查失败: {e}", exc_info=e)
            except Exception as e:
                logger.error(f"本轮检查发生预期外的错误: {e}", exc_info=e)

        logger.info(f"提醒投递循环已关闭, 最后检查时间: {self._last_check_at}")


__all__ = ["ReminderNotifier", "TickResult"]
