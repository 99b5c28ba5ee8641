import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from notifybot.utils import truncate_to_minute


class Clock(ABC):
    """提醒循环使用的时钟，测试中可替换为假时钟"""

    @abstractmethod
    def now(self) -> datetime:
        pass

    @abstractmethod
    async def wait_until_next_tick(self, shutdown_event: asyncio.Event) -> None:
        """等待到下一次检查; shutdown_event 被设置时应尽快返回"""


class SystemClock(Clock):
    """本地墙上时钟，每分钟整点触发一次"""

    def now(self) -> datetime:
        return datetime.now()

    def seconds_until_next_minute(self) -> float:
        now = self.now()
        next_minute = truncate_to_minute(now) + timedelta(minutes=1)
        return max(0.0, (next_minute - now).total_seconds())

    async def wait_until_next_tick(self, shutdown_event: asyncio.Event) -> None:
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=self.seconds_until_next_minute())
        except asyncio.TimeoutError:
            pass


__all__ = ["Clock", "SystemClock"]
