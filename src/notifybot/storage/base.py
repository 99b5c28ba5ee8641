from abc import ABC, abstractmethod
from datetime import datetime

from notifybot.datamodel import ReminderTask


class TaskStore(ABC):
    """提醒任务存储的约定

    每个操作都必须是原子的: 消息处理与定时投递会并发访问同一个存储，调用方不再额外加锁。
    所有失败都以 StoreError 抛出
    """

    @abstractmethod
    async def save(self, task: ReminderTask) -> ReminderTask:
        """保存任务，返回带有新 task_id 的任务"""

    @abstractmethod
    async def find_by_notify_time(self, notify_time: datetime) -> list[ReminderTask]:
        """返回 notify_time 与给定分钟完全相等的任务，顺序不作保证"""

    @abstractmethod
    async def delete(self, task: ReminderTask) -> bool:
        """删除任务; 任务已不存在时返回 False"""


__all__ = ["TaskStore"]
