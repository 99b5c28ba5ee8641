"""
注意: 任务的时间(notify_time)只精确到分钟，在库中的格式为 "YYYY-MM-DD HH:MM"
"""

from datetime import datetime

import aiosqlite

from notifybot.datamodel import ReminderTask
from notifybot.errors import StoreError
from notifybot.events import bus, E
from notifybot.logger import logger
from notifybot.storage.base import TaskStore
from notifybot.utils import to_min_str, from_min_str

# aiosqlite 在连接关闭后抛出 ValueError("no active connection")
_DB_ERRORS = (aiosqlite.Error, ValueError)


class SqliteTaskStore(TaskStore):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def save(self, task: ReminderTask) -> ReminderTask:
        """保存提醒任务"""
        try:
            async with self._conn.execute(
                "INSERT INTO tasks (chat_id, message, notify_time) VALUES (?, ?, ?)",
                (task.chat_id, task.message, to_min_str(task.notify_time))
            ) as cursor:
                task_id = cursor.lastrowid
            await self._conn.commit()
        except _DB_ERRORS as e:
            raise StoreError(f"保存任务失败: chat_id={task.chat_id}, notify_time={task.notify_time}") from e

        saved = task.with_id(task_id)
        logger.trace(f"创建任务: task_id={task_id}, chat_id={task.chat_id}, notify_time={to_min_str(task.notify_time)}")
        bus.emit(E.TASK_CREATED, task=saved)
        return saved

    async def find_by_notify_time(self, notify_time: datetime) -> list[ReminderTask]:
        """获取 notify_time 恰好等于给定分钟的所有任务"""
        try:
            async with self._conn.execute(
                "SELECT task_id, chat_id, message, notify_time FROM tasks WHERE notify_time = ?",
                (to_min_str(notify_time),)
            ) as cursor:
                rows = await cursor.fetchall()
        except _DB_ERRORS as e:
            raise StoreError(f"查询任务失败: notify_time={notify_time}") from e

        return [
            ReminderTask(
                task_id=row[0],
                chat_id=row[1],
                message=row[2],
                notify_time=from_min_str(row[3]),
            )
            for row in rows
        ]

    async def delete(self, task: ReminderTask) -> bool:
        """删除任务，返回是否确实删除了一行"""
        if task.task_id is None:
            raise StoreError("无法删除尚未保存的任务")
        try:
            async with self._conn.execute(
                "DELETE FROM tasks WHERE task_id = ?",
                (task.task_id,)
            ) as cursor:
                deleted = cursor.rowcount > 0
            await self._conn.commit()
        except _DB_ERRORS as e:
            raise StoreError(f"删除任务失败: task_id={task.task_id}") from e

        logger.trace(f"删除任务: task_id={task.task_id}, deleted={deleted}")
        return deleted


__all__ = ["SqliteTaskStore"]
