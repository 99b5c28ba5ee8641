from typing import Iterable

from notifybot.channels.base import ChatTransport
from notifybot.config.replies import (
    START_REPLY, SAVED_REPLY, INVALID_DATETIME_REPLY,
    MALFORMED_REPLY, NON_TEXT_REPLY, SAVE_FAILED_REPLY,
)
from notifybot.core.parser import parse
from notifybot.datamodel import (
    Command, IncomingMessage, ParsedTask, Rejected, RejectReason, ReminderTask,
)
from notifybot.errors import NotifyBotError, StoreError
from notifybot.events import bus, E
from notifybot.logger import logger
from notifybot.storage.base import TaskStore

_REJECT_REPLIES = {
    RejectReason.NON_TEXT_INPUT: NON_TEXT_REPLY,
    RejectReason.MALFORMED_INPUT: MALFORMED_REPLY,
    RejectReason.INVALID_DATETIME: INVALID_DATETIME_REPLY,
}

_COMMAND_REPLIES = {
    "start": START_REPLY,
}


class Dispatcher:
    """处理收到的消息: 解析、保存任务并回复，每条消息恰好回复一次"""

    def __init__(self, transport: ChatTransport, store: TaskStore):
        self.transport = transport
        self.store = store

    async def handle(self, msg: IncomingMessage) -> None:
        logger.info(f"收到消息 chat_id={msg.chat_id}, user_id={msg.user_id}, sent_at={msg.timestamp}: {msg.text!r}")
        bus.emit(E.MESSAGE_RECEIVED, msg=msg)

        result = parse(msg.text)

        if isinstance(result, Command):
            await self.transport.send_message(msg.chat_id, _COMMAND_REPLIES[result.name])
            return

        if isinstance(result, Rejected):
            logger.debug(f"消息被拒绝 chat_id={msg.chat_id}: {result.reason.value}")
            await self.transport.send_message(msg.chat_id, _REJECT_REPLIES[result.reason])
            return

        await self._save_task(msg.chat_id, result)

    async def _save_task(self, chat_id: int, parsed: ParsedTask) -> None:
        task = ReminderTask(chat_id=chat_id, message=parsed.message, notify_time=parsed.notify_time)
        try:
            saved = await self.store.save(task)
        except StoreError as e:
            logger.error(f"保存任务失败 chat_id={chat_id}: {e}", exc_info=e)
            await self.transport.send_message(chat_id, SAVE_FAILED_REPLY)
            return

        logger.info(f"任务已保存 task_id={saved.task_id}, chat_id={chat_id}, notify_time={saved.notify_time}")
        await self.transport.send_message(chat_id, SAVED_REPLY)

    async def process(self, updates: Iterable[IncomingMessage]) -> bool:
        """逐条处理一批消息；单条失败不影响其余消息，返回 True 表示整批已确认"""
        for msg in updates:
            try:
                await self.handle(msg)
            except NotifyBotError as e:
                logger.error(f"处理来自 chat_id={msg.chat_id} 的消息失败: {e}", exc_info=e)
        return True


__all__ = ["Dispatcher"]
