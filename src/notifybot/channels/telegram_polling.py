from notifybot.logger import logger
from notifybot.channels.base import ChatTransport
from notifybot.datamodel import IncomingMessage
from notifybot.errors import TransportError
import datetime
import asyncio

import telegram
from telegram.ext import Application, ApplicationBuilder, MessageHandler, ContextTypes, filters

from notifybot.core.dispatcher import Dispatcher


class TelegramTransport(ChatTransport):
    def __init__(self, bot: telegram.Bot):
        self.bot = bot

    async def send_message(self, chat_id: int, text: str) -> None:
        logger.debug(f"发送消息给 Telegram chat_id={chat_id}: {text!r}")
        try:
            await self.bot.send_message(chat_id=chat_id, text=text)
        except telegram.error.TelegramError as e:
            raise TransportError(chat_id, str(e)) from e


def to_incoming_message(update: telegram.Update) -> IncomingMessage:
    """把 Telegram Update 转为 IncomingMessage，非文本消息的 text 为 None"""
    message = update.effective_message
    return IncomingMessage(
        chat_id=update.effective_chat.id,
        text=message.text if message is not None else None,
        user_id=update.effective_user.id if update.effective_user is not None else None,
        timestamp=message.date if message is not None else None,
    )


def make_message_handler(dispatcher: Dispatcher):
    async def process_message(update: telegram.Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_chat is None:
            logger.warning(f"忽略没有 chat 的 Update: {update.update_id}")
            return
        # PTB 每次只交付一个 Update, 并按 offset 自行确认; 回复失败在 process 中记录, 其余异常交给 error_handler
        await dispatcher.process([to_incoming_message(update)])

    return process_message


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """处理 handler 中抛出的错误"""
    chat_id = None
    if isinstance(update, telegram.Update) and update.effective_chat is not None:
        chat_id = update.effective_chat.id
    logger.error(f"处理 chat_id={chat_id} 的 Update 时发生错误: {context.error}", exc_info=context.error)

def bot_error_callback(error: telegram.error.TelegramError) -> None:
    if isinstance(error, telegram.error.NetworkError):
        logger.warning(f"Telegram Bot 网络错误: {error}")
    else:
        logger.error(f"Telegram Bot 发生预期外的错误: {error}", exc_info=error)


def build_application(token: str) -> Application:
    return ApplicationBuilder().token(token).build()


def register_handlers(app: Application, dispatcher: Dispatcher) -> None:
    # /start 与非文本消息也交给 Dispatcher 处理; 编辑消息不处理
    app.add_handler(MessageHandler(filters.UpdateType.MESSAGE, make_message_handler(dispatcher)))
    app.add_error_handler(error_handler)


async def main(app: Application, shutdown_event: asyncio.Event, drop_pending_updates: bool = False) -> None:
    try:
        await app.initialize()
        await app.updater.start_polling(
            poll_interval=0.5,
            timeout=datetime.timedelta(seconds=15),
            bootstrap_retries=-1,
            drop_pending_updates=drop_pending_updates,
            error_callback=bot_error_callback,
        )
        await app.start()
        logger.info("Telegram Bot Polling 已启动")

        await shutdown_event.wait()
    finally:
        logger.info("关闭 Telegram Bot Polling...")
        if app.updater.running:
            await app.updater.stop()
        if app.running:
            await app.stop()
        await app.shutdown()


__all__ = [
    "TelegramTransport", "to_incoming_message", "make_message_handler",
    "error_handler", "bot_error_callback", "build_application", "register_handlers", "main",
]
