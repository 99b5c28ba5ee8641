from notifybot.logger import setup_logging, logger
from notifybot.config.settings import *

import asyncio
import signal
import sys

import notifybot.channels.telegram_polling as telegram_polling
import notifybot.storage.db_config as db_config
from notifybot.channels.telegram_polling import TelegramTransport
from notifybot.core.dispatcher import Dispatcher
from notifybot.metrics import runtime_metrics
from notifybot.storage.reminder import SqliteTaskStore
from notifybot.world.notifier import ReminderNotifier

shutdown_event = asyncio.Event()

def request_shutdown(sig: signal.Signals, event: asyncio.Event) -> None:
    """处理 SIGINT (Ctrl+C) / SIGTERM 信号"""
    logger.info(f"收到 {sig.name} 信号,正在依次关闭组件...")
    event.set()

def install_signal_handlers(loop: asyncio.AbstractEventLoop, event: asyncio.Event) -> None:
    """在事件循环上注册信号处理, 阻塞在 select 中的循环也能被立即唤醒"""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig, event)
        except NotImplementedError:
            # Windows 事件循环不支持 add_signal_handler
            signal.signal(sig, lambda s, frame: loop.call_soon_threadsafe(request_shutdown, signal.Signals(s), event))


async def main():
    install_signal_handlers(asyncio.get_running_loop(), shutdown_event)

    conn = await db_config.init_db(DB_PATH)
    store = SqliteTaskStore(conn)

    app = telegram_polling.build_application(TELEGRAM_BOT_TOKEN)
    transport = TelegramTransport(app.bot)
    dispatcher = Dispatcher(transport, store)
    telegram_polling.register_handlers(app, dispatcher)
    notifier = ReminderNotifier(store, transport, retry_delay=SEND_RETRY_DELAY_SECONDS)

    try:
        await asyncio.gather(
            telegram_polling.main(app, shutdown_event, drop_pending_updates=DROP_PENDING_UPDATES),
            notifier.main_loop(shutdown_event),
        )
    finally:
        shutdown_event.set()
        logger.info("关闭数据库连接...")
        await db_config.close_db(conn)
        logger.info(f"运行指标: {runtime_metrics.snapshot()}")
        logger.info("notifybot 已关闭")


def run() -> None:
    setup_logging(
        log_level=LOG_LEVEL,
        log_file=LOG_FILE,
        console_level=CONSOLE_LOG_LEVEL,
    )
    if TELEGRAM_BOT_TOKEN == "":
        logger.critical("TELEGRAM_BOT_TOKEN 未设置")
        sys.exit(1)

    logger.info("启动 notifybot...")
    asyncio.run(main())


if __name__ == "__main__":
    run()
