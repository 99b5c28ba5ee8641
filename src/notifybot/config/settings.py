import os
from dotenv import load_dotenv
from notifybot.logger import logger
load_dotenv()

__all__ = [
    "TELEGRAM_BOT_TOKEN", "DROP_PENDING_UPDATES",
    "DB_PATH",
    "LOG_FILE", "LOG_LEVEL", "CONSOLE_LOG_LEVEL",
    "SEND_RETRY_DELAY_SECONDS",
]


def _parse_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on", "y")


# Telegram Bot, token 是否为空由 main 在启动时检查
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
DROP_PENDING_UPDATES = _parse_bool("DROP_PENDING_UPDATES", False)

# 存储
DB_PATH = os.getenv("DB_PATH", "data/notifybot.db")

# 日志
LOG_FILE = os.getenv("LOG_FILE", "logs/notifybot.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "TRACE").strip().upper()
CONSOLE_LOG_LEVEL = os.getenv("CONSOLE_LOG_LEVEL", "INFO").strip().upper()

# 提醒投递失败后的重试等待时间
try:
    SEND_RETRY_DELAY_SECONDS = float(os.getenv("SEND_RETRY_DELAY_SECONDS", "5"))
except ValueError:
    SEND_RETRY_DELAY_SECONDS = 5.0
    logger.warning("SEND_RETRY_DELAY_SECONDS 非法, 已回退到 5 秒")
