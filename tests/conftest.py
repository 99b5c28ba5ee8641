# Shared fixtures: a real SQLite store in tmp_path and a recording chat transport

import pytest
import pytest_asyncio

from notifybot.channels.base import ChatTransport
from notifybot.errors import TransportError
from notifybot.storage import db_config
from notifybot.storage.reminder import SqliteTaskStore


class RecordingTransport(ChatTransport):
    """Collects sent messages; chat ids in ``failing`` raise TransportError."""

    def __init__(self, failing=()):
        self.sent: list[tuple[int, str]] = []
        self.failing = set(failing)
        self.attempts: list[int] = []

    async def send_message(self, chat_id: int, text: str) -> None:
        self.attempts.append(chat_id)
        if chat_id in self.failing:
            raise TransportError(chat_id, "chat not found")
        self.sent.append((chat_id, text))


@pytest_asyncio.fixture
async def db_conn(tmp_path):
    conn = await db_config.init_db(str(tmp_path / "data" / "tasks.db"))
    yield conn
    await db_config.close_db(conn)


@pytest_asyncio.fixture
async def store(db_conn):
    return SqliteTaskStore(db_conn)


@pytest.fixture
def transport():
    return RecordingTransport()
