from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from notifybot.utils import truncate_to_minute

__all__ = [
    "ReminderTask",
    "IncomingMessage",
    "Command", "ParsedTask", "Rejected", "RejectReason", "ParseResult",
]

# ----------------- ReminderTask 数据模型 ----------------
@dataclass(frozen=True)
class ReminderTask:
    chat_id: int
    message: str
    notify_time: datetime  # 精确到分钟
    task_id: Optional[int] = field(default=None, compare=False)  # 由存储在创建时分配

    def __post_init__(self) -> None:
        if not self.message or not self.message.strip():
            raise ValueError("ReminderTask.message 不能为空")
        object.__setattr__(self, "notify_time", truncate_to_minute(self.notify_time))

    def with_id(self, task_id: int) -> ReminderTask:
        return replace(self, task_id=task_id)


# ----------------- Channel 数据模型 ----------------
@dataclass
class IncomingMessage:
    chat_id: int
    text: Optional[str]  # 非文本消息 (贴纸、图片等) 为 None
    user_id: Optional[int] = None
    timestamp: Optional[datetime] = None


# ----------------- Parser 输出 ----------------
class RejectReason(str, Enum):
    NON_TEXT_INPUT = "non_text_input"
    MALFORMED_INPUT = "malformed_input"
    INVALID_DATETIME = "invalid_datetime"

@dataclass(frozen=True)
class Command:
    name: str  # 不带斜杠, 例如 "start"

@dataclass(frozen=True)
class ParsedTask:
    message: str
    notify_time: datetime

@dataclass(frozen=True)
class Rejected:
    reason: RejectReason


ParseResult = Union[Command, ParsedTask, Rejected]
