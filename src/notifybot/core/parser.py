"""把用户发来的原始文本解析为命令、提醒任务或拒绝结果

两阶段校验:
1. 词法: 整条消息必须是 "DD.MM.YYYY HH:MM <正文>", 正文只允许拉丁/西里尔字母、数字、空白、逗号和句点
   数字与空白只接受 ASCII (全角数字、阿拉伯-印度数字、不换行空格都算格式错误)
2. 语义: 时间戳必须是合法的日历日期与时间 (例如 32.13.2023 会在这一步被拒绝)

正文全为空白时视为格式错误。本模块无副作用，可在并发场景中复用
"""

import re
from datetime import datetime

from notifybot.config.replies import START_COMMAND
from notifybot.datamodel import Command, ParsedTask, ParseResult, Rejected, RejectReason
from notifybot.utils import truncate_to_minute

__all__ = ["parse", "TASK_PATTERN", "DATETIME_FORMAT"]

DATETIME_FORMAT = "%d.%m.%Y %H:%M"

TASK_PATTERN = re.compile(
    r"(\d{2}\.\d{2}\.\d{4}\s\d{2}:\d{2})\s+([A-Za-zА-Яа-яЁё0-9\s,.]*)",
    re.ASCII,
)

_COMMANDS = {
    START_COMMAND: Command("start"),
}


def parse(text: str | None) -> ParseResult:
    if text is None:
        return Rejected(RejectReason.NON_TEXT_INPUT)

    command = _COMMANDS.get(text)
    if command is not None:
        return command

    match = TASK_PATTERN.fullmatch(text)
    if match is None:
        return Rejected(RejectReason.MALFORMED_INPUT)

    timestamp, body = match.group(1), match.group(2).strip()
    if not body:
        return Rejected(RejectReason.MALFORMED_INPUT)

    try:
        notify_time = datetime.strptime(timestamp, DATETIME_FORMAT)
    except ValueError:
        return Rejected(RejectReason.INVALID_DATETIME)

    return ParsedTask(message=body, notify_time=truncate_to_minute(notify_time))
