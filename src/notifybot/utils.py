"""时间工具

提醒只精确到分钟，且只使用进程所在的本地时区 (naive datetime)
存储中的格式为 "YYYY-MM-DD HH:MM"
"""

from datetime import datetime

__all__ = ["MIN_STR_FORMAT", "truncate_to_minute", "to_min_str", "from_min_str"]

MIN_STR_FORMAT = "%Y-%m-%d %H:%M"


def truncate_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)

def to_min_str(dt: datetime) -> str:
    return dt.strftime(MIN_STR_FORMAT)

def from_min_str(min_str: str) -> datetime:
    return datetime.strptime(min_str, MIN_STR_FORMAT)
