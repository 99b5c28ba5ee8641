"""notifybot: 通过聊天消息创建定时提醒，并在指定的分钟发回原会话"""

__version__ = "0.1.0"
