"""异常定义

解析失败不是异常, 由 core.parser 以 Rejected 返回; 这里只有外部协作方 (存储/聊天通道) 的失败
"""


class NotifyBotError(Exception):
    """本项目所有异常的基类"""


class StoreError(NotifyBotError):
    """存储不可用，或写入/删除失败"""


class TransportError(NotifyBotError):
    """消息发送失败"""

    def __init__(self, chat_id: int, message: str):
        super().__init__(f"向 chat_id={chat_id} 发送消息失败: {message}")
        self.chat_id = chat_id


__all__ = ["NotifyBotError", "StoreError", "TransportError"]
