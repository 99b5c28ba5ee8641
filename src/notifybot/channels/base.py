from abc import ABC, abstractmethod


class ChatTransport(ABC):
    """聊天通道的发送端，失败时抛出 TransportError"""

    @abstractmethod
    async def send_message(self, chat_id: int, text: str) -> None:
        pass


__all__ = ["ChatTransport"]
