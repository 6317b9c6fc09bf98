"""Модели группового чата и сообщений (только факты отправки)."""

from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from .base import Base


class MessageKind(str, Enum):
    """Типы сообщений."""
    TEXT = "TEXT"
    VOICE = "VOICE"
    IMAGE = "IMAGE"
    FILE = "FILE"


class Chat(Base):
    """Групповой чат."""

    __tablename__ = "chats"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True)


class ChatMessage(Base):
    """Сообщение в чате. lesson_id: урок, к которому относится сообщение."""

    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="SET NULL"), nullable=True, index=True)
    kind = Column(String(20), nullable=False)
    sent_at = Column(DateTime, nullable=False)  # UTC
