#!/usr/bin/env python3
"""
Data models for Chat Share Parser
"""

import hashlib
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime
from enum import Enum

UNTITLED_CONVERSATION = "Untitled Conversation"

class MessageRole(Enum):
    """Message role enumeration"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    UNKNOWN = "unknown"

class ConversationSource(Enum):
    """Providers that can produce a conversation"""
    CHATGPT = "chatgpt"
    CLAUDE = "claude"
    UNKNOWN = "unknown"

@dataclass(frozen=True)
class ChatMessage:
    """A single turn of a conversation"""
    role: MessageRole
    content: str
    timestamp: Optional[datetime] = None
    sequence: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.role, str):
            object.__setattr__(self, 'role', MessageRole(self.role.lower()))
        content = (self.content or '').strip()
        if not content:
            raise ValueError("Message content must not be empty")
        object.__setattr__(self, 'content', content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'role': self.role.value,
            'content': self.content,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'sequence': self.sequence,
        }

@dataclass(frozen=True)
class Conversation:
    """A complete conversation. Never empty."""
    id: str
    messages: Tuple[ChatMessage, ...]
    source: ConversationSource
    title: str = UNTITLED_CONVERSATION
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.source, str):
            object.__setattr__(self, 'source', ConversationSource(self.source.lower()))
        object.__setattr__(self, 'messages', tuple(self.messages))
        if not self.messages:
            raise ValueError("A conversation needs at least one message")
        if not self.title:
            object.__setattr__(self, 'title', UNTITLED_CONVERSATION)

    @classmethod
    def from_text(cls, text: str, title: Optional[str] = None) -> 'Conversation':
        """
        Wrap a raw text blob as a single-turn conversation

        Args:
            text: Free text pasted or uploaded by the user
            title: Optional label for the conversation

        Returns:
            Conversation with one user message and an id derived from the text
        """
        message = ChatMessage(role=MessageRole.USER, content=text, sequence=1)
        digest = hashlib.sha1(message.content.encode('utf-8')).hexdigest()[:12]
        return cls(
            id=f"text-{digest}",
            messages=(message,),
            source=ConversationSource.UNKNOWN,
            title=title or UNTITLED_CONVERSATION,
            metadata={'message_count': 1},
        )

    def get_user_messages(self) -> List[ChatMessage]:
        """Get all user messages"""
        return [msg for msg in self.messages if msg.role == MessageRole.USER]

    def get_assistant_messages(self) -> List[ChatMessage]:
        """Get all assistant messages"""
        return [msg for msg in self.messages if msg.role == MessageRole.ASSISTANT]

    def get_message_count(self) -> int:
        """Get total message count"""
        return len(self.messages)

    def to_dict(self, include_raw: bool = False) -> Dict[str, Any]:
        """Serializable view; the raw structured payload is left out unless asked for"""
        metadata = {
            key: value for key, value in self.metadata.items()
            if include_raw or key != 'structured_data'
        }
        return {
            'id': self.id,
            'title': self.title,
            'source': self.source.value,
            'messages': [msg.to_dict() for msg in self.messages],
            'metadata': metadata,
        }
