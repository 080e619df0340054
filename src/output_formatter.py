#!/usr/bin/env python3
"""
Output Formatter for Chat Share Parser
Renders conversations as Markdown, plain prompt text or JSON.
"""

import json
from typing import Dict, Any, Optional
import logging

from models import Conversation, ChatMessage, MessageRole

logger = logging.getLogger(__name__)

FORMATS = ('markdown', 'text', 'json')

ROLE_HEADINGS = {
    MessageRole.USER: 'User',
    MessageRole.ASSISTANT: 'Assistant',
    MessageRole.SYSTEM: 'System',
    MessageRole.UNKNOWN: 'Unknown',
}

class ConversationFormatter:
    """Formats conversations for display or for a downstream report prompt"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.output_config = self.config.get('output', {})

    def format(self, conversation: Conversation, output_format: str = 'markdown') -> str:
        """
        Render a conversation

        Args:
            conversation: Conversation to render
            output_format: One of 'markdown', 'text', 'json'

        Returns:
            Rendered string

        Raises:
            ValueError: If the format is not supported
        """
        if output_format == 'markdown':
            return self.format_markdown(conversation)
        if output_format == 'text':
            return self.format_text(conversation)
        if output_format == 'json':
            return self.format_json(conversation)
        raise ValueError(f"Unsupported format: {output_format}. Supported formats: {', '.join(FORMATS)}")

    def format_markdown(self, conversation: Conversation) -> str:
        logger.debug(f"Formatting conversation with {len(conversation.messages)} messages as Markdown")
        lines = [f"# {conversation.title}", ""]

        if self.output_config.get('include_metadata', True):
            lines.extend(self._format_metadata(conversation))
            lines.append("")

        for message in conversation.messages:
            lines.extend(self._format_message(message))

        return "\n".join(lines).rstrip() + "\n"

    def _format_metadata(self, conversation: Conversation) -> list:
        lines = []
        url = conversation.metadata.get('url')
        if url:
            lines.append(f"**Source:** {url}")
        lines.append(f"**Provider:** {conversation.source.value}")
        lines.append(f"**Conversation ID:** {conversation.id}")
        lines.append(f"**Messages:** {conversation.get_message_count()}")
        method = conversation.metadata.get('extraction_method')
        if method:
            lines.append(f"**Extraction:** {method}")
        return lines

    def _format_message(self, message: ChatMessage) -> list:
        heading = f"## {ROLE_HEADINGS[message.role]}"
        if self.output_config.get('show_timestamps', False) and message.timestamp:
            heading += f" ({message.timestamp.strftime('%Y-%m-%d %H:%M:%S')})"
        return [heading, "", message.content, ""]

    @staticmethod
    def format_text(conversation: Conversation) -> str:
        """ROLE: content blocks, the shape report prompts are built from"""
        return "\n\n".join(
            f"{message.role.value.upper()}: {message.content}"
            for message in conversation.messages
        )

    @staticmethod
    def format_json(conversation: Conversation) -> str:
        return json.dumps(conversation.to_dict(), ensure_ascii=False, indent=2)
