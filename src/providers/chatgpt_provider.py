#!/usr/bin/env python3
"""
ChatGPT Provider for Chat Share Parser
Handles ChatGPT shared links.
"""

from models import ConversationSource
from providers.base_provider import BaseProvider

class ChatGPTProvider(BaseProvider):
    """Provider for ChatGPT shared conversations"""

    name = "ChatGPT"
    source = ConversationSource.CHATGPT
    domains = ['chat.openai.com', 'chatgpt.com']
    canonical_host = 'chat.openai.com'
    title_affixes = [
        ('', ' - ChatGPT'),
        ('', ' | ChatGPT'),
        ('ChatGPT - ', ''),
    ]
