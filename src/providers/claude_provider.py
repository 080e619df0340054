#!/usr/bin/env python3
"""
Claude Provider for Chat Share Parser
Handles Claude shared links.
"""

from models import ConversationSource
from providers.base_provider import BaseProvider

class ClaudeProvider(BaseProvider):
    """Provider for Claude shared conversations"""

    name = "Claude"
    source = ConversationSource.CLAUDE
    domains = ['claude.ai', 'www.claude.ai']
    canonical_host = 'claude.ai'
    title_affixes = [
        ('', ' - Claude'),
        ('', ' | Claude'),
        ('', ' \\ Anthropic'),
    ]
