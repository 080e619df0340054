#!/usr/bin/env python3
"""
Conversation Normalizer for Chat Share Parser
Assembles extracted turns into a Conversation, or classifies why there are none.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from errors import AccessDeniedError, ConversationError, FetchError, ParseError
from extractors.structured_extractor import ExtractionResult
from extractors.text_normalizer import TextNormalizer
from extractors.url_classifier import trailing_segment
from models import ChatMessage, Conversation, ConversationSource, UNTITLED_CONVERSATION

logger = logging.getLogger(__name__)

UNKNOWN_ID = "unknown"

DEFAULT_SIGN_IN_MARKERS = [
    'log in',
    'sign in',
    'sign in to chatgpt',
    'log in with your openai account',
]
DEFAULT_NOT_FOUND_MARKERS = ['Error 404', 'Page not found']
DEFAULT_MAX_BODY_LENGTH = 2000

ACCESS_DENIED_MESSAGE = (
    "This conversation requires authentication. "
    "Make sure it is shared publicly: enable public sharing (\"Share with web\") "
    "and use the generated link."
)
NOT_FOUND_MESSAGE = (
    "Conversation not found. The URL might be incorrect "
    "or the conversation might have been deleted."
)
PARSE_ERROR_MESSAGE = (
    "No messages found in conversation. The conversation might require "
    "authentication or JavaScript to load."
)

class ConversationNormalizer:
    """Builds the canonical Conversation for one provider"""

    def __init__(self, source: ConversationSource,
                 title_affixes: Iterable[Tuple[str, str]] = (),
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            source: Provider tag stamped on every conversation
            title_affixes: (prefix, suffix) pairs stripped from the page title
            config: Full configuration; the 'access_wall' section is read
        """
        self.source = source
        self.title_affixes = list(title_affixes)
        wall = (config or {}).get('access_wall', {})
        self.sign_in_markers = [m.lower() for m in wall.get('sign_in_markers') or DEFAULT_SIGN_IN_MARKERS]
        self.not_found_markers = wall.get('not_found_markers') or DEFAULT_NOT_FOUND_MARKERS
        self.max_body_length = wall.get('max_body_length', DEFAULT_MAX_BODY_LENGTH)

    def build(self, result: ExtractionResult, soup: BeautifulSoup, url: str,
              fetched_at: Optional[datetime] = None,
              metadata: Optional[Dict[str, Any]] = None) -> Conversation:
        """
        Assemble a Conversation from a successful extraction

        Args:
            result: Non-empty extraction result
            soup: Parsed page, used for title fallbacks
            url: Origin URL, used for the id fallback
            fetched_at: Fetch time; backfills missing message timestamps
            metadata: Extra metadata merged into the conversation's

        Returns:
            Conversation

        Raises:
            ParseError: If the result holds no messages
        """
        if not result.success:
            raise ParseError(PARSE_ERROR_MESSAGE)

        fetched_at = fetched_at or datetime.now(timezone.utc)
        messages = self._finalize_messages(result.messages, fetched_at)

        conversation_metadata = {
            'url': url,
            'fetched_at': fetched_at.isoformat(),
            'message_count': len(messages),
            'extraction_method': result.method,
        }
        if result.payload is not None:
            conversation_metadata['structured_data'] = result.payload
        conversation_metadata.update(metadata or {})

        conversation = Conversation(
            id=self.derive_id(result, url),
            title=self.derive_title(result, soup),
            messages=tuple(messages),
            source=self.source,
            metadata=conversation_metadata,
        )
        logger.info(f"Built conversation '{conversation.title}' with {len(messages)} messages")
        return conversation

    @staticmethod
    def _finalize_messages(messages: List[ChatMessage], fetched_at: datetime) -> List[ChatMessage]:
        return [
            replace(message, sequence=i, timestamp=message.timestamp or fetched_at)
            for i, message in enumerate(messages, 1)
        ]

    def derive_title(self, result: ExtractionResult, soup: BeautifulSoup) -> str:
        """Structured title, then page <title>, then first heading, then placeholder"""
        title = result.title
        if title:
            return title

        title_tag = soup.find('title')
        if title_tag is not None:
            title = self.strip_affixes(TextNormalizer.collapse(title_tag.get_text()))
            if title:
                return title

        heading = soup.find('h1')
        if heading is not None:
            title = TextNormalizer.collapse(heading.get_text())
            if title:
                return title

        return UNTITLED_CONVERSATION

    def strip_affixes(self, title: str) -> str:
        for prefix, suffix in self.title_affixes:
            if prefix and title.startswith(prefix):
                title = title[len(prefix):]
            if suffix and title.endswith(suffix):
                title = title[:-len(suffix)]
        title = title.strip()

        # A bare product name is not a conversation title
        bare_names = {(prefix or suffix).strip(' -|\\').lower()
                      for prefix, suffix in self.title_affixes}
        if title.lower() in bare_names:
            return ""
        return title

    @staticmethod
    def derive_id(result: ExtractionResult, url: str) -> str:
        """Structured id, then trailing URL segment, then placeholder"""
        return result.conversation_id or trailing_segment(url) or UNKNOWN_ID

    def classify_failure(self, soup: BeautifulSoup, frame_denied: bool = False) -> ConversationError:
        """
        Explain a page that produced no turns

        Access walls outrank not-found pages, which outrank a plain parse error.
        """
        body = soup.find('body') or soup
        body_text = ' '.join(body.get_text(separator=' ').split())
        lowered = body_text.lower()

        has_sign_in = any(marker in lowered for marker in self.sign_in_markers)
        if frame_denied or (has_sign_in and len(body_text) < self.max_body_length):
            logger.warning(f"Page looks like an access wall "
                           f"(frame_denied={frame_denied}, body length={len(body_text)})")
            return AccessDeniedError(ACCESS_DENIED_MESSAGE,
                                     details={'body_length': len(body_text),
                                              'frame_denied': frame_denied})

        if any(marker in body_text for marker in self.not_found_markers):
            logger.warning("Page looks like a not-found page")
            return FetchError(NOT_FOUND_MESSAGE, details={'status': 404})

        logger.warning("No messages found and no access wall detected")
        return ParseError(PARSE_ERROR_MESSAGE, details={'body_length': len(body_text)})
