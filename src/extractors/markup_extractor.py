#!/usr/bin/env python3
"""
Markup-based Extraction for Chat Share Parser
DOM selector cascade used when the page carries no structured data, plus a
last-resort scan of "Speaker:" transcript text.
"""

import logging
import re
from typing import Optional, List, Dict, Any, Tuple

from bs4 import BeautifulSoup, Tag

from models import ChatMessage, MessageRole
from extractors.role_inference import RoleHints, RoleInferenceEngine
from extractors.structured_extractor import ExtractionStrategy, ExtractionResult
from extractors.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

# Newest markup first, legacy renderings last
DEFAULT_CONTAINER_SELECTORS = [
    '[data-testid="conversation-main"]',
    '[data-testid="conversation"]',
    '.conversation-main',
    '.prose',
    'div[role="main"]',
    'main',
]

DEFAULT_MESSAGE_SELECTORS = [
    '[data-message-id]',
    '[data-message-author-role]',
    '[data-testid="conversation-turn"]',
    '[data-testid^="conversation-turn-"]',
    '.text-base',
    '.prose > div',
    '.markdown',
    '.conversation-turn',
    '.message',
    '.chat-message',
    '[data-message]',
]

DEFAULT_CONTENT_SELECTORS = [
    '[class*="markdown"]',
    '.whitespace-pre-wrap',
    '.message-content',
    '.content',
    '.text',
]

DEFAULT_NON_CONTENT_MARKERS = [
    'window.__oai',
    '__NEXT_DATA__',
    'self.__next_f',
]

DEFAULT_SPEAKER_LABELS = {
    'user': ['You', 'User', 'Human'],
    'assistant': ['Assistant', 'ChatGPT', 'Claude', 'AI'],
    'system': ['System'],
}

def _setting(config: Dict[str, Any], key: str, default: Any) -> Any:
    value = config.get('extraction', {}).get(key)
    return value if value else default

class MarkupExtractionStrategy(ExtractionStrategy):
    """Container discovery, then message discovery, then whole-document fallback"""

    name = "markup"

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 role_engine: Optional[RoleInferenceEngine] = None):
        config = config or {}
        self.container_selectors = _setting(config, 'container_selectors', DEFAULT_CONTAINER_SELECTORS)
        self.message_selectors = _setting(config, 'message_selectors', DEFAULT_MESSAGE_SELECTORS)
        self.content_selectors = _setting(config, 'content_selectors', DEFAULT_CONTENT_SELECTORS)
        self.non_content_markers = _setting(config, 'non_content_markers', DEFAULT_NON_CONTENT_MARKERS)
        self.role_engine = role_engine or RoleInferenceEngine(RoleHints.from_config(config))

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        """Extract turns from the DOM"""
        containers, container_selector = self.find_containers(soup)

        if containers:
            messages, selector = self.find_messages(containers)
            if messages:
                logger.info(f"Found {len(messages)} messages with '{selector}' "
                            f"inside container '{container_selector}'")
                return ExtractionResult(messages, method=self.name)
            logger.debug(f"No messages inside container '{container_selector}'")
        else:
            logger.debug("No conversation container found")

        logger.debug("Falling back to whole-document message selectors")
        messages, selector = self.find_messages([soup])
        if messages:
            logger.info(f"Found {len(messages)} messages with '{selector}' in whole document")
        return ExtractionResult(messages, method=self.name)

    def find_containers(self, soup: BeautifulSoup) -> Tuple[List[Tag], Optional[str]]:
        """Phase A: first selector matching at least one element"""
        for selector in self.container_selectors:
            found = soup.select(selector)
            if found:
                logger.debug(f"Found {len(found)} container(s) with selector: {selector}")
                return found, selector
        return [], None

    def find_messages(self, scopes: List[Any]) -> Tuple[List[ChatMessage], Optional[str]]:
        """
        Phase B: first message selector yielding a node with usable text

        Args:
            scopes: Containers (or the whole document) to search within

        Returns:
            Tuple of (messages, selector that produced them)
        """
        for selector in self.message_selectors:
            nodes = self._select_all(scopes, selector)
            if not nodes:
                continue

            messages = []
            for node in nodes:
                content = self.extract_text(node)
                if not content:
                    continue
                role = self.role_engine.infer_tag(node)
                messages.append(ChatMessage(role=role, content=content))

            if messages:
                return messages, selector
            logger.debug(f"Selector '{selector}' matched {len(nodes)} nodes without usable text")

        return [], None

    @staticmethod
    def _select_all(scopes: List[Any], selector: str) -> List[Tag]:
        """Matches across all scopes in document order, without duplicates"""
        seen = set()
        nodes = []
        for scope in scopes:
            for node in scope.select(selector):
                if id(node) not in seen:
                    seen.add(id(node))
                    nodes.append(node)
        return nodes

    def extract_text(self, node: Tag) -> str:
        """Text of the most specific content element, else the node's own text"""
        text = ""
        for selector in self.content_selectors:
            inner = node.select_one(selector)
            if inner is not None:
                text = TextNormalizer.normalize_text(inner.get_text())
                if text:
                    break
        if not text:
            text = TextNormalizer.normalize_text(node.get_text())

        if self.is_non_content(text):
            logger.debug(f"Discarding non-content node: {text[:40]!r}")
            return ""
        return text

    def is_non_content(self, text: str) -> bool:
        """True when every line is a script statement led by a known marker"""
        remaining = [
            line for line in text.split('\n')
            if not any(line.lstrip().startswith(marker) for marker in self.non_content_markers)
        ]
        return not ''.join(remaining).strip()

class TranscriptTextStrategy(ExtractionStrategy):
    """Last resort: split page text on 'Speaker:' labels"""

    name = "transcript_text"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        labels = _setting(config, 'speaker_labels', DEFAULT_SPEAKER_LABELS)
        self.patterns = []
        for role, names in labels.items():
            alternatives = '|'.join(re.escape(name) for name in names)
            pattern = re.compile(rf'^(?:{alternatives})\s*:\s*', re.IGNORECASE)
            self.patterns.append((MessageRole(role), pattern))

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        root = soup.find('body') or soup
        text = root.get_text(separator='\n')
        messages = self._split_turns(text)
        if messages:
            logger.info(f"Found {len(messages)} messages from speaker labels in page text")
        return ExtractionResult(messages, method=self.name)

    def _split_turns(self, text: str) -> List[ChatMessage]:
        messages = []
        current_role = None
        current_lines: List[str] = []

        def flush():
            content = TextNormalizer.normalize_text('\n'.join(current_lines))
            if current_role is not None and content:
                messages.append(ChatMessage(role=current_role, content=content))

        for raw_line in text.split('\n'):
            line = raw_line.strip()
            if not line:
                continue

            matched = self._match_label(line)
            if matched:
                flush()
                current_role, line = matched
                current_lines = [line] if line else []
            elif current_role is not None:
                current_lines.append(line)
            # Lines before the first label are page chrome

        flush()
        return messages

    def _match_label(self, line: str) -> Optional[Tuple[MessageRole, str]]:
        for role, pattern in self.patterns:
            match = pattern.match(line)
            if match:
                return role, line[match.end():].strip()
        return None
