#!/usr/bin/env python3
"""
Structured-Data Extraction for Chat Share Parser
Finds machine-readable conversation JSON embedded in a page, bypassing the
presentational markup entirely.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Dict, List, Any, Iterator

from bs4 import BeautifulSoup

from models import ChatMessage, MessageRole
from extractors.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

PAYLOAD_KEYS = ('"messages"', '"mapping"')
DATA_ATTRIBUTES = ('data-json', 'data-props')
MAX_DECODE_ATTEMPTS = 64

DEFAULT_ROLE_ALIASES = {
    'user': 'user',
    'human': 'user',
    'you': 'user',
    'assistant': 'assistant',
    'chatgpt': 'assistant',
    'gpt': 'assistant',
    'claude': 'assistant',
    'model': 'assistant',
    'ai': 'assistant',
    'bot': 'assistant',
    'system': 'system',
    'tool': 'system',
    'developer': 'system',
}

CONTENT_KEYS = ('content', 'text', 'message', 'body')
TIMESTAMP_KEYS = ('create_time', 'created_at', 'timestamp')

class StructuredDataExtractor:
    """Scan script bodies and data attributes for a messages-bearing JSON object"""

    def __init__(self):
        self.decoder = json.JSONDecoder()

    def find_payload(self, soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
        """
        Return the first embedded JSON object carrying conversation messages

        Args:
            soup: Parsed page

        Returns:
            Decoded object whose 'messages' is a list (or whose 'mapping' is a
            dict), or None
        """
        for region in self._regions(soup):
            payload = self._find_in_region(region)
            if payload is not None:
                return payload
        return None

    def _regions(self, soup: BeautifulSoup) -> Iterator[str]:
        for script in soup.find_all('script'):
            content = script.string or script.get_text()
            if content and content.strip():
                yield content

        for attribute in DATA_ATTRIBUTES:
            for element in soup.find_all(attrs={attribute: True}):
                value = element.get(attribute)
                if value:
                    yield value

    def _find_in_region(self, region: str) -> Optional[Dict[str, Any]]:
        if not any(key in region for key in PAYLOAD_KEYS):
            return None

        attempts = 0
        tried = set()
        for key_pos in self._key_positions(region):
            start = region.rfind('{', 0, key_pos)
            while start != -1 and attempts < MAX_DECODE_ATTEMPTS:
                if start not in tried:
                    tried.add(start)
                    attempts += 1
                    candidate = self._decode_at(region, start)
                    if candidate is not None and self._is_payload(candidate):
                        logger.debug(f"Structured payload found at offset {start}")
                        return candidate
                start = region.rfind('{', 0, start)
            if attempts >= MAX_DECODE_ATTEMPTS:
                logger.debug("Giving up on region after too many decode attempts")
                break
        return None

    @staticmethod
    def _key_positions(region: str) -> List[int]:
        positions = []
        for key in PAYLOAD_KEYS:
            pos = region.find(key)
            while pos != -1:
                positions.append(pos)
                pos = region.find(key, pos + 1)
        return sorted(positions)

    def _decode_at(self, region: str, start: int) -> Optional[Any]:
        try:
            value, _ = self.decoder.raw_decode(region, start)
            return value
        except ValueError:
            return None

    @staticmethod
    def _is_payload(candidate: Any) -> bool:
        if not isinstance(candidate, dict):
            return False
        return (isinstance(candidate.get('messages'), list)
                or isinstance(candidate.get('mapping'), dict))

class PayloadMapper:
    """Turn a structured payload into ChatMessage objects"""

    def __init__(self, role_aliases: Optional[Dict[str, str]] = None):
        self.role_aliases = dict(DEFAULT_ROLE_ALIASES)
        if role_aliases:
            self.role_aliases.update({key.lower(): value for key, value in role_aliases.items()})

    def to_messages(self, payload: Dict[str, Any]) -> List[ChatMessage]:
        entries = payload.get('messages')
        if not isinstance(entries, list):
            entries = self._flatten_mapping(payload.get('mapping'), payload.get('current_node'))

        messages = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue

            content = self.extract_content(entry)
            if not content:
                continue

            role = self.extract_role(entry)
            if role == MessageRole.UNKNOWN:
                logger.debug(f"Dropping structured entry with unresolvable role: {content[:40]!r}")
                continue

            messages.append(ChatMessage(
                role=role,
                content=content,
                timestamp=self.extract_timestamp(entry),
            ))

        logger.debug(f"Mapped {len(messages)} of {len(entries)} structured entries")
        return messages

    @staticmethod
    def _flatten_mapping(mapping: Any, current_node: Any = None) -> List[Dict[str, Any]]:
        """
        ChatGPT keeps turns in an id -> node tree

        The visible branch runs from current_node back to the root through
        parent pointers. Without current_node, key order is used.
        """
        if not isinstance(mapping, dict):
            return []

        if isinstance(current_node, str) and current_node in mapping:
            nodes = [mapping[node_id] for node_id in PayloadMapper._branch(mapping, current_node)]
        else:
            nodes = list(mapping.values())

        entries = []
        for node in nodes:
            if isinstance(node, dict) and isinstance(node.get('message'), dict):
                entries.append(node['message'])
        return entries

    @staticmethod
    def _branch(mapping: Dict[str, Any], current_node: str) -> List[str]:
        """Node ids from the root down to current_node"""
        path = []
        visited = set()
        node_id = current_node

        while node_id and node_id in mapping:
            if node_id in visited:
                logger.warning(f"Circular reference detected at node {node_id}")
                break
            visited.add(node_id)
            path.append(node_id)
            node = mapping[node_id]
            node_id = node.get('parent') if isinstance(node, dict) else None

        path.reverse()
        return path

    def extract_role(self, entry: Dict[str, Any]) -> MessageRole:
        author = entry.get('author')
        candidates = [
            author.get('role') if isinstance(author, dict) else author,
            entry.get('role'),
            entry.get('sender'),
        ]
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                mapped = self.role_aliases.get(candidate.strip().lower())
                return MessageRole(mapped) if mapped else MessageRole.UNKNOWN
        return MessageRole.UNKNOWN

    def extract_content(self, entry: Dict[str, Any]) -> str:
        for key in CONTENT_KEYS:
            if key in entry:
                text = self._flatten_content(entry[key])
                text = TextNormalizer.normalize_text(text)
                if text:
                    return text
        return ""

    def _flatten_content(self, content: Any) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = [self._flatten_content(part) for part in content]
            return '\n'.join(part for part in parts if part)
        if isinstance(content, dict):
            if isinstance(content.get('parts'), list):
                return self._flatten_content(content['parts'])
            for key in ('text', 'content', 'value'):
                if key in content:
                    return self._flatten_content(content[key])
        return ""

    @staticmethod
    def extract_timestamp(entry: Dict[str, Any]) -> Optional[datetime]:
        for key in TIMESTAMP_KEYS:
            value = entry.get(key)
            if isinstance(value, bool) or value is None:
                continue
            try:
                if isinstance(value, (int, float)):
                    return datetime.fromtimestamp(value, tz=timezone.utc)
                if isinstance(value, str):
                    return datetime.fromisoformat(value.replace('Z', '+00:00'))
            except (ValueError, OverflowError, OSError):
                continue
        return None

def payload_title(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if not payload:
        return None
    title = payload.get('title')
    if isinstance(title, str) and title.strip():
        return TextNormalizer.collapse(title)
    return None

def payload_id(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if not payload:
        return None
    for key in ('id', 'conversation_id', 'conversationId'):
        value = payload.get(key)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip():
            return str(value).strip()
    return None

class ExtractionResult:
    """Container for extraction results with metadata"""

    def __init__(self, messages: List[ChatMessage], method: str,
                 payload: Optional[Dict[str, Any]] = None):
        self.messages = messages
        self.method = method  # Which strategy produced the messages
        self.payload = payload  # Raw structured data, if any
        self.success = len(messages) > 0

    @property
    def title(self) -> Optional[str]:
        return payload_title(self.payload)

    @property
    def conversation_id(self) -> Optional[str]:
        return payload_id(self.payload)

class ExtractionStrategy(ABC):
    """One step of the extraction cascade"""

    name = "strategy"

    @abstractmethod
    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        """Extract turns from a parsed page; an empty result means 'not found'"""
        pass

class StructuredDataStrategy(ExtractionStrategy):
    """Highest-precedence strategy: embedded JSON"""

    name = "structured_data"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.extractor = StructuredDataExtractor()
        self.mapper = PayloadMapper(config.get('extraction', {}).get('role_aliases'))

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        payload = self.extractor.find_payload(soup)
        if payload is None:
            logger.debug("No structured conversation data in page")
            return ExtractionResult([], method=self.name)

        messages = self.mapper.to_messages(payload)
        return ExtractionResult(messages, method=self.name, payload=payload)
