#!/usr/bin/env python3
"""
Text Normalizer for Chat Share Parser
Cleans text pulled out of markup or JSON before it becomes message content.
"""

import html
import re
import unicodedata
import logging
from typing import Optional

logger = logging.getLogger(__name__)

INVISIBLE_CHARS = {
    '\u200b': '',  # zero-width space
    '\u200c': '',  # zero-width non-joiner
    '\u200d': '',  # zero-width joiner
    '\ufeff': '',  # byte order mark
    '\u00a0': ' ', # non-breaking space
}

class TextNormalizer:
    """Unicode and whitespace normalization"""

    @staticmethod
    def normalize_text(text: Optional[str]) -> str:
        """
        Normalize text for use as message content

        Args:
            text: Raw text

        Returns:
            NFC-normalized string with collapsed spaces, at most one blank
            line between paragraphs, and no surrounding whitespace
        """
        if not text:
            return ""

        text = str(text).replace('\x00', '').replace('\ufffd', '')
        text = unicodedata.normalize('NFC', text)
        text = html.unescape(text)
        text = TextNormalizer._clean_problematic_chars(text)
        text = TextNormalizer._normalize_whitespace(text)

        return text.strip()

    @staticmethod
    def _clean_problematic_chars(text: str) -> str:
        """Drop control characters except common whitespace"""
        for old, new in INVISIBLE_CHARS.items():
            text = text.replace(old, new)

        return ''.join(char for char in text
                       if unicodedata.category(char)[0] != 'C' or char in '\n\r\t ')

    @staticmethod
    def _normalize_whitespace(text: str) -> str:
        text = re.sub(r'[\u2000-\u200a\u2028\u2029\u202f\u205f\u3000]', ' ', text)

        text = text.replace('\r\n', '\n').replace('\r', '\n')

        # Collapse runs of spaces, trim each line, keep paragraph breaks
        text = re.sub(r'[ \t]+', ' ', text)
        text = '\n'.join(line.strip() for line in text.split('\n'))
        text = re.sub(r'\n{3,}', '\n\n', text)

        return text

    @staticmethod
    def collapse(text: Optional[str]) -> str:
        """Single-line form, used for titles"""
        return ' '.join(TextNormalizer.normalize_text(text).split())
