#!/usr/bin/env python3
"""
Unified Extraction System for Chat Share Parser
Runs the extraction strategies in precedence order; the first one that yields
turns wins and the rest never run.
"""

import logging
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from extractors.markup_extractor import MarkupExtractionStrategy, TranscriptTextStrategy
from extractors.role_inference import RoleInferenceEngine
from extractors.structured_extractor import (
    ExtractionResult,
    ExtractionStrategy,
    StructuredDataStrategy,
)

logger = logging.getLogger(__name__)

class UnifiedExtractor:
    """
    Ordered strategy list with fallback handling
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 role_engine: Optional[RoleInferenceEngine] = None,
                 strategies: Optional[List[ExtractionStrategy]] = None):
        config = config or {}
        if strategies is None:
            strategies = [
                StructuredDataStrategy(config),
                MarkupExtractionStrategy(config, role_engine),
                TranscriptTextStrategy(config),
            ]
        self.strategies = strategies

        # Track extraction attempts for debugging
        self.extraction_history: List[Dict[str, Any]] = []

    def extract(self, soup: BeautifulSoup) -> ExtractionResult:
        """
        Try each strategy in order until one produces turns

        Args:
            soup: Parsed page

        Returns:
            The winning ExtractionResult, or an empty one if every strategy
            came back empty. A structured payload seen along the way is kept
            on the empty result for debugging.
        """
        self.extraction_history = []
        payload = None

        for i, strategy in enumerate(self.strategies, 1):
            logger.debug(f"Attempting extraction with strategy {i}/{len(self.strategies)}: {strategy.name}")

            result = strategy.extract(soup)
            self.extraction_history.append({
                'strategy': strategy.name,
                'success': result.success,
                'message_count': len(result.messages),
            })
            payload = payload or result.payload

            if result.success:
                logger.info(f"{strategy.name} succeeded: {len(result.messages)} messages")
                return result

            logger.debug(f"{strategy.name} failed: no messages extracted")

        logger.warning("All extraction strategies failed")
        self._log_failure_analysis(soup)
        return ExtractionResult([], method="none", payload=payload)

    def _log_failure_analysis(self, soup: BeautifulSoup):
        """Log page structure details to help debugging"""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        script_tags = soup.find_all('script')
        logger.debug(f"  - Found {len(script_tags)} script tags")

        divs = soup.find_all('div')
        logger.debug(f"  - Found {len(divs)} div elements")

        message_classes = set()
        for div in divs:
            for cls in div.get('class', []):
                if any(keyword in cls.lower() for keyword in ['message', 'chat', 'conversation', 'turn']):
                    message_classes.add(cls)

        if message_classes:
            logger.debug(f"  - Found message-related classes: {sorted(message_classes)[:5]}")
        else:
            logger.debug("  - No obvious message-related classes found")

    def get_extraction_stats(self) -> List[Dict[str, Any]]:
        """Attempts made during the last extract() call"""
        return list(self.extraction_history)
