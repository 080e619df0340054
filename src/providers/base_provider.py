#!/usr/bin/env python3
"""
Base Provider for Chat Share Parser
Shared behavior of all transcript sources.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Tuple
import logging

from bs4 import BeautifulSoup

from errors import AccessDeniedError, FetchError, InvalidUrlError, ValidationResult
from extractors.conversation_normalizer import ACCESS_DENIED_MESSAGE, NOT_FOUND_MESSAGE, ConversationNormalizer
from extractors.role_inference import RoleHints, RoleInferenceEngine
from extractors.unified_extractor import UnifiedExtractor
from extractors.url_classifier import DEFAULT_MIN_ID_LENGTH, UrlClassifier
from fetcher import FetchResult, PageFetcher
from models import Conversation, ConversationSource

logger = logging.getLogger(__name__)

class BaseProvider:
    """
    One transcript-hosting product

    Subclasses only declare what differs between products: domains, the
    canonical host and the page-title decorations.
    """

    name: ClassVar[str] = "base"
    source: ClassVar[ConversationSource] = ConversationSource.UNKNOWN
    domains: ClassVar[List[str]] = []
    canonical_host: ClassVar[Optional[str]] = None
    share_prefix: ClassVar[str] = '/share/'
    title_affixes: ClassVar[List[Tuple[str, str]]] = []

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 fetcher: Optional[PageFetcher] = None):
        self.config = config or {}
        self.fetcher = fetcher or PageFetcher(self.config)

        min_id_length = self.config.get('extraction', {}).get('min_share_id_length', DEFAULT_MIN_ID_LENGTH)
        self.classifier = UrlClassifier(self.domains, self.canonical_host,
                                        self.share_prefix, min_id_length)
        self.role_engine = RoleInferenceEngine(RoleHints.from_config(self.config))
        self.normalizer = ConversationNormalizer(self.source, self.title_affixes, self.config)

    def can_handle(self, url: str) -> bool:
        return self.classifier.can_handle(url)

    def validate_url(self, url: str) -> ValidationResult:
        return self.classifier.validate_url(url)

    def normalize_url(self, url: str) -> str:
        return self.classifier.normalize(url)

    def fetch_conversation(self, url: str) -> Conversation:
        """
        Fetch and parse a shared conversation

        Args:
            url: The share URL to extract from

        Returns:
            Conversation

        Raises:
            InvalidUrlError: Before any network call, if the URL is not ours
            AccessDeniedError: If the page is private or behind a login wall
            FetchError: On network or HTTP failures
            ParseError: If no strategy found any message
        """
        validation = self.validate_url(url)
        if not validation.is_valid:
            raise InvalidUrlError(validation.error or "Invalid URL")

        normalized_url = self.normalize_url(url)
        logger.info(f"Fetching {self.name} conversation: {normalized_url}")
        fetched_at = datetime.now(timezone.utc)
        fetch_result = self.fetcher.fetch(normalized_url)

        if fetch_result.status in (401, 403):
            raise AccessDeniedError(ACCESS_DENIED_MESSAGE, details={'status': fetch_result.status})
        if fetch_result.status == 404:
            raise FetchError(NOT_FOUND_MESSAGE, details={'status': 404})
        if not fetch_result.ok:
            raise FetchError(f"Failed to fetch conversation: HTTP {fetch_result.status}",
                             details={'status': fetch_result.status})

        return self.parse_html(fetch_result.body, url, fetch_result=fetch_result,
                               fetched_at=fetched_at, normalized_url=normalized_url)

    def parse_html(self, html: str, url: str, fetch_result: Optional[FetchResult] = None,
                   fetched_at: Optional[datetime] = None,
                   normalized_url: Optional[str] = None) -> Conversation:
        """
        Parse an already retrieved page

        Args:
            html: Raw HTML
            url: Origin URL (used for the id fallback and metadata)
            fetch_result: Response details, used for access-wall detection

        Returns:
            Conversation
        """
        soup = BeautifulSoup(html, 'html.parser')
        extractor = UnifiedExtractor(self.config, self.role_engine)
        result = extractor.extract(soup)

        if not result.success:
            frame_denied = bool(fetch_result and fetch_result.frame_denied)
            raise self.normalizer.classify_failure(soup, frame_denied=frame_denied)

        return self.normalizer.build(
            result, soup, url,
            fetched_at=fetched_at,
            metadata={
                'provider': self.name,
                'normalized_url': normalized_url or self.normalize_url(url),
                'extraction_attempts': extractor.get_extraction_stats(),
            },
        )
