#!/usr/bin/env python3
"""
Conversation Service for Chat Share Parser
Dispatches a URL to the first registered provider that can handle it.
"""

from typing import Any, Dict, Iterable, Optional, Tuple
import logging

from errors import ConversationError, FetchError, InvalidUrlError, ValidationResult
from fetcher import PageFetcher
from models import Conversation
from providers.base_provider import BaseProvider
from providers.chatgpt_provider import ChatGPTProvider
from providers.claude_provider import ClaudeProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_CLASSES = [ChatGPTProvider, ClaudeProvider]

class ConversationService:
    """
    Ordered provider registry

    Build one at startup (usually with create_default), register any extra
    providers, then share it read-only. Lookups never mutate it.
    """

    def __init__(self, providers: Optional[Iterable[BaseProvider]] = None):
        self._providers = []
        for provider in providers or []:
            self.register_provider(provider)

    @classmethod
    def create_default(cls, config: Optional[Dict[str, Any]] = None,
                       fetcher: Optional[PageFetcher] = None) -> 'ConversationService':
        """Service with the built-in providers sharing one fetcher"""
        config = config or {}
        fetcher = fetcher or PageFetcher(config)
        return cls(provider_class(config, fetcher) for provider_class in DEFAULT_PROVIDER_CLASSES)

    def register_provider(self, provider: BaseProvider) -> None:
        self._providers.append(provider)
        logger.debug(f"Registered provider: {provider.name}")

    @property
    def providers(self) -> Tuple[BaseProvider, ...]:
        return tuple(self._providers)

    def find_provider(self, url: str) -> Optional[BaseProvider]:
        """First provider whose can_handle(url) is true, or None"""
        return next((provider for provider in self._providers if provider.can_handle(url)), None)

    def fetch_conversation(self, url: str) -> Conversation:
        """
        Fetch a conversation through the matching provider

        Raises:
            InvalidUrlError: If no provider handles the URL
            ConversationError: Typed provider errors pass through unchanged;
                anything else becomes a FetchError
        """
        provider = self.find_provider(url)
        if provider is None:
            raise InvalidUrlError("No provider found that can handle this URL")

        try:
            return provider.fetch_conversation(url)
        except ConversationError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error from {provider.name} provider: {e}")
            raise FetchError("Failed to fetch conversation", details=e) from e

    def validate_url(self, url: str) -> ValidationResult:
        """Validate through the matching provider, tagged with its name"""
        provider = self.find_provider(url)
        if provider is None:
            return ValidationResult(False, "Unsupported conversation URL format")

        validation = provider.validate_url(url)
        return ValidationResult(validation.is_valid, validation.error, provider.name)

    def get_supported_providers(self) -> list:
        """Names of registered providers"""
        return [provider.name for provider in self._providers]
