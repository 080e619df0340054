#!/usr/bin/env python3
"""
URL Classifier for Chat Share Parser
Validates and canonicalizes shared conversation links for one provider.
"""

from urllib.parse import urlsplit, urlunsplit, SplitResult
from typing import Iterable, Optional
import logging

from errors import ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_SHARE_PREFIX = '/share/'
DEFAULT_MIN_ID_LENGTH = 5

def _split(url: str) -> Optional[SplitResult]:
    """Parse an absolute http(s) URL, or return None if it is malformed"""
    if not isinstance(url, str):
        return None
    try:
        parsed = urlsplit(url.strip())
        # Accessing hostname/port raises on broken netlocs
        hostname = parsed.hostname
        parsed.port
    except ValueError:
        return None
    if parsed.scheme not in ('http', 'https') or not hostname:
        return None
    return parsed

def trailing_segment(url: str) -> Optional[str]:
    """Last non-empty path segment of a URL"""
    parsed = _split(url)
    if not parsed:
        return None
    segments = [segment for segment in parsed.path.split('/') if segment]
    return segments[-1] if segments else None

class UrlClassifier:
    """Domain whitelist, path-shape check and hostname canonicalization"""

    def __init__(self, domains: Iterable[str], canonical_host: Optional[str] = None,
                 share_prefix: str = DEFAULT_SHARE_PREFIX,
                 min_id_length: int = DEFAULT_MIN_ID_LENGTH):
        self.domains = [domain.lower() for domain in domains]
        self.canonical_host = (canonical_host or self.domains[0]).lower()
        self.share_prefix = share_prefix
        self.min_id_length = min_id_length

    def can_handle(self, url: str) -> bool:
        """True iff the URL parses and its hostname is one of ours"""
        parsed = _split(url)
        return bool(parsed) and parsed.hostname in self.domains

    def validate_url(self, url: str) -> ValidationResult:
        """
        Validate a shared conversation URL

        Args:
            url: URL to check

        Returns:
            ValidationResult; never raises
        """
        parsed = _split(url)
        if not parsed:
            logger.debug(f"Malformed URL: {url!r}")
            return ValidationResult(False, "Invalid URL format")

        if parsed.hostname not in self.domains:
            logger.debug(f"Invalid domain: {parsed.hostname}")
            return ValidationResult(
                False, f"Invalid domain. Must be one of: {' or '.join(self.domains)}"
            )

        if not parsed.path.startswith(self.share_prefix):
            logger.debug(f"Path does not start with {self.share_prefix}: {parsed.path}")
            return ValidationResult(
                False,
                f"Invalid URL format. Must be a shared conversation URL ({self.share_prefix}...)"
            )

        share_id = self.share_id(url)
        if not share_id:
            return ValidationResult(False, "Missing share ID in URL")
        if len(share_id) < self.min_id_length:
            return ValidationResult(False, "Invalid share ID in URL")

        return ValidationResult(True)

    def share_id(self, url: str) -> Optional[str]:
        """Identifier that follows the share prefix"""
        parsed = _split(url)
        if not parsed or not parsed.path.startswith(self.share_prefix):
            return None
        share_id = parsed.path[len(self.share_prefix):].strip('/')
        return share_id or None

    def normalize(self, url: str) -> str:
        """
        Canonicalize a URL before fetching

        Equivalent hostnames collapse to the canonical one and a bare trailing
        identifier is moved under the share prefix. Malformed or foreign URLs
        come back unchanged.
        """
        parsed = _split(url)
        if not parsed or parsed.hostname not in self.domains:
            return url

        netloc = parsed.netloc
        if parsed.hostname != self.canonical_host:
            netloc = self.canonical_host if parsed.port is None else f"{self.canonical_host}:{parsed.port}"

        path = parsed.path
        if not path.startswith(self.share_prefix):
            identifier = trailing_segment(url)
            # A bare share prefix carries no identifier
            if identifier and identifier != self.share_prefix.strip('/'):
                path = f"{self.share_prefix}{identifier}"

        normalized = urlunsplit((parsed.scheme, netloc, path, parsed.query, parsed.fragment))
        if normalized != url:
            logger.debug(f"Normalized URL: {url} -> {normalized}")
        return normalized
