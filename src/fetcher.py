#!/usr/bin/env python3
"""
Page Fetcher for Chat Share Parser
Retrieves the raw HTML of a shared conversation page.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urljoin
import logging

import requests

from errors import FetchError

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_TIMEOUT = 30
MINIMAL_USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36'

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
    'Upgrade-Insecure-Requests': '1',
}

@dataclass
class FetchResult:
    """Final response after redirects"""
    url: str
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def frame_denied(self) -> bool:
        """True when the response forbids framing outright"""
        for name, value in self.headers.items():
            if name.lower() == 'x-frame-options':
                return value.strip().upper() == 'DENY'
        return False

class PageFetcher:
    """HTTP fetch with bounded manual redirects and one retry on 403"""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 session: Optional[requests.Session] = None):
        fetch_config = (config or {}).get('fetch', {})
        self.timeout = fetch_config.get('timeout', DEFAULT_TIMEOUT)
        self.max_redirects = fetch_config.get('max_redirects', DEFAULT_MAX_REDIRECTS)

        self.session = session or requests.Session()
        self.session.headers.update(BROWSER_HEADERS)
        if fetch_config.get('user_agent'):
            self.session.headers['User-Agent'] = fetch_config['user_agent']

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch a page, following redirects up to the configured limit

        Args:
            url: URL to fetch

        Returns:
            FetchResult of the final response, whatever its status

        Raises:
            FetchError: On transport failures or redirect problems
        """
        current_url = url
        try:
            response = None
            for hop in range(self.max_redirects + 1):
                logger.debug(f"GET {current_url} (hop {hop})")
                response = self.session.get(current_url, timeout=self.timeout, allow_redirects=False)

                if response.status_code not in REDIRECT_STATUSES:
                    break

                location = response.headers.get('Location')
                if not location:
                    raise FetchError("Received redirect response without Location header",
                                     details={'url': current_url, 'status': response.status_code})
                current_url = urljoin(current_url, location)
            else:
                raise FetchError(f"Failed to get a valid response after {self.max_redirects} redirects",
                                 details={'url': current_url})

            if response.status_code == 403:
                # Some servers block specific browser fingerprints
                logger.warning("403 Forbidden - retrying with minimal headers")
                response = self.session.get(current_url, timeout=self.timeout, allow_redirects=False,
                                            headers={'User-Agent': MINIMAL_USER_AGENT})

        except requests.RequestException as e:
            logger.error(f"Request to {current_url} failed: {e}")
            raise FetchError(f"Failed to fetch conversation: {e}", details=e) from e

        logger.debug(f"Fetched {current_url}: {response.status_code} ({len(response.text)} characters)")
        return FetchResult(
            url=current_url,
            status=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )
