#!/usr/bin/env python3
"""
Tests for PageFetcher
"""

import unittest
from unittest import mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import requests

from errors import ErrorCode, FetchError
from fetcher import FetchResult, MINIMAL_USER_AGENT, PageFetcher

URL = "https://chat.openai.com/share/abc12345"

def response(status: int, text: str = "", headers=None):
    return mock.Mock(status_code=status, text=text, headers=headers or {})

class TestPageFetcher(unittest.TestCase):
    """Test cases for PageFetcher"""

    def setUp(self):
        self.session = mock.Mock()
        self.session.headers = {}

    def test_browser_headers(self):
        PageFetcher({'fetch': {'user_agent': 'custom-agent'}}, session=self.session)
        self.assertEqual(self.session.headers['User-Agent'], 'custom-agent')
        self.assertIn('Accept-Language', self.session.headers)

    def test_plain_fetch(self):
        self.session.get.return_value = response(200, "<html>ok</html>", {'Content-Type': 'text/html'})
        result = PageFetcher(session=self.session).fetch(URL)

        self.assertEqual(result.status, 200)
        self.assertEqual(result.body, "<html>ok</html>")
        self.assertEqual(result.url, URL)
        self.assertTrue(result.ok)
        self.session.get.assert_called_once_with(URL, timeout=30, allow_redirects=False)

    def test_follows_relative_redirects(self):
        self.session.get.side_effect = [
            response(302, headers={'Location': '/share/xyz98765'}),
            response(301, headers={'Location': 'https://chatgpt.com/share/xyz98765'}),
            response(200, "final"),
        ]
        result = PageFetcher(session=self.session).fetch(URL)

        urls = [call.args[0] for call in self.session.get.call_args_list]
        self.assertEqual(urls, [
            URL,
            "https://chat.openai.com/share/xyz98765",
            "https://chatgpt.com/share/xyz98765",
        ])
        self.assertEqual(result.url, "https://chatgpt.com/share/xyz98765")
        self.assertEqual(result.body, "final")

    def test_too_many_redirects(self):
        self.session.get.return_value = response(302, headers={'Location': '/loop'})
        fetcher = PageFetcher({'fetch': {'max_redirects': 2}}, session=self.session)

        with self.assertRaises(FetchError):
            fetcher.fetch(URL)
        self.assertEqual(self.session.get.call_count, 3)

    def test_redirect_without_location(self):
        self.session.get.return_value = response(307)
        with self.assertRaises(FetchError) as ctx:
            PageFetcher(session=self.session).fetch(URL)
        self.assertIn("Location", ctx.exception.message)

    def test_403_retries_once_with_minimal_headers(self):
        self.session.get.side_effect = [response(403, "blocked"), response(200, "page")]
        result = PageFetcher(session=self.session).fetch(URL)

        self.assertEqual(self.session.get.call_count, 2)
        self.assertEqual(self.session.get.call_args_list[1], mock.call(
            URL, timeout=30, allow_redirects=False, headers={'User-Agent': MINIMAL_USER_AGENT}))
        self.assertEqual(result.status, 200)
        self.assertEqual(result.body, "page")

    def test_403_after_retry_is_returned(self):
        self.session.get.side_effect = [response(403, "blocked"), response(403, "still blocked")]
        result = PageFetcher(session=self.session).fetch(URL)

        self.assertEqual(self.session.get.call_count, 2)
        self.assertEqual(result.status, 403)
        self.assertEqual(result.body, "still blocked")
        self.assertFalse(result.ok)

    def test_transport_error(self):
        self.session.get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(FetchError) as ctx:
            PageFetcher(session=self.session).fetch(URL)

        self.assertEqual(ctx.exception.code, ErrorCode.FETCH_ERROR)
        self.assertIsInstance(ctx.exception.details, requests.ConnectionError)

class TestFetchResult(unittest.TestCase):

    def test_frame_denied(self):
        cases = [
            ({'X-Frame-Options': 'DENY'}, True),
            ({'x-frame-options': ' deny '}, True),
            ({'X-Frame-Options': 'SAMEORIGIN'}, False),
            ({}, False),
        ]
        for headers, expected in cases:
            with self.subTest(headers=headers):
                result = FetchResult(url=URL, status=200, body="", headers=headers)
                self.assertEqual(result.frame_denied, expected)

if __name__ == '__main__':
    unittest.main()
