#!/usr/bin/env python3
"""
Tests for the ChatGPT and Claude providers
"""

import unittest
from unittest import mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from errors import AccessDeniedError, ErrorCode, FetchError, InvalidUrlError, ParseError
from extractors.markup_extractor import MarkupExtractionStrategy
from fetcher import FetchResult
from models import ConversationSource, MessageRole
from providers.chatgpt_provider import ChatGPTProvider
from providers.claude_provider import ClaudeProvider

SHARE_URL = "https://chatgpt.com/share/abc12345"

STRUCTURED_PAGE = (
    '<title>My Chat</title>'
    '<script>{"messages":[{"role":"user","content":"Hi"},'
    '{"role":"assistant","content":"Hello!"}]}</script>'
)

class FakeFetcher:
    """Records requested URLs and replays one canned response"""

    def __init__(self, body: str = "", status: int = 200, headers=None, error=None):
        self.result = (body, status, headers or {})
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        body, status, headers = self.result
        return FetchResult(url=url, status=status, body=body, headers=headers)

class TestChatGPTProviderParsing(unittest.TestCase):
    """Test cases for parsing retrieved pages"""

    def setUp(self):
        self.provider = ChatGPTProvider(fetcher=FakeFetcher())

    def test_structured_page(self):
        conversation = self.provider.parse_html(STRUCTURED_PAGE, SHARE_URL)

        self.assertEqual(conversation.title, "My Chat")
        self.assertEqual(conversation.id, "abc12345")
        self.assertEqual(conversation.source, ConversationSource.CHATGPT)
        self.assertEqual([m.role for m in conversation.messages], [MessageRole.USER, MessageRole.ASSISTANT])
        self.assertEqual([m.content for m in conversation.messages], ["Hi", "Hello!"])
        self.assertEqual(conversation.metadata['extraction_method'], "structured_data")
        self.assertEqual(conversation.metadata['provider'], "ChatGPT")
        self.assertEqual(conversation.metadata['normalized_url'], "https://chat.openai.com/share/abc12345")

    def test_structured_data_short_circuits_markup(self):
        html = (
            '<title>From Tag</title>'
            '<script>{"title": "From JSON", "messages": [{"role": "user", "content": "json turn"}]}</script>'
            '<main><div data-message-id="1">markup turn</div></main>'
        )
        with mock.patch.object(MarkupExtractionStrategy, 'extract') as markup_extract:
            conversation = self.provider.parse_html(html, SHARE_URL)

        markup_extract.assert_not_called()
        self.assertEqual(conversation.title, "From JSON")
        self.assertEqual([m.content for m in conversation.messages], ["json turn"])
        self.assertEqual(len(conversation.metadata['extraction_attempts']), 1)

    def test_markup_page(self):
        html = """
        <html><head><title>Egg advice - ChatGPT</title></head><body><main>
          <div data-message-id="a" data-message-author-role="user"><div class="markdown">How long?</div></div>
          <div data-message-id="b" data-message-author-role="assistant"><div class="markdown">Nine minutes.</div></div>
        </main></body></html>
        """
        conversation = self.provider.parse_html(html, SHARE_URL)

        self.assertEqual(conversation.title, "Egg advice")
        self.assertEqual(conversation.metadata['extraction_method'], "markup")
        self.assertEqual([m.sequence for m in conversation.messages], [1, 2])

    def test_login_wall(self):
        body = "Log in or sign up to view this shared conversation. " + "Ipsum dolor " * 20
        with self.assertRaises(AccessDeniedError) as ctx:
            self.provider.parse_html(f"<html><body><p>{body}</p></body></html>", SHARE_URL)

        self.assertIn("enable public sharing", ctx.exception.message)

    def test_zero_turns(self):
        html = "<html><body><div>" + "Lorem ipsum dolor sit amet. " * 10 + "</div></body></html>"
        with self.assertRaises(ParseError):
            self.provider.parse_html(html, SHARE_URL)

    def test_not_found_page(self):
        html = "<html><body><h1>Error 404</h1><p>Page not found</p></body></html>"
        with self.assertRaises(FetchError):
            self.provider.parse_html(html, SHARE_URL)

class TestChatGPTProviderFetching(unittest.TestCase):
    """Test cases for the fetch path"""

    def test_invalid_url_never_fetches(self):
        fetcher = FakeFetcher(STRUCTURED_PAGE)
        provider = ChatGPTProvider(fetcher=fetcher)

        for url in ["https://example.com/share/abc12345", "https://chatgpt.com/c/abc12345", "invalid-url"]:
            with self.subTest(url=url):
                with self.assertRaises(InvalidUrlError):
                    provider.fetch_conversation(url)

        self.assertEqual(fetcher.calls, [])

    def test_fetches_normalized_url(self):
        fetcher = FakeFetcher(STRUCTURED_PAGE)
        conversation = ChatGPTProvider(fetcher=fetcher).fetch_conversation(SHARE_URL)

        self.assertEqual(fetcher.calls, ["https://chat.openai.com/share/abc12345"])
        self.assertEqual(conversation.metadata['url'], SHARE_URL)
        self.assertEqual(conversation.get_message_count(), 2)

    def test_status_mapping(self):
        cases = [
            (401, AccessDeniedError),
            (403, AccessDeniedError),
            (404, FetchError),
            (500, FetchError),
        ]
        for status, error_class in cases:
            with self.subTest(status=status):
                provider = ChatGPTProvider(fetcher=FakeFetcher(STRUCTURED_PAGE, status=status))
                with self.assertRaises(error_class):
                    provider.fetch_conversation(SHARE_URL)

    def test_frame_denied_empty_page(self):
        fetcher = FakeFetcher("<body><p>Loading</p></body>", headers={'X-Frame-Options': 'DENY'})
        with self.assertRaises(AccessDeniedError) as ctx:
            ChatGPTProvider(fetcher=fetcher).fetch_conversation(SHARE_URL)
        self.assertEqual(ctx.exception.code, ErrorCode.ACCESS_DENIED)

    def test_frame_denied_page_with_turns(self):
        fetcher = FakeFetcher(STRUCTURED_PAGE, headers={'X-Frame-Options': 'DENY'})
        conversation = ChatGPTProvider(fetcher=fetcher).fetch_conversation(SHARE_URL)
        self.assertEqual(conversation.get_message_count(), 2)

class TestClaudeProvider(unittest.TestCase):

    def test_url_handling(self):
        provider = ClaudeProvider(fetcher=FakeFetcher())
        self.assertTrue(provider.can_handle("https://claude.ai/share/3f88bb56-06f8"))
        self.assertFalse(provider.can_handle(SHARE_URL))
        self.assertEqual(provider.normalize_url("https://www.claude.ai/share/3f88bb56-06f8"),
                         "https://claude.ai/share/3f88bb56-06f8")

    def test_parse_page(self):
        html = (
            '<title>Trip planning - Claude</title>'
            '<script>{"uuid": "x", "chat_messages": [], "messages": ['
            '{"sender": "human", "text": "Plan a trip"},'
            '{"sender": "assistant", "text": "Sure."}]}</script>'
        )
        conversation = ClaudeProvider(fetcher=FakeFetcher()).parse_html(
            html, "https://claude.ai/share/3f88bb56-06f8")

        self.assertEqual(conversation.source, ConversationSource.CLAUDE)
        self.assertEqual(conversation.title, "Trip planning")
        self.assertEqual(conversation.id, "3f88bb56-06f8")
        self.assertEqual([m.role for m in conversation.messages], [MessageRole.USER, MessageRole.ASSISTANT])

if __name__ == '__main__':
    unittest.main()
