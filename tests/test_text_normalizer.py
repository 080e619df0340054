#!/usr/bin/env python3
"""
Tests for TextNormalizer
"""

import unittest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from extractors.text_normalizer import TextNormalizer

class TestTextNormalizer(unittest.TestCase):
    """Test cases for TextNormalizer"""

    def test_empty(self):
        self.assertEqual(TextNormalizer.normalize_text(None), "")
        self.assertEqual(TextNormalizer.normalize_text("   \n\t "), "")

    def test_whitespace(self):
        text = "  first   line  \r\n\r\n\r\n\r\n  second\tline "
        self.assertEqual(TextNormalizer.normalize_text(text), "first line\n\nsecond line")

    def test_invisible_characters(self):
        text = "zero\u200bwidth\u00a0space\ufeff"
        self.assertEqual(TextNormalizer.normalize_text(text), "zerowidth space")

    def test_entities_and_composition(self):
        self.assertEqual(TextNormalizer.normalize_text("caf&eacute; &amp; more"), "caf\u00e9 & more")
        self.assertEqual(TextNormalizer.normalize_text("cafe\u0301"), "caf\u00e9")

    def test_collapse(self):
        self.assertEqual(TextNormalizer.collapse("  A title\n  over lines "), "A title over lines")

if __name__ == '__main__':
    unittest.main()
