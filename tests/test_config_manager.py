#!/usr/bin/env python3
"""
Tests for ConfigManager
"""

import unittest
import tempfile
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config_manager import ConfigManager, deep_merge

class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        # Create temporary directory for test config
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"
        self.config_manager = ConfigManager(str(self.config_path))

    def tearDown(self):
        # Clean up temporary directory
        import shutil
        shutil.rmtree(self.temp_dir)

    def test_create_default_config(self):
        """Test default config creation"""
        config = self.config_manager.load_config()

        # Check that default config was created
        self.assertTrue(self.config_path.exists())

        # Check for expected keys
        expected_keys = ['fetch', 'extraction', 'roles', 'access_wall', 'output']
        for key in expected_keys:
            self.assertIn(key, config)

    def test_get_nested_value(self):
        """Test nested value retrieval"""
        config = self.config_manager.load_config()

        # Test existing nested value
        self.assertEqual(self.config_manager.get_nested_value(config, 'fetch.timeout'), 30)
        self.assertEqual(self.config_manager.get_nested_value(config, 'fetch.max_redirects'), 5)

        # Test non-existing nested value with default
        missing_value = self.config_manager.get_nested_value(config, 'fetch.missing', 'default')
        self.assertEqual(missing_value, 'default')

        # Test deeply nested value
        user_markers = self.config_manager.get_nested_value(config, 'roles.user_text_markers')
        self.assertEqual(user_markers, ['You:'])

    def test_update_config(self):
        """Test config updating"""
        self.config_manager.load_config()

        updates = {
            'output': {'format': 'json'},
            'new_key': 'new_value'
        }
        self.config_manager.update_config(updates)

        # Load updated config
        updated_config = self.config_manager.load_config()

        # Check updates were applied
        self.assertEqual(updated_config['output']['format'], 'json')
        self.assertEqual(updated_config['new_key'], 'new_value')

        # Check other values are preserved
        self.assertEqual(updated_config['fetch']['timeout'], 30)
        self.assertTrue(updated_config['output']['include_metadata'])

    def test_partial_file_is_merged_with_defaults(self):
        """Test a user file only needs the keys it changes"""
        self.config_path.write_text("fetch:\n  timeout: 5\n", encoding='utf-8')

        config = self.config_manager.load_config()

        self.assertEqual(config['fetch']['timeout'], 5)
        self.assertEqual(config['fetch']['max_redirects'], 5)
        self.assertIn('message_selectors', config['extraction'])

    def test_broken_file_falls_back_to_defaults(self):
        self.config_path.write_text("fetch: [unclosed\n", encoding='utf-8')

        config = self.config_manager.load_config()

        self.assertEqual(config, ConfigManager.get_default_config())

    def test_deep_merge(self):
        base = {'a': {'b': 1, 'c': 2}, 'd': [1]}
        merged = deep_merge(base, {'a': {'c': 3}, 'd': [2]})

        self.assertEqual(merged, {'a': {'b': 1, 'c': 3}, 'd': [2]})
        self.assertEqual(base['a']['c'], 2)

if __name__ == '__main__':
    unittest.main()
