#!/usr/bin/env python3
"""
Configuration Manager for Chat Share Parser
Handles loading and managing configuration files.
"""

import copy
import yaml
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from extractors.conversation_normalizer import (
    DEFAULT_MAX_BODY_LENGTH,
    DEFAULT_NOT_FOUND_MARKERS,
    DEFAULT_SIGN_IN_MARKERS,
)
from extractors.markup_extractor import (
    DEFAULT_CONTAINER_SELECTORS,
    DEFAULT_CONTENT_SELECTORS,
    DEFAULT_MESSAGE_SELECTORS,
    DEFAULT_NON_CONTENT_MARKERS,
    DEFAULT_SPEAKER_LABELS,
)
from extractors.role_inference import RoleHints
from extractors.url_classifier import DEFAULT_MIN_ID_LENGTH
from fetcher import DEFAULT_MAX_REDIRECTS, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay overrides on a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged

class ConfigManager:
    """Manages configuration files and settings"""

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "chat_share_parser"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config manager with optional custom config path"""
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_FILE
        self.config_dir = self.config_path.parent

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file, creating default if needed"""
        try:
            if not self.config_path.exists():
                logger.info(f"Config file not found at {self.config_path}, creating default")
                self._create_default_config()

            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)

            logger.debug(f"Loaded config from {self.config_path}")
            return deep_merge(self._get_default_config(), config or {})

        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            logger.info("Using default configuration")
            return self._get_default_config()

    def save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

            logger.info(f"Saved config to {self.config_path}")

        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            raise

    def _create_default_config(self) -> None:
        """Create default configuration file"""
        self.save_config(self._get_default_config())

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Get default configuration dictionary"""
        return {
            'fetch': {
                'timeout': DEFAULT_TIMEOUT,
                'max_redirects': DEFAULT_MAX_REDIRECTS,
                'user_agent': None,
            },
            'extraction': {
                'min_share_id_length': DEFAULT_MIN_ID_LENGTH,
                'container_selectors': list(DEFAULT_CONTAINER_SELECTORS),
                'message_selectors': list(DEFAULT_MESSAGE_SELECTORS),
                'content_selectors': list(DEFAULT_CONTENT_SELECTORS),
                'non_content_markers': list(DEFAULT_NON_CONTENT_MARKERS),
                'speaker_labels': copy.deepcopy(DEFAULT_SPEAKER_LABELS),
                'role_aliases': {},
            },
            'roles': asdict(RoleHints()),
            'access_wall': {
                'sign_in_markers': list(DEFAULT_SIGN_IN_MARKERS),
                'not_found_markers': list(DEFAULT_NOT_FOUND_MARKERS),
                'max_body_length': DEFAULT_MAX_BODY_LENGTH,
            },
            'output': {
                'format': 'markdown',
                'include_metadata': True,
                'show_timestamps': False,
            },
        }

    @classmethod
    def get_default_config(cls) -> Dict[str, Any]:
        """Defaults without touching the filesystem"""
        return cls._get_default_config()

    def get_nested_value(self, config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
        """Get nested configuration value using dot notation (e.g., 'fetch.timeout')"""
        keys = key_path.split('.')
        value = config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values"""
        config = self.load_config()
        config.update(updates)
        self.save_config(config)
