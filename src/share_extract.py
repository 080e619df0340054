#!/usr/bin/env python3
"""
Chat Share Parser CLI
Extract a conversation from a publicly shared chat link.
"""

import argparse
import sys
from pathlib import Path
import logging

from config_manager import ConfigManager
from errors import ConversationError, InvalidUrlError
from output_formatter import ConversationFormatter, FORMATS
from providers.conversation_service import ConversationService

VERSION = "0.1.0"

def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a conversation from a publicly shared chat link",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  share-extract https://chatgpt.com/share/6885c4e8-7c2c-832d-a1b2-9c52925434a1
  share-extract https://claude.ai/share/3f88bb56-06f8 --format json -o chat.json
  share-extract https://chatgpt.com/share/abc12345 --html-file saved_page.html
        """
    )

    parser.add_argument(
        "url",
        help="Shared conversation URL"
    )

    parser.add_argument(
        "--html-file",
        help="Parse a saved copy of the page instead of fetching it"
    )

    parser.add_argument(
        "--format", "-f",
        choices=FORMATS,
        help="Output format (default: from config)"
    )

    parser.add_argument(
        "--output", "-o",
        help="Write the result to this file instead of stdout"
    )

    parser.add_argument(
        "--config", "-c",
        help="Configuration file path (default: ~/.config/chat_share_parser/config.yaml)"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only check whether the URL is a supported shared link"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Chat Share Parser v{VERSION}"
    )

    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = ConfigManager(args.config).load_config()
        service = ConversationService.create_default(config)

        validation = service.validate_url(args.url)
        if not validation.is_valid:
            raise InvalidUrlError(validation.error or "Invalid URL")
        logger.info(f"Detected provider: {validation.provider}")

        if args.validate_only:
            print(f"Valid {validation.provider} shared link")
            return 0

        if args.html_file:
            provider = service.find_provider(args.url)
            html = Path(args.html_file).expanduser().read_text(encoding='utf-8')
            logger.info(f"Parsing saved page {args.html_file}")
            conversation = provider.parse_html(html, args.url)
        else:
            conversation = service.fetch_conversation(args.url)

        output_format = args.format or config.get('output', {}).get('format', 'markdown')
        rendered = ConversationFormatter(config).format(conversation, output_format)

        if args.output:
            output_path = Path(args.output).expanduser()
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(rendered, encoding='utf-8')
            logger.info(f"Saved conversation to {output_path}")
        else:
            print(rendered)

        logger.info(f"Extracted {conversation.get_message_count()} messages")
        return 0

    except ConversationError as e:
        logger.error(f"[{e.code.value}] {e.user_message}")
        if args.verbose and e.details is not None:
            logger.debug(f"Details: {e.details!r}")
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1

if __name__ == "__main__":
    sys.exit(main())
