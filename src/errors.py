#!/usr/bin/env python3
"""
Error taxonomy for Chat Share Parser
Every failure surfaced by the library carries one of four codes.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

class ErrorCode(Enum):
    """Closed set of failure codes"""
    INVALID_URL = "INVALID_URL"
    FETCH_ERROR = "FETCH_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    ACCESS_DENIED = "ACCESS_DENIED"

SUGGESTIONS = {
    ErrorCode.INVALID_URL: [
        "Copy the link from the provider's Share dialog",
        "Shared links look like https://chatgpt.com/share/<id>",
    ],
    ErrorCode.FETCH_ERROR: [
        "Verify the URL opens in your browser",
        "The shared link may have been deleted or expired",
        "Check your internet connection and try again later",
    ],
    ErrorCode.PARSE_ERROR: [
        "The page structure may have changed",
        "Save the page from your browser and pass it with --html-file",
        "Try again later",
    ],
    ErrorCode.ACCESS_DENIED: [
        "Open the conversation and enable public sharing (\"Share with web\")",
        "Create a new shared link and try again",
    ],
}

class ConversationError(Exception):
    """Base exception for conversation retrieval errors"""

    code = ErrorCode.FETCH_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details
        self.timestamp = datetime.now()

    @property
    def user_message(self) -> str:
        """Error message with suggested solutions"""
        full_msg = f"{self.message}\n\nPossible solutions:\n"
        for i, suggestion in enumerate(SUGGESTIONS[self.code], 1):
            full_msg += f"{i}. {suggestion}\n"
        return full_msg.strip()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.code.value}: {self.message!r})"

class InvalidUrlError(ConversationError):
    code = ErrorCode.INVALID_URL

class FetchError(ConversationError):
    code = ErrorCode.FETCH_ERROR

class ParseError(ConversationError):
    code = ErrorCode.PARSE_ERROR

class AccessDeniedError(ConversationError):
    code = ErrorCode.ACCESS_DENIED

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of URL validation; failures are values, not exceptions"""
    is_valid: bool
    error: Optional[str] = None
    provider: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid
