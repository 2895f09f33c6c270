# ycb/core/errors.py
"""Error taxonomy and the single policy deciding what the user sees."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class YCBError(Exception):
    """Base class for all client errors."""


class ConfigError(YCBError):
    """Missing or invalid user configuration (API key, URL)."""


class AuthError(YCBError):
    """Token exchange failed. Fatal to search initialization."""


class LexicalSearchError(YCBError):
    """
    Index query failed.

    `transport` is True when the request never got a usable answer
    (network failure, rejected credential) as opposed to the index
    answering with an error for this particular query.
    """

    def __init__(self, message: str, transport: bool = False):
        super().__init__(message)
        self.transport = transport


class SemanticSearchError(YCBError):
    """Non-2xx answer or transport failure on the semantic endpoint."""


class ImageResolutionError(YCBError):
    """Image lookup failed. Degrades to 'no image', never surfaced."""


class ClipboardError(YCBError):
    """Copying an image to the clipboard failed."""


class ErrorCode(str, Enum):
    AUTH = "AUTH"
    LEXICAL_TRANSPORT = "LEXICAL_TRANSPORT"
    LEXICAL_INDEX = "LEXICAL_INDEX"
    SEMANTIC = "SEMANTIC"
    IMAGE = "IMAGE"
    CLIPBOARD = "CLIPBOARD"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ErrorInfo:
    code: ErrorCode
    title: str
    message: str
    visible: bool = True


_ERRORS: Dict[ErrorCode, ErrorInfo] = {
    ErrorCode.AUTH: ErrorInfo(
        code=ErrorCode.AUTH,
        title="Search Error",
        message="Failed to initialize search. Check your API key.",
    ),
    ErrorCode.LEXICAL_TRANSPORT: ErrorInfo(
        code=ErrorCode.LEXICAL_TRANSPORT,
        title="Search Error",
        message="Search service unreachable. Check your connection.",
    ),
    ErrorCode.LEXICAL_INDEX: ErrorInfo(
        code=ErrorCode.LEXICAL_INDEX,
        title="Search Error",
        message="Search failed for this query.",
        visible=False,
    ),
    ErrorCode.SEMANTIC: ErrorInfo(
        code=ErrorCode.SEMANTIC,
        title="Search Error",
        message="Failed to perform semantic search",
    ),
    ErrorCode.IMAGE: ErrorInfo(
        code=ErrorCode.IMAGE,
        title="Image Error",
        message="Could not load image.",
        visible=False,
    ),
    ErrorCode.CLIPBOARD: ErrorInfo(
        code=ErrorCode.CLIPBOARD,
        title="Failed to copy image",
        message="Copying image URL instead",
    ),
    ErrorCode.CONFIG: ErrorInfo(
        code=ErrorCode.CONFIG,
        title="Configuration Error",
        message="Set your API key with: ycb config --api-key <key>",
    ),
    ErrorCode.UNKNOWN: ErrorInfo(
        code=ErrorCode.UNKNOWN,
        title="Unexpected Error",
        message="Something went wrong. See the log for details.",
    ),
}


def error_code(exc: BaseException) -> ErrorCode:
    if isinstance(exc, AuthError):
        return ErrorCode.AUTH
    if isinstance(exc, LexicalSearchError):
        return ErrorCode.LEXICAL_TRANSPORT if exc.transport else ErrorCode.LEXICAL_INDEX
    if isinstance(exc, SemanticSearchError):
        return ErrorCode.SEMANTIC
    if isinstance(exc, ImageResolutionError):
        return ErrorCode.IMAGE
    if isinstance(exc, ClipboardError):
        return ErrorCode.CLIPBOARD
    if isinstance(exc, ConfigError):
        return ErrorCode.CONFIG
    return ErrorCode.UNKNOWN


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map any exception to its user-facing description and visibility."""
    return _ERRORS[error_code(exc)]
