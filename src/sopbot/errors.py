from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOTION_UNAUTHORIZED = "NOTION_UNAUTHORIZED"
    NOTION_NOT_FOUND = "NOTION_NOT_FOUND"
    NOTION_RATE_LIMITED = "NOTION_RATE_LIMITED"
    NOTION_REQUEST_FAILED = "NOTION_REQUEST_FAILED"
    COMPLETION_FAILED = "COMPLETION_FAILED"
    INVALID_INPUT = "INVALID_INPUT"


class SopBotError(Exception):
    """Raised for all expected failures talking to Notion or the model.

    Caught by transport.py and rendered into the apology reply. The
    ``message`` and ``suggestion`` are shown to the user verbatim, so they
    must stay short and never carry a traceback.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable
