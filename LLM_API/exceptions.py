from datetime import datetime
from typing import Optional


class LLMError(Exception):
    """Raised when a text or image provider cannot serve a request.

    ``error_type`` is a short machine readable tag such as
    ``missing_api_key`` or ``empty_prompt``; ``original_error`` keeps the
    SDK exception when there is one.
    """

    def __init__(
        self,
        message: str,
        provider: str = "",
        error_type: str = "general",
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.error_type = error_type
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self):
        if self.provider:
            return f"{self.provider}: {self.message}"
        return self.message


class LLMAuthenticationError(LLMError):
    """No usable API key for the provider"""


class LLMRequestError(LLMError):
    """The request was rejected before it reached the provider"""
