"""Provider layer: request/response data classes and the Gemini client."""

from .base import CallModel
from .data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse,
    ProviderConfig
)
from .exceptions import LLMError, LLMAuthenticationError, LLMRequestError

__all__ = [
    'CallModel',
    'BaseRequest', 'BaseResponse',
    'StructuredOutputRequest', 'StructuredOutputResponse',
    'ImageGenerationRequest', 'ImageGenerationResponse',
    'ProviderConfig',
    'LLMError', 'LLMAuthenticationError', 'LLMRequestError',
]
