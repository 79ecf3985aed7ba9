from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


# ========== Base Classes ==========

@dataclass
class BaseRequest:
    """Base class for every provider request"""
    prompt: str = ""
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    system_instruction: Optional[str] = None


@dataclass
class BaseResponse:
    """Base class for every provider response"""
    text: str = ""
    model_used: Optional[str] = None
    error: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def success(self) -> bool:
        """Whether the request succeeded"""
        return self.error is None


# ========== Structured Output ==========

@dataclass
class StructuredOutputRequest(BaseRequest):
    """Request for JSON output constrained by a response schema"""
    schema: Dict[str, Any] = field(default_factory=dict)
    schema_name: str = "response"
    schema_description: Optional[str] = None


@dataclass
class StructuredOutputResponse(BaseResponse):
    """Structured output; ``parsed_output`` may be an object or an array"""
    parsed_output: Optional[Any] = None
    validation_error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether parsing succeeded"""
        return self.error is None and self.validation_error is None and self.parsed_output is not None


# ========== Image Generation ==========

@dataclass
class ImageGenerationRequest(BaseRequest):
    """Image synthesis request"""
    number_of_images: int = 1
    aspect_ratio: str = "16:9"
    output_mime_type: str = "image/jpeg"

    def __post_init__(self):
        """Validation"""
        if self.number_of_images < 1:
            raise ValueError("number_of_images must be at least 1")


@dataclass
class ImageGenerationResponse(BaseResponse):
    """Image synthesis response, raw encoded image bytes"""
    images: List[bytes] = field(default_factory=list)
    mime_type: Optional[str] = None

    @property
    def has_images(self) -> bool:
        """Whether at least one image came back"""
        return len(self.images) > 0


# ========== Provider-Specific Conversion Helpers ==========

@dataclass
class ProviderConfig:
    """Provider specific settings"""
    provider_name: str = ""
    model_name: str = ""
    image_model_name: Optional[str] = None
    supports_image_generation: bool = True

    # provider limits
    max_tokens_limit: Optional[int] = None
    max_images_per_request: Optional[int] = None

