import json
from typing import Optional, List
from google import genai
from google.genai import types
from dotenv import load_dotenv
from ..data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse,
    ProviderConfig
)
from ..converters import GeminiConverter
from ..decorators import log_request
from ._base_provider import BaseProvider


class GeminiModel(BaseProvider):
    """Gemini API implementation of CallModel using data classes"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gemini-2.5-flash",
        image_model_name: str = "imagen-4.0-generate-001",
        timeout_seconds: Optional[float] = None,
    ):
        self.timeout_seconds = timeout_seconds
        super().__init__(api_key=api_key, model_name=model_name, image_model_name=image_model_name)

    def _get_provider_config(self) -> ProviderConfig:
        """Get Gemini provider configuration"""
        return ProviderConfig(
            provider_name="Gemini",
            model_name=self.model_name or "gemini-2.5-flash",
            image_model_name=self.image_model_name or "imagen-4.0-generate-001",
            supports_image_generation=True,
            max_tokens_limit=65536,
            max_images_per_request=4,
        )

    def setup_client(self):
        """Setup Gemini client"""
        load_dotenv()
        api_key = self._get_api_key(("GEMINI_API_KEY", "API_KEY"))
        http_options = None
        if self.timeout_seconds:
            http_options = types.HttpOptions(timeout=int(self.timeout_seconds * 1000))
        self.client = genai.Client(api_key=api_key, http_options=http_options)

    @log_request
    def generate_content(self, request: BaseRequest) -> BaseResponse:
        """Generate plain text content"""
        model = request.model_name or self.model_name
        try:
            config = None
            if request.system_instruction:
                config = types.GenerateContentConfig(system_instruction=request.system_instruction)
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=config,
            )
            return BaseResponse(
                text=getattr(response, 'text', '') or "",
                model_used=model,
                raw_response=response
            )
        except Exception as e:
            return BaseResponse(text="", model_used=model, error=str(e))

    @log_request
    def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        """Generate JSON constrained by ``request.schema``"""
        model = request.model_name or self.model_name
        try:
            self._validate_request(request)
            response = self.client.models.generate_content(
                model=model,
                contents=request.prompt,
                config=types.GenerateContentConfig(
                    **GeminiConverter.convert_structured_output_request(request)
                ),
            )
        except Exception as e:
            return StructuredOutputResponse(
                text="",
                model_used=model,
                error=f"Structured output failed: {e}"
            )

        text = (getattr(response, 'text', '') or "").strip()
        parsed_output = getattr(response, 'parsed', None)
        validation_error = None
        if parsed_output is None and text:
            try:
                parsed_output = json.loads(text)
            except json.JSONDecodeError as e:
                validation_error = f"Response is not valid JSON: {e}"
        return StructuredOutputResponse(
            text=text,
            parsed_output=parsed_output,
            validation_error=validation_error,
            model_used=model,
            raw_response=response
        )

    @log_request
    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """Generate images with the Imagen model"""
        model = request.model_name or self.image_model_name
        try:
            self._validate_request(request)
            response = self.client.models.generate_images(
                model=model,
                prompt=request.prompt,
                config=types.GenerateImagesConfig(
                    **GeminiConverter.convert_image_request(request)
                ),
            )
        except Exception as e:
            return ImageGenerationResponse(model_used=model, error=str(e))

        images: List[bytes] = []
        for generated in getattr(response, 'generated_images', None) or []:
            image = getattr(generated, 'image', None)
            image_bytes = getattr(image, 'image_bytes', None)
            if image_bytes:
                images.append(image_bytes)
        return ImageGenerationResponse(
            images=images,
            mime_type=request.output_mime_type,
            model_used=model,
            raw_response=response
        )
