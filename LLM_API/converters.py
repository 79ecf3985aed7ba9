from typing import Dict, Any
from .data_classes import StructuredOutputRequest, ImageGenerationRequest


class GeminiConverter:
    """Convert data classes to Gemini API config arguments"""

    @staticmethod
    def convert_structured_output_request(request: StructuredOutputRequest) -> Dict[str, Any]:
        """Convert StructuredOutputRequest to GenerateContentConfig keyword arguments"""
        config: Dict[str, Any] = {
            "response_mime_type": "application/json",
            "response_schema": request.schema,
        }

        if request.system_instruction:
            config["system_instruction"] = request.system_instruction
        if request.temperature is not None:
            config["temperature"] = request.temperature
        if request.max_tokens:
            config["max_output_tokens"] = request.max_tokens

        return config

    @staticmethod
    def convert_image_request(request: ImageGenerationRequest) -> Dict[str, Any]:
        """Convert ImageGenerationRequest to GenerateImagesConfig keyword arguments"""
        return {
            "number_of_images": request.number_of_images,
            "output_mime_type": request.output_mime_type,
            "aspect_ratio": request.aspect_ratio,
        }
