"""Single-image synthesis for slides and pages."""

from __future__ import annotations

import logging

from LLM_API.data_classes import ImageGenerationRequest

from .errors import ImageError
from .prompts import frame_image_prompt

LOGGER = logging.getLogger(__name__)

IMAGE_ASPECT_RATIO = "16:9"
IMAGE_MIME_TYPE = "image/jpeg"


class ImageSynthesizer:
    """Request exactly one wide JPEG image per prompt."""

    def __init__(self, llm_client) -> None:
        self.llm_client = llm_client

    def synthesize(self, prompt: str) -> bytes:
        if not prompt or not prompt.strip():
            raise ImageError("Failed to generate image: the image prompt is empty.")

        request = ImageGenerationRequest(
            prompt=frame_image_prompt(prompt),
            number_of_images=1,
            aspect_ratio=IMAGE_ASPECT_RATIO,
            output_mime_type=IMAGE_MIME_TYPE,
        )
        try:
            response = self.llm_client.generate_image(request)
        except Exception as exc:
            LOGGER.error("Error generating image: %s", exc)
            raise ImageError(f"Failed to generate image: {exc}", original_error=exc) from exc

        if response is None:
            raise ImageError("Failed to generate image: the model returned no response.")
        if response.error:
            raise ImageError(f"Failed to generate image: {response.error}")
        if not response.images:
            raise ImageError("Failed to generate image: No image was generated from the prompt.")
        return response.images[0]
