import os
from typing import Sequence
from ..base import CallModel
from ..data_classes import ImageGenerationRequest
from ..exceptions import LLMAuthenticationError, LLMRequestError


class BaseProvider(CallModel):
    """Key lookup and request checks shared by concrete providers"""

    def _get_api_key(self, env_var_names: Sequence[str]) -> str:
        """Explicit key first, then the first populated environment variable"""
        api_key = self.api_key
        for name in env_var_names:
            if api_key:
                break
            api_key = os.getenv(name)

        if not api_key:
            raise LLMAuthenticationError(
                message=(
                    f"API key required. Set {' or '.join(env_var_names)} "
                    "or pass api_key parameter"
                ),
                provider=self.provider_config.provider_name,
                error_type="missing_api_key"
            )

        return api_key

    def _validate_request(self, request):
        name = self.provider_config.provider_name
        if not request.prompt or not request.prompt.strip():
            raise LLMRequestError("Request must have a prompt", name, "empty_prompt")

        limit = self.provider_config.max_tokens_limit
        if request.max_tokens and limit and request.max_tokens > limit:
            raise LLMRequestError(f"max_tokens exceeds limit: {limit}", name, "max_tokens")

        max_images = self.provider_config.max_images_per_request
        if isinstance(request, ImageGenerationRequest) and max_images:
            if request.number_of_images > max_images:
                raise LLMRequestError(
                    f"At most {max_images} images per request", name, "too_many_images"
                )
