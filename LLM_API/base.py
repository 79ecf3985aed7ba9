"""Common interface shared by the content and image providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .data_classes import (
    BaseRequest,
    BaseResponse,
    ImageGenerationRequest,
    ImageGenerationResponse,
    ProviderConfig,
    StructuredOutputRequest,
    StructuredOutputResponse,
)


class CallModel(ABC):
    """A provider that can write text, JSON and pictures.

    Subclasses build their SDK client in :meth:`setup_client`; failures in
    the ``generate_*`` calls are reported on the returned response rather
    than raised.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        image_model_name: Optional[str] = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.image_model_name = image_model_name
        self.client = None
        self.provider_config = self._get_provider_config()
        self.setup_client()

    @abstractmethod
    def setup_client(self) -> None:
        """Create the SDK client, raising LLMAuthenticationError without a key."""

    @abstractmethod
    def _get_provider_config(self) -> ProviderConfig:
        ...

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    @abstractmethod
    def generate_content(self, request: BaseRequest) -> BaseResponse:
        """Free-form text."""

    @abstractmethod
    def generate_structured_output(
        self, request: StructuredOutputRequest
    ) -> StructuredOutputResponse:
        """JSON that follows ``request.schema``."""

    @abstractmethod
    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """Encoded images for ``request.prompt``."""

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def supports_images(self) -> bool:
        return self.provider_config.supports_image_generation

    def describe(self) -> str:
        """One line naming the provider and its models, for display."""

        config = self.provider_config
        text = f"{config.provider_name} · {self.model_name or config.model_name}"
        image_model = self.image_model_name or config.image_model_name
        if self.supports_images and image_model:
            text += f" + {image_model}"
        return text
