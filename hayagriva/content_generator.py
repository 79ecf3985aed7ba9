"""Full document generation through structured model output."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from LLM_API.data_classes import StructuredOutputRequest, StructuredOutputResponse

from .config import DEFAULT_MAX_GROUNDING_CHARS
from .errors import GenerationError
from .prompts import build_creative_prompt, build_grounded_prompt
from .schema import (
    ContentItem,
    DocumentType,
    load_json_payload,
    parse_items,
    response_schema,
    validate_slide_count,
)
from .templates import Template

LOGGER = logging.getLogger(__name__)


class ContentGenerator:
    """Turn a prompt (and optional grounding text) into slides or pages."""

    def __init__(
        self,
        llm_client,
        *,
        max_grounding_chars: int = DEFAULT_MAX_GROUNDING_CHARS,
    ) -> None:
        self.llm_client = llm_client
        self.max_grounding_chars = max_grounding_chars

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(
        self,
        prompt: str,
        document_type: DocumentType,
        template: Template,
        item_count: int,
        grounding_text: Optional[str] = None,
    ) -> List[ContentItem]:
        """Return the generated items, or raise :class:`GenerationError`.

        For presentations exactly ``item_count`` slides are requested; the
        count actually returned is not reconciled, only logged when it
        differs.
        """

        document_type = DocumentType(document_type)
        if document_type is DocumentType.PRESENTATION:
            validate_slide_count(item_count)

        request = self.build_request(
            prompt, document_type, template, item_count, grounding_text
        )

        try:
            response = self.llm_client.generate_structured_output(request)
            payload = self._extract_payload(response)
            items = parse_items(payload, document_type)
        except GenerationError as exc:
            LOGGER.error("Error generating content: %s", exc)
            raise GenerationError(
                f"Failed to generate content: {exc.message}", original_error=exc
            ) from exc
        except Exception as exc:
            LOGGER.exception("Error generating content")
            raise GenerationError(
                f"Failed to generate content: {exc}", original_error=exc
            ) from exc

        if document_type is DocumentType.PRESENTATION and len(items) != item_count:
            LOGGER.warning(
                "Requested %d slides but the model returned %d", item_count, len(items)
            )
        return items

    def build_request(
        self,
        prompt: str,
        document_type: DocumentType,
        template: Template,
        item_count: int,
        grounding_text: Optional[str] = None,
    ) -> StructuredOutputRequest:
        """Assemble the outbound request without sending it."""

        document_type = DocumentType(document_type)
        if grounding_text:
            system_instruction, user_prompt = build_grounded_prompt(
                prompt,
                self._bounded_grounding(grounding_text),
                document_type,
                template,
                item_count,
            )
        else:
            system_instruction, user_prompt = build_creative_prompt(
                prompt, document_type, template, item_count
            )

        return StructuredOutputRequest(
            prompt=user_prompt,
            system_instruction=system_instruction,
            schema=response_schema(document_type),
            schema_name=document_type.value.lower(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _bounded_grounding(self, grounding_text: str) -> str:
        text = grounding_text.strip()
        if len(text) <= self.max_grounding_chars:
            return text
        LOGGER.warning(
            "Grounding text has %d characters; truncating to %d",
            len(text),
            self.max_grounding_chars,
        )
        return text[: self.max_grounding_chars]

    def _extract_payload(self, response: StructuredOutputResponse) -> Any:
        if response is None:
            raise GenerationError("The model returned no response.")
        if response.error:
            raise GenerationError(response.error)
        if response.parsed_output is not None:
            return response.parsed_output
        if not response.text:
            raise GenerationError(
                response.validation_error or "The model returned an empty response."
            )
        try:
            return load_json_payload(response.text)
        except json.JSONDecodeError as exc:
            LOGGER.debug("Failed to parse structured output text: %s", response.text)
            raise GenerationError(f"Response is not valid JSON: {exc}") from exc
