"""Regenerate one slide from a new instruction and a media directive."""

from __future__ import annotations

import json
import logging
from typing import Any

from LLM_API.data_classes import StructuredOutputRequest, StructuredOutputResponse

from .errors import RegenerationError
from .prompts import build_regeneration_prompt
from .schema import SLIDE_SCHEMA, MediaRequest, Slide, load_json_payload, media_violations, parse_slide

LOGGER = logging.getLogger(__name__)


class SlideRegenerator:
    """Produce a single replacement slide anchored to the deck's topic."""

    def __init__(self, llm_client) -> None:
        self.llm_client = llm_client

    def regenerate(
        self,
        original_prompt: str,
        instruction: str,
        media_request: MediaRequest,
    ) -> Slide:
        """Return a slide honoring ``media_request`` or raise :class:`RegenerationError`.

        Media the caller did not ask for is stripped from the response and
        logged; media the caller asked for but did not get is an error.
        """

        media_request = MediaRequest(media_request)
        if not instruction or not instruction.strip():
            raise RegenerationError("Failed to regenerate slide: the new instruction is empty.")

        request = self.build_request(original_prompt, instruction, media_request)
        try:
            response = self.llm_client.generate_structured_output(request)
            slide = parse_slide(self._extract_payload(response))
        except RegenerationError as exc:
            LOGGER.error("Error regenerating slide: %s", exc)
            raise RegenerationError(
                f"Failed to regenerate slide: {exc.message}", original_error=exc
            ) from exc
        except Exception as exc:
            LOGGER.exception("Error regenerating slide")
            raise RegenerationError(
                f"Failed to regenerate slide: {exc}", original_error=exc
            ) from exc

        return self._enforce_media_request(slide, media_request)

    def build_request(
        self, original_prompt: str, instruction: str, media_request: MediaRequest
    ) -> StructuredOutputRequest:
        system_instruction, user_prompt = build_regeneration_prompt(
            original_prompt, instruction, media_request
        )
        return StructuredOutputRequest(
            prompt=user_prompt,
            system_instruction=system_instruction,
            schema=SLIDE_SCHEMA,
            schema_name="slide",
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _enforce_media_request(self, slide: Slide, media_request: MediaRequest) -> Slide:
        violations = media_violations(slide, media_request)
        if not violations:
            return slide

        LOGGER.warning(
            "Regenerated slide breaks the '%s' media request: %s",
            media_request.value,
            "; ".join(violations),
        )
        updates = {}
        if media_request is not MediaRequest.IMAGE and slide.image_prompt is not None:
            updates["image_prompt"] = None
        if media_request is not MediaRequest.CHART and slide.chart is not None:
            updates["chart"] = None
        slide = slide.model_copy(update=updates)

        remaining = media_violations(slide, media_request)
        if remaining:
            raise RegenerationError(
                f"Failed to regenerate slide: {'; '.join(remaining)}."
            )
        return slide

    def _extract_payload(self, response: StructuredOutputResponse) -> Any:
        if response is None:
            raise RegenerationError("The model returned no response.")
        if response.error:
            raise RegenerationError(response.error)
        if response.parsed_output is not None:
            return response.parsed_output
        if not response.text:
            raise RegenerationError(
                response.validation_error or "The model returned an empty response."
            )
        try:
            return load_json_payload(response.text)
        except json.JSONDecodeError as exc:
            raise RegenerationError(f"Response is not valid JSON: {exc}") from exc
