"""Sequence content generation, image fan-out and slide regeneration."""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from .config import DEFAULT_CALL_TIMEOUT, Settings
from .content_generator import ContentGenerator
from .errors import GenerationError, HayagrivaError, ImageError, RegenerationError, UnsupportedInputError
from .file_context import parse_file
from .image_synthesizer import ImageSynthesizer
from .schema import (
    ContentItem,
    DocumentType,
    MediaRequest,
    Page,
    validate_slide_count,
)
from .slide_regenerator import SlideRegenerator
from .state import GenerationPhase, GenerationState
from .templates import FONTS, get_template

LOGGER = logging.getLogger(__name__)

BUSY_MESSAGE = "Another generation is already in progress. Please wait for it to finish."

# asyncio.run joins its default executor on shutdown, so a timed-out call
# left running there would hold the caller until it finished.
PROVIDER_POOL = concurrent.futures.ThreadPoolExecutor(
    max_workers=32, thread_name_prefix="hayagriva_provider"
)


@dataclass
class OperationResult:
    """Outcome of an orchestrator operation; failures never raise."""

    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    images_requested: int = 0
    images_generated: int = 0

    @property
    def success(self) -> bool:
        return self.error is None


def default_media_request(item: ContentItem) -> MediaRequest:
    """The media option an edit form should preselect for ``item``."""

    if item.image_prompt:
        return MediaRequest.IMAGE
    if item.chart is not None:
        return MediaRequest.CHART
    return MediaRequest.NONE


class GenerationOrchestrator:
    """Own the :class:`GenerationState` and every mutation applied to it."""

    def __init__(
        self,
        generator: ContentGenerator,
        regenerator: SlideRegenerator,
        synthesizer: ImageSynthesizer,
        *,
        state: Optional[GenerationState] = None,
        call_timeout: Optional[float] = DEFAULT_CALL_TIMEOUT,
        file_parser: Callable[[str, bytes], str] = parse_file,
        executor: Optional[concurrent.futures.Executor] = None,
    ) -> None:
        self.generator = generator
        self.regenerator = regenerator
        self.synthesizer = synthesizer
        self.state = state or GenerationState()
        self.call_timeout = call_timeout
        self.file_parser = file_parser
        self.executor = executor or PROVIDER_POOL

    @classmethod
    def from_client(
        cls,
        llm_client,
        settings: Optional[Settings] = None,
        *,
        state: Optional[GenerationState] = None,
    ) -> "GenerationOrchestrator":
        """Wire every component to the same provider client."""

        settings = settings or Settings()
        return cls(
            ContentGenerator(llm_client, max_grounding_chars=settings.max_grounding_chars),
            SlideRegenerator(llm_client),
            ImageSynthesizer(llm_client),
            state=state,
            call_timeout=settings.call_timeout,
        )

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------
    def select_template(self, template_id: str) -> None:
        template = get_template(template_id)
        self.state.template = template
        self.state.font = template.font

    def set_font(self, font: str) -> None:
        if font not in FONTS:
            raise ValueError(f"Unknown font: {font}")
        self.state.font = font

    def set_document_type(self, document_type: DocumentType) -> None:
        self.state.document_type = DocumentType(document_type)

    def set_slide_count(self, count: int) -> None:
        self.state.slide_count = validate_slide_count(count)

    def begin_edit(self, index: int) -> None:
        self.state.item_id_at(index)
        self.state.editing_index = index

    def cancel_edit(self) -> None:
        self.state.editing_index = None

    # ------------------------------------------------------------------
    # Grounding file
    # ------------------------------------------------------------------
    def attach_file(self, file_name: str, data: bytes) -> OperationResult:
        state = self.state
        if state.busy:
            return OperationResult(error=BUSY_MESSAGE)

        state.attached_file_name = None
        state.grounding_text = None
        try:
            text = self.file_parser(file_name, data)
        except UnsupportedInputError as exc:
            message = f"Failed to parse file: {exc}"
            LOGGER.warning(message)
            state.error = message
            return OperationResult(error=message)

        state.attached_file_name = file_name
        state.grounding_text = text
        state.error = None
        LOGGER.info("Attached %s (%d characters of grounding text)", file_name, len(text))
        return OperationResult()

    def remove_file(self) -> None:
        self.state.attached_file_name = None
        self.state.grounding_text = None

    # ------------------------------------------------------------------
    # Full generation
    # ------------------------------------------------------------------
    async def generate(self, prompt: str) -> OperationResult:
        """Generate a fresh document, then its images.

        Image failures are soft: they are logged, reported as warnings and
        leave no entry in ``state.images``.
        """

        state = self.state
        prompt = (prompt or "").strip()
        if not prompt:
            return OperationResult(error="Please enter a prompt to generate content.")
        if state.busy:
            return OperationResult(error=BUSY_MESSAGE)

        state.busy = True
        state.error = None
        state.warnings = []
        state.clear_generation()
        state.prompt = prompt
        state.phase = GenerationPhase.GENERATING_CONTENT
        state.status_text = "Generating content..."
        try:
            try:
                items = await self._run_blocking(
                    functools.partial(
                        self.generator.generate,
                        prompt,
                        state.document_type,
                        state.styled_template,
                        state.slide_count,
                        state.grounding_text,
                    ),
                    error_cls=GenerationError,
                    label="Content generation",
                )
            except (GenerationError, ValueError) as exc:
                return self._fail(str(exc))

            state.load_content(items)
            result = OperationResult()
            if (
                state.document_type is DocumentType.PRESENTATION
                and len(items) != state.slide_count
            ):
                result.warnings.append(
                    f"Requested {state.slide_count} slides but received {len(items)}."
                )

            requests = [
                (index, item.image_prompt)
                for index, item in enumerate(items)
                if item.image_prompt
            ]
            if requests:
                state.phase = GenerationPhase.GENERATING_IMAGES
                state.status_text = f"Generating {len(requests)} image(s)..."
                images = await self.synthesize_batch(requests)
                state.merge_images(images)
                result.images_requested = len(requests)
                result.images_generated = len(images)
                failed = len(requests) - len(images)
                if failed:
                    result.warnings.append(
                        f"{failed} of {len(requests)} image(s) could not be generated."
                    )

            state.phase = GenerationPhase.READY
            state.warnings = list(result.warnings)
            return result
        finally:
            state.busy = False
            state.status_text = ""

    async def synthesize_batch(
        self, requests: Sequence[Tuple[int, str]]
    ) -> Dict[int, bytes]:
        """Synthesize every ``(index, prompt)`` concurrently.

        The returned map holds exactly the indices whose call succeeded.
        """

        results = await asyncio.gather(
            *(self._synthesize_one(index, prompt) for index, prompt in requests)
        )
        return {index: data for index, data in results if data is not None}

    # ------------------------------------------------------------------
    # Regeneration
    # ------------------------------------------------------------------
    async def regenerate(
        self, index: int, instruction: str, media_request: MediaRequest
    ) -> OperationResult:
        """Replace ``content[index]`` (and its image) leaving other items alone."""

        state = self.state
        state.editing_index = None
        if state.busy:
            return OperationResult(error=BUSY_MESSAGE)
        if not state.has_content:
            return OperationResult(error="Generate content before regenerating a slide.")
        try:
            media_request = MediaRequest(media_request)
            state.item_id_at(index)
        except (ValueError, IndexError) as exc:
            return OperationResult(error=str(exc))

        state.busy = True
        state.error = None
        state.warnings = []
        state.phase = GenerationPhase.REGENERATING
        state.status_text = f"Regenerating slide {index + 1}..."
        try:
            try:
                slide = await self._run_blocking(
                    functools.partial(
                        self.regenerator.regenerate, state.prompt, instruction, media_request
                    ),
                    error_cls=RegenerationError,
                    label=f"Regeneration of slide {index + 1}",
                )
            except RegenerationError as exc:
                message = str(exc)
                LOGGER.warning(message)
                state.error = message
                state.phase = GenerationPhase.READY
                return OperationResult(error=message)

            item: ContentItem = slide
            if state.document_type is DocumentType.DOCUMENT:
                item = Page.model_validate(slide.model_dump(exclude={"notes"}))
            state.replace_item(index, item)

            result = OperationResult()
            if item.image_prompt:
                state.status_text = f"Generating new image for slide {index + 1}..."
                result.images_requested = 1
                images = await self.synthesize_batch([(index, item.image_prompt)])
                if index in images:
                    state.set_image(index, images[index])
                    result.images_generated = 1
                else:
                    result.warnings.append(
                        f"The new image for slide {index + 1} could not be generated."
                    )
            else:
                state.drop_image(index)

            state.phase = GenerationPhase.READY
            state.warnings = list(result.warnings)
            return result
        finally:
            state.busy = False
            state.status_text = ""
            state.editing_index = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _synthesize_one(self, index: int, prompt: str) -> Tuple[int, Optional[bytes]]:
        try:
            data = await self._run_blocking(
                functools.partial(self.synthesizer.synthesize, prompt),
                error_cls=ImageError,
                label=f"Image for item {index + 1}",
            )
        except ImageError as exc:
            LOGGER.warning("Failed to generate image for item %d: %s", index, exc)
            return index, None
        return index, data

    async def _run_blocking(
        self,
        call: Callable[[], object],
        *,
        error_cls: Type[HayagrivaError],
        label: str,
    ):
        """Run a blocking provider call on the provider pool under the timeout."""

        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self.executor, call), timeout=self.call_timeout
            )
        except asyncio.TimeoutError as exc:
            raise error_cls(
                f"{label} timed out after {self.call_timeout:g} seconds.",
                original_error=exc,
            ) from exc

    def _fail(self, message: str) -> OperationResult:
        LOGGER.error("Generation failed: %s", message)
        self.state.clear_generation()
        self.state.error = message
        self.state.phase = GenerationPhase.ERRORED
        return OperationResult(error=message)
