"""Structural contract for generated slides and pages.

The same contract is used in two directions: the ``*_SCHEMA`` dictionaries are
sent to the model as response schemas (Gemini dialect), and the pydantic
models validate whatever comes back before it reaches the orchestrator.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import GenerationError, RegenerationError

LOGGER = logging.getLogger(__name__)

MIN_SLIDE_COUNT = 1
MAX_SLIDE_COUNT = 25
DEFAULT_SLIDE_COUNT = 10


class DocumentType(str, Enum):
    PRESENTATION = "PRESENTATION"
    DOCUMENT = "DOCUMENT"


class MediaRequest(str, Enum):
    """Visual aid a regenerated slide must (or must not) carry."""

    IMAGE = "image"
    CHART = "chart"
    NONE = "none"


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"


# ----------------------------------------------------------------------
# Validation models
# ----------------------------------------------------------------------
class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        """Dump using the camelCase field names of the wire format."""

        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ChartDataset(_WireModel):
    label: str
    data: List[float]
    background_color: Optional[List[str]] = Field(default=None, alias="backgroundColor")


class ChartData(_WireModel):
    type: ChartType
    labels: List[str]
    datasets: List[ChartDataset]

    @model_validator(mode="after")
    def _align_series_lengths(self) -> "ChartData":
        # Labels and every series are cut to the shortest common length.
        lengths = [len(self.labels)] + [len(dataset.data) for dataset in self.datasets]
        common = min(lengths)
        if any(length != common for length in lengths):
            LOGGER.warning(
                "Chart series lengths %s do not match; truncating to %d points",
                lengths,
                common,
            )
            self.labels = self.labels[:common]
            for dataset in self.datasets:
                dataset.data = dataset.data[:common]
        return self

    @property
    def is_empty(self) -> bool:
        return not self.labels or not self.datasets


class ContentItem(_WireModel):
    """Fields shared by slides and pages."""

    title: str
    content: List[str]
    image_prompt: Optional[str] = Field(default=None, alias="imagePrompt")
    chart: Optional[ChartData] = None

    @field_validator("image_prompt")
    @classmethod
    def _blank_prompt_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def wants_image(self) -> bool:
        return self.image_prompt is not None


class Page(ContentItem):
    """A section of a flowing document."""


class Slide(ContentItem):
    """A presentation slide; ``notes`` are speaker notes."""

    notes: Optional[str] = None


# ----------------------------------------------------------------------
# Response schemas (Gemini dialect)
# ----------------------------------------------------------------------
CHART_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "type": {
            "type": "STRING",
            "enum": [chart_type.value for chart_type in ChartType],
            "description": "The type of chart to display.",
        },
        "labels": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "The labels for the x-axis (for bar/line) or segments (for pie).",
        },
        "datasets": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "label": {"type": "STRING", "description": "The label for this dataset."},
                    "data": {
                        "type": "ARRAY",
                        "items": {"type": "NUMBER"},
                        "description": "The numerical data for this dataset.",
                    },
                },
                "required": ["label", "data"],
            },
            "description": "The data series to be plotted on the chart.",
        },
    },
    "required": ["type", "labels", "datasets"],
}

_IMAGE_PROMPT_PROPERTY: Dict[str, Any] = {
    "type": "STRING",
    "description": (
        "A brief, descriptive prompt for a relevant, professional image. "
        'E.g., "A photo of a solar panel farm at sunset." '
        "Only add if an image would strongly enhance the content."
    ),
    "nullable": True,
}

_CHART_PROPERTY: Dict[str, Any] = {
    **CHART_SCHEMA,
    "description": "Data for a chart. Only include if data visualization is essential to explain the content.",
    "nullable": True,
}

SLIDE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "The title of the slide. Should be concise."},
        "content": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "An array of strings, each being a detailed and informative bullet point.",
        },
        "imagePrompt": _IMAGE_PROMPT_PROPERTY,
        "chart": _CHART_PROPERTY,
        "notes": {"type": "STRING", "description": "Speaker notes for the slide.", "nullable": True},
    },
    "required": ["title", "content"],
}

PAGE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "The title or heading of this document section."},
        "content": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "An array of strings, each being a full paragraph.",
        },
        "imagePrompt": _IMAGE_PROMPT_PROPERTY,
        "chart": _CHART_PROPERTY,
    },
    "required": ["title", "content"],
}

PRESENTATION_SCHEMA: Dict[str, Any] = {"type": "ARRAY", "items": SLIDE_SCHEMA}
DOCUMENT_SCHEMA: Dict[str, Any] = {"type": "ARRAY", "items": PAGE_SCHEMA}


def response_schema(document_type: DocumentType) -> Dict[str, Any]:
    if DocumentType(document_type) is DocumentType.PRESENTATION:
        return PRESENTATION_SCHEMA
    return DOCUMENT_SCHEMA


def item_model(document_type: DocumentType) -> Type[ContentItem]:
    if DocumentType(document_type) is DocumentType.PRESENTATION:
        return Slide
    return Page


def validate_slide_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"Slide count must be an integer, got {count!r}")
    if not MIN_SLIDE_COUNT <= count <= MAX_SLIDE_COUNT:
        raise ValueError(
            f"Slide count must be between {MIN_SLIDE_COUNT} and {MAX_SLIDE_COUNT}, got {count}"
        )
    return count


# ----------------------------------------------------------------------
# Boundary parsing
# ----------------------------------------------------------------------
_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def load_json_payload(text: str) -> Any:
    """Decode model text, tolerating a surrounding Markdown code fence.

    Raises :class:`json.JSONDecodeError` when the text is not JSON.
    """

    stripped = (text or "").strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        stripped = match.group(1)
    return json.loads(stripped)


def parse_items(payload: Any, document_type: DocumentType) -> List[ContentItem]:
    """Validate a full-generation payload into slides or pages."""

    if not isinstance(payload, list):
        raise GenerationError("API did not return a valid array.")

    model = item_model(document_type)
    items: List[ContentItem] = []
    for position, raw in enumerate(payload, start=1):
        try:
            items.append(model.model_validate(raw))
        except ValidationError as exc:
            raise GenerationError(
                f"Item {position} does not match the expected shape: {_summarize(exc)}",
                original_error=exc,
            ) from exc
    return items


def parse_slide(payload: Any) -> Slide:
    """Validate a single-slide regeneration payload."""

    if isinstance(payload, list) and len(payload) == 1:
        payload = payload[0]
    if not isinstance(payload, dict):
        raise RegenerationError("API did not return a single slide object.")
    try:
        return Slide.model_validate(payload)
    except ValidationError as exc:
        raise RegenerationError(
            f"Slide does not match the expected shape: {_summarize(exc)}",
            original_error=exc,
        ) from exc


def media_violations(item: ContentItem, media_request: MediaRequest) -> List[str]:
    """Describe every way ``item`` breaks the requested media constraint.

    An empty list means the item complies.
    """

    request = MediaRequest(media_request)
    has_image = item.image_prompt is not None
    has_chart = item.chart is not None
    problems: List[str] = []
    if request is MediaRequest.IMAGE:
        if not has_image:
            problems.append("an image was requested but no imagePrompt was returned")
        if has_chart:
            problems.append("a chart was returned although an image was requested")
    elif request is MediaRequest.CHART:
        if not has_chart:
            problems.append("a chart was requested but no chart data was returned")
        if has_image:
            problems.append("an imagePrompt was returned although a chart was requested")
    else:
        if has_image:
            problems.append("an imagePrompt was returned although no media was requested")
        if has_chart:
            problems.append("a chart was returned although no media was requested")
    return problems


def _summarize(exc: ValidationError, limit: int = 3) -> str:
    errors: Sequence[Dict[str, Any]] = exc.errors()
    parts = [
        f"{'.'.join(str(loc) for loc in error.get('loc', ())) or 'item'}: {error.get('msg')}"
        for error in errors[:limit]
    ]
    if len(errors) > limit:
        parts.append(f"and {len(errors) - limit} more")
    return "; ".join(parts)
