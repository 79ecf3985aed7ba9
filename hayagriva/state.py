"""Mutable generation state owned by the orchestrator."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from .schema import DEFAULT_SLIDE_COUNT, ContentItem, DocumentType
from .templates import DEFAULT_TEMPLATE, Template


class GenerationPhase(str, Enum):
    IDLE = "idle"
    GENERATING_CONTENT = "generating_content"
    GENERATING_IMAGES = "generating_images"
    REGENERATING = "regenerating"
    READY = "ready"
    ERRORED = "errored"


def _new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass
class GenerationState:
    """Content, images and selections for one session.

    Items carry an opaque id assigned when they enter the state; images are
    stored by that id. :attr:`content` and :attr:`images` expose the
    position-based view (``images`` is keyed by item index).
    """

    document_type: DocumentType = DocumentType.PRESENTATION
    template: Template = DEFAULT_TEMPLATE
    font: str = DEFAULT_TEMPLATE.font
    slide_count: int = DEFAULT_SLIDE_COUNT
    prompt: str = ""
    grounding_text: Optional[str] = None
    attached_file_name: Optional[str] = None
    phase: GenerationPhase = GenerationPhase.IDLE
    busy: bool = False
    status_text: str = ""
    error: Optional[str] = None
    editing_index: Optional[int] = None
    warnings: List[str] = field(default_factory=list)
    _order: Optional[List[str]] = field(default=None, repr=False)
    _items: Dict[str, ContentItem] = field(default_factory=dict, repr=False)
    _images: Dict[str, bytes] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def content(self) -> Optional[List[ContentItem]]:
        if self._order is None:
            return None
        return [self._items[item_id] for item_id in self._order]

    @property
    def images(self) -> Dict[int, bytes]:
        if self._order is None:
            return {}
        return {
            index: self._images[item_id]
            for index, item_id in enumerate(self._order)
            if item_id in self._images
        }

    @property
    def item_ids(self) -> List[str]:
        return list(self._order or [])

    @property
    def has_content(self) -> bool:
        return self._order is not None

    @property
    def styled_template(self) -> Template:
        """The selected template with the (possibly overridden) font."""

        return self.template.with_font(self.font)

    def item_id_at(self, index: int) -> str:
        if self._order is None or not 0 <= index < len(self._order):
            raise IndexError(f"No content item at index {index}")
        return self._order[index]

    # ------------------------------------------------------------------
    # Mutation (orchestrator only)
    # ------------------------------------------------------------------
    def clear_generation(self) -> None:
        self._order = None
        self._items = {}
        self._images = {}
        self.editing_index = None

    def load_content(self, items: Sequence[ContentItem]) -> List[str]:
        """Replace every item (and drop every image); return the new ids."""

        self.clear_generation()
        self._order = []
        for item in items:
            item_id = _new_item_id()
            self._order.append(item_id)
            self._items[item_id] = item
        return list(self._order)

    def replace_item(self, index: int, item: ContentItem) -> str:
        """Swap the item at ``index`` for ``item`` under a fresh id.

        The previous item's image is discarded with it.
        """

        old_id = self.item_id_at(index)
        new_id = _new_item_id()
        self._order[index] = new_id
        del self._items[old_id]
        self._images.pop(old_id, None)
        self._items[new_id] = item
        return new_id

    def set_image(self, index: int, data: bytes) -> None:
        self._images[self.item_id_at(index)] = data

    def drop_image(self, index: int) -> None:
        self._images.pop(self.item_id_at(index), None)

    def merge_images(self, images: Mapping[int, bytes]) -> None:
        for index, data in images.items():
            self.set_image(index, data)
