"""Render document pages into an A4 DOCX file."""

from __future__ import annotations

import io
import logging
from typing import Mapping, Optional, Sequence, Tuple

from docx import Document
from docx.shared import Inches, Mm, Pt, RGBColor
from PIL import Image

from .schema import ContentItem
from .templates import Template, hex_to_rgb

LOGGER = logging.getLogger(__name__)

PAGE_MARGIN = Inches(1)
IMAGE_WIDTH_INCHES = 6.5


class DocumentRenderer:
    """Render pages as headings, images and paragraphs in one flowing section."""

    def __init__(self, template: Template, font: Optional[str] = None) -> None:
        self.template = template
        self.font = font or template.font

    def render(
        self, content: Sequence[ContentItem], images: Mapping[int, bytes]
    ) -> io.BytesIO:
        document = Document()
        self._setup_page(document)

        for index, page in enumerate(content):
            if page.title and page.title.strip():
                heading = document.add_heading(page.title, level=1)
                heading.paragraph_format.space_after = Pt(12)
                for run in heading.runs:
                    run.font.color.rgb = RGBColor(*hex_to_rgb(self.template.colors.primary))

            image = images.get(index)
            if image is not None:
                self._add_image(document, image, page.image_prompt, index)

            for text in page.content:
                if text and text.strip():
                    paragraph = document.add_paragraph(text)
                    paragraph.paragraph_format.space_after = Pt(6)

            spacer = document.add_paragraph("")
            spacer.paragraph_format.space_after = Pt(12)

        buffer = io.BytesIO()
        document.save(buffer)
        buffer.seek(0)
        return buffer

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _setup_page(self, document) -> None:
        section = document.sections[0]
        section.page_width = Mm(210)
        section.page_height = Mm(297)
        for side in ("left_margin", "right_margin", "top_margin", "bottom_margin"):
            setattr(section, side, PAGE_MARGIN)

        normal = document.styles["Normal"]
        normal.font.name = self.font
        normal.font.color.rgb = RGBColor(*hex_to_rgb(self.template.colors.text))

    def _add_image(
        self, document, data: bytes, prompt: Optional[str], index: int
    ) -> None:
        paragraph = document.add_paragraph()
        paragraph.paragraph_format.space_after = Pt(6)
        try:
            width, height = _pixel_size(data)
            paragraph.add_run().add_picture(
                io.BytesIO(data),
                width=Inches(IMAGE_WIDTH_INCHES),
                height=Inches(IMAGE_WIDTH_INCHES * height / width),
            )
        except Exception as exc:
            LOGGER.warning("Could not add image to page %d: %s", index + 1, exc)
            for run in list(paragraph.runs):
                run._element.getparent().remove(run._element)
            run = paragraph.add_run(f"[Image failed to load: {prompt or 'Untitled'}]")
            run.italic = True


def _pixel_size(data: bytes) -> Tuple[int, int]:
    with Image.open(io.BytesIO(data)) as picture:
        width, height = picture.size
    if not width or not height:
        raise ValueError("Image has zero dimensions.")
    return width, height
