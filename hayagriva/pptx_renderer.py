"""Render slides into a 16:9 PPTX deck."""

from __future__ import annotations

import io
import logging
from typing import Mapping, Optional, Sequence

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from .schema import ContentItem
from .templates import Template, hex_to_rgb

LOGGER = logging.getLogger(__name__)

SLIDE_WIDTH = Inches(10)
SLIDE_HEIGHT = Inches(5.625)
BLANK_LAYOUT_INDEX = 6

TITLE_POINTS = 32
BULLET_POINTS = 18
BULLET_CHAR = "•"


class PresentationRenderer:
    """Render slide content into PPTX binaries."""

    def __init__(self, template: Template, font: Optional[str] = None) -> None:
        self.template = template
        self.font = font or template.font

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(
        self, content: Sequence[ContentItem], images: Mapping[int, bytes]
    ) -> io.BytesIO:
        """Return a PPTX stream with one slide per item in ``content``."""

        presentation = Presentation()
        presentation.slide_width = SLIDE_WIDTH
        presentation.slide_height = SLIDE_HEIGHT
        layout = presentation.slide_layouts[BLANK_LAYOUT_INDEX]

        for index, item in enumerate(content):
            slide = presentation.slides.add_slide(layout)
            self._fill_background(slide)
            self._write_title(slide, item.title)
            image = images.get(index)
            self._write_bullets(slide, item.content, narrow=image is not None)
            if image is not None:
                self._add_image(slide, image, index)
            notes = getattr(item, "notes", None)
            if notes:
                slide.notes_slide.notes_text_frame.text = notes

        buffer = io.BytesIO()
        presentation.save(buffer)
        buffer.seek(0)
        return buffer

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fill_background(self, slide) -> None:
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = RGBColor(*hex_to_rgb(self.template.colors.background))

    def _write_title(self, slide, title: str) -> None:
        box = slide.shapes.add_textbox(
            Inches(0.5), Inches(0.25), int(SLIDE_WIDTH * 0.9), Inches(1)
        )
        frame = box.text_frame
        frame.word_wrap = True
        run = frame.paragraphs[0].add_run()
        run.text = title
        self._style_run(run, TITLE_POINTS, self.template.colors.primary, bold=True)

    def _write_bullets(self, slide, points: Sequence[str], *, narrow: bool) -> None:
        width = int(SLIDE_WIDTH * (0.45 if narrow else 0.9))
        box = slide.shapes.add_textbox(Inches(0.5), Inches(1.5), width, Inches(4))
        frame = box.text_frame
        frame.word_wrap = True
        for position, point in enumerate(points):
            paragraph = frame.paragraphs[0] if position == 0 else frame.add_paragraph()
            _set_bullet(paragraph)
            run = paragraph.add_run()
            run.text = point
            self._style_run(run, BULLET_POINTS, self.template.colors.text)

    def _add_image(self, slide, data: bytes, index: int) -> None:
        try:
            slide.shapes.add_picture(
                io.BytesIO(data),
                int(SLIDE_WIDTH * 0.52),
                Inches(1.5),
                int(SLIDE_WIDTH * 0.45),
                Inches(4),
            )
        except Exception as exc:
            LOGGER.warning("Skipping unreadable image on slide %d: %s", index + 1, exc)

    def _style_run(self, run, points: int, color: str, *, bold: bool = False) -> None:
        run.font.size = Pt(points)
        run.font.bold = bold
        run.font.name = self.font
        run.font.color.rgb = RGBColor(*hex_to_rgb(color))


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------
def _set_bullet(paragraph, char: str = BULLET_CHAR) -> None:
    p_pr = paragraph._element.get_or_add_pPr()
    for child in list(p_pr):
        if child.tag in {qn("a:buChar"), qn("a:buAutoNum"), qn("a:buNone")}:
            p_pr.remove(child)
    p_pr.set("marL", str(Pt(BULLET_POINTS)))
    p_pr.set("indent", str(-Pt(BULLET_POINTS)))
    bullet = OxmlElement("a:buChar")
    bullet.set("char", char)
    p_pr.append(bullet)
