"""Fixed-layout PDF export built from the preview figures."""

from __future__ import annotations

import io
import logging
from typing import Mapping, Optional, Sequence

from matplotlib import rc_context
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from .preview import PAGE_SIZE, render_preview
from .schema import ContentItem, DocumentType
from .templates import Template

LOGGER = logging.getLogger(__name__)


class PdfRenderer:
    """Save one PDF page per preview figure.

    Slides become borderless 16:9 landscape pages; documents keep the A4
    portrait pages (and margins) laid out by the preview.
    """

    def __init__(
        self,
        document_type: DocumentType,
        template: Template,
        font: Optional[str] = None,
    ) -> None:
        self.document_type = DocumentType(document_type)
        self.template = template
        self.font = font or template.font

    def render(
        self, content: Sequence[ContentItem], images: Mapping[int, bytes]
    ) -> io.BytesIO:
        figures = render_preview(
            content, images, self.document_type, self.template, self.font
        )
        if not figures:
            # A PDF needs at least one page.
            figures = [Figure(figsize=PAGE_SIZE, facecolor="white")]

        buffer = io.BytesIO()
        with rc_context({"pdf.fonttype": 42}):
            with PdfPages(buffer) as pdf:
                for figure in figures:
                    pdf.savefig(figure, facecolor=figure.get_facecolor())
                metadata = pdf.infodict()
                metadata["Title"] = content[0].title if content else ""
                metadata["Creator"] = "Hayagriva"
        LOGGER.debug("Rendered %d PDF page(s)", len(figures))
        buffer.seek(0)
        return buffer
