"""Export boundary: turn the current content into downloadable files.

Every function here returns an :class:`ExportResult`; renderer failures are
logged and reported through ``error`` instead of being raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .docx_renderer import DocumentRenderer
from .errors import ExportError
from .pdf_renderer import PdfRenderer
from .pptx_renderer import PresentationRenderer
from .schema import ContentItem, DocumentType
from .templates import Template

LOGGER = logging.getLogger(__name__)

PPTX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME_TYPE = "application/pdf"


@dataclass
class ExportResult:
    file_name: str
    mime_type: str
    data: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.data is not None


def export_pptx(
    content: Sequence[ContentItem],
    images: Mapping[int, bytes],
    document_type: DocumentType,
    template: Template,
    font: Optional[str] = None,
) -> ExportResult:
    result = ExportResult("presentation.pptx", PPTX_MIME_TYPE)
    try:
        if DocumentType(document_type) is not DocumentType.PRESENTATION:
            raise ExportError("PPTX export is only available for presentations.")
        result.data = PresentationRenderer(template, font).render(content, images).getvalue()
    except Exception as exc:
        result.error = _failure("PPTX", exc)
    return result


def export_docx(
    content: Sequence[ContentItem],
    images: Mapping[int, bytes],
    document_type: DocumentType,
    template: Template,
    font: Optional[str] = None,
) -> ExportResult:
    result = ExportResult("document.docx", DOCX_MIME_TYPE)
    try:
        if DocumentType(document_type) is not DocumentType.DOCUMENT:
            raise ExportError("DOCX export is only available for documents.")
        result.data = DocumentRenderer(template, font).render(content, images).getvalue()
    except Exception as exc:
        result.error = _failure("DOCX", exc)
    return result


def export_pdf(
    content: Sequence[ContentItem],
    images: Mapping[int, bytes],
    document_type: DocumentType,
    template: Template,
    font: Optional[str] = None,
) -> ExportResult:
    result = ExportResult("document.pdf", PDF_MIME_TYPE)
    try:
        if DocumentType(document_type) is DocumentType.PRESENTATION:
            result.file_name = "presentation.pdf"
        renderer = PdfRenderer(document_type, template, font)
        result.data = renderer.render(content, images).getvalue()
    except Exception as exc:
        result.error = _failure("PDF", exc)
    return result


def _failure(kind: str, exc: Exception) -> str:
    if isinstance(exc, ExportError):
        LOGGER.warning("%s export rejected: %s", kind, exc)
        return str(exc)
    LOGGER.exception("%s export failed", kind)
    return f"Sorry, there was an error creating the {kind} file: {exc}"
