"""Extract grounding text from uploaded PDF and PPTX files."""

from __future__ import annotations

import io
import logging
from pathlib import PurePath
from typing import List

from pptx import Presentation
from pptx.oxml.ns import qn
from pypdf import PdfReader

from .errors import UnsupportedInputError

LOGGER = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = "Unsupported file type. Please upload a PDF or PPTX file."
SUPPORTED_EXTENSIONS = (".pdf", ".pptx")


def parse_file(file_name: str, data: bytes) -> str:
    """Return the plain text of ``data``.

    The extension decides the parser and is checked before any bytes are
    read. Raises :class:`UnsupportedInputError` for other types, unreadable
    files and files without any text.
    """

    extension = PurePath(file_name or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedInputError(UNSUPPORTED_MESSAGE)

    try:
        if extension == ".pdf":
            text = _pdf_text(data)
        else:
            text = _pptx_text(data)
    except Exception as exc:
        LOGGER.warning("Could not read %s: %s", file_name, exc)
        raise UnsupportedInputError(
            f"Could not read {file_name}: {exc}", original_error=exc
        ) from exc

    if not text:
        raise UnsupportedInputError(f"No text could be extracted from {file_name}.")
    LOGGER.debug("Extracted %d characters from %s", len(text), file_name)
    return text


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------
def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages: List[str] = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")
    return "\n\n".join(pages).strip()


def _pptx_text(data: bytes) -> str:
    presentation = Presentation(io.BytesIO(data))
    slides: List[str] = []
    for slide in presentation.slides:
        runs = [node.text for node in slide.element.iter(qn("a:t")) if node.text]
        slides.append(" ".join(runs))
    return "\n\n".join(slides).strip()
