"""Error taxonomy shared by the generation pipeline and the exporters."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class HayagrivaError(Exception):
    """Base exception for every failure surfaced by the pipeline."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.timestamp = datetime.now()

    def __str__(self) -> str:
        return self.message


class GenerationError(HayagrivaError):
    """Full document generation failed (provider error or malformed payload)."""


class RegenerationError(GenerationError):
    """Single slide regeneration failed; the previous slide stays in place."""


class ImageError(HayagrivaError):
    """Image synthesis failed for one item."""


class ExportError(HayagrivaError):
    """An export encoder could not produce its artifact."""


class UnsupportedInputError(HayagrivaError):
    """An attached grounding file could not be read."""
