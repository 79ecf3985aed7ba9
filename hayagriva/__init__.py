"""AI-assisted presentation and document generation."""

from .config import Settings, configure_logging
from .content_generator import ContentGenerator
from .errors import (
    ExportError,
    GenerationError,
    HayagrivaError,
    ImageError,
    RegenerationError,
    UnsupportedInputError,
)
from .export import ExportResult, export_docx, export_pdf, export_pptx
from .file_context import parse_file
from .image_synthesizer import ImageSynthesizer
from .orchestrator import GenerationOrchestrator, OperationResult, default_media_request
from .preview import figure_to_png, render_preview
from .schema import ChartData, ChartDataset, ChartType, DocumentType, MediaRequest, Page, Slide
from .slide_regenerator import SlideRegenerator
from .state import GenerationPhase, GenerationState
from .templates import FONTS, TEMPLATES, Template, get_template

__all__ = [
    "Settings",
    "configure_logging",
    "ContentGenerator",
    "SlideRegenerator",
    "ImageSynthesizer",
    "GenerationOrchestrator",
    "OperationResult",
    "default_media_request",
    "GenerationState",
    "GenerationPhase",
    "DocumentType",
    "MediaRequest",
    "ChartType",
    "ChartData",
    "ChartDataset",
    "Slide",
    "Page",
    "Template",
    "TEMPLATES",
    "FONTS",
    "get_template",
    "parse_file",
    "render_preview",
    "figure_to_png",
    "ExportResult",
    "export_pptx",
    "export_docx",
    "export_pdf",
    "HayagrivaError",
    "GenerationError",
    "RegenerationError",
    "ImageError",
    "ExportError",
    "UnsupportedInputError",
]
