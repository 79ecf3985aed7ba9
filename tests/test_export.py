import io

import pytest

pytest.importorskip("pptx")
pytest.importorskip("docx")
pytest.importorskip("matplotlib")
pytest.importorskip("pypdf")

from docx import Document
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pypdf import PdfReader

from hayagriva.export import (
    DOCX_MIME_TYPE,
    PDF_MIME_TYPE,
    PPTX_MIME_TYPE,
    export_docx,
    export_pdf,
    export_pptx,
)
from hayagriva.preview import figure_to_png, render_preview
from hayagriva.schema import DocumentType, Page, Slide
from hayagriva.templates import get_template
from tests.llm_stubs import bar_chart, make_jpeg

TEMPLATE = get_template("modern-green")


def _slides():
    return [
        Slide(title="Why solar", content=["Cheap", "Clean"], notes="Start with the why"),
        Slide(title="Panels", content=["Silicon cells"], image_prompt="Rooftop panels"),
        Slide.model_validate({"title": "Capacity", "content": [], "chart": bar_chart()}),
    ]


def _pages():
    return [
        Page(title="Overview", content=["Solar energy is growing.", "  "]),
        Page(title="", content=["Untitled section body."], image_prompt="Solar farm"),
        Page.model_validate({"title": "Numbers", "content": [], "chart": bar_chart()}),
    ]


# ----------------------------------------------------------------------
# PPTX
# ----------------------------------------------------------------------
def test_export_pptx_writes_titles_notes_and_images():
    result = export_pptx(_slides(), {1: make_jpeg()}, DocumentType.PRESENTATION, TEMPLATE)

    assert result.success
    assert result.file_name == "presentation.pptx"
    assert result.mime_type == PPTX_MIME_TYPE

    prs = Presentation(io.BytesIO(result.data))
    assert len(prs.slides) == 3
    texts = [
        shape.text_frame.text
        for shape in prs.slides[0].shapes
        if getattr(shape, "has_text_frame", False)
    ]
    assert "Why solar" in texts
    assert prs.slides[0].notes_slide.notes_text_frame.text == "Start with the why"
    pictures = [shape for shape in prs.slides[1].shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1
    assert not any(shape.shape_type == MSO_SHAPE_TYPE.PICTURE for shape in prs.slides[0].shapes)


def test_export_pptx_tolerates_missing_and_broken_images():
    result = export_pptx(
        _slides(), {0: b"not an image", 9: make_jpeg()}, DocumentType.PRESENTATION, TEMPLATE
    )

    assert result.success
    assert len(Presentation(io.BytesIO(result.data)).slides) == 3


def test_export_pptx_with_no_slides():
    result = export_pptx([], {}, DocumentType.PRESENTATION, TEMPLATE)

    assert result.success
    assert len(Presentation(io.BytesIO(result.data)).slides) == 0


def test_export_pptx_rejects_documents():
    result = export_pptx(_pages(), {}, DocumentType.DOCUMENT, TEMPLATE)

    assert not result.success
    assert result.data is None
    assert "only available for presentations" in result.error


# ----------------------------------------------------------------------
# DOCX
# ----------------------------------------------------------------------
def test_export_docx_writes_headings_paragraphs_and_images():
    result = export_docx(_pages(), {1: make_jpeg()}, DocumentType.DOCUMENT, TEMPLATE)

    assert result.success
    assert result.file_name == "document.docx"
    assert result.mime_type == DOCX_MIME_TYPE

    document = Document(io.BytesIO(result.data))
    headings = [p.text for p in document.paragraphs if p.style.name == "Heading 1"]
    assert headings == ["Overview", "Numbers"]
    texts = [p.text for p in document.paragraphs]
    assert "Solar energy is growing." in texts
    assert "  " not in texts
    assert len(document.inline_shapes) == 1
    assert document.inline_shapes[0].width == pytest.approx(int(6.5 * 914400), rel=1e-3)


def test_export_docx_replaces_undecodable_image_with_placeholder():
    result = export_docx(_pages(), {1: b"corrupt"}, DocumentType.DOCUMENT, TEMPLATE)

    assert result.success
    document = Document(io.BytesIO(result.data))
    placeholder = [
        run
        for paragraph in document.paragraphs
        for run in paragraph.runs
        if run.text == "[Image failed to load: Solar farm]"
    ]
    assert len(placeholder) == 1
    assert placeholder[0].italic
    assert len(document.inline_shapes) == 0


def test_export_docx_rejects_presentations():
    result = export_docx(_slides(), {}, DocumentType.PRESENTATION, TEMPLATE)

    assert not result.success
    assert "only available for documents" in result.error


def test_export_docx_with_no_pages():
    assert export_docx([], {}, DocumentType.DOCUMENT, TEMPLATE).success


# ----------------------------------------------------------------------
# PDF and preview
# ----------------------------------------------------------------------
def test_export_pdf_presentation_has_one_page_per_slide():
    result = export_pdf(_slides(), {1: make_jpeg()}, DocumentType.PRESENTATION, TEMPLATE)

    assert result.success
    assert result.file_name == "presentation.pdf"
    assert result.mime_type == PDF_MIME_TYPE
    assert result.data.startswith(b"%PDF")
    reader = PdfReader(io.BytesIO(result.data))
    assert len(reader.pages) == 3
    box = reader.pages[0].mediabox
    assert float(box.width) == pytest.approx(720)
    assert float(box.height) == pytest.approx(405)


def test_export_pdf_document_uses_a4_pages():
    result = export_pdf(_pages(), {1: b"corrupt"}, DocumentType.DOCUMENT, TEMPLATE, "Merriweather")

    assert result.success
    assert result.file_name == "document.pdf"
    reader = PdfReader(io.BytesIO(result.data))
    assert len(reader.pages) >= 3
    assert float(reader.pages[0].mediabox.height) > float(reader.pages[0].mediabox.width)


def test_export_pdf_with_no_content_is_still_a_pdf():
    result = export_pdf([], {}, DocumentType.PRESENTATION, TEMPLATE)

    assert result.success
    assert len(PdfReader(io.BytesIO(result.data)).pages) == 1


def test_long_document_page_continues_on_next_sheet():
    long_page = Page(title="Long", content=["word " * 120] * 30)

    figures = render_preview([long_page], {}, DocumentType.DOCUMENT, TEMPLATE)

    assert len(figures) > 1


def test_preview_draws_titles_but_not_notes():
    figures = render_preview(_slides(), {}, DocumentType.PRESENTATION, TEMPLATE)

    assert len(figures) == 3
    texts = [text.get_text() for text in figures[0].texts]
    assert "Why solar" in texts
    assert not any("Start with the why" in text for text in texts)
    assert figure_to_png(figures[2]).startswith(b"\x89PNG")


def _pdf_text(data):
    return "\n".join(page.extract_text() for page in PdfReader(io.BytesIO(data)).pages)


def _pptx_text(data):
    return "\n".join(
        shape.text_frame.text
        for slide in Presentation(io.BytesIO(data)).slides
        for shape in slide.shapes
        if getattr(shape, "has_text_frame", False)
    )


def _docx_text(data):
    return "\n".join(paragraph.text for paragraph in Document(io.BytesIO(data)).paragraphs)


@pytest.mark.parametrize(
    "export, item, document_type, read_text",
    [
        (export_pptx, Slide(title="Bare slide", content=[]), DocumentType.PRESENTATION, _pptx_text),
        (export_docx, Page(title="Bare page", content=[]), DocumentType.DOCUMENT, _docx_text),
        (export_pdf, Slide(title="Bare slide", content=[]), DocumentType.PRESENTATION, _pdf_text),
        (export_pdf, Page(title="Bare page", content=[]), DocumentType.DOCUMENT, _pdf_text),
    ],
)
def test_every_encoder_keeps_the_title_of_a_bare_item(export, item, document_type, read_text):
    result = export([item], {}, document_type, TEMPLATE)

    assert result.success, result.error
    assert item.title in read_text(result.data)


def test_dollar_amounts_survive_pdf_export():
    slide = Slide(
        title="Cost trends",
        content=["Module prices fell from $0.50/W in 2015 to $0.20/W in 2023"],
    )

    result = export_pdf([slide], {}, DocumentType.PRESENTATION, TEMPLATE)

    text = _pdf_text(result.data)
    assert "Cost trends" in text
    assert "$0.50/W in 2015 to $0.20/W" in text


def test_preview_text_is_never_parsed_as_math():
    chart = {
        "type": "bar",
        "labels": ["$1M", "$2M"],
        "datasets": [{"label": "Revenue in $ and €", "data": [1, 2]}],
    }
    slides = [
        Slide(title="Budget $5 to $10", content=["Spend $3 or $4"]),
        Slide.model_validate({"title": "Revenue", "content": [], "chart": chart}),
    ]

    figures = render_preview(slides, {}, DocumentType.PRESENTATION, TEMPLATE)

    assert all(not text.get_parse_math() for text in figures[0].texts)
    axes = figures[1].axes[0]
    labels = axes.get_xticklabels() + axes.get_legend().get_texts()
    assert [label.get_text() for label in axes.get_xticklabels()] == ["$1M", "$2M"]
    assert all(not label.get_parse_math() for label in labels)
