import asyncio
import io

import pytest

pytest.importorskip("streamlit")
from PIL import Image

from LLM_API.data_classes import ImageGenerationRequest, StructuredOutputRequest

import app
from hayagriva.content_generator import ContentGenerator
from hayagriva.orchestrator import GenerationOrchestrator
from hayagriva.schema import DocumentType, MediaRequest
from hayagriva.slide_regenerator import SlideRegenerator
from hayagriva.templates import DEFAULT_TEMPLATE


def test_extract_topic_reads_creative_prompt():
    prompt = 'Create a PowerPoint presentation with exactly 3 slides about: "Solar energy"'

    assert app._extract_topic(prompt) == "Solar energy"


def test_extract_topic_prefers_grounded_instruction():
    prompt = '<CONTEXT>\nabout: "noise"\n</CONTEXT>\n\n<INSTRUCTION>\nSummarize revenue\n</INSTRUCTION>'

    assert app._extract_topic(prompt) == "Summarize revenue"


def test_demo_model_honours_requested_slide_count():
    request = ContentGenerator(app.DemoGenerativeModel()).build_request(
        "Solar energy", DocumentType.PRESENTATION, DEFAULT_TEMPLATE, 4
    )

    response = app.DemoGenerativeModel().generate_structured_output(request)

    assert response.success
    assert len(response.parsed_output) == 4
    assert response.parsed_output[1]["imagePrompt"].startswith("An illustration of")
    assert response.parsed_output[2]["chart"]["type"] == "bar"


def test_demo_model_regeneration_respects_media_request():
    request = SlideRegenerator(app.DemoGenerativeModel()).build_request(
        "Solar energy", "Show the costs", MediaRequest.CHART
    )

    payload = app.DemoGenerativeModel().generate_structured_output(request).parsed_output

    assert payload["title"] == "Show the costs"
    assert "chart" in payload
    assert "imagePrompt" not in payload


def test_demo_model_images_are_jpegs():
    response = app.DemoGenerativeModel().generate_image(
        ImageGenerationRequest(prompt="A professional image: a roof")
    )

    assert response.has_images
    with Image.open(io.BytesIO(response.images[0])) as picture:
        assert picture.format == "JPEG"


def test_demo_model_drives_the_whole_pipeline():
    orchestrator = GenerationOrchestrator.from_client(app.DemoGenerativeModel())
    orchestrator.set_slide_count(3)

    result = asyncio.run(orchestrator.generate("Solar energy"))

    assert result.success
    assert len(orchestrator.state.content) == 3
    assert set(orchestrator.state.images) == {1}

    result = asyncio.run(orchestrator.regenerate(0, "Add a photo", MediaRequest.IMAGE))

    assert result.success
    assert set(orchestrator.state.images) == {0, 1}


def test_demo_model_document_request():
    request = StructuredOutputRequest(prompt='about: "Solar"', schema_name="document")

    payload = app.DemoGenerativeModel().generate_structured_output(request).parsed_output

    assert len(payload) == app.DEMO_PAGE_COUNT
    assert all("notes" not in page for page in payload)


def test_export_key_is_stable_until_content_changes():
    orchestrator = GenerationOrchestrator.from_client(app.DemoGenerativeModel())
    orchestrator.set_slide_count(3)
    asyncio.run(orchestrator.generate("Solar energy"))
    state = orchestrator.state

    key = app.export_key(state)
    assert app.export_key(state) == key

    asyncio.run(orchestrator.regenerate(2, "Show the costs", MediaRequest.CHART))
    regenerated = app.export_key(state)
    assert regenerated != key

    orchestrator.set_font("Lato")
    assert app.export_key(state) != regenerated


def test_build_exports_matches_document_type():
    orchestrator = GenerationOrchestrator.from_client(app.DemoGenerativeModel())
    orchestrator.set_slide_count(2)
    asyncio.run(orchestrator.generate("Solar energy"))

    exports = app.build_exports(orchestrator.state)

    assert [label for _, label in exports] == ["Download PPTX", "Download PDF"]
    assert all(result.success for result, _ in exports)
