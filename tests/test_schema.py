import pytest

from hayagriva.errors import GenerationError, RegenerationError
from hayagriva.schema import (
    DOCUMENT_SCHEMA,
    PRESENTATION_SCHEMA,
    SLIDE_SCHEMA,
    ChartData,
    ChartType,
    DocumentType,
    MediaRequest,
    Page,
    Slide,
    load_json_payload,
    media_violations,
    parse_items,
    parse_slide,
    response_schema,
    validate_slide_count,
)
from tests.llm_stubs import bar_chart, slide_payload


def test_parse_items_builds_slides_from_wire_names():
    payload = [
        slide_payload("Intro", notes="Welcome everyone"),
        slide_payload("Panels", image_prompt="Solar panels at sunset"),
        slide_payload("Growth", chart=bar_chart()),
    ]

    slides = parse_items(payload, DocumentType.PRESENTATION)

    assert [type(slide) for slide in slides] == [Slide, Slide, Slide]
    assert slides[0].notes == "Welcome everyone"
    assert slides[1].image_prompt == "Solar panels at sunset"
    assert slides[2].chart.type is ChartType.BAR
    assert slides[2].chart.datasets[0].data == [10.0, 14.0, 21.0]


def test_parse_items_builds_pages_for_documents():
    pages = parse_items([slide_payload("Section")], DocumentType.DOCUMENT)

    assert isinstance(pages[0], Page)
    assert not hasattr(pages[0], "notes")


def test_parse_items_rejects_non_array():
    with pytest.raises(GenerationError) as excinfo:
        parse_items({"title": "Lonely slide"}, DocumentType.PRESENTATION)

    assert "API did not return a valid array." in str(excinfo.value)


def test_parse_items_names_the_broken_item():
    payload = [slide_payload("Fine"), {"title": "Missing content"}]

    with pytest.raises(GenerationError) as excinfo:
        parse_items(payload, DocumentType.PRESENTATION)

    assert "Item 2" in str(excinfo.value)
    assert "content" in str(excinfo.value)


def test_blank_image_prompt_is_treated_as_absent():
    slides = parse_items([slide_payload("Intro", image_prompt="   ")], DocumentType.PRESENTATION)

    assert slides[0].image_prompt is None
    assert not slides[0].wants_image


def test_chart_series_are_truncated_to_common_length():
    chart = ChartData.model_validate(
        {
            "type": "line",
            "labels": ["Jan", "Feb", "Mar"],
            "datasets": [
                {"label": "A", "data": [1, 2]},
                {"label": "B", "data": [3, 4, 5, 6]},
            ],
        }
    )

    assert chart.labels == ["Jan", "Feb"]
    assert [dataset.data for dataset in chart.datasets] == [[1.0, 2.0], [3.0, 4.0]]


def test_to_wire_uses_camel_case_names():
    slide = Slide(title="Panels", content=["a"], image_prompt="A roof")

    wire = slide.to_wire()

    assert wire["imagePrompt"] == "A roof"
    assert "image_prompt" not in wire
    assert "chart" not in wire


def test_load_json_payload_strips_markdown_fence():
    assert load_json_payload('```json\n[{"title": "x", "content": []}]\n```') == [
        {"title": "x", "content": []}
    ]


def test_parse_slide_accepts_single_element_list():
    slide = parse_slide([slide_payload("Only one")])

    assert slide.title == "Only one"


def test_parse_slide_rejects_multiple_slides():
    with pytest.raises(RegenerationError):
        parse_slide([slide_payload("One"), slide_payload("Two")])


@pytest.mark.parametrize(
    "media_request, image_prompt, chart, expected_problems",
    [
        (MediaRequest.IMAGE, "A photo", None, 0),
        (MediaRequest.IMAGE, None, None, 1),
        (MediaRequest.CHART, None, bar_chart(), 0),
        (MediaRequest.CHART, "A photo", None, 2),
        (MediaRequest.NONE, None, None, 0),
        (MediaRequest.NONE, "A photo", bar_chart(), 2),
    ],
)
def test_media_violations(media_request, image_prompt, chart, expected_problems):
    slide = parse_slide(slide_payload("Edited", image_prompt=image_prompt, chart=chart))

    assert len(media_violations(slide, media_request)) == expected_problems


@pytest.mark.parametrize("count", [0, 26, -1, 2.5, True])
def test_validate_slide_count_rejects_out_of_range(count):
    with pytest.raises(ValueError):
        validate_slide_count(count)


def test_validate_slide_count_accepts_bounds():
    assert validate_slide_count(1) == 1
    assert validate_slide_count(25) == 25


def test_response_schema_matches_document_type():
    assert response_schema(DocumentType.PRESENTATION) is PRESENTATION_SCHEMA
    assert response_schema(DocumentType.DOCUMENT) is DOCUMENT_SCHEMA
    assert SLIDE_SCHEMA["required"] == ["title", "content"]
    assert "notes" not in DOCUMENT_SCHEMA["items"]["properties"]
