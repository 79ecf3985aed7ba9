"""Streamlit UI for generating, previewing, editing and exporting content."""

from __future__ import annotations

import asyncio
import hashlib
import io
import re
import textwrap
from typing import Any, Dict, List, Optional, Tuple

import streamlit as st
from PIL import Image, ImageDraw

from LLM_API.base import CallModel
from LLM_API.data_classes import (
    BaseResponse,
    ImageGenerationRequest,
    ImageGenerationResponse,
    StructuredOutputRequest,
    StructuredOutputResponse,
)

from hayagriva.config import Settings, configure_logging
from hayagriva.export import ExportResult, export_docx, export_pdf, export_pptx
from hayagriva.orchestrator import GenerationOrchestrator, OperationResult, default_media_request
from hayagriva.preview import figure_to_png, render_preview
from hayagriva.prompts import MEDIA_INSTRUCTIONS
from hayagriva.schema import (
    DEFAULT_SLIDE_COUNT,
    MAX_SLIDE_COUNT,
    MIN_SLIDE_COUNT,
    DocumentType,
    MediaRequest,
)
from hayagriva.state import GenerationState
from hayagriva.templates import FONTS, TEMPLATES, get_template

DEMO_CHOICE = "Offline demo"
GEMINI_CHOICE = "Gemini (API key from environment)"

DEMO_PAGE_COUNT = 3

MEDIA_LABELS = {
    MediaRequest.IMAGE: "Image",
    MediaRequest.CHART: "Chart",
    MediaRequest.NONE: "No media",
}


def _extract_topic(prompt: str, *, max_width: int = 60) -> str:
    """Return a short topic line recovered from an outbound prompt."""

    if not prompt:
        return "Untitled topic"

    for pattern in (
        r"<INSTRUCTION>\s*(.*?)\s*</INSTRUCTION>",
        r'instruction for this slide is: "(.*?)"\.',
        r'about: "(.*)"',
    ):
        match = re.search(pattern, prompt, re.DOTALL)
        if match:
            prompt = match.group(1)
            break
    topic = prompt.strip().replace("\n", " ")
    if not topic:
        return "Untitled topic"
    return textwrap.shorten(topic, width=max_width, placeholder="...")


class DemoGenerativeModel:
    """Offline stand-in for the Gemini provider.

    Produces schema-shaped slides and pages plus solid-color placeholder
    JPEGs so the whole pipeline can be tried without an API key.
    """

    model_name = "demo"

    # ------------------------------------------------------------------
    # LLM compatible interface
    # ------------------------------------------------------------------
    def generate_content(self, request) -> BaseResponse:
        topic = _extract_topic(getattr(request, "prompt", ""))
        return BaseResponse(text=f"A short overview of {topic}.", model_used="demo-text")

    def generate_structured_output(
        self, request: StructuredOutputRequest
    ) -> StructuredOutputResponse:
        topic = _extract_topic(request.prompt)
        if request.schema_name == "slide":
            payload: Any = self._regenerated_slide(topic, request.prompt)
        elif request.schema_name == "document":
            payload = [self._item(topic, index, notes=False) for index in range(DEMO_PAGE_COUNT)]
        else:
            count = self._requested_count(request)
            payload = [self._item(topic, index, notes=True) for index in range(count)]
        return StructuredOutputResponse(parsed_output=payload, model_used="demo-structured")

    def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        digest = hashlib.sha1(request.prompt.encode("utf-8")).digest()
        picture = Image.new("RGB", (1280, 720), tuple(64 + value % 160 for value in digest[:3]))
        draw = ImageDraw.Draw(picture)
        caption = textwrap.fill(request.prompt.split(":", 1)[-1].strip(), width=60)
        draw.multiline_text((40, 40), caption, fill=(255, 255, 255))
        buffer = io.BytesIO()
        picture.save(buffer, format="JPEG")
        return ImageGenerationResponse(
            images=[buffer.getvalue()], mime_type="image/jpeg", model_used="demo-image"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _requested_count(self, request: StructuredOutputRequest) -> int:
        text = f"{request.system_instruction or ''} {request.prompt}"
        match = re.search(r"with exactly (\d+) slides", text)
        return int(match.group(1)) if match else DEFAULT_SLIDE_COUNT

    def _item(self, topic: str, index: int, *, notes: bool) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "title": f"{topic}: part {index + 1}",
            "content": [
                f"Key point {point} about {topic}." for point in range(1, 4)
            ],
        }
        if index % 3 == 1:
            item["imagePrompt"] = f"An illustration of {topic}"
        elif index % 3 == 2:
            item["chart"] = _demo_chart(topic)
        if notes:
            item["notes"] = f"Talk through part {index + 1} of {topic}."
        return item

    def _regenerated_slide(self, topic: str, prompt: str) -> Dict[str, Any]:
        slide: Dict[str, Any] = {
            "title": topic,
            "content": [f"Revised point {point} on {topic}." for point in range(1, 4)],
            "notes": f"Revised notes for {topic}.",
        }
        if MEDIA_INSTRUCTIONS[MediaRequest.IMAGE] in prompt:
            slide["imagePrompt"] = f"An illustration of {topic}"
        elif MEDIA_INSTRUCTIONS[MediaRequest.CHART] in prompt:
            slide["chart"] = _demo_chart(topic)
        return slide


def _demo_chart(topic: str) -> Dict[str, Any]:
    return {
        "type": "bar",
        "labels": ["Q1", "Q2", "Q3", "Q4"],
        "datasets": [{"label": topic, "data": [12, 19, 7, 15]}],
    }


@st.cache_resource(show_spinner=False)
def load_llm(choice: str):
    """Create (once per choice) the client behind every generation call."""

    if choice == GEMINI_CHOICE:
        from LLM_API.providers.gemini import GeminiModel

        settings = Settings.from_env()
        return GeminiModel(
            api_key=settings.api_key,
            model_name=settings.text_model,
            image_model_name=settings.image_model,
            timeout_seconds=settings.call_timeout,
        )
    return DemoGenerativeModel()


def _build_orchestrator(choice: str, settings: Settings) -> Optional[GenerationOrchestrator]:
    try:
        llm_client = load_llm(choice)
    except Exception as exc:  # pragma: no cover - depends on runtime secrets
        st.warning(
            "Could not initialise the Gemini client. Check GEMINI_API_KEY or switch to the offline demo."
        )
        st.text(str(exc))
        return None
    if isinstance(llm_client, CallModel):
        st.caption(llm_client.describe())
    return GenerationOrchestrator.from_client(
        llm_client, settings, state=st.session_state["generation_state"]
    )


def _report(result: OperationResult, success_message: str) -> None:
    """Queue the outcome so it survives the rerun that refreshes the preview."""

    st.session_state["flash"] = (result, success_message)


def _show_flash(state: GenerationState) -> None:
    flash = st.session_state.pop("flash", None)
    if flash is None:
        return
    result, success_message = flash
    if not result.success:
        # Pipeline failures are also kept on the state and shown from there.
        if result.error != state.error:
            st.error(result.error)
        return
    st.success(success_message)
    for warning in result.warnings:
        st.warning(warning)


def _sync_attachment(orchestrator: GenerationOrchestrator, upload) -> None:
    state = orchestrator.state
    if upload is None:
        if state.attached_file_name:
            orchestrator.remove_file()
        return
    if upload.name == state.attached_file_name:
        return
    result = orchestrator.attach_file(upload.name, upload.getvalue())
    if result.success:
        st.caption(f"Using {upload.name} as the source for generation.")
    else:
        st.error(result.error)


def _download(result: ExportResult, label: str) -> None:
    if not result.success:
        st.error(result.error)
        return
    st.download_button(
        label,
        data=result.data,
        file_name=result.file_name,
        mime=result.mime_type,
        use_container_width=True,
    )


def export_key(state: GenerationState) -> Tuple[Any, ...]:
    """Identify the exportable content; item ids change on every (re)generation."""

    return (
        tuple(state.item_ids),
        tuple(sorted(state.images)),
        state.document_type.value,
        state.template.id,
        state.font,
    )


def build_exports(state: GenerationState) -> List[Tuple[ExportResult, str]]:
    args = (state.content, state.images, state.document_type, state.template, state.font)
    if state.document_type is DocumentType.PRESENTATION:
        editable = (export_pptx(*args), "Download PPTX")
    else:
        editable = (export_docx(*args), "Download DOCX")
    return [editable, (export_pdf(*args), "Download PDF")]


def _render_exports(state: GenerationState) -> None:
    st.header("Export")
    key = export_key(state)
    cached = st.session_state.get("exports")
    if cached is None or cached[0] != key:
        if not st.button("Prepare downloads", use_container_width=True):
            return
        with st.spinner("Building files..."):
            cached = (key, build_exports(state))
        st.session_state["exports"] = cached
    for result, label in cached[1]:
        _download(result, label)


def _render_sidebar(orchestrator: GenerationOrchestrator) -> None:
    state = orchestrator.state
    st.header("Create")
    prompt = st.text_area(
        "What should the content be about?",
        value=state.prompt,
        height=140,
        placeholder="e.g. A 3-slide overview of solar energy for a business audience",
    )

    type_label = st.radio(
        "Document type",
        ("Presentation", "Document"),
        index=0 if state.document_type is DocumentType.PRESENTATION else 1,
        horizontal=True,
    )
    orchestrator.set_document_type(
        DocumentType.PRESENTATION if type_label == "Presentation" else DocumentType.DOCUMENT
    )

    if state.document_type is DocumentType.PRESENTATION:
        orchestrator.set_slide_count(
            st.slider(
                "Number of slides",
                min_value=MIN_SLIDE_COUNT,
                max_value=MAX_SLIDE_COUNT,
                value=state.slide_count,
            )
        )

    template_ids = [template.id for template in TEMPLATES]
    template_id = st.selectbox(
        "Template",
        template_ids,
        index=template_ids.index(state.template.id),
        format_func=lambda value: get_template(value).name,
    )
    if template_id != state.template.id:
        orchestrator.select_template(template_id)
    orchestrator.set_font(st.selectbox("Font", FONTS, index=FONTS.index(state.font)))

    upload = st.file_uploader(
        "Ground the content in a file (optional)",
        type=None,
        help="PDF and PPTX files are supported.",
    )
    _sync_attachment(orchestrator, upload)

    if st.button("Generate", type="primary", use_container_width=True, disabled=state.busy):
        with st.spinner("Generating content and images..."):
            result = asyncio.run(orchestrator.generate(prompt))
        _report(result, "Content generated.")

    if state.has_content:
        _render_exports(state)


def _render_edit_form(orchestrator: GenerationOrchestrator, index: int) -> None:
    item = orchestrator.state.content[index]
    options: List[MediaRequest] = list(MEDIA_LABELS)
    with st.expander(f"Edit {index + 1}. {item.title}", expanded=False):
        with st.form(key=f"edit-{index}"):
            instruction = st.text_area(
                "New instruction",
                placeholder="e.g. Focus on installation costs and add a chart",
            )
            media = st.radio(
                "Media",
                options,
                index=options.index(default_media_request(item)),
                format_func=MEDIA_LABELS.get,
                horizontal=True,
            )
            submitted = st.form_submit_button("Regenerate")
        if submitted:
            orchestrator.begin_edit(index)
            with st.spinner(f"Regenerating {index + 1}..."):
                result = asyncio.run(orchestrator.regenerate(index, instruction, media))
            _report(result, f"Item {index + 1} regenerated.")
            st.rerun()


def _render_preview(orchestrator: GenerationOrchestrator) -> None:
    state = orchestrator.state
    _show_flash(state)
    if state.error:
        st.error(state.error)
    if not state.has_content:
        st.info(
            "Describe a topic in the sidebar, optionally attach a PDF or PPTX, and press Generate."
        )
        return
    if not state.content:
        st.info("The model returned no content. Try a different prompt.")
        return

    figures = render_preview(
        state.content, state.images, state.document_type, state.template, state.font
    )
    if state.document_type is DocumentType.PRESENTATION:
        for index, figure in enumerate(figures):
            st.image(figure_to_png(figure), caption=f"Slide {index + 1}", use_container_width=True)
            _render_edit_form(orchestrator, index)
        return

    for number, figure in enumerate(figures, start=1):
        st.image(figure_to_png(figure), caption=f"Page {number}", use_container_width=True)
    st.subheader("Edit sections")
    for index in range(len(state.content)):
        _render_edit_form(orchestrator, index)


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)

    st.set_page_config(page_title="Hayagriva", layout="wide")
    st.title("Hayagriva")

    st.session_state.setdefault("generation_state", GenerationState())

    with st.sidebar:
        llm_choice = st.radio(
            "Model",
            (DEMO_CHOICE, GEMINI_CHOICE),
            index=1 if settings.has_api_key else 0,
            help="The offline demo needs no API key.",
        )
        orchestrator = _build_orchestrator(llm_choice, settings)
        if orchestrator is None:
            return
        _render_sidebar(orchestrator)

    _render_preview(orchestrator)


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
