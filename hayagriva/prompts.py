"""Instruction templates sent to the generative model."""

from __future__ import annotations

import textwrap
from typing import Tuple

from .schema import DocumentType, MediaRequest
from .templates import Template

ASSISTANT_NAME = "Hayagriva"

IMAGE_FRAMING = "A professional, high-quality image for a business presentation: {prompt}"

CREATIVE_SYSTEM_TEMPLATE = textwrap.dedent(
    """\
    You are an expert content creator named {assistant}. Your task is to generate content for a professional {document_type_name} based on the user's prompt, styled according to the chosen template. The template is named "{template_name}" and uses a {font} font.
    For presentations, each slide's content should contain comprehensive and detailed information with multiple, informative bullet points.
    Where appropriate, enhance slides or document sections with a relevant 'imagePrompt' or 'chart' data to visualize key information and improve engagement. Use professional and relevant visuals where they add value.
    You must return valid JSON adhering to the provided schema, with no markdown formatting."""
)

GROUNDED_SYSTEM_TEMPLATE = textwrap.dedent(
    """\
    You are a highly specialized AI assistant named {assistant}. Your only function is to act as a **Content Extractor and Formatter**. You will be given a text context and an instruction. Your entire response MUST be based *exclusively* on the provided text context.

    **ABSOLUTE DIRECTIVES:**
    1.  **SOURCE OF TRUTH:** The provided <CONTEXT> is your one and only source of information. You are forbidden from using any external knowledge, making assumptions, or inventing details. Every piece of content you generate must be directly traceable to the <CONTEXT>.
    2.  **USER INSTRUCTION:** The <INSTRUCTION> from the user tells you *how* to process the <CONTEXT>. You must follow this instruction precisely. For example, if the instruction is "Summarize this in 3 slides," you will create a 3-slide summary using ONLY information from the <CONTEXT>.
    3.  **OUTPUT FORMAT:** You MUST format your response as a valid JSON array that strictly adheres to the provided JSON schema. Do not include any text, explanations, or markdown formatting outside of the JSON.
    4.  **DOCUMENT TYPE:** The final output should be structured as a {document_type_name}{count_instruction}.
    5.  **STYLE:** The content should reflect the style of the "{template_name}" template which uses the "{font}" font.
    6.  **VISUALS:** If you include an 'imagePrompt' or a 'chart', the subject matter or data MUST be explicitly present in the <CONTEXT>."""
)

GROUNDED_USER_TEMPLATE = "<CONTEXT>\n{context}\n</CONTEXT>\n\n<INSTRUCTION>\n{instruction}\n</INSTRUCTION>"

CREATIVE_USER_TEMPLATE = 'Create a {document_type_name}{count_instruction} about: "{prompt}"'

REGENERATION_SYSTEM_TEMPLATE = (
    "You are an expert content editor named {assistant}. You are editing a single slide "
    'within a larger presentation about "{original_prompt}". Your task is to regenerate '
    "the content for this specific slide based on the user's new instructions. Ensure the "
    "new content is detailed and comprehensive."
)

REGENERATION_USER_TEMPLATE = (
    'The user\'s new instruction for this slide is: "{instruction}". Please regenerate the '
    "slide's title and content. The user has specifically requested that {media_instruction} "
    "Provide a single valid JSON object for the slide, adhering to the provided schema, with "
    "no markdown formatting."
)

MEDIA_INSTRUCTIONS = {
    MediaRequest.IMAGE: (
        "you MUST include a relevant image by providing an 'imagePrompt'. "
        "Do not include a chart."
    ),
    MediaRequest.CHART: (
        "you MUST include a relevant data chart by providing 'chart' data. "
        "Do not include an image."
    ),
    MediaRequest.NONE: (
        "you MUST NOT include any image or chart: leave both 'imagePrompt' and 'chart' out."
    ),
}


def document_type_name(document_type: DocumentType) -> str:
    if DocumentType(document_type) is DocumentType.PRESENTATION:
        return "PowerPoint presentation"
    return "Microsoft Word document"


def count_instruction(document_type: DocumentType, item_count: int) -> str:
    if DocumentType(document_type) is DocumentType.PRESENTATION:
        return f" with exactly {item_count} slides"
    return ""


def build_creative_prompt(
    prompt: str, document_type: DocumentType, template: Template, item_count: int
) -> Tuple[str, str]:
    """Return ``(system_instruction, user_prompt)`` for free generation."""

    type_name = document_type_name(document_type)
    system_instruction = CREATIVE_SYSTEM_TEMPLATE.format(
        assistant=ASSISTANT_NAME,
        document_type_name=type_name,
        template_name=template.name,
        font=template.font,
    )
    user_prompt = CREATIVE_USER_TEMPLATE.format(
        document_type_name=type_name,
        count_instruction=count_instruction(document_type, item_count),
        prompt=prompt,
    )
    return system_instruction, user_prompt


def build_grounded_prompt(
    instruction: str,
    grounding_text: str,
    document_type: DocumentType,
    template: Template,
    item_count: int,
) -> Tuple[str, str]:
    """Return ``(system_instruction, user_prompt)`` for extractive generation."""

    system_instruction = GROUNDED_SYSTEM_TEMPLATE.format(
        assistant=ASSISTANT_NAME,
        document_type_name=document_type_name(document_type),
        count_instruction=count_instruction(document_type, item_count),
        template_name=template.name,
        font=template.font,
    )
    user_prompt = GROUNDED_USER_TEMPLATE.format(context=grounding_text, instruction=instruction)
    return system_instruction, user_prompt


def build_regeneration_prompt(
    original_prompt: str, instruction: str, media_request: MediaRequest
) -> Tuple[str, str]:
    system_instruction = REGENERATION_SYSTEM_TEMPLATE.format(
        assistant=ASSISTANT_NAME, original_prompt=original_prompt
    )
    user_prompt = REGENERATION_USER_TEMPLATE.format(
        instruction=instruction,
        media_instruction=MEDIA_INSTRUCTIONS[MediaRequest(media_request)],
    )
    return system_instruction, user_prompt


def frame_image_prompt(prompt: str) -> str:
    return IMAGE_FRAMING.format(prompt=prompt.strip())
