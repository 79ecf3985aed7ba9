"""Render generated content into matplotlib figures.

The figures back both the on-screen preview (as PNG) and the fixed-layout
PDF export, so what the user sees is what ends up in the PDF. Only the
object-oriented ``Figure`` API is used; nothing here touches ``pyplot``.
"""

from __future__ import annotations

import io
import logging
import textwrap
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from matplotlib.axes import Axes
from matplotlib.colors import is_color_like
from matplotlib.figure import Figure
from PIL import Image

from .schema import ChartData, ChartType, ContentItem, DocumentType
from .templates import SERIF_FONTS, Template

LOGGER = logging.getLogger(__name__)

SLIDE_SIZE: Tuple[float, float] = (10.0, 5.625)
PAGE_SIZE: Tuple[float, float] = (8.27, 11.69)
PAGE_MARGIN = 0.5
PREVIEW_DPI = 100

TITLE_POINTS = 32
BULLET_POINTS = 16
HEADING_POINTS = 20
PARAGRAPH_POINTS = 11
LINE_SPACING = 1.35


def font_family(font: Optional[str]) -> str:
    """Map a catalog font to the generic family matplotlib can always resolve."""

    return "serif" if font in SERIF_FONTS else "sans-serif"


def render_preview(
    content: Sequence[ContentItem],
    images: Mapping[int, bytes],
    document_type: DocumentType,
    template: Template,
    font: Optional[str] = None,
) -> List[Figure]:
    """Return one figure per slide, or the paginated figures of a document."""

    family = font_family(font or template.font)
    if DocumentType(document_type) is DocumentType.PRESENTATION:
        return [
            _render_slide(item, images.get(index), template, family)
            for index, item in enumerate(content)
        ]

    flow = _PageFlow(template, family)
    for index, item in enumerate(content):
        flow.add_item(item, images.get(index))
    return flow.figures


def figure_to_png(figure: Figure, dpi: int = PREVIEW_DPI) -> bytes:
    buffer = io.BytesIO()
    figure.savefig(buffer, format="png", dpi=dpi, facecolor=figure.get_facecolor())
    return buffer.getvalue()


# ----------------------------------------------------------------------
# Slides
# ----------------------------------------------------------------------
def _render_slide(
    item: ContentItem, image: Optional[bytes], template: Template, family: str
) -> Figure:
    width, height = SLIDE_SIZE
    colors = template.colors
    figure = Figure(figsize=SLIDE_SIZE, facecolor=colors.background)

    has_media = image is not None or item.chart is not None
    text_width = 0.45 * width if has_media else 0.9 * width

    title_lines = _wrap(item.title, 0.9 * width, TITLE_POINTS)
    figure.text(
        0.5 / width,
        1 - 0.25 / height,
        "\n".join(title_lines),
        fontsize=TITLE_POINTS,
        fontweight="bold",
        color=colors.primary,
        family=family,
        va="top",
        ha="left",
        parse_math=False,
    )

    cursor = 1.5
    bottom = height - 0.1
    line_height = BULLET_POINTS * LINE_SPACING / 72
    for bullet in item.content:
        lines = _wrap(bullet, text_width - 0.3, BULLET_POINTS)
        if cursor + line_height * len(lines) > bottom:
            LOGGER.debug("Slide '%s' overflows the preview canvas", item.title)
            break
        for position, line in enumerate(lines):
            prefix = "• " if position == 0 else "   "
            figure.text(
                0.5 / width,
                1 - cursor / height,
                prefix + line,
                fontsize=BULLET_POINTS,
                color=colors.text,
                family=family,
                va="top",
                ha="left",
                parse_math=False,
            )
            cursor += line_height
        cursor += line_height * 0.3

    if has_media:
        axes = figure.add_axes(
            [0.52, 1 - (1.5 + 4.0) / height, 0.45, 4.0 / height]
        )
        if image is not None:
            _draw_image(axes, image, item.image_prompt, family)
        else:
            _draw_chart(axes, item.chart, template, family)
    return figure


# ----------------------------------------------------------------------
# Pages
# ----------------------------------------------------------------------
class _PageFlow:
    """Lay out page-like blocks top to bottom across A4 figures."""

    def __init__(self, template: Template, family: str) -> None:
        self.template = template
        self.family = family
        self.figures: List[Figure] = []
        self.figure: Optional[Figure] = None
        self.cursor = PAGE_MARGIN
        self.width, self.height = PAGE_SIZE
        self.usable_width = self.width - 2 * PAGE_MARGIN

    def add_item(self, item: ContentItem, image: Optional[bytes]) -> None:
        self.new_page()
        if item.title.strip():
            self.add_lines(
                _wrap(item.title, self.usable_width, HEADING_POINTS),
                HEADING_POINTS,
                color=self.template.colors.primary,
                weight="bold",
            )
            self.cursor += 0.15

        if image is not None:
            block = _image_height(image, self.usable_width, max_height=4.0)
            axes = self.add_block(block)
            _draw_image(axes, image, item.image_prompt, self.family)
            self.cursor += 0.15

        if item.chart is not None:
            axes = self.add_block(3.0)
            _draw_chart(axes, item.chart, self.template, self.family)
            self.cursor += 0.15

        for paragraph in item.content:
            if not paragraph.strip():
                continue
            self.add_lines(
                _wrap(paragraph, self.usable_width, PARAGRAPH_POINTS),
                PARAGRAPH_POINTS,
                color=self.template.colors.text,
            )
            self.cursor += PARAGRAPH_POINTS * 0.6 / 72

    def new_page(self) -> None:
        self.figure = Figure(figsize=PAGE_SIZE, facecolor="white")
        self.figures.append(self.figure)
        self.cursor = PAGE_MARGIN

    def add_lines(
        self, lines: Sequence[str], points: int, *, color: str, weight: str = "normal"
    ) -> None:
        line_height = points * LINE_SPACING / 72
        for line in lines:
            if self.cursor + line_height > self.height - PAGE_MARGIN:
                self.new_page()
            self.figure.text(
                PAGE_MARGIN / self.width,
                1 - self.cursor / self.height,
                line,
                fontsize=points,
                fontweight=weight,
                color=color,
                family=self.family,
                va="top",
                ha="left",
                parse_math=False,
            )
            self.cursor += line_height

    def add_block(self, block_height: float) -> Axes:
        if self.cursor + block_height > self.height - PAGE_MARGIN:
            self.new_page()
        axes = self.figure.add_axes(
            [
                PAGE_MARGIN / self.width,
                1 - (self.cursor + block_height) / self.height,
                self.usable_width / self.width,
                block_height / self.height,
            ]
        )
        self.cursor += block_height
        return axes


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------
def _wrap(text: str, width_inches: float, points: int) -> List[str]:
    chars = max(10, int(width_inches * 72 / (points * 0.55)))
    return textwrap.wrap(text or "", chars) or [""]


def _image_height(data: bytes, width: float, *, max_height: float) -> float:
    try:
        with Image.open(io.BytesIO(data)) as picture:
            pixel_width, pixel_height = picture.size
    except Exception:
        return 1.0
    if not pixel_width:
        return 1.0
    return min(max_height, width * pixel_height / pixel_width)


def _draw_image(axes: Axes, data: bytes, prompt: Optional[str], family: str) -> None:
    axes.set_axis_off()
    try:
        with Image.open(io.BytesIO(data)) as picture:
            picture.load()
            pixels = picture.convert("RGB")
    except Exception as exc:
        LOGGER.warning("Image could not be decoded for preview: %s", exc)
        axes.text(
            0.5,
            0.5,
            f"[Image failed to load: {prompt or 'Untitled'}]",
            ha="center",
            va="center",
            style="italic",
            wrap=True,
            family=family,
            transform=axes.transAxes,
            parse_math=False,
        )
        return
    axes.imshow(pixels)


def _draw_chart(axes: Axes, chart: ChartData, template: Template, family: str) -> None:
    palette = [template.colors.primary, template.colors.accent, template.colors.secondary]
    if chart.is_empty:
        _draw_no_data(axes, family)
        return

    positions = list(range(len(chart.labels)))
    if chart.type is ChartType.PIE:
        dataset = chart.datasets[0]
        values = [max(0.0, value) for value in dataset.data]
        if sum(values) <= 0:
            _draw_no_data(axes, family)
            return
        colors = _series_colors(dataset.background_color, len(values), palette)
        axes.pie(
            values,
            labels=chart.labels,
            colors=colors,
            textprops={"family": family, "fontsize": 9, "parse_math": False},
        )
        axes.set_aspect("equal")
        return

    count = len(chart.datasets)
    bar_width = 0.8 / count
    for series, dataset in enumerate(chart.datasets):
        rotated = palette[series % len(palette):] + palette[: series % len(palette)]
        color = _series_colors(dataset.background_color, 1, rotated)[0]
        if chart.type is ChartType.BAR:
            offset = (series - (count - 1) / 2) * bar_width
            axes.bar(
                [x + offset for x in positions],
                dataset.data,
                width=bar_width,
                label=dataset.label,
                color=color,
            )
        else:
            axes.plot(positions, dataset.data, marker="o", label=dataset.label, color=color)

    axes.set_xticks(positions)
    axes.set_xticklabels(chart.labels, fontsize=8, family=family, parse_math=False)
    axes.tick_params(axis="y", labelsize=8)
    for side in ("top", "right"):
        axes.spines[side].set_visible(False)
    axes.set_facecolor("white")
    legend = axes.legend(frameon=False, prop={"family": family, "size": 8})
    for text in legend.get_texts():
        text.set_parse_math(False)


def _draw_no_data(axes: Axes, family: str) -> None:
    axes.set_axis_off()
    axes.text(
        0.5, 0.5, "No chart data", ha="center", va="center", family=family, parse_math=False
    )


def _series_colors(
    requested: Optional[Sequence[str]], count: int, palette: Sequence[str]
) -> List[str]:
    usable = [color for color in (requested or []) if is_color_like(color)]
    if len(usable) >= count:
        return usable[:count]
    fallback: Dict[int, str] = dict(enumerate(usable))
    return [fallback.get(index, palette[index % len(palette)]) for index in range(count)]
