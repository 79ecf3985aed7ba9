"""Style templates and the font catalog."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Tuple

FONTS: Tuple[str, ...] = (
    "Inter",
    "Roboto",
    "Lato",
    "Montserrat",
    "Poppins",
    "Nunito",
    "Raleway",
    "Merriweather",
    "Playfair Display",
)

SERIF_FONTS = frozenset({"Merriweather", "Playfair Display"})


@dataclass(frozen=True)
class ColorPalette:
    primary: str
    secondary: str
    accent: str
    background: str
    text: str


@dataclass(frozen=True)
class Template:
    """An immutable style descriptor drawn from :data:`TEMPLATES`."""

    id: str
    name: str
    colors: ColorPalette
    font: str

    def with_font(self, font: str) -> "Template":
        """Return a copy using ``font`` instead of the template default."""

        if font not in FONTS:
            raise ValueError(f"Unknown font: {font}")
        return replace(self, font=font)


TEMPLATES: Tuple[Template, ...] = (
    Template(
        id="corporate-blue",
        name="Corporate Blue",
        colors=ColorPalette("#005A9C", "#003366", "#E87722", "#F0F4F7", "#333333"),
        font="Inter",
    ),
    Template(
        id="modern-green",
        name="Modern Green",
        colors=ColorPalette("#1E8449", "#145A32", "#F1C40F", "#F4F6F6", "#212F3C"),
        font="Roboto",
    ),
    Template(
        id="startup-orange",
        name="Startup Orange",
        colors=ColorPalette("#E67E22", "#D35400", "#3498DB", "#FDFEFE", "#17202A"),
        font="Poppins",
    ),
    Template(
        id="creative-purple",
        name="Creative Purple",
        colors=ColorPalette("#8E44AD", "#5B2C6F", "#F39C12", "#FDFAF2", "#4A235A"),
        font="Raleway",
    ),
    Template(
        id="oceanic-teal",
        name="Oceanic Teal",
        colors=ColorPalette("#16A085", "#117A65", "#E74C3C", "#F2F4F4", "#212F3C"),
        font="Nunito",
    ),
    Template(
        id="academic",
        name="Academic",
        colors=ColorPalette("#2C3E50", "#000000", "#B03A2E", "#FAFAFA", "#212121"),
        font="Merriweather",
    ),
    Template(
        id="minimalist-gray",
        name="Minimalist Gray",
        colors=ColorPalette("#5D6D7E", "#34495E", "#1ABC9C", "#FFFFFF", "#2C3E50"),
        font="Montserrat",
    ),
)

DEFAULT_TEMPLATE = TEMPLATES[0]

_TEMPLATES_BY_ID: Dict[str, Template] = {template.id: template for template in TEMPLATES}


def get_template(template_id: str) -> Template:
    """Look up a template, falling back to :data:`DEFAULT_TEMPLATE`."""

    return _TEMPLATES_BY_ID.get(template_id, DEFAULT_TEMPLATE)


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """``"#005A9C"`` -> ``(0, 90, 156)``."""

    digits = value.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Invalid hex color: {value}")
    return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
