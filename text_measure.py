from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple

# Pillow is used ONLY for measuring (and drawing previews); PowerPoint renders the export.
from PIL import ImageFont
from matplotlib.font_manager import FontProperties, findfont

from fit_scaler import DESIGN_HEIGHT, DESIGN_WIDTH, Measurement
from slide_model import Slide, SlideType, StyleOptions, TextStyle

# Content block geometry, in design units.
PADDING_TOP = 80
PADDING_BOTTOM = 96
PADDING_X = 64
TITLE_GAP = 24       # below the section / number caption
LINE_GAP = 12        # below every lyric line
LINE_HEIGHT = 1.4    # multiple of font size for lyric rows

_GENERIC_FAMILIES = {"serif", "sans-serif", "monospace", "cursive", "fantasy"}


def font_families(font_face: str) -> List[str]:
    """Split a CSS font stack ("Georgia, 'Times', serif") into family names."""
    out = []
    for part in (font_face or "").split(","):
        name = part.strip().strip("'\"").strip()
        if name:
            out.append(name)
    return out


def _resolve_font_path(font_face: str, bold: bool = False) -> Optional[str]:
    """Resolve the first installed family of a font stack to a font file path.

    Falls back to matplotlib's default font when nothing in the stack is
    installed.
    """
    weight = "bold" if bold else "normal"

    for family in font_families(font_face):
        try:
            path = findfont(FontProperties(family=family, weight=weight), fallback_to_default=False)
        except ValueError:
            continue
        if path and os.path.exists(path):
            return path
        if family in _GENERIC_FAMILIES:
            break

    path = findfont(FontProperties(weight=weight), fallback_to_default=True)
    if path and os.path.exists(path):
        return path
    return None


@lru_cache(maxsize=64)
def load_font(font_face: str, size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    """Load a font for a CSS font stack at `size` design units (pixels)."""
    size = max(1, int(round(size)))
    path = _resolve_font_path(font_face, bold)
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


def _text_width(font, text: str) -> float:
    return float(font.getlength(text))


def font_metrics(font, size: int) -> Tuple[int, int]:
    """(ascent, descent) of `font`, approximated for fonts without metrics."""
    try:
        return font.getmetrics()
    except AttributeError:
        # Pillow's bitmap fallback doesn't expose metrics.
        return int(size * 0.8), int(size * 0.2)


def _font_line_height(font, size: int) -> float:
    ascent, descent = font_metrics(font, size)
    return float(ascent + descent)


def wrap_line(line: str, font, max_width: float) -> List[str]:
    """Greedy word wrap of one lyric line by measured width.

    A single word wider than `max_width` is kept on its own row.
    """
    words = (line or "").split()
    if not words:
        return []

    rows: List[str] = []
    cur = words[0]
    for word in words[1:]:
        candidate = cur + " " + word
        if _text_width(font, candidate) <= max_width:
            cur = candidate
        else:
            rows.append(cur)
            cur = word
    rows.append(cur)
    return rows


@dataclass
class TextRow:
    text: str
    x_align: str
    y: float
    height: float
    style: TextStyle
    bold: bool = False
    underline: bool = False


@dataclass
class ContentLayout:
    rows: List[TextRow] = field(default_factory=list)
    natural_height: float = float(PADDING_TOP + PADDING_BOTTOM)
    allotted_height: float = float(DESIGN_HEIGHT)
    width: float = float(DESIGN_WIDTH - 2 * PADDING_X)


def layout_slide(
    slide: Slide,
    styles: StyleOptions,
    design_width: float = DESIGN_WIDTH,
    design_height: float = DESIGN_HEIGHT,
) -> ContentLayout:
    """
    Lay out a slide's content block at its natural size (no fit scaling).
    Row y positions are relative to the top of the content block.
    """
    layout = ContentLayout(
        allotted_height=float(design_height),
        width=float(design_width - 2 * PADDING_X),
    )
    if slide.type is SlideType.COVER:
        return layout

    is_title_slide = slide.type is SlideType.TITLE
    y = float(PADDING_TOP)

    if slide.title:
        cap_style = styles.hymn_number if is_title_slide else styles.section_title
        underline = (not is_title_slide) and styles.section_title.underline
        font = load_font(cap_style.font_face, cap_style.font_size, True)
        h = _font_line_height(font, cap_style.font_size)
        layout.rows.append(TextRow(slide.title, "center", y, h, cap_style, bold=True, underline=underline))
        y += h + TITLE_GAP

    if is_title_slide:
        body_style = styles.hymn_title
        bold = styles.hymn_title.bold
        align = "center"
    else:
        body_style = styles.lyrics
        bold = False
        align = styles.lyrics.align

    font = load_font(body_style.font_face, body_style.font_size, bold)
    row_h = body_style.font_size * LINE_HEIGHT
    for line in slide.lines:
        for row in wrap_line(line, font, layout.width):
            layout.rows.append(TextRow(row, align, y, row_h, body_style, bold=bold))
            y += row_h
        y += LINE_GAP

    layout.natural_height = y + PADDING_BOTTOM
    return layout


class TextMeasurer:
    """
    Measure capability for FitScaler backed by Pillow font metrics.

    Layout happens in design units, so the result doesn't depend on the
    viewport scale (both heights scale together).
    """

    def __init__(self, design_width: float = DESIGN_WIDTH, design_height: float = DESIGN_HEIGHT):
        self.design_width = design_width
        self.design_height = design_height

    def __call__(self, slide: Slide, styles: StyleOptions, viewport_scale: float = 1.0) -> Measurement:
        layout = layout_slide(slide, styles, self.design_width, self.design_height)
        return Measurement(layout.natural_height, layout.allotted_height)
