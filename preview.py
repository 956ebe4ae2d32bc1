from __future__ import annotations

import math

from PIL import Image, ImageDraw, ImageOps

from fit_scaler import DESIGN_HEIGHT, DESIGN_WIDTH, FitScaler
from pptx_utils import open_image_ref
from slide_model import Slide, SlideType, StyleOptions, slide_number_label
from text_measure import PADDING_X, TextMeasurer, TextRow, font_metrics, layout_slide, load_font

# Slide number position, from the top right corner of the canvas.
NUMBER_TOP = 28
NUMBER_RIGHT = 42

OVERLAY_ALPHA = 77  # ~30% black over the background image


def _draw_row(draw: ImageDraw.ImageDraw, row: TextRow, inner_width: float) -> None:
    font = load_font(row.style.font_face, row.style.font_size, row.bold)
    text_w = font.getlength(row.text)

    if row.x_align == "left":
        x = PADDING_X
    elif row.x_align == "right":
        x = PADDING_X + inner_width - text_w
    else:
        x = PADDING_X + (inner_width - text_w) / 2

    ascent, descent = font_metrics(font, row.style.font_size)
    y = row.y + (row.height - (ascent + descent)) / 2
    draw.text((x, y), row.text, font=font, fill=row.style.color)

    if row.underline:
        uy = y + ascent + max(2, descent // 2)
        draw.line([(x, uy), (x + text_w, uy)], fill=row.style.color, width=max(1, row.style.font_size // 16))


def _background(slide: Slide, backgrounds_dir) -> Image.Image:
    canvas = Image.new("RGBA", (DESIGN_WIDTH, DESIGN_HEIGHT), (0, 0, 0, 255))
    data = open_image_ref(slide.background_image, backgrounds_dir)
    if data is not None:
        with Image.open(data) as img:
            fitted = ImageOps.fit(img.convert("RGBA"), (DESIGN_WIDTH, DESIGN_HEIGHT))
        canvas.alpha_composite(fitted)
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, OVERLAY_ALPHA))
        canvas.alpha_composite(overlay)
    return canvas


def render_slide(
    slide: Slide,
    index: int,
    total: int,
    styles: StyleOptions,
    container_width: float,
    *,
    backgrounds_dir=None,
    scaler: FitScaler | None = None,
) -> Image.Image:
    """
    Draw one slide as it appears in a container `container_width` wide.

    Layout happens on the design canvas; the content block is shrunk by the
    fit scale (anchored top centre), then the whole canvas is scaled by the
    viewport scale.
    """
    if scaler is None:
        scaler = FitScaler(TextMeasurer())
    scaler.resize(container_width)
    factors = scaler.scale_for(slide, styles)

    canvas = _background(slide, backgrounds_dir)
    draw = ImageDraw.Draw(canvas)

    if slide.type is not SlideType.COVER:
        style = styles.slide_number
        font = load_font(style.font_face, style.font_size, True)
        label = slide_number_label(index, total)
        x = DESIGN_WIDTH - NUMBER_RIGHT - font.getlength(label)
        draw.text((x, NUMBER_TOP), label, font=font, fill=style.color)

    layout = layout_slide(slide, styles)
    if layout.rows:
        # Tall enough for overflowing rows; cropped back to the canvas below.
        content_h = max(DESIGN_HEIGHT, math.ceil(layout.natural_height))
        content = Image.new("RGBA", (DESIGN_WIDTH, content_h), (0, 0, 0, 0))
        content_draw = ImageDraw.Draw(content)
        for row in layout.rows:
            _draw_row(content_draw, row, layout.width)

        if factors.fit < 1.0:
            w = max(1, round(DESIGN_WIDTH * factors.fit))
            h = max(1, round(content_h * factors.fit))
            shrunk = content.resize((w, h), Image.Resampling.LANCZOS)
            content = Image.new("RGBA", (DESIGN_WIDTH, max(h, DESIGN_HEIGHT)), (0, 0, 0, 0))
            content.alpha_composite(shrunk, ((DESIGN_WIDTH - w) // 2, 0))

        canvas.alpha_composite(content.crop((0, 0, DESIGN_WIDTH, DESIGN_HEIGHT)))

    out_w = max(1, round(DESIGN_WIDTH * factors.viewport))
    out_h = max(1, round(DESIGN_HEIGHT * factors.viewport))
    if (out_w, out_h) != canvas.size:
        canvas = canvas.resize((out_w, out_h), Image.Resampling.LANCZOS)
    return canvas.convert("RGB")
