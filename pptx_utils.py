from __future__ import annotations

import base64
import binascii
import io
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.util import Emu, Pt

from debug_tools import DebugRecorder
from slide_model import Slide, SlideType, StyleOptions, TextStyle, slide_number_label
from text_measure import font_families

# 16:9, 13.333in x 7.5in
SLIDE_WIDTH = Emu(12192000)
SLIDE_HEIGHT = Emu(6858000)

LINE_SPACING_FACTOR = 1.5

_ALIGN = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}

_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+(?:;[^,;]*)*;base64,(.*)$", re.DOTALL)


class ExportError(RuntimeError):
    pass


def default_export_filename(title: str) -> str:
    base = (title or "").replace(" ", "_")
    return f"{base or 'hymn'}.pptx"


def open_image_ref(ref: Optional[str], backgrounds_dir: Path | str | None = None) -> Optional[io.BytesIO]:
    """
    Resolve a background handle to image bytes.

    Accepts `data:image/...;base64,` URLs and file paths (relative paths are
    looked up in `backgrounds_dir`). Returns None when nothing is there.
    """
    if not ref:
        return None

    m = _DATA_URL_RE.match(ref)
    if m:
        try:
            return io.BytesIO(base64.b64decode(m.group(1), validate=True))
        except (binascii.Error, ValueError):
            return None

    # Anything else is treated as a path; a handle that can't name a file
    # (too long, embedded NUL) is just unresolved.
    try:
        path = Path(ref).expanduser()
        if not path.is_absolute() and backgrounds_dir:
            path = Path(backgrounds_dir) / path
        if path.is_file():
            return io.BytesIO(path.read_bytes())
    except (OSError, ValueError):
        return None
    return None


def _get_layout_by_name(prs, name):
    for layout in prs.slide_layouts:
        if layout.name == name:
            return layout
    raise ValueError(f"Slide layout not found: {name}")


def _pct(total: int, pct: float) -> Emu:
    return Emu(int(total * pct / 100.0))


def _add_text_box(
    slide,
    name: str,
    box: tuple,
    lines: List[str],
    style: TextStyle,
    *,
    align: str = "center",
    bold: bool = False,
    underline: bool = False,
    line_spacing_pt: float | None = None,
):
    left, top, width, height = box
    shape = slide.shapes.add_textbox(left, top, width, height)
    shape.name = name

    tf = shape.text_frame
    tf.word_wrap = True

    families = font_families(style.font_face)
    color = RGBColor.from_string(style.color.lstrip("#").upper())

    for i, line in enumerate(lines):
        p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        p.alignment = _ALIGN.get(align, PP_ALIGN.CENTER)
        if line_spacing_pt:
            p.line_spacing = Pt(line_spacing_pt)

        r = p.add_run()
        r.text = line
        r.font.size = Pt(style.font_size)
        r.font.bold = bold
        r.font.underline = underline
        r.font.color.rgb = color
        if families:
            r.font.name = families[0]

    return shape


def _add_background(slide, ref: Optional[str], backgrounds_dir, dbg: DebugRecorder | None) -> bool:
    image = open_image_ref(ref, backgrounds_dir)
    if image is None:
        if ref and dbg:
            dbg.log(f"[BG] unresolved background {ref[:60]!r}; leaving slide plain")
        return False

    # Added before any text box, so it sits at the back of the z-order.
    pic = slide.shapes.add_picture(image, 0, 0, SLIDE_WIDTH, SLIDE_HEIGHT)
    pic.name = "Background"
    return True


def add_hymn_slide(prs, slide_data: Slide, index: int, total: int, styles: StyleOptions,
                   backgrounds_dir=None, dbg: DebugRecorder | None = None):
    """Append one hymn slide (background, slide number, caption, lines) to `prs`."""
    layout = _get_layout_by_name(prs, "Blank")
    slide = prs.slides.add_slide(layout)

    w, h = int(prs.slide_width), int(prs.slide_height)
    has_bg = _add_background(slide, slide_data.background_image, backgrounds_dir, dbg)

    if slide_data.type is not SlideType.COVER:
        _add_text_box(
            slide, "Slide Number",
            (_pct(w, 88), _pct(h, 4), _pct(w, 10), _pct(h, 8)),
            [slide_number_label(index, total)],
            styles.slide_number,
            align="right",
        )

    is_title_slide = slide_data.type is SlideType.TITLE

    if slide_data.title:
        style = styles.hymn_number if is_title_slide else styles.section_title
        _add_text_box(
            slide, "Caption",
            (0, _pct(h, 30 if is_title_slide else 20), w, _pct(h, 10)),
            [slide_data.title],
            style,
            underline=False if is_title_slide else styles.section_title.underline,
        )

    if slide_data.lines:
        if is_title_slide:
            style, align, bold = styles.hymn_title, "center", styles.hymn_title.bold
        else:
            style, align, bold = styles.lyrics, styles.lyrics.align, False
        _add_text_box(
            slide, "Lyrics",
            (0, _pct(h, 45 if is_title_slide else 35), w, _pct(h, 60)),
            list(slide_data.lines),
            style,
            align=align,
            bold=bold,
            line_spacing_pt=style.font_size * LINE_SPACING_FACTOR,
        )

    if dbg:
        dbg.record_slide(index, slide_data, background=has_bg)
    return slide


def build_presentation(slides: Iterable[Slide], styles: StyleOptions, title: str = "",
                       backgrounds_dir=None, dbg: DebugRecorder | None = None):
    slides = list(slides)
    prs = Presentation()
    prs.slide_width = SLIDE_WIDTH
    prs.slide_height = SLIDE_HEIGHT
    if title:
        prs.core_properties.title = title

    for index, slide_data in enumerate(slides):
        add_hymn_slide(prs, slide_data, index, len(slides), styles, backgrounds_dir, dbg)
    return prs


def export_hymn(title: str, slides: Iterable[Slide], styles: StyleOptions, output_path: Path | str,
                *, backgrounds_dir=None, dbg: DebugRecorder | None = None) -> Path:
    """
    Write `slides` to a .pptx at `output_path`.

    The deck is fully serialized in memory before anything touches the disk,
    so a failed export never leaves a half-written file behind.
    """
    output_path = Path(output_path)

    try:
        prs = build_presentation(slides, styles, title, backgrounds_dir, dbg)
        buf = io.BytesIO()
        prs.save(buf)
    except Exception as e:
        raise ExportError(f"Could not build presentation for {title!r}: {e}") from e

    tmp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(buf.getvalue())
        os.replace(tmp_path, output_path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ExportError(f"Could not write {output_path}: {e}") from e

    if dbg:
        dbg.log(f"[EXPORT] wrote {output_path}")
    return output_path
