from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Opaque background handle: a data URL or a file path. Only the export and
# preview code ever looks inside it.
ImageRef = str


class SlideType(str, Enum):
    COVER = "cover"
    TITLE = "title"
    LYRICS = "lyrics"


@dataclass(frozen=True)
class Slide:
    type: SlideType
    title: Optional[str] = None
    lines: Tuple[str, ...] = ()
    background_image: Optional[ImageRef] = None


@dataclass(frozen=True)
class Backgrounds:
    cover: Optional[ImageRef] = None
    title: Optional[ImageRef] = None
    lyrics: Optional[ImageRef] = None


# Used for hymns typed as free text (they carry no images of their own).
DEFAULT_BACKGROUNDS = Backgrounds(cover="cover.jpg", title="title.jpg", lyrics="lyrics.jpg")


@dataclass(frozen=True)
class Hymn:
    id: str
    title: str
    number: str = ""
    stanzas: Tuple[str, ...] = ()
    chorus: Optional[str] = None
    backgrounds: Backgrounds = field(default_factory=Backgrounds)


@dataclass(frozen=True)
class ParsedHymn:
    """A hymn derived from raw lyric text. Never stored, rebuilt on every edit."""
    id: str
    title: str
    slides: Tuple[Slide, ...] = ()


def slide_number_label(index: int, total: int) -> str:
    """Label drawn on every non-cover slide. The cover counts as slide 0."""
    return f"{index}/{total - 1}"


# ---------------- Styles ----------------

ALIGNMENTS = ("left", "center", "right")

FONT_BASKERVILLE = "Baskerville, 'Goudy Old Style', 'Palatino', 'Book Antiqua', serif"
FONT_GEORGIA = "Georgia, serif"

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class TextStyle:
    font_face: str
    font_size: int
    color: str


@dataclass(frozen=True)
class HymnTitleStyle(TextStyle):
    bold: bool = True


@dataclass(frozen=True)
class SectionTitleStyle(TextStyle):
    underline: bool = True


@dataclass(frozen=True)
class LyricsStyle(TextStyle):
    align: str = "center"


@dataclass(frozen=True)
class StyleOptions:
    hymn_title: HymnTitleStyle
    hymn_number: TextStyle
    section_title: SectionTitleStyle
    lyrics: LyricsStyle
    slide_number: TextStyle


DEFAULT_STYLES = StyleOptions(
    hymn_title=HymnTitleStyle(FONT_BASKERVILLE, 60, "#FFFFFF", bold=True),
    hymn_number=TextStyle(FONT_BASKERVILLE, 32, "#FFFFFF"),
    section_title=SectionTitleStyle(FONT_GEORGIA, 28, "#FFFFFF", underline=True),
    lyrics=LyricsStyle(FONT_GEORGIA, 44, "#FFFFFF", align="center"),
    slide_number=TextStyle(FONT_GEORGIA, 18, "#FFFFFF"),
)

_STYLE_GROUPS = ("hymn_title", "hymn_number", "section_title", "lyrics", "slide_number")


def _style_to_dict(style: TextStyle) -> Dict[str, Any]:
    return asdict(style)


def styles_to_dict(styles: StyleOptions) -> Dict[str, Any]:
    return {name: _style_to_dict(getattr(styles, name)) for name in _STYLE_GROUPS}


def _validated_style(group: str, style: TextStyle) -> TextStyle:
    if not _COLOR_RE.match(style.color or ""):
        raise ValueError(f"{group}: color must look like #RRGGBB, got {style.color!r}")
    if not isinstance(style.font_size, int) or isinstance(style.font_size, bool) or style.font_size <= 0:
        raise ValueError(f"{group}: font_size must be a positive integer, got {style.font_size!r}")
    if not str(style.font_face).strip():
        raise ValueError(f"{group}: font_face is empty")
    if isinstance(style, LyricsStyle) and style.align not in ALIGNMENTS:
        raise ValueError(f"{group}: align must be one of {ALIGNMENTS}, got {style.align!r}")
    return style


def styles_from_dict(data: Dict[str, Any] | None, base: StyleOptions = DEFAULT_STYLES) -> StyleOptions:
    """
    Overlay a (possibly partial) dict on top of `base`.
    Unknown keys are ignored; bad values raise ValueError.
    """
    data = data or {}
    groups = {}
    for name in _STYLE_GROUPS:
        current = getattr(base, name)
        overrides = data.get(name) or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"{name}: expected an object, got {type(overrides).__name__}")
        names = {f.name for f in fields(current)}
        known = {k: v for k, v in overrides.items() if k in names}
        groups[name] = _validated_style(name, replace(current, **known))
    return StyleOptions(**groups)


# ---------------- Hymn records ----------------

def hymn_to_dict(hymn: Hymn) -> Dict[str, Any]:
    return {
        "id": hymn.id,
        "title": hymn.title,
        "number": hymn.number,
        "stanzas": list(hymn.stanzas),
        "chorus": hymn.chorus,
        "backgrounds": {
            "cover": hymn.backgrounds.cover,
            "title": hymn.backgrounds.title,
            "lyrics": hymn.backgrounds.lyrics,
        },
    }


def hymn_from_dict(data: Dict[str, Any]) -> Hymn:
    if not isinstance(data, dict):
        raise ValueError("Hymn record must be a JSON object.")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("Hymn record is missing a title.")

    stanzas = data.get("stanzas", [])
    if not isinstance(stanzas, list) or not all(isinstance(s, str) for s in stanzas):
        raise ValueError("Hymn 'stanzas' must be a list of strings.")

    bgs = data.get("backgrounds") or {}
    if not isinstance(bgs, dict):
        raise ValueError("Hymn 'backgrounds' must be an object.")
    chorus = data.get("chorus")
    return Hymn(
        id=str(data.get("id") or title),
        title=title,
        number=str(data.get("number") or ""),
        stanzas=tuple(stanzas),
        chorus=str(chorus) if chorus is not None else None,
        backgrounds=Backgrounds(
            cover=bgs.get("cover"),
            title=bgs.get("title"),
            lyrics=bgs.get("lyrics"),
        ),
    )


def slide_to_dict(slide: Slide) -> Dict[str, Any]:
    return {
        "type": slide.type.value,
        "title": slide.title,
        "lines": list(slide.lines),
        "background_image": slide.background_image,
    }
