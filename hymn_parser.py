from __future__ import annotations

import re
from typing import List, Optional

from slide_model import (
    DEFAULT_BACKGROUNDS,
    Backgrounds,
    Hymn,
    ParsedHymn,
    Slide,
    SlideType,
)

MAX_LINES_PER_SLIDE = 4
DEFAULT_TITLE = "Hymn"

_NUMBER_RE = re.compile(r"^(?:HIMNO|NUMBER)\s*:\s*(.*)$", re.IGNORECASE)
_TITLE_RE = re.compile(r"^(?:TÍTULO|TITLE)\s*:\s*(.*)$", re.IGNORECASE)

# Lines that open a named group. "Efesios" is a scripture citation some
# hymnals print above a verse.
_HEADER_RE = re.compile(r"^(?:CORO|CHORUS|ESTROFA|VERSE|PUENTE|BRIDGE|EFESIOS)", re.IGNORECASE)

# Only CR/LF breaks split lines; form feeds and Unicode separators stay in the text.
_LINE_BREAK_RE = re.compile(r"\r?\n")


def _split_lines(block: str) -> List[str]:
    """Split a block on line breaks, trim, and drop blank lines."""
    return [ln.strip() for ln in _LINE_BREAK_RE.split(block) if ln.strip()]


def _cover_and_title(title: str, number: str, backgrounds: Backgrounds) -> List[Slide]:
    return [
        Slide(SlideType.COVER, lines=(), background_image=backgrounds.cover),
        Slide(
            SlideType.TITLE,
            title=f"HIMNO: {number}",
            lines=(title.upper(),),
            background_image=backgrounds.title,
        ),
    ]


# -------------------------
# Structured hymn (stanzas + optional chorus)
# -------------------------

def slides_from_hymn(hymn: Hymn) -> List[Slide]:
    """
    Cover, title, then every stanza in order, each followed by the chorus
    when the hymn has one.

    Stanzas are never capped or dropped: a long stanza stays on one slide and
    a blank stanza still yields an (empty) slide.
    """
    bgs = hymn.backgrounds
    slides = _cover_and_title(hymn.title, hymn.number, bgs)

    chorus_lines = tuple(_split_lines(hymn.chorus)) if hymn.chorus else None

    for i, stanza in enumerate(hymn.stanzas, start=1):
        slides.append(Slide(
            SlideType.LYRICS,
            title=f"ESTROFA {i}",
            lines=tuple(_split_lines(stanza)),
            background_image=bgs.lyrics,
        ))
        if chorus_lines is not None:
            slides.append(Slide(
                SlideType.LYRICS,
                title="CORO",
                lines=chorus_lines,
                background_image=bgs.lyrics,
            ))

    return slides


# -------------------------
# Free text (what people paste from a hymnal or a PPTX import)
# -------------------------

def _pop_labelled_value(lines: List[str], pattern: re.Pattern) -> Optional[str]:
    """Remove the first line matching `pattern` and return its value."""
    for i, line in enumerate(lines):
        m = pattern.match(line)
        if m:
            del lines[i]
            return m.group(1).strip()
    return None


def _header_title(line: str) -> str:
    return line.upper().replace(":", "", 1).strip()


class _GroupAccumulator:
    def __init__(self, background: Optional[str]):
        self.background = background
        self.slides: List[Slide] = []
        self.lines: List[str] = []
        self.title: Optional[str] = None

    def flush(self) -> None:
        # A header with no lyrics under it is dropped with the group.
        if self.lines:
            self.slides.append(Slide(
                SlideType.LYRICS,
                title=self.title,
                lines=tuple(self.lines),
                background_image=self.background,
            ))
        self.lines = []
        self.title = None

    def add(self, line: str) -> None:
        self.lines.append(line)
        if len(self.lines) >= MAX_LINES_PER_SLIDE:
            self.flush()


def parse_hymn_text(text: str) -> ParsedHymn:
    """
    Turn raw lyric text into a hymn with cover, title and lyric slides.

    Recognised metadata lines ("HIMNO: 14", "TITLE: Venid") are removed from
    the lyrics. Blank lines and group headers (CORO, VERSE 2, ...) split the
    lyrics into slides, and no lyric slide holds more than four lines.
    Any input is accepted; missing metadata falls back to defaults.
    """
    lines = [ln.strip() for ln in _LINE_BREAK_RE.split(text or "")]

    number = _pop_labelled_value(lines, _NUMBER_RE) or ""
    title = _pop_labelled_value(lines, _TITLE_RE) or DEFAULT_TITLE

    bgs = DEFAULT_BACKGROUNDS
    slides = _cover_and_title(title, number, bgs)

    group = _GroupAccumulator(bgs.lyrics)
    for line in lines:
        if not line:
            group.flush()
        elif _HEADER_RE.match(line):
            group.flush()
            group.title = _header_title(line)
        else:
            group.add(line)
    group.flush()

    slides.extend(group.slides)
    return ParsedHymn(id=number, title=title, slides=tuple(slides))


def hymn_to_text(parsed: ParsedHymn) -> str:
    """
    Write a parsed hymn back out as text that parse_hymn_text() reads again
    into the same slides.
    """
    out: List[str] = []
    if parsed.id:
        out.append(f"HIMNO: {parsed.id}")
    out.append(f"TÍTULO: {parsed.title}")

    for slide in parsed.slides:
        if slide.type is not SlideType.LYRICS:
            continue
        out.append("")
        if slide.title:
            out.append(slide.title)
        out.extend(slide.lines)

    return "\n".join(out) + "\n"
