from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Iterator, List

from pptx import Presentation
from pptx.exc import PackageNotFoundError

from hymn_parser import parse_hymn_text
from slide_model import ParsedHymn


class HymnImportError(RuntimeError):
    pass


def _open_presentation(pptx_path: Path):
    pptx_path = Path(pptx_path)
    if not pptx_path.is_file():
        raise HymnImportError(f"No such presentation: {pptx_path}")
    try:
        return Presentation(str(pptx_path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as e:
        raise HymnImportError(f"Not a PowerPoint file: {pptx_path.name} ({e})") from e


def _iter_text_rows(slide) -> Iterator[str]:
    """One row per paragraph: its runs concatenated, in shape order."""
    for sh in slide.shapes:
        if not getattr(sh, "has_text_frame", False):
            continue
        for p in sh.text_frame.paragraphs:
            row = "".join(r.text for r in p.runs).strip()
            if row:
                yield row


def extract_slide_texts(pptx_path: Path) -> List[str]:
    """Return the text of every slide that has any, in slide order."""
    prs = _open_presentation(pptx_path)
    out: List[str] = []
    for slide in prs.slides:
        rows = list(_iter_text_rows(slide))
        if rows:
            out.append("\n".join(rows))
    return out


def import_hymn_text(pptx_path: Path) -> str:
    """Slide texts joined by a blank line, ready for parse_hymn_text()."""
    return "\n\n".join(extract_slide_texts(pptx_path))


def import_hymn(pptx_path: Path) -> ParsedHymn:
    return parse_hymn_text(import_hymn_text(pptx_path))
