#!/usr/bin/env python3
"""
Hymn slides from the command line (no GUI).

Sources are either plain lyric text (.txt, anything not .json) or a
structured hymn record (.json, a single hymn or a library file).

Usage (examples):
  hymn-slides slides lyrics/venid.txt
  hymn-slides export lyrics/venid.txt -o decks/venid.pptx
  hymn-slides import old_deck.pptx -o lyrics/old_deck.txt
  hymn-slides preview hymns/14.json --slide 3 --width 960 -o slide3.png
  hymn-slides fit lyrics/venid.txt --width 640
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Tuple

from config import load_backgrounds_dir, load_style_options, save_export_prefs
from debug_tools import DebugRecorder
from fit_scaler import FitScaler
from hymn_library import HymnLibrary
from hymn_parser import parse_hymn_text, slides_from_hymn
from navigation import clamp_index
from pptx_importer import HymnImportError, import_hymn_text
from pptx_utils import ExportError, default_export_filename, export_hymn
from preview import render_slide
from slide_model import Slide, hymn_from_dict, slide_to_dict
from text_measure import TextMeasurer


def _load_source(path: Path) -> Tuple[str, List[Slide]]:
    """Return (title, slides) for a lyric text file or a hymn JSON file."""
    if path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict) and "hymns" in data:
            library = HymnLibrary()
            library.load(path)
            if library.selected is None:
                raise ValueError(f"{path.name} contains no hymns.")
            return library.selected.title, library.slides()
        hymn = hymn_from_dict(data)
        return hymn.title, slides_from_hymn(hymn)

    parsed = parse_hymn_text(path.read_text(encoding="utf-8", errors="ignore"))
    return parsed.title, list(parsed.slides)


def _print_slides(slides: List[Slide]) -> None:
    for i, s in enumerate(slides):
        caption = f"  [{s.title}]" if s.title else ""
        print(f"{i:>3}  {s.type.value:<6}{caption}")
        for line in s.lines:
            print(f"       {line}")


def cmd_slides(args) -> int:
    _, slides = _load_source(args.source)
    if args.json:
        print(json.dumps([slide_to_dict(s) for s in slides], indent=2, ensure_ascii=False))
    else:
        _print_slides(slides)
    return 0


def cmd_export(args) -> int:
    title, slides = _load_source(args.source)
    out = args.output or Path(default_export_filename(title))
    dbg = DebugRecorder.for_run("export", str(args.source), str(out))

    path = export_hymn(
        title,
        slides,
        load_style_options(),
        out,
        backgrounds_dir=load_backgrounds_dir(),
        dbg=dbg,
    )
    debug_files = dbg.flush()
    save_export_prefs(path)

    print("Wrote:")
    for p in [path, *debug_files]:
        print(" -", p)
    return 0


def cmd_import(args) -> int:
    text = import_hymn_text(args.deck)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        print("Wrote:")
        print(" -", args.output)
    else:
        print(text)
    return 0


def cmd_preview(args) -> int:
    _, slides = _load_source(args.source)
    if not slides:
        raise ValueError("Nothing to preview.")
    index = clamp_index(args.slide, len(slides))
    dbg = DebugRecorder.for_run("preview", str(args.source), str(args.output))

    scaler = FitScaler(TextMeasurer(), dbg=dbg)
    img = render_slide(
        slides[index],
        index,
        len(slides),
        load_style_options(),
        args.width,
        backgrounds_dir=load_backgrounds_dir(),
        scaler=scaler,
    )
    args.output.parent.mkdir(parents=True, exist_ok=True)
    img.save(args.output)
    debug_files = dbg.flush()

    print("Wrote:")
    for p in [args.output, *debug_files]:
        print(" -", p)
    return 0


def cmd_fit(args) -> int:
    _, slides = _load_source(args.source)
    styles = load_style_options()
    scaler = FitScaler(TextMeasurer())
    scaler.resize(args.width)
    for i, s in enumerate(slides):
        f = scaler.scale_for(s, styles)
        flag = "  SHRUNK" if f.fit < 1.0 else ""
        print(f"{i:>3}  {s.type.value:<6} viewport={f.viewport:.3f} fit={f.fit:.3f}{flag}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="hymn-slides", description="Turn hymn lyrics into presentation slides.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("slides", help="Show the slides a source produces")
    p.add_argument("source", type=Path, help="Lyric .txt or hymn .json")
    p.add_argument("--json", action="store_true", help="Print slides as JSON")
    p.set_defaults(func=cmd_slides)

    p = sub.add_parser("export", help="Export a source to .pptx")
    p.add_argument("source", type=Path, help="Lyric .txt or hymn .json")
    p.add_argument("-o", "--output", type=Path, help="Output .pptx (default: <title>.pptx)")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Extract lyric text from a .pptx")
    p.add_argument("deck", type=Path, help="PowerPoint file")
    p.add_argument("-o", "--output", type=Path, help="Write text here instead of printing")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("preview", help="Render one slide to an image")
    p.add_argument("source", type=Path, help="Lyric .txt or hymn .json")
    p.add_argument("--slide", type=int, default=0, help="Slide index (clamped to the deck)")
    p.add_argument("--width", type=int, default=960, help="Container width in pixels")
    p.add_argument("-o", "--output", type=Path, required=True, help="Output image (.png)")
    p.set_defaults(func=cmd_preview)

    p = sub.add_parser("fit", help="Print viewport and fit scale per slide")
    p.add_argument("source", type=Path, help="Lyric .txt or hymn .json")
    p.add_argument("--width", type=int, default=960, help="Container width in pixels")
    p.set_defaults(func=cmd_fit)

    return ap


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (ExportError, HymnImportError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
