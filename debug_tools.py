from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

ENV_PREFIX = "HS_DEBUG"


def _truthy(v: str | None) -> bool:
    if v is None:
        return False
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_flag(suffix: str, default: bool) -> bool:
    raw = os.getenv(f"{ENV_PREFIX}_{suffix}")
    return default if raw is None else _truthy(raw)


@dataclass
class DebugSettings:
    enabled: bool = False
    # <stem>_debug.json: every slide exported, every fit decision
    write_json_report: bool = True
    # echo log lines to stdout
    print_console: bool = True
    # <stem>_debug.log next to the output
    write_text_log: bool = True

    @staticmethod
    def from_env() -> "DebugSettings":
        # HS_DEBUG=1 turns everything on; HS_DEBUG_JSON / _PRINT / _LOG=0
        # switch single outputs back off.
        return DebugSettings(
            enabled=_truthy(os.getenv(ENV_PREFIX)),
            write_json_report=_env_flag("JSON", True),
            print_console=_env_flag("PRINT", True),
            write_text_log=_env_flag("LOG", True),
        )


@dataclass
class DebugRecorder:
    """
    Collects log lines and a per-run report while slides are exported or
    previewed. Every method is a no-op unless the settings are enabled.
    """
    settings: DebugSettings
    output_path: Optional[Path] = None
    lines: List[str] = field(default_factory=list)
    report: Dict[str, Any] = field(default_factory=lambda: {"tool": "hymn-slides", "runs": []})

    def _stamp(self) -> str:
        return time.strftime("%Y-%m-%d %H:%M:%S")

    def log(self, msg: str) -> None:
        if not self.settings.enabled:
            return
        line = f"[{self._stamp()}] {msg}"
        self.lines.append(line)
        if self.settings.print_console:
            print(line)

    def start_run(self, run_kind: str, source_path: str, output_path: str) -> None:
        if not self.settings.enabled:
            return
        self.output_path = Path(output_path)
        self.report["runs"].append({
            "kind": run_kind,
            "source_path": source_path,
            "output_path": output_path,
            "started_at": self._stamp(),
            "slides": [],
            "fits": [],
        })
        self.log(f"DEBUG ENABLED ({run_kind})")
        self.log(f"Source: {source_path}")
        self.log(f"Output: {output_path}")

    def _cur_run(self) -> Optional[Dict[str, Any]]:
        if not self.settings.enabled or not self.report["runs"]:
            return None
        return self.report["runs"][-1]

    def add_slide_record(self, slide_rec: Dict[str, Any]) -> None:
        run = self._cur_run()
        if run is not None:
            run["slides"].append(slide_rec)

    def record_slide(self, index: int, slide, **extra: Any) -> None:
        """Add a slide (and whatever the caller measured for it) to the report."""
        if not self.settings.enabled:
            return
        rec: Dict[str, Any] = {
            "index": index,
            "type": slide.type.value,
            "title": slide.title,
            "lines": list(slide.lines),
            "line_count": len(slide.lines),
        }
        rec.update(extra)
        self.add_slide_record(rec)
        self.log(f"[SLIDE {index}] {rec['type']} title={slide.title!r} lines={len(slide.lines)}")

    def record_fit(self, slide, natural: float, allotted: float, viewport: float, fit: float) -> None:
        run = self._cur_run()
        if run is None:
            return
        run["fits"].append({
            "type": slide.type.value,
            "title": slide.title,
            "natural_height": natural,
            "allotted_height": allotted,
            "viewport": viewport,
            "fit": fit,
        })

    def summary(self) -> Dict[str, int]:
        run = self._cur_run()
        if run is None:
            return {}
        return {
            "slides": len(run["slides"]),
            "measured": len(run["fits"]),
            "shrunk": sum(1 for f in run["fits"] if f["fit"] < 1.0),
        }

    def flush(self) -> List[Path]:
        """Write the log and report next to the output. Returns the files written."""
        if not self.settings.enabled or not self.output_path:
            return []
        out_dir = self.output_path.parent
        stem = self.output_path.stem
        written: List[Path] = []

        run = self._cur_run()
        if run is not None:
            run["summary"] = self.summary()
            self.log(f"Summary: {run['summary']}")

        if self.settings.write_text_log:
            path = out_dir / f"{stem}_debug.log"
            path.write_text("\n".join(self.lines) + "\n", encoding="utf-8")
            written.append(path)

        if self.settings.write_json_report:
            path = out_dir / f"{stem}_debug.json"
            path.write_text(json.dumps(self.report, indent=2, ensure_ascii=False), encoding="utf-8")
            written.append(path)

        return written

    @classmethod
    def for_run(cls, run_kind: str, source_path: str, output_path: str) -> "DebugRecorder":
        """Read settings from the environment and open a run in one go."""
        dbg = cls(DebugSettings.from_env())
        dbg.start_run(run_kind, source_path, output_path)
        return dbg
