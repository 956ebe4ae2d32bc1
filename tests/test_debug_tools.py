"""Tests for the HS_DEBUG recorder."""

import json

from debug_tools import DebugRecorder, DebugSettings
from fit_scaler import FitScaler, Measurement
from hymn_parser import parse_hymn_text
from pptx_utils import export_hymn
from slide_model import DEFAULT_STYLES, Slide, SlideType


class TestSettings:
    def test_off_by_default(self):
        assert DebugSettings.from_env().enabled is False

    def test_env_toggles(self, monkeypatch):
        monkeypatch.setenv("HS_DEBUG", "yes")
        monkeypatch.setenv("HS_DEBUG_JSON", "0")
        s = DebugSettings.from_env()
        assert s.enabled is True
        assert s.write_json_report is False
        assert s.print_console is True


class TestRecorder:
    def test_disabled_writes_nothing(self, tmp_path):
        dbg = DebugRecorder.for_run("export", "in.txt", str(tmp_path / "out.pptx"))
        dbg.log("hello")
        assert dbg.flush() == []
        assert dbg.lines == []
        assert list(tmp_path.iterdir()) == []

    def test_export_run_is_recorded(self, tmp_path, monkeypatch, example_text, capsys):
        monkeypatch.setenv("HS_DEBUG", "1")
        monkeypatch.setenv("HS_DEBUG_PRINT", "0")
        out = tmp_path / "venid.pptx"
        dbg = DebugRecorder.for_run("export", "venid.txt", str(out))

        parsed = parse_hymn_text(example_text)
        export_hymn(parsed.title, parsed.slides, DEFAULT_STYLES, out, dbg=dbg)
        written = dbg.flush()

        assert written == [tmp_path / "venid_debug.log", tmp_path / "venid_debug.json"]
        assert capsys.readouterr().out == ""
        log = (tmp_path / "venid_debug.log").read_text(encoding="utf-8")
        assert "DEBUG ENABLED (export)" in log
        assert "[EXPORT]" in log

        report = json.loads((tmp_path / "venid_debug.json").read_text(encoding="utf-8"))
        run = report["runs"][0]
        assert run["kind"] == "export"
        assert [s["index"] for s in run["slides"]] == [0, 1, 2, 3]
        assert run["slides"][3]["title"] == "CORO"
        assert run["slides"][0]["background"] is False

    def test_unresolved_background_is_logged(self, tmp_path, monkeypatch, example_text):
        monkeypatch.setenv("HS_DEBUG", "1")
        monkeypatch.setenv("HS_DEBUG_PRINT", "0")
        dbg = DebugRecorder.for_run("export", "venid.txt", str(tmp_path / "venid.pptx"))
        parsed = parse_hymn_text(example_text)
        export_hymn(parsed.title, parsed.slides, DEFAULT_STYLES, tmp_path / "venid.pptx", dbg=dbg)
        assert any("unresolved background 'cover.jpg'" in line for line in dbg.lines)

    def test_fit_decisions_are_summarised(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HS_DEBUG", "1")
        monkeypatch.setenv("HS_DEBUG_PRINT", "0")
        monkeypatch.setenv("HS_DEBUG_LOG", "0")
        dbg = DebugRecorder.for_run("preview", "long.txt", str(tmp_path / "slide.png"))

        scaler = FitScaler(lambda slide, styles, viewport: Measurement(1440, 720), dbg=dbg)
        scaler.resize(640)
        scaler.scale_for(Slide(SlideType.LYRICS, lines=("a",)), DEFAULT_STYLES)
        scaler.scale_for(Slide(SlideType.COVER), DEFAULT_STYLES)

        assert dbg.summary() == {"slides": 0, "measured": 2, "shrunk": 2}
        assert dbg.flush() == [tmp_path / "slide_debug.json"]
        fits = json.loads((tmp_path / "slide_debug.json").read_text(encoding="utf-8"))["runs"][0]["fits"]
        assert fits[0]["viewport"] == 0.5
        assert fits[0]["fit"] == 0.5
