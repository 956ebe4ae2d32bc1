"""Shared fixtures for hymn slide tests."""

import pytest
from PIL import Image

import config
from slide_model import Backgrounds, Hymn

EXAMPLE_TEXT = "HIMNO: 14\nTÍTULO: VENID\n\nLine one\nLine two\n\nCORO:\nHallelujah"


@pytest.fixture(autouse=True)
def no_debug(monkeypatch):
    """Keep debug recorders quiet unless a test turns them on."""
    for name in ("HS_DEBUG", "HS_DEBUG_JSON", "HS_DEBUG_PRINT", "HS_DEBUG_LOG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tmp_config(tmp_path, monkeypatch):
    """Point the config module at a throwaway file."""
    path = tmp_path / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    return path


@pytest.fixture
def example_text():
    return EXAMPLE_TEXT


@pytest.fixture
def sample_hymn():
    return Hymn(
        id="hymn-14",
        title="Venid, fieles",
        number="14",
        stanzas=("Venid, fieles todos\nA Belén marchemos", "Cantad jubilosos\nCoros celestiales"),
        chorus="Venid, adoremos\nA Cristo el Señor",
        backgrounds=Backgrounds(cover="c.png", title="t.png", lyrics="l.png"),
    )


@pytest.fixture
def red_png(tmp_path):
    """A small solid red PNG on disk."""
    path = tmp_path / "red.png"
    Image.new("RGB", (64, 36), (255, 0, 0)).save(path)
    return path
