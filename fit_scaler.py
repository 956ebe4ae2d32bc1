from __future__ import annotations

import math
from typing import Callable, NamedTuple, Optional

from debug_tools import DebugRecorder
from slide_model import Slide, StyleOptions

# Every slide is laid out on this virtual canvas and scaled to the container.
DESIGN_WIDTH = 1280
DESIGN_HEIGHT = 720

# Content shrinks towards the top centre; the whole canvas scales from top left.
FIT_ORIGIN = ("center", "top")
VIEWPORT_ORIGIN = ("left", "top")


class Measurement(NamedTuple):
    natural_height: float
    allotted_height: float


class ScaleFactors(NamedTuple):
    viewport: float
    fit: float


# measure(slide, styles, viewport_scale) -> Measurement
MeasureFn = Callable[[Slide, StyleOptions, float], Measurement]


def _measurable(v) -> bool:
    try:
        return math.isfinite(v) and v > 0
    except TypeError:
        return False


def viewport_scale(container_width: float, design_width: float = DESIGN_WIDTH) -> float:
    """Container width over design width; 1.0 when the container can't be measured."""
    if not _measurable(container_width) or not _measurable(design_width):
        return 1.0
    return float(container_width) / float(design_width)


def fit_scale(natural_height: float, allotted_height: float, tolerance: float = 0.0) -> float:
    """
    Uniform shrink factor that makes content of `natural_height` fit into
    `allotted_height`. Never upscales: content that already fits gets 1.0.

    `tolerance` lets content overflow by a few units before shrinking
    (browsers round layout heights).
    """
    if not _measurable(natural_height) or not _measurable(allotted_height):
        return 1.0
    if natural_height <= allotted_height + max(0.0, tolerance):
        return 1.0
    return float(allotted_height) / float(natural_height)


class FitScaler:
    """
    Holds the two scale factors for the slide on screen.

    The viewport scale follows resize() calls; the fit scale is recomputed
    whenever the slide, the styles or the viewport scale differ from the last
    measurement. Measuring is delegated to `measure` so that any rendering
    surface (or a test double) can supply sizes.
    """

    def __init__(
        self,
        measure: MeasureFn,
        design_width: float = DESIGN_WIDTH,
        tolerance: float = 0.0,
        dbg: DebugRecorder | None = None,
    ):
        self.measure = measure
        self.design_width = design_width
        self.tolerance = float(tolerance)
        self.dbg = dbg

        self.viewport = 1.0
        self._generation = 0
        self._last_key: Optional[tuple] = None
        self._last_fit = 1.0

    def resize(self, container_width: float) -> float:
        scale = viewport_scale(container_width, self.design_width)
        if scale != self.viewport:
            self.viewport = scale
            # Any measurement taken at the old scale is now stale.
            self._generation += 1
            self._log(f"[VIEWPORT] width={container_width!r} scale={scale:.4f}")
        return self.viewport

    def is_stale(self, slide: Slide, styles: StyleOptions) -> bool:
        return self._last_key != (slide, styles, self.viewport, self._generation)

    def scale_for(self, slide: Slide, styles: StyleOptions) -> ScaleFactors:
        if self.is_stale(slide, styles):
            self._recompute(slide, styles)
        return ScaleFactors(self.viewport, self._last_fit)

    def _recompute(self, slide: Slide, styles: StyleOptions) -> None:
        while True:
            generation = self._generation
            viewport = self.viewport
            natural, allotted = self.measure(slide, styles, viewport)
            if generation == self._generation:
                break
            # A resize landed while measuring; measure again at the new scale.
            self._log("[FIT] superseded by resize, re-measuring")

        fit = fit_scale(natural, allotted, self.tolerance)
        self._last_key = (slide, styles, viewport, generation)
        self._last_fit = fit
        self._log(
            f"[FIT] type={slide.type.value} title={slide.title!r} "
            f"natural={natural!r} allotted={allotted!r} fit={fit:.4f}"
        )
        if self.dbg is not None:
            self.dbg.record_fit(slide, natural, allotted, viewport, fit)

    def _log(self, msg: str) -> None:
        if self.dbg is not None:
            self.dbg.log(msg)
