from __future__ import annotations

from typing import Optional, Sequence

from slide_model import Slide


def clamp_index(index: int, slide_count: int) -> int:
    """Keep a slide index inside [0, slide_count - 1]; 0 for an empty deck."""
    if slide_count <= 0:
        return 0
    return max(0, min(index, slide_count - 1))


class SlideNavigator:
    """Current-slide index for a preview, safe against decks that shrink."""

    def __init__(self, slide_count: int = 0):
        self.slide_count = max(0, slide_count)
        self.index = 0

    @property
    def last_index(self) -> int:
        return max(0, self.slide_count - 1)

    @property
    def at_start(self) -> bool:
        return self.index == 0

    @property
    def at_end(self) -> bool:
        return self.index >= self.last_index

    def prev(self) -> int:
        self.index = max(0, self.index - 1)
        return self.index

    def next(self) -> int:
        self.index = min(self.last_index, self.index + 1)
        return self.index

    def reset(self) -> int:
        self.index = 0
        return self.index

    def set_slide_count(self, slide_count: int) -> int:
        # Re-segmenting after an edit can drop slides under the cursor.
        self.slide_count = max(0, slide_count)
        self.index = clamp_index(self.index, self.slide_count)
        return self.index

    def current(self, slides: Sequence[Slide]) -> Optional[Slide]:
        if len(slides) != self.slide_count:
            self.set_slide_count(len(slides))
        if not slides:
            return None
        return slides[self.index]

    def position_label(self) -> str:
        if self.slide_count == 0:
            return "0 / 0"
        return f"{self.index + 1} / {self.slide_count}"
