from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from hymn_parser import slides_from_hymn
from slide_model import Hymn, Slide, hymn_from_dict, hymn_to_dict

SCHEMA_VERSION = "1.0"


class HymnLibrary:
    """
    Ordered collection of structured hymns plus the current selection.

    Hymns are only ever replaced whole: save() with an existing id swaps the
    stored record, it never patches it.
    """

    def __init__(self, hymns: Optional[List[Hymn]] = None):
        self.hymns: List[Hymn] = list(hymns or [])
        self.selected_id: Optional[str] = self.hymns[0].id if self.hymns else None

    def __len__(self) -> int:
        return len(self.hymns)

    def _index_of(self, hymn_id: str) -> int:
        for i, h in enumerate(self.hymns):
            if h.id == hymn_id:
                return i
        return -1

    def get(self, hymn_id: str) -> Optional[Hymn]:
        i = self._index_of(hymn_id)
        return self.hymns[i] if i >= 0 else None

    @property
    def selected(self) -> Optional[Hymn]:
        if self.selected_id is None:
            return None
        return self.get(self.selected_id)

    def select(self, hymn_id: str) -> Hymn:
        hymn = self.get(hymn_id)
        if hymn is None:
            raise KeyError(hymn_id)
        self.selected_id = hymn_id
        return hymn

    def save(self, hymn: Hymn) -> None:
        i = self._index_of(hymn.id)
        if i >= 0:
            self.hymns[i] = hymn
        else:
            self.hymns.append(hymn)
            self.selected_id = hymn.id

    def delete(self, hymn_id: str) -> bool:
        i = self._index_of(hymn_id)
        if i < 0:
            return False
        del self.hymns[i]
        if self.selected_id == hymn_id:
            self.selected_id = self.hymns[0].id if self.hymns else None
        return True

    def slides(self) -> List[Slide]:
        hymn = self.selected
        return slides_from_hymn(hymn) if hymn else []

    # ---------------- JSON files ----------------

    def load(self, path: Path) -> None:
        """Replace the library with the hymns in `path`.

        The file is fully parsed first; a bad file raises ValueError and the
        library keeps what it had.
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"{Path(path).name} is not valid JSON: {e}") from e

        raw = data.get("hymns") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise ValueError(f"{Path(path).name} has no hymn list.")

        hymns = [hymn_from_dict(item) for item in raw]
        self.hymns = hymns
        self.selected_id = hymns[0].id if hymns else None

    def save_to(self, path: Path) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "hymns": [hymn_to_dict(h) for h in self.hymns],
        }
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
