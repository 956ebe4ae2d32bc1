"""Tests for lyric segmentation (structured and free text)."""

import random

import pytest

from hymn_parser import MAX_LINES_PER_SLIDE, hymn_to_text, parse_hymn_text, slides_from_hymn
from slide_model import DEFAULT_BACKGROUNDS, Hymn, Slide, SlideType


def _lyrics(slides):
    return [s for s in slides if s.type is SlideType.LYRICS]


class TestSlidesFromHymn:
    """Tests for the structured hymn segmenter."""

    @pytest.mark.parametrize("n", [0, 1, 2, 5])
    @pytest.mark.parametrize("chorus", [None, "Coro uno\nCoro dos"])
    def test_slide_count(self, n, chorus):
        hymn = Hymn(id="x", title="T", number="1", stanzas=tuple(f"line {i}" for i in range(n)), chorus=chorus)
        slides = slides_from_hymn(hymn)
        assert len(slides) == 2 + n + (n if chorus else 0)

    def test_cover_and_title(self, sample_hymn):
        cover, title = slides_from_hymn(sample_hymn)[:2]
        assert cover == Slide(SlideType.COVER, lines=(), background_image="c.png")
        assert title.type is SlideType.TITLE
        assert title.title == "HIMNO: 14"
        assert title.lines == ("VENID, FIELES",)
        assert title.background_image == "t.png"

    def test_chorus_follows_every_stanza(self, sample_hymn):
        lyrics = slides_from_hymn(sample_hymn)[2:]
        assert [s.title for s in lyrics] == ["ESTROFA 1", "CORO", "ESTROFA 2", "CORO"]
        assert lyrics[1].lines == ("Venid, adoremos", "A Cristo el Señor")
        assert all(s.background_image == "l.png" for s in lyrics)

    def test_long_stanza_is_not_capped(self):
        hymn = Hymn(id="x", title="T", stanzas=("A\nB\nC\nD\nE",))
        lyrics = slides_from_hymn(hymn)[2:]
        assert len(lyrics) == 1
        assert lyrics[0].lines == ("A", "B", "C", "D", "E")

    def test_blank_lines_dropped_and_trimmed(self):
        hymn = Hymn(id="x", title="T", stanzas=("  A  \n\n   \nB",))
        assert slides_from_hymn(hymn)[2].lines == ("A", "B")

    def test_only_newlines_split_stanza(self):
        hymn = Hymn(id="x", title="T", stanzas=("a\u2028b\x0bc\r\nd",))
        assert slides_from_hymn(hymn)[2].lines == ("a\u2028b\x0bc", "d")

    def test_blank_stanza_still_yields_slide(self):
        hymn = Hymn(id="x", title="T", stanzas=("\n  \n",))
        lyrics = slides_from_hymn(hymn)[2:]
        assert len(lyrics) == 1
        assert lyrics[0].title == "ESTROFA 1"
        assert lyrics[0].lines == ()

    def test_empty_chorus_means_no_chorus(self):
        hymn = Hymn(id="x", title="T", stanzas=("A", "B"), chorus="")
        assert [s.title for s in slides_from_hymn(hymn)[2:]] == ["ESTROFA 1", "ESTROFA 2"]


class TestParseHymnText:
    """Tests for the free-text segmenter."""

    def test_example(self, example_text):
        parsed = parse_hymn_text(example_text)
        assert parsed.id == "14"
        assert parsed.title == "VENID"
        bg = DEFAULT_BACKGROUNDS
        assert list(parsed.slides) == [
            Slide(SlideType.COVER, lines=(), background_image=bg.cover),
            Slide(SlideType.TITLE, title="HIMNO: 14", lines=("VENID",), background_image=bg.title),
            Slide(SlideType.LYRICS, title=None, lines=("Line one", "Line two"), background_image=bg.lyrics),
            Slide(SlideType.LYRICS, title="CORO", lines=("Hallelujah",), background_image=bg.lyrics),
        ]

    def test_defaults_for_empty_text(self):
        parsed = parse_hymn_text("")
        assert parsed.id == ""
        assert parsed.title == "Hymn"
        assert len(parsed.slides) == 2
        assert parsed.slides[1].title == "HIMNO: "
        assert parsed.slides[1].lines == ("HYMN",)

    def test_metadata_labels_are_case_insensitive(self):
        parsed = parse_hymn_text("title: Come thou fount\nnumber:  7 \nCome thou fount")
        assert parsed.id == "7"
        assert parsed.title == "Come thou fount"
        assert parsed.slides[1].lines == ("COME THOU FOUNT",)
        assert _lyrics(parsed.slides)[0].lines == ("Come thou fount",)

    def test_accented_title_label(self):
        parsed = parse_hymn_text("título: Santo\nSanto, santo")
        assert parsed.title == "Santo"

    def test_metadata_lines_are_removed(self):
        parsed = parse_hymn_text("HIMNO: 3\nA\nTITLE: X\nB")
        assert _lyrics(parsed.slides)[0].lines == ("A", "B")

    def test_four_line_cap(self):
        text = "\n".join(f"line {i}" for i in range(9))
        lyrics = _lyrics(parse_hymn_text(text).slides)
        assert [len(s.lines) for s in lyrics] == [4, 4, 1]

    def test_cap_resets_group_title(self):
        text = "CORO:\n" + "\n".join("abcde")
        lyrics = _lyrics(parse_hymn_text(text).slides)
        assert [(s.title, s.lines) for s in lyrics] == [
            ("CORO", ("a", "b", "c", "d")),
            (None, ("e",)),
        ]

    @pytest.mark.parametrize("header,expected", [
        ("Estrofa 2:", "ESTROFA 2"),
        ("verse 1", "VERSE 1"),
        ("Chorus:", "CHORUS"),
        ("Puente", "PUENTE"),
        ("BRIDGE: x", "BRIDGE X"),
        ("Efesios 5:19", "EFESIOS 519"),
    ])
    def test_group_headers(self, header, expected):
        lyrics = _lyrics(parse_hymn_text(f"{header}\nSome words").slides)
        assert len(lyrics) == 1
        assert lyrics[0].title == expected
        assert lyrics[0].lines == ("Some words",)

    def test_header_flushes_previous_group(self):
        lyrics = _lyrics(parse_hymn_text("one\ntwo\nCORO\nthree").slides)
        assert [(s.title, s.lines) for s in lyrics] == [
            (None, ("one", "two")),
            ("CORO", ("three",)),
        ]

    def test_header_without_lines_is_dropped(self):
        lyrics = _lyrics(parse_hymn_text("CORO:\n\nVERSE 2\nwords").slides)
        assert [(s.title, s.lines) for s in lyrics] == [("VERSE 2", ("words",))]

    def test_crlf_and_whitespace(self):
        lyrics = _lyrics(parse_hymn_text("  uno  \r\n\tdos\r\n\r\ntres").slides)
        assert [s.lines for s in lyrics] == [("uno", "dos"), ("tres",)]

    def test_only_newlines_break_lines(self):
        text = "uno\u2028dos\x0ctres\ncuatro\x85\ncinco"
        lyrics = _lyrics(parse_hymn_text(text).slides)
        assert [s.lines for s in lyrics] == [("uno\u2028dos\x0ctres", "cuatro", "cinco")]

    def test_lyric_slides_are_never_empty_or_oversized(self):
        rng = random.Random(1234)
        tokens = ["", "", "la la", "CORO:", "Verse 2", "HIMNO: 9", "Title: z", "  ", "amen", "Efesios 1:3"]
        for _ in range(300):
            text = "\n".join(rng.choice(tokens) for _ in range(rng.randint(0, 30)))
            for slide in _lyrics(parse_hymn_text(text).slides):
                assert 1 <= len(slide.lines) <= MAX_LINES_PER_SLIDE


class TestHymnToText:
    """Tests for writing a parsed hymn back to text."""

    def test_round_trip(self, example_text):
        parsed = parse_hymn_text(example_text)
        assert parse_hymn_text(hymn_to_text(parsed)) == parsed

    def test_round_trip_with_capped_groups(self):
        text = "TITLE: Gloria\nESTROFA 1\n" + "\n".join(f"l{i}" for i in range(6)) + "\n\nCORO\nx\ny"
        parsed = parse_hymn_text(text)
        assert parse_hymn_text(hymn_to_text(parsed)) == parsed

    def test_number_line_omitted_when_empty(self):
        text = hymn_to_text(parse_hymn_text("just words"))
        assert not text.startswith("HIMNO")
        assert text.splitlines()[0] == "TÍTULO: Hymn"
