# tests/test_lrc.py
"""Test LRC parsing and timeline utilities"""

import pytest

from lyricfx.lyrics.lrc import (
    parse_lrc,
    parse_timestamp,
    rescale_timeline,
    line_durations,
    is_epic,
    epic_markers,
)
from lyricfx.lyrics.models import LyricLine


class TestParseLrc:
    """Test LRC parsing"""

    def test_parses_lines_and_drops_tags_and_blanks(self, sample_lrc):
        timeline = parse_lrc(sample_lrc)

        assert [line.text for line in timeline] == ["First line", "Second line", "Third line"]
        assert timeline[0].time_seconds == pytest.approx(0.5)
        assert timeline[1].time_seconds == pytest.approx(4.2)
        assert timeline[2].time_seconds == pytest.approx(12.345)

    def test_two_digit_fraction_is_hundredths(self):
        assert parse_lrc("[01:02.50] x")[0].time_seconds == pytest.approx(62.5)
        assert parse_timestamp("01", "02", "50") == pytest.approx(62.5)

    def test_three_digit_fraction_is_milliseconds(self):
        assert parse_lrc("[00:01.005] x")[0].time_seconds == pytest.approx(1.005)

    def test_malformed_markers_are_skipped(self):
        text = "\n".join([
            "[0:01.00] one-digit minutes",
            "[00:01.0050] four-digit fraction",
            "[00:00.005... broken",
            "no marker at all",
            "[00:03.00] kept",
        ])
        timeline = parse_lrc(text)

        assert len(timeline) == 1
        assert timeline[0].text == "kept"

    def test_text_is_trimmed(self):
        assert parse_lrc("[00:01.00]    spaced out   ")[0].text == "spaced out"

    def test_empty_input(self):
        assert parse_lrc("") == ()
        assert parse_lrc(None) == ()

    def test_output_is_sorted_and_stable(self):
        text = "[00:20.00] c\n[00:05.00] a\n[00:10.00] b1\n[00:10.00] b2"
        timeline = parse_lrc(text)

        assert [line.text for line in timeline] == ["a", "b1", "b2", "c"]
        times = [line.time_seconds for line in timeline]
        assert times == sorted(times)

    def test_returns_tuple(self, sample_lrc):
        assert isinstance(parse_lrc(sample_lrc), tuple)


class TestRescale:
    """Test tempo correction"""

    def test_divides_by_ratio(self):
        timeline = (LyricLine(30.0, "a"), LyricLine(60.0, "b"))
        rescaled = rescale_timeline(timeline, 1.2)

        assert rescaled[0].time_seconds == pytest.approx(25.0)
        assert rescaled[1].time_seconds == pytest.approx(50.0)
        assert [line.text for line in rescaled] == ["a", "b"]

    def test_inverse_ratio_restores_times(self, sample_timeline):
        for ratio in (0.5, 0.8, 1.25, 1.33, 2.0):
            restored = rescale_timeline(rescale_timeline(sample_timeline, ratio), 1 / ratio)
            for original, line in zip(sample_timeline, restored):
                assert line.time_seconds == pytest.approx(original.time_seconds)

    def test_ratio_one_keeps_times(self, sample_timeline):
        assert rescale_timeline(sample_timeline, 1) == sample_timeline

    def test_non_positive_ratio_rejected(self, sample_timeline):
        with pytest.raises(ValueError):
            rescale_timeline(sample_timeline, 0)
        with pytest.raises(ValueError):
            rescale_timeline(sample_timeline, -1.5)


class TestDurations:
    """Test line durations and epic detection"""

    def test_line_durations(self):
        timeline = (LyricLine(0.0, "a"), LyricLine(3.0, "b"), LyricLine(11.0, "c"))
        assert line_durations(timeline) == [3.0, 8.0, 5.0]
        assert line_durations(timeline, last_line_duration=2.0)[-1] == 2.0

    def test_is_epic(self):
        assert is_epic(8.0) is True
        assert is_epic(5.0) is False
        assert is_epic(3.0, threshold=2.0) is True

    def test_epic_markers(self):
        timeline = (LyricLine(0.0, "a"), LyricLine(3.0, "b"), LyricLine(11.0, "c"))
        flags = [epic for _, _, epic in epic_markers(timeline)]
        assert flags == [False, True, False]
