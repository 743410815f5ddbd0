# tests/test_tracker.py
"""Test track-change detection"""

import pytest

from conftest import FakePlayer
from lyricfx.player.base import PlayerState, Track
from lyricfx.player.playerctl import FIELD_SEPARATOR, parse_metadata_output
from lyricfx.sync.tracker import TrackChangeDetector


def state(title, duration=200.0, artist="Artist"):
    return PlayerState(title=title, artist=artist, duration_seconds=duration, current_time_seconds=1.0)


def make_detector(states, confirmations=1):
    changes = []
    detector = TrackChangeDetector(
        FakePlayer(states=states),
        on_change=changes.append,
        tolerance=5.0,
        confirmations=confirmations,
    )
    return detector, changes


class TestTrackChangeDetector:
    """Test change detection and debouncing"""

    @pytest.mark.asyncio
    async def test_first_track_fires(self):
        detector, changes = make_detector([state("Song A")])

        track = await detector.poll()

        assert track == Track("Song A", "Artist", 200.0)
        assert changes == [track]
        assert detector.current == track

    @pytest.mark.asyncio
    async def test_not_ready_player_is_skipped(self):
        detector, changes = make_detector([PlayerState(), state("")])

        assert await detector.poll() is None
        assert await detector.poll() is None
        assert changes == []

    @pytest.mark.asyncio
    async def test_duration_jitter_is_ignored(self):
        detector, changes = make_detector([state("Song A", 200), state("Song A", 204.5), state("Song A", 196)])

        for _ in range(3):
            await detector.poll()

        assert len(changes) == 1

    @pytest.mark.asyncio
    async def test_duration_change_beyond_tolerance(self):
        detector, changes = make_detector([state("Song A", 200), state("Song A", 150)])

        await detector.poll()
        await detector.poll()

        assert [track.duration_seconds for track in changes] == [200, 150]

    @pytest.mark.asyncio
    async def test_title_change(self):
        detector, changes = make_detector([state("Song A"), state("Song B")])

        await detector.poll()
        await detector.poll()

        assert [track.title for track in changes] == ["Song A", "Song B"]

    @pytest.mark.asyncio
    async def test_confirmations_debounce(self):
        detector, changes = make_detector(
            [state("Song A"), state("Song A"), state("Glitch"), state("Song A"), state("Song B"), state("Song B")],
            confirmations=2
        )

        results = [await detector.poll() for _ in range(6)]

        assert [track.title for track in changes] == ["Song A", "Song B"]
        assert results[0] is None and results[1] is not None
        assert results[4] is None and results[5] is not None

    def test_confirmations_minimum_is_one(self):
        detector, _ = make_detector([], confirmations=0)
        assert detector.confirmations == 1


class TestPlayerctlParsing:
    """Test playerctl metadata parsing"""

    def test_parse_metadata_output(self):
        output = FIELD_SEPARATOR.join(["Song", "Artist • Album • 2023", "215000000", "12500000"]) + "\n"
        parsed = parse_metadata_output(output)

        assert parsed.title == "Song"
        assert parsed.artist == "Artist"
        assert parsed.duration_seconds == pytest.approx(215.0)
        assert parsed.current_time_seconds == pytest.approx(12.5)
        assert parsed.is_ready

    def test_missing_length(self):
        output = FIELD_SEPARATOR.join(["Song", "", "", "0"])
        parsed = parse_metadata_output(output)

        assert parsed.duration_seconds == 0.0
        assert parsed.artist == ""

    def test_garbage_output(self):
        assert not parse_metadata_output("No players found").is_ready
