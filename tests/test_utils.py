# tests/test_utils.py
"""Test utilities and helpers"""

import pytest

from lyricfx.ai.client import extract_completion
from lyricfx.exceptions import MalformedResponseError
from lyricfx.utils.helpers import (
    clean_artist_label,
    clean_track_title,
    collapse_whitespace,
    format_duration,
    format_timestamp,
    is_speed_modified,
    strip_code_fences,
    truncate_string,
)
from lyricfx.utils.logger import parse_size


class TestHelpers:
    """Test helper functions"""

    def test_format_duration(self):
        """Test duration formatting"""
        assert format_duration(90) == "1:30"
        assert format_duration(3661) == "1:01:01"
        assert format_duration(0) == "0:00"
        assert format_duration(-10) == "0:00"

    def test_format_timestamp(self):
        assert format_timestamp(62.5) == "01:02.50"
        assert format_timestamp(0) == "00:00.00"
        assert format_timestamp(-3) == "00:00.00"
        assert format_timestamp(599.999) == "10:00.00"

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a long lyric line", 10) == "a long ..."
        assert truncate_string("abc", 2) == ".."

    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \t b\n c ") == "a b c"
        assert collapse_whitespace(None) == ""

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 ** 2
        assert parse_size("500 kb") == 500 * 1024
        with pytest.raises(ValueError):
            parse_size("ten megs")


class TestTitleCleaning:
    """Test track title normalization"""

    @pytest.mark.parametrize("raw, expected", [
        ("Song (Official Video)", "Song"),
        ("Song [Lyrics]", "Song"),
        ("Song {Live}", "Song"),
        ("Song 【MV】", "Song"),
        ("Song 〔Remix〕", "Song"),
        ("Song feat. Someone Else", "Song"),
        ("Song ft. Someone", "Song"),
        ("Artist - Song", "Artist Song"),
        ("Artist — Song", "Artist Song"),
        ("Song Official Video", "Song"),
        ("Song Audio", "Song"),
        ("Song (Sped Up)", "Song"),
        ("Song sped up", "Song"),
        ("Song Nightcore Slowed Reverb", "Song"),
    ])
    def test_clean_track_title(self, raw, expected):
        assert clean_track_title(raw) == expected

    def test_falls_back_to_raw_title(self):
        assert clean_track_title("(Official Video)") == "(Official Video)"
        assert clean_track_title("") == ""

    def test_is_speed_modified(self):
        assert is_speed_modified("Song (Sped Up)")
        assert is_speed_modified("NIGHTCORE - Song")
        assert is_speed_modified("song slowed + reverb")
        assert not is_speed_modified("Speed of Sound")
        assert not is_speed_modified("")

    def test_custom_keywords(self):
        assert is_speed_modified("Song (8D Audio)", ["8d"])
        assert clean_track_title("Song 8D", ["8d"]) == "Song"

    def test_clean_artist_label(self):
        assert clean_artist_label("Artist • Album • 2021") == "Artist"
        assert clean_artist_label("  Artist  ") == "Artist"
        assert clean_artist_label("") == ""


class TestCompletionHandling:
    """Test generative response handling"""

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n[{"id": "x"}]\n```') == '[{"id": "x"}]'
        assert strip_code_fences('```\n[]\n```') == '[]'
        assert strip_code_fences('  [1, 2]  ') == '[1, 2]'
        assert strip_code_fences('') == ''

    def test_extract_completion(self):
        payload = {'candidates': [{'content': {'parts': [{'text': '```json\n[]\n```'}]}}]}
        assert extract_completion(payload) == '[]'

    @pytest.mark.parametrize("payload", [
        {},
        {'candidates': []},
        {'candidates': [{'content': {'parts': []}}]},
        {'candidates': [{'content': {'parts': [{'text': 42}]}}]},
        None,
    ])
    def test_extract_completion_rejects_bad_payloads(self, payload):
        with pytest.raises(MalformedResponseError):
            extract_completion(payload)
