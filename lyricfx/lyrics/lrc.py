"""
LRC parsing and timeline utilities

LRC is a line-oriented lyrics format where each line starts with a
[mm:ss.xx] or [mm:ss.xxx] timestamp marker:

    [00:12.34] First line of lyrics
    [00:18.670] Second line of lyrics

The parser never raises: malformed input degrades to fewer lines. Metadata
tags such as [ar:Artist] carry no timestamp marker and are ignored like any
other unmarked line.
"""

import re
from typing import List, Tuple

from .models import LyricLine, Timeline


# Leading [mm:ss.ff] / [mm:ss.fff] marker
LRC_MARKER = re.compile(r"^\s*\[(\d{2}):(\d{2})\.(\d{2,3})\]")


def parse_timestamp(minutes: str, seconds: str, fraction: str) -> float:
    """
    Convert marker groups to seconds

    Two-digit fractions are hundredths and are scaled x10 to milliseconds.

    Args:
        minutes: Minutes digits
        seconds: Seconds digits
        fraction: Two or three fraction digits

    Returns:
        Position in seconds
    """
    millis = int(fraction) if len(fraction) == 3 else int(fraction) * 10
    return int(minutes) * 60 + int(seconds) + millis / 1000


def parse_lrc(text: str) -> Timeline:
    """
    Parse LRC text into a time-sorted timeline

    Args:
        text: LRC document

    Returns:
        Tuple of LyricLine sorted by time; lines without a marker or with no
        text after the marker are dropped
    """
    if not text:
        return ()

    lines: List[LyricLine] = []
    for raw_line in text.splitlines():
        match = LRC_MARKER.match(raw_line)
        if not match:
            continue

        line_text = raw_line[match.end():].strip()
        if not line_text:
            continue

        lines.append(LyricLine(time_seconds=parse_timestamp(*match.groups()), text=line_text))

    # Stable sort keeps source order for equal timestamps
    lines.sort(key=lambda line: line.time_seconds)
    return tuple(lines)


def rescale_timeline(timeline: Timeline, ratio: float) -> Timeline:
    """
    Divide every timestamp by a speed ratio

    Lyrics timed against the original recording drift when the playing audio
    is sped up or slowed down. With ratio = original / played duration,
    dividing compresses (ratio > 1) or stretches (ratio < 1) the timeline to
    the observed playback speed.

    Args:
        timeline: Timeline to rescale
        ratio: Positive speed ratio

    Returns:
        New timeline with rescaled timestamps

    Raises:
        ValueError: If ratio is not positive
    """
    if ratio <= 0:
        raise ValueError(f"Speed ratio must be positive, got {ratio}")
    if ratio == 1:
        return tuple(timeline)
    return tuple(LyricLine(time_seconds=line.time_seconds / ratio, text=line.text) for line in timeline)


def line_durations(timeline: Timeline, last_line_duration: float = 5.0) -> List[float]:
    """
    How long each line stays active

    Args:
        timeline: Parsed timeline
        last_line_duration: Duration assumed for the final line

    Returns:
        One duration per line (next line start minus own start)
    """
    durations = []
    for index, line in enumerate(timeline):
        if index < len(timeline) - 1:
            durations.append(timeline[index + 1].time_seconds - line.time_seconds)
        else:
            durations.append(last_line_duration)
    return durations


def is_epic(duration: float, threshold: float = 5.0) -> bool:
    """Long-held lines (longer than threshold seconds) get emphasized rendering"""
    return duration > threshold


def epic_markers(timeline: Timeline, threshold: float = 5.0, last_line_duration: float = 5.0) -> List[Tuple[LyricLine, float, bool]]:
    """
    Pair each line with its duration and epic flag for renderers

    Returns:
        List of (line, duration, epic) tuples
    """
    return [
        (line, duration, is_epic(duration, threshold))
        for line, duration in zip(timeline, line_durations(timeline, last_line_duration))
    ]
