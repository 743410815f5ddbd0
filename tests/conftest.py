"""Test configuration and fixtures"""

import asyncio
import tempfile
from pathlib import Path

import pytest

from lyricfx.config.settings import (
    Settings,
    LyricsConfig,
    AIConfig,
    TranslationConfig,
    SyncConfig,
    EffectsConfig,
    DisplayConfig,
    PlayerConfig,
    LoggingConfig,
)
from lyricfx.exceptions import NetworkFailure
from lyricfx.lyrics.models import Candidate, LyricLine
from lyricfx.player.base import PlayerSource, PlayerState
from lyricfx.render.base import Renderer


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def settings():
    """Settings with every section at its defaults, independent of the environment"""
    settings = Settings()
    settings.lyrics = LyricsConfig()
    settings.ai = AIConfig()
    settings.translation = TranslationConfig()
    settings.sync = SyncConfig()
    settings.effects = EffectsConfig()
    settings.display = DisplayConfig()
    settings.player = PlayerConfig()
    settings.logging = LoggingConfig()
    return settings


@pytest.fixture
def ai_settings(settings):
    """Settings with a generative API key so AI features are available"""
    settings.ai.api_key = "test-key"
    return settings


@pytest.fixture
def sample_lrc():
    """Small LRC document with metadata tags and a blank line"""
    return (
        "[ar:Test Artist]\n"
        "[ti:Test Song]\n"
        "[00:00.50] First line\n"
        "[00:04.20] Second line\n"
        "[00:04.20]\n"
        "[00:12.345] Third line\n"
    )


@pytest.fixture
def sample_timeline():
    return (
        LyricLine(0.0, "a"),
        LyricLine(10.0, "b"),
        LyricLine(20.0, "c"),
    )


class FakePlayer(PlayerSource):
    """Player source returning scripted states"""

    def __init__(self, states=None, times=None):
        self.states = list(states or [])
        self.times = list(times or [])
        self.state = PlayerState()
        self.time = 0.0

    async def read_state(self):
        if self.states:
            self.state = self.states.pop(0)
        return self.state

    async def current_time(self):
        if self.times:
            value = self.times.pop(0)
            if isinstance(value, Exception):
                raise value
            self.time = value
        return self.time


class RecordingRenderer(Renderer):
    """Renderer recording every call as (method, args) tuples"""

    def __init__(self, visible=True):
        self.visible = visible
        self.calls = []

    def names(self):
        return [name for name, _ in self.calls]

    def args_of(self, name):
        return [args for call_name, args in self.calls if call_name == name]

    def is_visible(self):
        return self.visible

    def set_visible(self, visible):
        self.visible = visible
        self.calls.append(('set_visible', (visible,)))

    def show_status(self, message):
        self.calls.append(('show_status', (message,)))

    def show_not_found(self, message="Lyrics not found"):
        self.calls.append(('show_not_found', (message,)))

    def show_timeline(self, timeline, title=""):
        self.calls.append(('show_timeline', (timeline, title)))

    def show_plain(self, text, title=""):
        self.calls.append(('show_plain', (text, title)))

    def highlight(self, index):
        self.calls.append(('highlight', (index,)))

    def spawn_effects(self, spawns):
        self.calls.append(('spawn_effects', (list(spawns),)))

    def install_styles(self, style_content):
        self.calls.append(('install_styles', (style_content,)))


class FakeSearchClient:
    """Lyrics search client answering from a query -> results mapping"""

    def __init__(self, results=None, failing=()):
        self.results = results or {}
        self.failing = set(failing)
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if query in self.failing:
            raise NetworkFailure("connection refused", details={'query': query})
        return list(self.results.get(query, []))

    async def close(self):
        pass


class FakeTextClient:
    """Generative client returning scripted completions (or raising scripted errors)"""

    def __init__(self, responses=None, delay=0.0):
        self.responses = list(responses or [])
        self.delay = delay
        self.prompts = []

    async def generate_text(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.responses:
            raise NetworkFailure("no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        pass


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def renderer():
    return RecordingRenderer()


def make_candidate(duration, synced=None, plain=None):
    return Candidate(duration_seconds=duration, synced_lyrics=synced, plain_lyrics=plain)
