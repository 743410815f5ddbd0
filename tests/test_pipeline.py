# tests/test_pipeline.py
"""Test the track pipeline and session orchestration"""

import asyncio
import json
import random

import pytest

from conftest import FakePlayer, FakeTextClient, RecordingRenderer, make_candidate
from lyricfx.effects.engine import EffectsEngine
from lyricfx.effects.generator import AIEffectsGenerator
from lyricfx.exceptions import NoMatchError
from lyricfx.lyrics.models import LyricLine, ResolvedLyrics
from lyricfx.lyrics.translation import TranslationAdapter
from lyricfx.player.base import PlayerState, Track
from lyricfx.sync.session import LyricsSession


TIMELINE = (LyricLine(0.0, "love is a potion"), LyricLine(4.0, "second line"))
TRACK_A = Track("Song A", "Artist", 200.0)
TRACK_B = Track("Song B", "Artist", 180.0)


def synced(timeline=TIMELINE):
    return ResolvedLyrics(candidate=make_candidate(200, synced="..."), timeline=timeline)


def plain(text="plain words"):
    return ResolvedLyrics(candidate=make_candidate(180, plain=text), plain_text=text)


AI_BATCH = json.dumps([{'id': 'potion', 'regex': 'potion', 'html': "<div></div>", 'css': ".potion{}"}])


class FakeResolver:
    """Resolver answering per title, optionally waiting on a gate first"""

    def __init__(self, results, gates=None):
        self.results = results
        self.gates = gates or {}
        self.calls = []
        self.settings_used = []

    async def resolve(self, title, artist, duration_seconds, settings=None):
        self.calls.append(title)
        self.settings_used.append(settings)
        if title in self.gates:
            await self.gates[title].wait()
        result = self.results.get(title)
        if result is None:
            raise NoMatchError(f"No lyrics found for '{title}'")
        if isinstance(result, Exception):
            raise result
        return result


def make_session(settings, resolver, renderer=None, ai_client=None, translation_client=None, player=None):
    engine = EffectsEngine(rng=random.Random(1))
    return LyricsSession(
        player or FakePlayer(),
        renderer or RecordingRenderer(),
        settings,
        resolver=resolver,
        engine=engine,
        generator=AIEffectsGenerator(engine, ai_client or FakeTextClient(), settings),
        translator=TranslationAdapter(translation_client or FakeTextClient(), settings),
    )


class TestTrackPipeline:
    """Test a single cycle"""

    @pytest.mark.asyncio
    async def test_publishes_synced_timeline(self, settings):
        session = make_session(settings, FakeResolver({"Song A": synced()}))

        result = await session.begin_cycle(TRACK_A)

        assert result.timeline == TIMELINE
        assert session.timeline == TIMELINE
        assert session.renderer.names() == ['show_status', 'show_timeline']
        assert session.renderer.args_of('show_status') == [("Searching lyrics...",)]
        assert session.renderer.args_of('show_timeline') == [(TIMELINE, "Artist - Song A")]

    @pytest.mark.asyncio
    async def test_plain_lyrics_are_not_published_as_timeline(self, settings):
        session = make_session(settings, FakeResolver({"Song B": plain()}))

        await session.begin_cycle(TRACK_B)

        assert session.timeline is None
        assert session.renderer.args_of('show_plain') == [("plain words", "Artist - Song B")]

    @pytest.mark.asyncio
    async def test_no_match_shows_not_found(self, settings):
        session = make_session(settings, FakeResolver({}))

        assert await session.begin_cycle(TRACK_A) is None
        assert session.renderer.names() == ['show_status', 'show_not_found']
        assert session.timeline is None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, settings):
        session = make_session(settings, FakeResolver({"Song A": RuntimeError("boom")}))

        assert await session.begin_cycle(TRACK_A) is None
        assert session.renderer.args_of('show_not_found') == [("Lyrics unavailable",)]

    @pytest.mark.asyncio
    async def test_ai_effects_merged_within_race(self, ai_settings):
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}), ai_client=FakeTextClient([AI_BATCH]))

        await session.begin_cycle(TRACK_A)

        assert [rule.id for rule in session.engine.table.ai] == ['potion']
        assert session.renderer.args_of('install_styles') == [(".potion{}",)]
        assert session.timeline == TIMELINE

    @pytest.mark.asyncio
    async def test_slow_ai_does_not_block_publication(self, ai_settings):
        ai_settings.ai.race_timeout = 0.05
        ai_client = FakeTextClient([AI_BATCH], delay=0.3)
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}), ai_client=ai_client)

        await session.begin_cycle(TRACK_A)

        assert session.timeline == TIMELINE
        assert session.engine.table.ai == ()
        assert len(session.background_tasks) == 1

        # Generation finishes later and still merges for the current track
        await asyncio.gather(*list(session.background_tasks))
        assert [rule.id for rule in session.engine.table.ai] == ['potion']

    @pytest.mark.asyncio
    async def test_stale_ai_result_is_discarded(self, ai_settings):
        ai_settings.ai.race_timeout = 0.01
        ai_client = FakeTextClient([AI_BATCH], delay=0.2)
        resolver = FakeResolver({"Song A": synced(), "Song B": plain()})
        session = make_session(ai_settings, resolver, ai_client=ai_client)

        await session.begin_cycle(TRACK_A)
        pending = list(session.background_tasks)
        await session.begin_cycle(TRACK_B)

        results = await asyncio.gather(*pending)

        assert results == [None]
        assert session.engine.table.ai == ()
        assert session.renderer.args_of('install_styles') == []

    @pytest.mark.asyncio
    async def test_translation_replaces_text(self, ai_settings):
        ai_settings.ai.enabled = False
        ai_settings.translation.enabled = True
        client = FakeTextClient(["l'amore è una pozione\nseconda riga"])
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}), translation_client=client)

        await session.begin_cycle(TRACK_A)

        assert [line.text for line in session.timeline] == ["l'amore è una pozione", "seconda riga"]
        assert [line.time_seconds for line in session.timeline] == [0.0, 4.0]

    @pytest.mark.asyncio
    async def test_failed_translation_keeps_original(self, ai_settings):
        ai_settings.ai.enabled = False
        ai_settings.translation.enabled = True
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}))

        await session.begin_cycle(TRACK_A)

        assert session.timeline == TIMELINE

    @pytest.mark.asyncio
    async def test_cycle_keeps_settings_from_its_start(self, ai_settings):
        ai_settings.ai.enabled = False
        ai_settings.translation.enabled = True
        ai_settings.translation.target_language = "Italian"
        gate = asyncio.Event()
        resolver = FakeResolver({"Song A": synced()}, gates={"Song A": gate})
        client = FakeTextClient(["uno\ndue"])
        session = make_session(ai_settings, resolver, translation_client=client)

        task = session.begin_cycle(TRACK_A)
        await asyncio.sleep(0)
        ai_settings.translation.target_language = "German"
        ai_settings.effects.enabled = False
        gate.set()
        await task

        assert resolver.settings_used[0] is not ai_settings
        assert "into Italian" in client.prompts[0]
        assert session.sync_loop.effects_enabled is True

    @pytest.mark.asyncio
    async def test_publish_applies_cycle_effects_toggle(self, settings):
        settings.effects.enabled = False
        session = make_session(settings, FakeResolver({"Song A": synced()}))

        await session.begin_cycle(TRACK_A)

        assert session.sync_loop.effects_enabled is False

    @pytest.mark.asyncio
    async def test_background_failure_is_logged(self, ai_settings, caplog):
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}), ai_client=FakeTextClient([AI_BATCH]))

        def broken_install(table):
            raise RuntimeError("renderer gone")

        session.generator.on_merged = broken_install

        await session.begin_cycle(TRACK_A)
        await asyncio.sleep(0)

        assert session.background_tasks == set()
        assert "Background task failed: renderer gone" in caplog.text


class TestLyricsSession:
    """Test generation tokens and cycle supersession"""

    @pytest.mark.asyncio
    async def test_new_cycle_cancels_previous(self, settings):
        gate = asyncio.Event()
        resolver = FakeResolver({"Song A": synced(), "Song B": synced((LyricLine(1.0, "b"),))}, gates={"Song A": gate})
        session = make_session(settings, resolver)

        task_a = session.begin_cycle(TRACK_A)
        await asyncio.sleep(0)
        task_b = session.begin_cycle(TRACK_B)
        gate.set()

        await task_b
        with pytest.raises(asyncio.CancelledError):
            await task_a

        assert session.generation == 2
        assert session.track == TRACK_B
        assert session.timeline == (LyricLine(1.0, "b"),)

    @pytest.mark.asyncio
    async def test_begin_cycle_clears_state(self, ai_settings):
        session = make_session(ai_settings, FakeResolver({"Song A": synced()}), ai_client=FakeTextClient([AI_BATCH]))
        await session.begin_cycle(TRACK_A)
        assert session.timeline is not None

        task = session.begin_cycle(TRACK_B)

        assert session.timeline is None
        assert session.engine.table.ai == ()
        await task

    def test_publish_requires_current_generation(self, settings):
        session = make_session(settings, FakeResolver({}))
        session.generation = 3

        assert session.publish(TIMELINE, 2) is False
        assert session.timeline is None
        assert session.publish(TIMELINE, 3) is True
        assert session.timeline == TIMELINE

    @pytest.mark.asyncio
    async def test_track_change_reshows_renderer(self, settings):
        renderer = RecordingRenderer(visible=False)
        session = make_session(settings, FakeResolver({"Song A": synced()}), renderer=renderer)

        await session.on_track_change(TRACK_A)

        assert renderer.visible is True
        assert renderer.calls[0] == ('set_visible', (True,))

    @pytest.mark.asyncio
    async def test_track_change_respects_hidden_preference(self, settings):
        settings.display.show_on_track_change = False
        renderer = RecordingRenderer(visible=False)
        session = make_session(settings, FakeResolver({"Song A": synced()}), renderer=renderer)

        await session.on_track_change(TRACK_A)

        assert renderer.visible is False

    @pytest.mark.asyncio
    async def test_run_drives_both_tasks(self, settings):
        settings.sync.poll_interval = 0.01
        settings.sync.sync_interval = 0.01
        player = FakePlayer(states=[PlayerState("Song A", "Artist", 200.0, 0.5)])
        session = make_session(settings, FakeResolver({"Song A": synced()}), player=player)

        task = asyncio.ensure_future(session.run())
        await asyncio.sleep(0.15)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert session.track == TRACK_A
        assert ('highlight', (0,)) in session.renderer.calls
        assert session.background_tasks == set()
