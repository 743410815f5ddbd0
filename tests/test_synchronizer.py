# tests/test_synchronizer.py
"""Test active line detection and the synchronization loop"""

import asyncio

import pytest

from conftest import FakePlayer, RecordingRenderer
from lyricfx.effects.engine import EffectsEngine
from lyricfx.lyrics.models import LyricLine
from lyricfx.sync.synchronizer import SyncLoop, find_active_index


class AlwaysFires:
    def random(self):
        return 0.0


class TestFindActiveIndex:
    """Test the active index scan"""

    @pytest.mark.parametrize("current_time, expected", [
        (-1.0, -1),
        (0.0, 0),
        (9.99, 0),
        (10.0, 1),
        (15.0, 1),
        (20.0, 2),
        (500.0, 2),
    ])
    def test_three_line_timeline(self, sample_timeline, current_time, expected):
        assert find_active_index(sample_timeline, current_time) == expected

    def test_empty_timeline(self):
        assert find_active_index((), 12.0) == -1

    def test_before_first_line(self):
        timeline = (LyricLine(5.0, "a"), LyricLine(8.0, "b"))
        assert find_active_index(timeline, 2.0) == -1


class TestSyncLoop:
    """Test edge-triggered activation"""

    def make_loop(self, timeline, times, visible=True, engine=None):
        holder = {'timeline': timeline}
        player = FakePlayer(times=times)
        renderer = RecordingRenderer(visible=visible)
        loop = SyncLoop(lambda: holder['timeline'], player, renderer, engine=engine, interval=0.01)
        return loop, renderer, holder

    @pytest.mark.asyncio
    async def test_activates_only_on_change(self, sample_timeline):
        loop, renderer, _ = self.make_loop(sample_timeline, [1.0, 2.0, 5.0, 11.0, 12.0, 21.0])

        results = [await loop.tick() for _ in range(6)]

        assert results == [0, None, None, 1, None, 2]
        assert renderer.args_of('highlight') == [(0,), (1,), (2,)]

    @pytest.mark.asyncio
    async def test_seek_backwards_reactivates(self, sample_timeline):
        loop, renderer, _ = self.make_loop(sample_timeline, [21.0, 3.0])

        await loop.tick()
        await loop.tick()

        assert renderer.args_of('highlight') == [(2,), (0,)]

    @pytest.mark.asyncio
    async def test_before_first_line_highlights_nothing(self):
        timeline = (LyricLine(5.0, "love"),)
        loop, renderer, _ = self.make_loop(timeline, [1.0, 6.0], engine=EffectsEngine(rng=AlwaysFires()))

        assert await loop.tick() == -1
        assert renderer.calls == [('highlight', (-1,))]

        await loop.tick()
        assert renderer.names() == ['highlight', 'highlight', 'spawn_effects']

    @pytest.mark.asyncio
    async def test_no_timeline_is_noop(self):
        loop, renderer, _ = self.make_loop(None, [1.0])

        assert await loop.tick() is None
        assert renderer.calls == []

    @pytest.mark.asyncio
    async def test_hidden_renderer_is_noop(self, sample_timeline):
        loop, renderer, _ = self.make_loop(sample_timeline, [1.0], visible=False)

        assert await loop.tick() is None
        assert renderer.calls == []

    @pytest.mark.asyncio
    async def test_new_timeline_resets_last_index(self, sample_timeline):
        loop, renderer, holder = self.make_loop(sample_timeline, [1.0, 1.0])

        await loop.tick()
        holder['timeline'] = (LyricLine(0.0, "new a"), LyricLine(10.0, "new b"))
        await loop.tick()

        assert renderer.args_of('highlight') == [(0,), (0,)]

    @pytest.mark.asyncio
    async def test_timeline_swapped_during_position_read(self, sample_timeline):
        new_timeline = (LyricLine(0.0, "only line"),)
        loop, renderer, holder = self.make_loop(sample_timeline, [])

        async def swap_then_report():
            holder['timeline'] = new_timeline
            return 25.0

        loop.player.current_time = swap_then_report

        assert await loop.tick() is None
        assert renderer.calls == []

        loop.player.current_time = FakePlayer(times=[25.0]).current_time
        assert await loop.tick() == 0
        assert renderer.args_of('highlight') == [(0,)]

    @pytest.mark.asyncio
    async def test_effects_spawned_for_active_line(self):
        timeline = (LyricLine(0.0, "my heart is on fire"),)
        loop, renderer, _ = self.make_loop(timeline, [0.5], engine=EffectsEngine(rng=AlwaysFires()))

        await loop.tick()

        spawns = renderer.args_of('spawn_effects')[0][0]
        assert [spawn.effect_id for spawn in spawns] == ['heart', 'fire']

    @pytest.mark.asyncio
    async def test_effects_disabled(self):
        timeline = (LyricLine(0.0, "my heart is on fire"),)
        loop, renderer, _ = self.make_loop(timeline, [0.5], engine=EffectsEngine(rng=AlwaysFires()))
        loop.effects_enabled = False

        await loop.tick()

        assert renderer.names() == ['highlight']

    @pytest.mark.asyncio
    async def test_run_survives_tick_errors(self, sample_timeline):
        loop, renderer, _ = self.make_loop(sample_timeline, [RuntimeError("player went away"), 11.0])

        task = asyncio.ensure_future(loop.run())
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert (1,) in renderer.args_of('highlight')
