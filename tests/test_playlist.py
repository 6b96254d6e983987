import random

from fakes import FakeClock, FakeLoader, FakeSink
from tunedir.audio import MAX_VOLUME
from tunedir.playlist import PlaylistManager, PlayStyle
from tunedir.tracks import Track


class PlaylistTestBase:
    """Shared setup: a manager over fake collaborators that records errors."""

    def setup_method(self):
        self.sink = FakeSink(broken={"/music/bad.mp3"})
        self.loader = FakeLoader(broken={"/music/corrupt.mp3"})
        self.clock = FakeClock()
        self.errors = []
        self.manager = PlaylistManager(
            self.sink, self.loader, clock=self.clock,
            on_error=self.errors.append, rng=random.Random(3),
        )

    def queue(self, *names):
        tracks = [Track(path=f"/music/{name}", total_duration=100.0) for name in names]
        for track in tracks:
            self.manager.enqueue(track)
        return tracks


class TestQueueEditing(PlaylistTestBase):
    """Tests for queue editing."""

    def test_enqueue_appends(self):
        """Test tracks are queued in order."""
        a, b = self.queue("a.mp3", "b.mp3")

        assert self.manager.queue == [a, b]

    def test_duplicate_paths_are_distinct_entries(self):
        """Test the same file can be queued twice."""
        first, second = self.queue("a.mp3", "a.mp3")

        assert len(self.manager.queue) == 2
        assert first is not second
        assert first != second

    def test_enqueue_paths_skips_failures(self):
        """Test one bad file does not abort the batch."""
        added = self.manager.enqueue_paths(
            ["/music/a.mp3", "/music/corrupt.mp3", "/music/b.mp3"]
        )

        assert added == 2
        assert [t.path for t in self.manager.queue] == ["/music/a.mp3", "/music/b.mp3"]
        assert len(self.errors) == 1
        assert "corrupt.mp3" in self.errors[0]

    def test_remove_single(self):
        """Test removing the middle of three."""
        a, b, c = self.queue("a", "b", "c")

        self.manager.remove_by_indices([2])

        assert self.manager.queue == [a, c]

    def test_remove_descending_order(self):
        """Test removing the first and last does not shift indices."""
        a, b, c = self.queue("a", "b", "c")

        removed = self.manager.remove_by_indices([1, 3])

        assert self.manager.queue == [b]
        assert removed == [a, c]

    def test_remove_last_index(self):
        """Test the index equal to the queue length removes the last track."""
        a, b, c = self.queue("a", "b", "c")

        self.manager.remove_by_indices([3])

        assert self.manager.queue == [a, b]

    def test_remove_out_of_range_ignored(self):
        """Test out-of-range indices are ignored."""
        tracks = self.queue("a", "b")

        self.manager.remove_by_indices([0, 3, 99, -1])

        assert self.manager.queue == tracks
        assert self.errors == []

    def test_remove_duplicate_indices(self):
        """Test repeating an index removes one track."""
        a, b, c = self.queue("a", "b", "c")

        self.manager.remove_by_indices([2, 2])

        assert self.manager.queue == [a, c]

    def test_clear_keeps_now_playing(self):
        """Test clearing the queue does not stop the current track."""
        self.queue("a", "b", "c")
        self.manager.tick()
        playing = self.manager.now_playing

        self.manager.clear()

        assert self.manager.queue == []
        assert self.manager.now_playing is playing
        assert self.sink.stopped == 0

    def test_shuffle_keeps_members(self):
        """Test shuffling permutes the queue without losing tracks."""
        tracks = self.queue(*[f"{i}.mp3" for i in range(20)])

        self.manager.shuffle()

        assert sorted(self.manager.queue, key=id) == sorted(tracks, key=id)
        assert self.manager.queue != tracks

    def test_shuffle_leaves_now_playing(self):
        """Test shuffling never touches the now-playing track."""
        self.queue("a", "b", "c", "d")
        self.manager.tick()
        playing = self.manager.now_playing

        self.manager.shuffle()

        assert self.manager.now_playing is playing
        assert playing not in self.manager.queue

    def test_shuffle_single_entry(self):
        """Test shuffling one track is a no-op."""
        tracks = self.queue("a")

        self.manager.shuffle()

        assert self.manager.queue == tracks


class TestAdvance(PlaylistTestBase):
    """Tests for advance() and tick()."""

    def test_sequential_pops_front(self):
        """Test the front of the queue is fed to the sink."""
        a, b = self.queue("a", "b")

        self.manager.advance()

        assert self.manager.now_playing is a
        assert self.manager.queue == [b]
        assert self.sink.fed == ["/music/a"]
        assert a.start_anchor == self.clock.now

    def test_sequential_goes_idle(self):
        """Test an empty queue leaves nothing playing."""
        a, = self.queue("a")
        self.manager.advance()

        self.sink.finish()
        self.manager.advance()

        assert self.manager.now_playing is None
        assert a.start_anchor is None

    def test_tick_only_advances_when_sink_empty(self):
        """Test tick leaves a busy sink alone."""
        a, b = self.queue("a", "b")
        self.manager.tick()

        self.manager.tick()

        assert self.manager.now_playing is a
        assert self.sink.fed == ["/music/a"]

        self.sink.finish()
        self.manager.tick()

        assert self.manager.now_playing is b

    def test_single_repeat_restarts_same_track(self):
        """Test single-repeat replays the current track from zero."""
        a, b = self.queue("a", "b")
        self.manager.set_play_style(PlayStyle.SINGLE_REPEAT)
        self.manager.tick()
        self.clock.advance(42)
        self.manager.tick()
        assert a.play_position == 42

        self.sink.finish()
        self.manager.advance()

        assert self.manager.now_playing is a
        assert a.play_position == 0
        assert a.start_anchor == self.clock.now
        assert self.manager.queue == [b]
        assert self.sink.fed == ["/music/a", "/music/a"]

    def test_single_repeat_without_current_pops(self):
        """Test single-repeat with nothing playing behaves like sequential."""
        a, b = self.queue("a", "b")
        self.manager.set_play_style(PlayStyle.SINGLE_REPEAT)

        self.manager.advance()

        assert self.manager.now_playing is a
        assert self.manager.queue == [b]

    def test_clear_releases_single_repeat(self):
        """Test clearing the queue stops the current track from repeating."""
        self.queue("a")
        self.manager.set_play_style(PlayStyle.SINGLE_REPEAT)
        self.manager.tick()

        self.manager.clear()
        self.sink.finish()
        self.manager.tick()

        assert self.manager.now_playing is None

    def test_decode_error_skips_track(self):
        """Test a track the sink rejects is dropped and the next one plays."""
        bad = Track(path="/music/bad.mp3")
        self.manager.enqueue(bad)
        good, = self.queue("good.mp3")

        self.manager.advance()

        assert self.manager.now_playing is good
        assert self.manager.queue == []
        assert len(self.errors) == 1

    def test_skip_stops_sink(self):
        """Test skipping drops the current item and plays the next."""
        a, b = self.queue("a", "b")
        self.manager.tick()

        self.manager.skip()

        assert self.sink.stopped == 1
        assert self.manager.now_playing is b
        assert list(self.sink.items) == ["/music/b"]


class TestPosition(PlaylistTestBase):
    """Tests for position tracking and pause."""

    def test_tick_updates_position(self):
        """Test position follows the clock while playing."""
        a, = self.queue("a")
        self.manager.tick()

        self.clock.advance(12.5)
        self.manager.tick()

        assert a.play_position == 12.5

    def test_position_frozen_while_paused(self):
        """Test position does not advance while paused."""
        a, = self.queue("a")
        self.manager.tick()
        self.clock.advance(10)

        self.manager.toggle_pause()
        self.clock.advance(30)
        self.manager.tick()

        assert a.play_position == 10
        assert self.manager.is_paused()

    def test_resume_rebases_anchor(self):
        """Test resuming does not count the time spent paused."""
        a, = self.queue("a")
        self.manager.tick()
        self.clock.advance(10)
        self.manager.toggle_pause()
        self.clock.advance(300)

        self.manager.toggle_pause()
        self.clock.advance(5)
        self.manager.tick()

        assert a.play_position == 15

    def test_pause_resume_without_elapsed_time(self):
        """Test pause then resume at the same instant keeps the position."""
        a, = self.queue("a")
        self.manager.tick()
        self.clock.advance(33)
        self.manager.tick()
        position = a.play_position

        self.manager.toggle_pause()
        self.manager.toggle_pause()

        assert a.play_position == position
        assert a.start_anchor == self.clock.now - position
        assert not self.manager.is_paused()

    def test_toggle_pause_with_nothing_playing(self):
        """Test pausing an idle sink only flips the sink state."""
        self.manager.toggle_pause()

        assert self.sink.paused is True
        assert self.manager.now_playing is None


class TestVolume(PlaylistTestBase):
    """Tests for volume control."""

    def test_volume_up_clamps(self):
        """Test volume tops out at 125%."""
        for _ in range(10):
            self.manager.set_volume(0.1)

        assert self.manager.volume() == MAX_VOLUME

    def test_volume_down_clamps(self):
        """Test volume bottoms out at zero."""
        value = self.manager.set_volume(-5)

        assert value == 0.0
        assert self.sink.volume() == 0.0
