"""
Playlist management and playback position tracking.

The sink drains audio on its own schedule and only tells us whether it is
empty or paused. Position is derived from a clock reading stamped when the
current playback segment started, instead of asking the sink.
"""
import random
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional

from tunedir.audio import AudioSink, MAX_VOLUME
from tunedir.logging_config import get_logger, DecodeError, MetadataError
from tunedir.tracks import Track, TrackLoader

logger = get_logger('playlist')

ErrorHandler = Callable[[str], None]


class PlayStyle(Enum):
    """What plays when the sink drains."""
    SEQUENTIAL = "sequential"
    SINGLE_REPEAT = "single_repeat"


def _log_error(message: str) -> None:
    logger.warning(message)


class PlaylistManager:
    """Owns the pending queue, the now-playing track and the audio sink.

    Args:
        sink: Audio sink; nothing else should hold a reference to it
        loader: Track loader used by ``enqueue_paths``
        clock: Monotonic clock in seconds
        on_error: Called with a readable message for every recoverable failure
        rng: Random source for ``shuffle``
    """

    def __init__(
        self,
        sink: AudioSink,
        loader: TrackLoader,
        clock: Callable[[], float] = time.monotonic,
        on_error: Optional[ErrorHandler] = None,
        rng: Optional[random.Random] = None,
    ):
        self._sink = sink
        self.loader = loader
        self.clock = clock
        self.on_error = on_error or _log_error
        self.rng = rng or random.Random()
        self.queue: List[Track] = []
        self.now_playing: Optional[Track] = None
        self.play_style = PlayStyle.SEQUENTIAL
        # Cleared by CLEAR: the current track is allowed to finish once more
        # instead of repeating.
        self._repeat_current = True

    # Queue editing

    def enqueue(self, track: Track) -> None:
        self.queue.append(track)
        logger.debug(f"Queued {track.path} at position {len(self.queue)}")

    def enqueue_paths(self, paths: Iterable[str]) -> int:
        """Load and queue every path, skipping files whose metadata fails.

        Returns:
            Number of tracks queued
        """
        added = 0
        for path in paths:
            try:
                track = self.loader.load(path)
            except MetadataError as e:
                self.on_error(str(e))
                continue
            self.enqueue(track)
            added += 1
        logger.info(f"Queued {added} tracks")
        return added

    def remove_by_indices(self, indices: Iterable[int]) -> List[Track]:
        """Remove pending tracks by 1-based position.

        Indices outside ``1..len(queue)`` are ignored. Removal runs from the
        highest index down so earlier removals do not shift later ones.

        Returns:
            The removed tracks, in queue order
        """
        valid = sorted({i for i in indices if 1 <= i <= len(self.queue)}, reverse=True)
        removed = [self.queue.pop(i - 1) for i in valid]
        removed.reverse()
        if removed:
            logger.info(f"Removed {len(removed)} tracks from queue")
        return removed

    def clear(self) -> None:
        """Empty the pending queue. The now-playing track keeps playing."""
        self.queue.clear()
        self._repeat_current = False
        logger.info("Queue cleared")

    def shuffle(self) -> None:
        if len(self.queue) <= 1:
            return
        self.rng.shuffle(self.queue)
        logger.info("Queue shuffled")

    def set_play_style(self, style: PlayStyle) -> None:
        if style is not self.play_style:
            logger.info(f"Play style: {self.play_style.value} -> {style.value}")
        self.play_style = style
        self._repeat_current = True

    # Playback

    def advance(self) -> None:
        """Feed the next track to the sink.

        Under single-repeat the now-playing track is restarted; otherwise the
        front of the queue is fed, or playback goes idle when it is empty.
        """
        if (
            self.play_style is PlayStyle.SINGLE_REPEAT
            and self.now_playing is not None
            and self._repeat_current
        ):
            track = self.now_playing
            track.play_position = 0.0
            try:
                self._feed(track)
                return
            except DecodeError as e:
                self.on_error(str(e))

        self._finish_current()
        while self.queue:
            track = self.queue.pop(0)
            try:
                self._feed(track)
            except DecodeError as e:
                self.on_error(str(e))
                continue
            self.now_playing = track
            self._repeat_current = True
            return

    def skip(self) -> None:
        """Drop what the sink is playing and advance right away."""
        self._sink.stop()
        self.advance()

    def tick(self) -> None:
        """Reconcile with the sink; call once per fixed period."""
        if self._sink.is_empty():
            self.advance()
        if not self._sink.is_paused():
            self._sync_position()

    def toggle_pause(self) -> None:
        if self._sink.is_paused():
            self._sink.play()
            track = self.now_playing
            if track is not None:
                # Measure from here as if playback had never stopped.
                track.start_anchor = self.clock() - track.play_position
            logger.debug("Resumed")
        else:
            self._sync_position()
            self._sink.pause()
            logger.debug("Paused")

    def is_paused(self) -> bool:
        return self._sink.is_paused()

    def volume(self) -> float:
        return self._sink.volume()

    def set_volume(self, delta: float) -> float:
        """Change the volume by ``delta``, clamped to ``[0.0, MAX_VOLUME]``."""
        value = max(0.0, min(MAX_VOLUME, self._sink.volume() + delta))
        self._sink.set_volume(value)
        return value

    def shutdown(self) -> None:
        self._sink.stop()
        self._finish_current()

    def _feed(self, track: Track) -> None:
        self._sink.append(track.path)
        track.start_anchor = self.clock()
        logger.info(f"Now playing: {track.path}")

    def _finish_current(self) -> None:
        if self.now_playing is not None:
            self.now_playing.start_anchor = None
            self.now_playing = None

    def _sync_position(self) -> None:
        track = self.now_playing
        if track is None or track.start_anchor is None:
            return
        track.play_position = max(0.0, self.clock() - track.start_anchor)

