"""
Track records and metadata loading.
"""
from dataclasses import dataclass
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

from tunedir.logging_config import get_logger, MetadataError
from tunedir.paths import display_name

logger = get_logger('tracks')


@dataclass(eq=False)
class Track:
    """One playable item.

    Tracks compare by identity: the same file queued twice yields two
    distinct entries.

    Attributes:
        path: Path to the audio file
        display_name: File name shown in the playlist
        artist: Artist tag, empty when unknown
        title: Title tag, empty when unknown
        album: Album tag, empty when unknown
        total_duration: Length in seconds, fixed at load time
        play_position: Seconds played so far; may exceed total_duration
        start_anchor: Clock reading the current playback segment is measured
            from. Set only while this track is the one feeding the sink.
    """
    path: str
    display_name: str = ""
    artist: str = ""
    title: str = ""
    album: str = ""
    total_duration: float = 0.0
    play_position: float = 0.0
    start_anchor: Optional[float] = None

    def __post_init__(self):
        if not self.display_name:
            self.display_name = display_name(self.path)

    @property
    def progress(self) -> float:
        """Played fraction clamped to ``[0.0, 1.0]``."""
        if self.total_duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.play_position / self.total_duration))


def _first_tag(tags, key: str) -> str:
    if not tags:
        return ""
    values = tags.get(key)
    if not values:
        return ""
    return str(values[0]).strip()


class TrackLoader:
    """Builds ``Track`` records from audio files using mutagen."""

    def load(self, path: str) -> Track:
        """Read tags and duration for ``path``.

        Raises:
            MetadataError: the file is unreadable or not a recognised audio
                container.
        """
        try:
            audio = MutagenFile(path, easy=True)
        except (MutagenError, OSError, ValueError) as e:
            logger.warning(f"Failed to read metadata from {path}: {e}")
            raise MetadataError(f"{display_name(path)}: {e}") from e

        if audio is None or getattr(audio, "info", None) is None:
            raise MetadataError(f"{display_name(path)}: unsupported audio format")

        duration = float(getattr(audio.info, "length", 0.0) or 0.0)
        track = Track(
            path=path,
            artist=_first_tag(audio.tags, "artist"),
            title=_first_tag(audio.tags, "title"),
            album=_first_tag(audio.tags, "album"),
            total_duration=duration,
        )
        logger.debug(f"Loaded {path}: {track.artist!r} - {track.title!r} ({duration:.1f}s)")
        return track
