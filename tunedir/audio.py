"""
Audio output for tunedir.

The engine treats the sink as a black box: it hands over file paths and
polls whether the sink has drained or is paused. The sinks here drive an
external player binary, one process per track.
"""
import os
import shutil
import signal
import subprocess
from collections import deque
from typing import Deque, List, Optional

from tunedir.logging_config import get_logger, AudioPlayerError, DecodeError

logger = get_logger('audio')

MAX_VOLUME: float = 1.25
SUPPORTED_PLAYERS: List[str] = ["ffplay", "mpg123"]


class AudioSink:
    """Base class for audio sinks."""

    def append(self, path: str) -> None:
        """Queue ``path`` for playback. Raises DecodeError if it cannot be played."""
        raise NotImplementedError("Subclasses must implement append()")

    def is_empty(self) -> bool:
        """True once every appended path has finished playing."""
        raise NotImplementedError("Subclasses must implement is_empty()")

    def is_paused(self) -> bool:
        raise NotImplementedError("Subclasses must implement is_paused()")

    def play(self) -> None:
        """Resume playback."""
        raise NotImplementedError("Subclasses must implement play()")

    def pause(self) -> None:
        """Pause playback."""
        raise NotImplementedError("Subclasses must implement pause()")

    def volume(self) -> float:
        raise NotImplementedError("Subclasses must implement volume()")

    def set_volume(self, value: float) -> None:
        raise NotImplementedError("Subclasses must implement set_volume()")

    def stop(self) -> None:
        """Drop the current and all queued items."""
        raise NotImplementedError("Subclasses must implement stop()")


class ProcessSink(AudioSink):
    """Sink that plays each queued file in its own player process.

    Pause and resume are SIGSTOP/SIGCONT on the player's process group.
    Volume is passed on the command line, so a change is heard from the
    next started track on.
    """

    def __init__(self, executable: str, volume: float = 1.0):
        self.executable = executable
        self.process: Optional[subprocess.Popen] = None
        self.current_file: Optional[str] = None
        self._pending: Deque[str] = deque()
        self._paused = False
        self._volume = max(0.0, min(MAX_VOLUME, volume))

    def build_command(self, path: str) -> List[str]:
        raise NotImplementedError("Subclasses must implement build_command()")

    def append(self, path: str) -> None:
        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise DecodeError(f"Cannot open audio file: {path}")
        self._pending.append(path)
        self._reap()

    def is_empty(self) -> bool:
        self._reap()
        return self.process is None and not self._pending

    def is_paused(self) -> bool:
        return self._paused

    def play(self) -> None:
        if not self._paused:
            return
        self._paused = False
        self._signal(signal.SIGCONT)
        logger.debug("Playback resumed")

    def pause(self) -> None:
        if self._paused:
            return
        self._paused = True
        self._signal(signal.SIGSTOP)
        logger.debug("Playback paused")

    def volume(self) -> float:
        return self._volume

    def set_volume(self, value: float) -> None:
        self._volume = max(0.0, min(MAX_VOLUME, value))
        logger.info(f"Volume set to {int(round(self._volume * 100))}%")

    def stop(self) -> None:
        self._pending.clear()
        self._terminate()

    def _reap(self) -> None:
        """Drop a finished process and start the next pending file."""
        if self.process is not None and self.process.poll() is not None:
            logger.debug(f"Player exited with {self.process.returncode}: {self.current_file}")
            self.process = None
            self.current_file = None
        while self.process is None and self._pending:
            self._start(self._pending.popleft())

    def _start(self, path: str) -> None:
        cmd = self.build_command(path)
        try:
            self.process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                preexec_fn=os.setsid
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.error(f"Failed to start {self.executable}: {e}")
            raise DecodeError(f"Failed to start audio player for {path}: {e}")

        self.current_file = path
        logger.info(f"Started playback: {path}")
        if self._paused:
            self._signal(signal.SIGSTOP)

    def _signal(self, signum: int) -> None:
        if self.process is None or self.process.poll() is not None:
            return
        try:
            os.killpg(os.getpgid(self.process.pid), signum)
        except (ProcessLookupError, PermissionError) as e:
            logger.warning(f"Failed to signal audio process: {e}")

    def _terminate(self) -> None:
        if self.process and self.process.poll() is None:
            try:
                pgid = os.getpgid(self.process.pid)
                # A stopped process ignores SIGTERM until continued.
                os.killpg(pgid, signal.SIGCONT)
                os.killpg(pgid, signal.SIGTERM)
                logger.info(f"Stopping audio process: {self.process.pid}")
                self.process.wait(timeout=1.0)
            except (ProcessLookupError, PermissionError) as e:
                logger.warning(f"Process termination error: {e}")
            except subprocess.TimeoutExpired:
                try:
                    os.killpg(os.getpgid(self.process.pid), signal.SIGKILL)
                    logger.warning(f"Force killed audio process: {self.process.pid}")
                    self.process.wait(timeout=0.5)
                except (ProcessLookupError, PermissionError, subprocess.TimeoutExpired) as e:
                    logger.warning(f"Force kill failed: {e}")
        self.process = None
        self.current_file = None


class MPG123Player(ProcessSink):
    """mpg123 sink. ``-f`` scales output, 32768 being unity gain."""

    def __init__(self, volume: float = 1.0):
        super().__init__("mpg123", volume)

    def build_command(self, path: str) -> List[str]:
        scale = int(round(32768 * self._volume))
        return [self.executable, "-q", "-f", str(scale), path]


class FFPlayPlayer(ProcessSink):
    """ffplay sink. ffplay's own volume scale tops out at 100."""

    def __init__(self, volume: float = 1.0):
        super().__init__("ffplay", volume)

    def build_command(self, path: str) -> List[str]:
        level = min(100, int(round(self._volume * 100)))
        return [
            self.executable, "-nodisp", "-autoexit",
            "-loglevel", "quiet", "-volume", str(level), path,
        ]


def detect_available_player() -> Optional[str]:
    """Detect available audio players."""
    for player in SUPPORTED_PLAYERS:
        if shutil.which(player):
            return player

    logger.warning("No supported audio player found")
    return None


def get_audio_sink(player_type: str = "auto", volume: float = 1.0) -> ProcessSink:
    """Build the sink for ``player_type``; ``auto`` picks the first one installed."""
    if player_type == "auto":
        detected = detect_available_player()
        if detected is None:
            raise AudioPlayerError(
                f"No supported audio player found (tried {', '.join(SUPPORTED_PLAYERS)})"
            )
        player_type = detected

    if player_type == "mpg123":
        return MPG123Player(volume)
    elif player_type == "ffplay":
        return FFPlayPlayer(volume)
    else:
        raise AudioPlayerError(f"Unsupported audio player: {player_type}")
