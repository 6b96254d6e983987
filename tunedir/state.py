"""
Application state for tunedir.

``StateManager`` ties the browser cursor, the input modes, the command
interpreter and the playlist together. The main loop feeds it input events
and ticks; the renderer only ever sees the frozen ``Snapshot`` it returns.
"""
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from tunedir.audio import AudioSink
from tunedir.commands import CommandInterpreter
from tunedir.listing import DirectoryEntry, DirectoryLister
from tunedir.logging_config import get_logger, MetadataError
from tunedir.modes import Action, ActionKind, InputEvent, Mode, ModeMachine
from tunedir.navigation import NavigationCursor, Page
from tunedir.playlist import PlaylistManager, PlayStyle
from tunedir.tracks import Track, TrackLoader

logger = get_logger('state')

# Rows taken by the browser pane's top and bottom border.
PANE_BORDER_ROWS: int = 2


@dataclass(frozen=True)
class TrackView:
    path: str
    display_name: str
    artist: str
    title: str
    album: str
    total_duration: float
    play_position: float
    progress: float

    @classmethod
    def of(cls, track: Track) -> "TrackView":
        position = track.play_position
        if track.total_duration > 0:
            position = min(position, track.total_duration)
        return cls(
            path=track.path,
            display_name=track.display_name,
            artist=track.artist,
            title=track.title,
            album=track.album,
            total_duration=track.total_duration,
            play_position=position,
            progress=track.progress,
        )


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of everything the renderer draws."""
    current_directory: str
    listing: Tuple[DirectoryEntry, ...]
    selection_index: Optional[int]
    viewport_height: int
    page: Page
    mode: Mode
    search_text: str
    command_text: str
    active_filter: str
    queue: Tuple[TrackView, ...]
    now_playing: Optional[TrackView]
    paused: bool
    volume: float
    play_style: PlayStyle
    error: Optional[str]


class StateManager:
    """Central state for the browser, the input modes and playback.

    All collaborators are injected so the whole engine runs against
    in-memory fakes in tests.
    """

    def __init__(
        self,
        lister: DirectoryLister,
        loader: TrackLoader,
        sink: AudioSink,
        root_directory: str,
        clock: Callable[[], float] = time.monotonic,
        move_step: int = 5,
        volume_step: float = 0.05,
        viewport_height: int = 1,
        rng: Optional[random.Random] = None,
    ):
        self.root_directory = root_directory
        self.volume_step = volume_step
        self.error: Optional[str] = None
        self.active_filter = ""
        self.running = True

        self.navigation = NavigationCursor(lister, root_directory, viewport_height)
        self.modes = ModeMachine(move_step)
        self.playlist = PlaylistManager(
            sink, loader, clock=clock, on_error=self.report_error, rng=rng
        )
        self.interpreter = CommandInterpreter()
        self._actions: Dict[ActionKind, Callable[[Action], None]] = {
            ActionKind.NONE: lambda action: None,
            ActionKind.MOVE_UP: lambda action: self.navigation.move_up(action.step),
            ActionKind.MOVE_DOWN: lambda action: self.navigation.move_down(action.step),
            ActionKind.MOVE_TOP: lambda action: self.navigation.move_top(),
            ActionKind.MOVE_BOTTOM: lambda action: self.navigation.move_bottom(),
            ActionKind.NEXT_PAGE: lambda action: self.navigation.next_page(),
            ActionKind.PREVIOUS_PAGE: lambda action: self.navigation.previous_page(),
            ActionKind.OPEN: lambda action: self.open_selected(),
            ActionKind.PARENT: lambda action: self.go_to_parent(),
            ActionKind.TOGGLE_PAUSE: lambda action: self.playlist.toggle_pause(),
            ActionKind.VOLUME_UP: lambda action: self.playlist.set_volume(self.volume_step),
            ActionKind.VOLUME_DOWN: lambda action: self.playlist.set_volume(-self.volume_step),
            ActionKind.APPLY_FILTER: lambda action: self.apply_filter(action.text),
            ActionKind.CLEAR_FILTER: lambda action: self.apply_filter(""),
            ActionKind.RUN_COMMAND: lambda action: self.run_command(action.text),
            ActionKind.QUIT: lambda action: self.quit(),
        }

    def start(self) -> None:
        """Load the initial listing of the root directory."""
        self.relist()

    def report_error(self, message: str) -> None:
        logger.warning(message)
        self.error = message

    # Input

    def handle_event(self, event: InputEvent) -> bool:
        """Handle one decoded input event.

        The error slot is cleared first, so an error stays visible for
        exactly the frames up to the next input.

        Returns:
            False once the user has asked to quit
        """
        self.error = None
        self.apply(self.modes.handle(event))
        return self.running

    def apply(self, action: Action) -> None:
        self._actions[action.kind](action)

    def quit(self) -> None:
        logger.info("Quit requested")
        self.running = False

    # Browser

    def relist(self, substring: str = "") -> bool:
        try:
            self.navigation.relist(substring)
        except OSError as e:
            self.report_error(f"Cannot read {self.navigation.current_directory}: {e.strerror or e}")
            return False
        self.active_filter = substring
        return True

    def apply_filter(self, substring: str) -> None:
        self.relist(substring)

    def enter_directory(self, path: str) -> None:
        try:
            self.navigation.enter_directory(path)
        except OSError as e:
            self.report_error(f"Cannot open {path}: {e.strerror or e}")
            return
        self.active_filter = ""

    def go_to_parent(self) -> None:
        current = self.navigation.current_directory
        try:
            changed = self.navigation.go_to_parent(self.root_directory)
        except OSError as e:
            self.report_error(f"Cannot leave {current}: {e.strerror or e}")
            return
        if changed:
            self.active_filter = ""

    def open_selected(self) -> None:
        """Enter the selected directory, or queue the selected file."""
        entry = self.navigation.selected_entry
        if entry is None:
            return
        if entry.is_dir:
            self.enter_directory(entry.path)
            return
        try:
            track = self.playlist.loader.load(entry.path)
        except MetadataError as e:
            self.report_error(str(e))
            return
        self.playlist.enqueue(track)

    def enqueue_listing(self) -> int:
        """Queue every file in the current listing, in listing order."""
        paths = [entry.path for entry in self.navigation.listing if entry.is_file]
        return self.playlist.enqueue_paths(paths)

    # Commands

    def run_command(self, command: str) -> None:
        self.interpreter.execute(self, command)
        self.relist()

    # Timing and layout

    def tick(self) -> None:
        self.playlist.tick()

    def resize(self, rows: int) -> None:
        self.navigation.resize(max(1, rows - PANE_BORDER_ROWS))

    def shutdown(self) -> None:
        self.playlist.shutdown()

    def snapshot(self) -> Snapshot:
        nav = self.navigation
        now_playing = self.playlist.now_playing
        return Snapshot(
            current_directory=nav.current_directory,
            listing=tuple(nav.listing),
            selection_index=nav.selection_index,
            viewport_height=nav.viewport_height,
            page=nav.page,
            mode=self.modes.mode,
            search_text=self.modes.search_text,
            command_text=self.modes.command_text,
            active_filter=self.active_filter,
            queue=tuple(TrackView.of(track) for track in self.playlist.queue),
            now_playing=TrackView.of(now_playing) if now_playing else None,
            paused=self.playlist.is_paused(),
            volume=self.playlist.volume(),
            play_style=self.playlist.play_style,
            error=self.error,
        )
