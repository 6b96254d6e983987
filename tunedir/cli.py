"""
Command line entry point: wires the real collaborators and runs the loop.
"""
import argparse
import signal
import sys
import time
from pathlib import Path
from typing import List, Optional

from tunedir import __description__, __version__
from tunedir.audio import get_audio_sink
from tunedir.config import ConfigManager, VALID_PLAYERS
from tunedir.listing import DirectoryLister
from tunedir.logging_config import get_logger, setup_logging, AudioPlayerError, ConfigurationError
from tunedir.state import StateManager
from tunedir.terminal import get_terminal_size, raw_terminal, read_events
from tunedir.tracks import TrackLoader
from tunedir.view import Theme, draw

logger = get_logger('main')

resize_received = False


def _handle_resize(signum: Optional[int] = None, frame=None) -> None:
    """Handle terminal resize events."""
    global resize_received
    resize_received = True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tunedir", description=__description__)
    parser.add_argument("--music-dir", help="directory to browse (default from config)")
    parser.add_argument("--player", choices=VALID_PLAYERS, help="audio player backend")
    parser.add_argument("--config", type=Path, help="path to config.json")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--version", action="version", version=f"tunedir {__version__}")
    return parser


def run(state: StateManager, theme: Theme, tick_interval: float, poll_timeout: float) -> None:
    """Main loop: poll input, tick on a fixed period, redraw.

    Input waits are bounded by ``poll_timeout`` so the tick keeps running
    while the user is idle.
    """
    global resize_received
    fd = sys.stdin.fileno()
    rows, cols = get_terminal_size()
    state.resize(rows)
    last_tick = time.monotonic()
    state.tick()

    while state.running:
        for event in read_events(fd, poll_timeout):
            if not state.handle_event(event):
                break

        now = time.monotonic()
        if now - last_tick >= tick_interval:
            state.tick()
            last_tick = now

        if resize_received:
            resize_received = False
            rows, cols = get_terminal_size()
            state.resize(rows)

        if state.running:
            draw(state.snapshot(), rows, cols, theme)


def check_music_directory(manager: ConfigManager) -> Path:
    """Return the resolved music directory.

    Raises:
        ConfigurationError: the directory does not exist.
    """
    music_dir = manager.get_music_directory_path()
    if not music_dir.is_dir():
        raise ConfigurationError(f"Music directory does not exist: {music_dir}")
    return music_dir.resolve()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    manager = ConfigManager(args.config)
    config = manager.config
    if args.music_dir:
        config.music_directory = args.music_dir
    if args.player:
        config.audio_player = args.player
    if args.log_level:
        config.log_level = args.log_level

    # Invalid values fall back to defaults before anything uses them.
    manager.validate_config()
    setup_logging(config.log_level, manager.get_log_file_path())

    try:
        music_dir = check_music_directory(manager)
        sink = get_audio_sink(config.audio_player, config.initial_volume)
    except (ConfigurationError, AudioPlayerError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not sys.stdin.isatty():
        print("Error: Must run in interactive terminal", file=sys.stderr)
        return 1

    state = StateManager(
        DirectoryLister(),
        TrackLoader(),
        sink,
        str(music_dir),
        move_step=config.move_step,
        volume_step=config.volume_step,
    )
    state.start()
    theme = Theme(config.theme)

    signal.signal(signal.SIGWINCH, _handle_resize)
    logger.info(f"Starting in {music_dir} with {sink.executable}")
    try:
        with raw_terminal(sys.stdin.fileno()):
            run(state, theme, config.tick_interval, config.poll_timeout)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        state.shutdown()
    return 0
