"""
Raw terminal handling: cbreak mode, key reading and key decoding.
"""
import os
import select
import shutil
import sys
import termios
import tty
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from tunedir.logging_config import get_logger
from tunedir.modes import InputEvent, Key

logger = get_logger('terminal')

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
ALT_SCREEN_ON = "\033[?1049h"
ALT_SCREEN_OFF = "\033[?1049l"

ESCAPE_SEQUENCES: Dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
    "\x1b[H": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOH": Key.HOME,
    "\x1bOF": Key.END,
    "\x1b[1~": Key.HOME,
    "\x1b[4~": Key.END,
    "\x1b[5~": Key.PAGE_UP,
    "\x1b[6~": Key.PAGE_DOWN,
}

SINGLE_KEYS: Dict[str, Key] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\x1b": Key.ESCAPE,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
}


def split_keys(chunk: str) -> List[str]:
    """Split raw terminal input into one string per key press."""
    keys = []
    i = 0
    while i < len(chunk):
        ch = chunk[i]
        if ch == "\x1b" and i + 1 < len(chunk) and chunk[i + 1] in "[O":
            j = i + 2
            if chunk[i + 1] == "[":
                while j < len(chunk) and not ("@" <= chunk[j] <= "~"):
                    j += 1
            keys.append(chunk[i:j + 1])
            i = j + 1
        else:
            keys.append(ch)
            i += 1
    return keys


def decode_key(sequence: str) -> Optional[InputEvent]:
    """Map one key sequence to an ``InputEvent``; unknown sequences give None."""
    if sequence in ESCAPE_SEQUENCES:
        return InputEvent(ESCAPE_SEQUENCES[sequence])
    if sequence in SINGLE_KEYS:
        return InputEvent(SINGLE_KEYS[sequence])
    if len(sequence) == 1 and sequence.isprintable():
        return InputEvent.of_char(sequence)
    logger.debug(f"Ignoring key sequence {sequence!r}")
    return None


def read_events(fd: int, timeout: float) -> List[InputEvent]:
    """Wait up to ``timeout`` seconds for input and decode what arrived."""
    try:
        ready, _, _ = select.select([fd], [], [], timeout)
    except InterruptedError:
        return []
    if not ready:
        return []
    try:
        data = os.read(fd, 1024)
    except (BlockingIOError, InterruptedError):
        return []
    events = []
    for sequence in split_keys(data.decode("utf-8", errors="ignore")):
        event = decode_key(sequence)
        if event is not None:
            events.append(event)
    return events


def get_terminal_size() -> Tuple[int, int]:
    """Return ``(rows, columns)`` of the controlling terminal."""
    size = shutil.get_terminal_size()
    return size.lines, size.columns


@contextmanager
def raw_terminal(fd: int) -> Iterator[None]:
    """Put the terminal in cbreak mode on the alternate screen for the block."""
    old = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    sys.stdout.write(ALT_SCREEN_ON + HIDE_CURSOR)
    sys.stdout.flush()
    try:
        yield
    finally:
        sys.stdout.write(SHOW_CURSOR + ALT_SCREEN_OFF)
        sys.stdout.flush()
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
