"""
Input modes: Browse, Search and Command.

Decoded key events go in, explicit ``Action`` descriptors come out. The
machine owns the mode and the search/command buffers; it never touches
the browser or the playlist itself.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from tunedir.logging_config import get_logger

logger = get_logger('modes')

SEARCH_PREFIX = "/"
COMMAND_PREFIX = ":"


class Mode(Enum):
    BROWSE = "browse"
    SEARCH = "search"
    COMMAND = "command"


class Key(Enum):
    """Logical keys produced by the terminal decoder."""
    CHAR = "char"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


@dataclass(frozen=True)
class InputEvent:
    key: Key
    char: str = ""

    @classmethod
    def of_char(cls, char: str) -> "InputEvent":
        return cls(Key.CHAR, char)


class ActionKind(Enum):
    NONE = "none"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_TOP = "move_top"
    MOVE_BOTTOM = "move_bottom"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"
    OPEN = "open"
    PARENT = "parent"
    TOGGLE_PAUSE = "toggle_pause"
    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    APPLY_FILTER = "apply_filter"
    CLEAR_FILTER = "clear_filter"
    RUN_COMMAND = "run_command"
    QUIT = "quit"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    step: int = 1
    text: str = ""


NO_ACTION = Action(ActionKind.NONE)

BROWSE_KEYS: Dict[Key, ActionKind] = {
    Key.UP: ActionKind.MOVE_UP,
    Key.DOWN: ActionKind.MOVE_DOWN,
    Key.HOME: ActionKind.MOVE_TOP,
    Key.END: ActionKind.MOVE_BOTTOM,
    Key.PAGE_DOWN: ActionKind.NEXT_PAGE,
    Key.PAGE_UP: ActionKind.PREVIOUS_PAGE,
    Key.ENTER: ActionKind.OPEN,
    Key.RIGHT: ActionKind.OPEN,
    Key.LEFT: ActionKind.PARENT,
}


def default_browse_chars(move_step: int) -> Dict[str, Tuple[ActionKind, int]]:
    return {
        "q": (ActionKind.QUIT, 1),
        "g": (ActionKind.MOVE_TOP, 1),
        "G": (ActionKind.MOVE_BOTTOM, 1),
        "j": (ActionKind.MOVE_DOWN, 1),
        "J": (ActionKind.MOVE_DOWN, move_step),
        "k": (ActionKind.MOVE_UP, 1),
        "K": (ActionKind.MOVE_UP, move_step),
        "n": (ActionKind.NEXT_PAGE, 1),
        "N": (ActionKind.PREVIOUS_PAGE, 1),
        "l": (ActionKind.OPEN, 1),
        "h": (ActionKind.PARENT, 1),
        " ": (ActionKind.TOGGLE_PAUSE, 1),
        "+": (ActionKind.VOLUME_UP, 1),
        "=": (ActionKind.VOLUME_UP, 1),
        "-": (ActionKind.VOLUME_DOWN, 1),
    }


class ModeMachine:
    """Mode state machine with one transition function per mode."""

    def __init__(self, move_step: int = 5):
        self.mode = Mode.BROWSE
        self.search_buffer: List[str] = []
        self.command_buffer: List[str] = []
        self.browse_chars = default_browse_chars(move_step)
        self._transitions: Dict[Mode, Callable[[InputEvent], Action]] = {
            Mode.BROWSE: self._browse,
            Mode.SEARCH: self._search,
            Mode.COMMAND: self._command,
        }

    @property
    def search_text(self) -> str:
        return "".join(self.search_buffer)

    @property
    def command_text(self) -> str:
        return "".join(self.command_buffer)

    def handle(self, event: InputEvent) -> Action:
        return self._transitions[self.mode](event)

    def enter_search(self) -> None:
        self.mode = Mode.SEARCH
        self.search_buffer = [SEARCH_PREFIX]
        logger.debug("Entered search mode")

    def enter_command(self) -> None:
        self.mode = Mode.COMMAND
        self.command_buffer = []
        logger.debug("Entered command mode")

    def _back_to_browse(self) -> None:
        self.mode = Mode.BROWSE
        self.search_buffer = []
        self.command_buffer = []

    def _browse(self, event: InputEvent) -> Action:
        if event.key is Key.CHAR:
            if event.char == SEARCH_PREFIX:
                self.enter_search()
                return NO_ACTION
            if event.char == COMMAND_PREFIX:
                self.enter_command()
                return NO_ACTION
            mapped = self.browse_chars.get(event.char)
            if mapped is None:
                return NO_ACTION
            kind, step = mapped
            return Action(kind, step=step)

        kind = BROWSE_KEYS.get(event.key)
        if kind is None:
            return NO_ACTION
        return Action(kind)

    def _search(self, event: InputEvent) -> Action:
        if event.key is Key.CHAR:
            self.search_buffer.append(event.char)
        elif event.key is Key.BACKSPACE:
            # The prefix stays put.
            if len(self.search_buffer) > 1:
                self.search_buffer.pop()
        elif event.key is Key.ENTER:
            query = self.search_text[len(SEARCH_PREFIX):]
            self._back_to_browse()
            logger.debug(f"Search submitted: {query!r}")
            return Action(ActionKind.APPLY_FILTER, text=query)
        elif event.key is Key.ESCAPE:
            self._back_to_browse()
            logger.debug("Search cancelled")
            return Action(ActionKind.CLEAR_FILTER)
        return NO_ACTION

    def _command(self, event: InputEvent) -> Action:
        if event.key is Key.CHAR:
            self.command_buffer.append(event.char)
        elif event.key is Key.BACKSPACE:
            if self.command_buffer:
                self.command_buffer.pop()
        elif event.key is Key.ENTER:
            text = self.command_text
            self._back_to_browse()
            return Action(ActionKind.RUN_COMMAND, text=text)
        elif event.key is Key.ESCAPE:
            self._back_to_browse()
            logger.debug("Command cancelled")
        return NO_ACTION
