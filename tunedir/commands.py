"""
Command-mode interpreter.

A command line such as ``:rm 2 4`` is split into whitespace tokens; the
first token picks a verb (case-insensitive), the rest are its arguments.
"""
from typing import TYPE_CHECKING, Callable, Dict, List

from tunedir.logging_config import get_logger, CommandError
from tunedir.modes import COMMAND_PREFIX
from tunedir.playlist import PlayStyle

if TYPE_CHECKING:
    from tunedir.state import StateManager

logger = get_logger('commands')

Handler = Callable[["StateManager", List[str]], None]


def parse_command(command: str) -> List[str]:
    """Split a command line into tokens; the verb is upper-cased."""
    tokens = command.strip().lstrip(COMMAND_PREFIX).split()
    if tokens:
        tokens[0] = tokens[0].upper()
    return tokens


def parse_index(token: str) -> int:
    """Parse a 1-based queue position.

    Raises:
        CommandError: ``token`` is not a positive integer.
    """
    try:
        index = int(token)
    except ValueError:
        index = 0
    if index <= 0:
        raise CommandError(f"{token!r}: index must be a positive integer")
    return index


def _remove(manager: "StateManager", args: List[str]) -> None:
    indices = []
    for token in args:
        try:
            indices.append(parse_index(token))
        except CommandError as e:
            manager.report_error(str(e))
    if indices:
        manager.playlist.remove_by_indices(indices)


def _clear(manager: "StateManager", args: List[str]) -> None:
    manager.playlist.clear()


def _all(manager: "StateManager", args: List[str]) -> None:
    manager.enqueue_listing()


def _order(manager: "StateManager", args: List[str]) -> None:
    manager.playlist.set_play_style(PlayStyle.SEQUENTIAL)


def _single_cycle(manager: "StateManager", args: List[str]) -> None:
    manager.playlist.set_play_style(PlayStyle.SINGLE_REPEAT)


def _next(manager: "StateManager", args: List[str]) -> None:
    manager.playlist.skip()


def _shuffle(manager: "StateManager", args: List[str]) -> None:
    manager.playlist.shuffle()


COMMANDS: Dict[str, Handler] = {
    "REMOVE": _remove,
    "RM": _remove,
    "CLEAR": _clear,
    "CLS": _clear,
    "ALL": _all,
    "ORDER": _order,
    "OD": _order,
    "SINGLECYCLE": _single_cycle,
    "SC": _single_cycle,
    "NEXT": _next,
    "N": _next,
    "SHUFFLE": _shuffle,
    "SH": _shuffle,
}


class CommandInterpreter:
    """Runs command lines against a ``StateManager``."""

    def __init__(self, commands: Dict[str, Handler] = COMMANDS):
        self.commands = commands

    def execute(self, manager: "StateManager", command: str) -> None:
        tokens = parse_command(command)
        verb = tokens[0] if tokens else ""
        handler = self.commands.get(verb)
        if handler is None:
            manager.report_error(f"Not a command: {command.strip() or '(empty)'}")
        else:
            logger.debug(f"Running {verb} {tokens[1:]}")
            handler(manager, tokens[1:])

        manager.navigation.move_up(1)
