"""
Terminal rendering of a state ``Snapshot``.

The screen is split into the browser pane on the left and, on the right,
the playlist pane above the now-playing pane. Rendering is a pure function
of the snapshot; ``draw`` only writes the result out.
"""
import re
import sys
import unicodedata
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from tunedir.modes import Mode
from tunedir.paths import display_name
from tunedir.playlist import PlayStyle
from tunedir.state import Snapshot, TrackView

COLOR_MAP: Dict[str, str] = {
    "black": "\033[30m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "gray": "\033[90m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bright_white": "\033[97m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "italic": "\033[3m",
    "underline": "\033[4m",
    "reverse": "\033[7m",
    "reset": "\033[0m",
    "default": "",
}
C_RESET = COLOR_MAP["reset"]

HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")

BORDER_TL = "┌"
BORDER_TR = "┐"
BORDER_BL = "└"
BORDER_BR = "┘"
BORDER_H = "─"
BORDER_V = "│"

BROWSER_WIDTH_RATIO: float = 0.3
PLAYING_PANE_ROWS: int = 5

PLAY_STYLE_LABELS: Dict[PlayStyle, str] = {
    PlayStyle.SEQUENTIAL: "⇉ order",
    PlayStyle.SINGLE_REPEAT: "↻ single",
}

USAGE: List[Tuple[str, str]] = [
    ("Move selection up", "[k, K]"),
    ("Move selection down", "[j, J]"),
    ("Move selection to the top", "[g]"),
    ("Move selection to the bottom", "[G]"),
    ("Next page", "[n]"),
    ("Previous page", "[N]"),
    ("Open folder", "[l]"),
    ("Back to previous folder", "[h]"),
    ("Enter search mode", "[/]"),
    ("Enter command mode", "[:]"),
    ("Exit program", "[q]"),
    ("Exit search or command mode", "[Esc]"),
    ("Pause or resume the music", "[Space]"),
    ("Decrease volume", "[-]"),
    ("Increase volume", "[+, =]"),
    ("Add music to the playlist", "[Enter]"),
]

Line = Tuple[str, str]


def color_code(value: str) -> str:
    """Translate a color name or ``#RRGGBB`` into an escape sequence."""
    match = HEX_COLOR_RE.match(value.strip())
    if match:
        r, g, b = (int(part, 16) for part in match.groups())
        return f"\033[38;2;{r};{g};{b}m"
    return COLOR_MAP.get(value.strip().lower(), "")


class Theme:
    """Resolved escape sequences for each UI element."""

    def __init__(self, colors: Optional[Dict[str, str]] = None):
        self.codes = {name: color_code(value) for name, value in (colors or {}).items()}

    def get(self, element: str) -> str:
        return self.codes.get(element, "")


@lru_cache(maxsize=4096)
def _char_display_width(ch: str) -> int:
    """Return display width of a single Unicode character (0, 1 or 2)."""
    if not ch:
        return 0
    cat = unicodedata.category(ch)
    if cat in ("Mn", "Me", "Cf"):
        return 0
    ea = unicodedata.east_asian_width(ch)
    if ea in ("F", "W"):
        return 2
    return 1


def _display_width(text: str) -> int:
    return sum(_char_display_width(ch) for ch in text)


def _truncate_to_width(text: str, max_width: int, ellipsis: str = "…") -> str:
    """Truncate plain ``text`` to fit in ``max_width`` display columns."""
    if max_width <= 0:
        return ""
    if _display_width(text) <= max_width:
        return text

    e_width = _display_width(ellipsis)
    target = max_width if e_width >= max_width else max_width - e_width

    out = []
    cur = 0
    for ch in text:
        w = _char_display_width(ch)
        if cur + w > target:
            break
        out.append(ch)
        cur += w

    if e_width >= max_width:
        return "".join(out)
    return "".join(out) + ellipsis


def printable(text: str) -> str:
    """Replace undecodable file name bytes so ``text`` can be written out.

    Names that are not valid UTF-8 come back from ``os`` with surrogate
    escapes, which a strict stdout refuses to encode.
    """
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _fit(text: str, width: int) -> str:
    """Truncate or pad ``text`` to exactly ``width`` columns."""
    text = _truncate_to_width(printable(text), width)
    return text + " " * (width - _display_width(text))


def format_duration(seconds: float) -> str:
    """Format duration in MM:SS format."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def _border(left: str, right: str, label: str, width: int, color: str) -> str:
    inner = max(0, width - 2)
    label = _truncate_to_width(printable(label), inner)
    fill = BORDER_H * (inner - _display_width(label))
    return f"{color}{left}{label}{fill}{right}{C_RESET}"


def _box(title: str, body: List[Line], width: int, height: int,
         border_color: str, footer: str = "") -> List[str]:
    """Draw a bordered box of ``width`` x ``height``; extra body lines are dropped."""
    if height <= 0 or width <= 1:
        return []
    inner_width = width - 2
    lines = [_border(BORDER_TL, BORDER_TR, title, width, border_color)]
    for row in range(max(0, height - 2)):
        text, color = body[row] if row < len(body) else ("", "")
        cell = _fit(text, inner_width)
        if color:
            cell = f"{color}{cell}{C_RESET}"
        lines.append(f"{border_color}{BORDER_V}{C_RESET}{cell}{border_color}{BORDER_V}{C_RESET}")
    if height >= 2:
        lines.append(_border(BORDER_BL, BORDER_BR, footer, width, border_color))
    return lines


def _browser_footer(snapshot: Snapshot) -> str:
    if snapshot.mode is Mode.SEARCH:
        return f" {snapshot.search_text}▏"
    if snapshot.mode is Mode.COMMAND:
        return f" :{snapshot.command_text}▏"
    if snapshot.active_filter:
        return f" /{snapshot.active_filter} "
    return ""


def browser_pane(snapshot: Snapshot, width: int, height: int, theme: Theme) -> List[str]:
    page = snapshot.page
    title = f" {display_name(snapshot.current_directory)} "
    if page.total_pages:
        title += f"[{page.current_page}/{page.total_pages}] "

    body: List[Line] = []
    for index in range(page.visible_from, page.visible_to):
        entry = snapshot.listing[index]
        if entry.is_dir:
            text, color = f" ▸ {entry.name}/", theme.get("list_folder")
        else:
            text, color = f" ♪ {entry.name}", theme.get("list_music")
        if index == snapshot.selection_index:
            color = color + theme.get("list_selection")
        body.append((text, color))
    if not snapshot.listing:
        body.append((" (empty)", theme.get("list_page")))

    border = theme.get("search_border") if snapshot.mode is not Mode.BROWSE else theme.get("list_border")
    return _box(title, body, width, height, border, _browser_footer(snapshot))


def _track_label(track: TrackView) -> str:
    if track.title:
        return f"{track.artist} - {track.title}" if track.artist else track.title
    return track.display_name


def format_total(seconds: float) -> str:
    """Format a long duration as ``1h 02m  3s``."""
    seconds = max(0, int(seconds))
    return f"{seconds // 3600}h {seconds // 60 % 60:02d}m {seconds % 60:>2d}s"


def remaining_time(snapshot: Snapshot) -> float:
    """Seconds left: every queued track plus the rest of the current one."""
    total = sum(track.total_duration for track in snapshot.queue)
    track = snapshot.now_playing
    if track is not None:
        total += max(0.0, track.total_duration - track.play_position)
    return total


def usage_lines(theme: Theme) -> List[Line]:
    width = max(len(description) for description, _ in USAGE)
    return [
        (f"  {description:<{width}}  {keys}", theme.get("usage"))
        for description, keys in USAGE
    ]


def playlist_pane(snapshot: Snapshot, width: int, height: int, theme: Theme) -> List[str]:
    """Queued tracks, or the key help while nothing is queued or playing."""
    if not snapshot.queue and snapshot.now_playing is None:
        help_body: List[Line] = [("", "")] + usage_lines(theme)
        return _box(" Play list ", help_body, width, height, theme.get("playlist_border"))

    inner_width = max(0, width - 2)
    body: List[Line] = []
    for position, track in enumerate(snapshot.queue, start=1):
        duration = f" {format_duration(track.total_duration)}"
        label = _fit(f" {position:>3}. {_track_label(track)}", inner_width - len(duration))
        body.append((label + duration, ""))
    songs = len(snapshot.queue) + (1 if snapshot.now_playing is not None else 0)
    title = f" Play list | {songs} songs | {format_total(remaining_time(snapshot))} "
    return _box(title, body, width, height, theme.get("playlist_border"))


def gauge(track: Optional[TrackView], width: int) -> str:
    """Progress bar followed by ``elapsed / total``."""
    if track is None:
        return ""
    times = f" {format_duration(track.play_position)} / {format_duration(track.total_duration)}"
    bar_width = max(0, width - len(times) - 2)
    filled = int(round(track.progress * bar_width))
    return "[" + "=" * filled + " " * (bar_width - filled) + "]" + times


def playing_pane(snapshot: Snapshot, width: int, height: int, theme: Theme) -> List[str]:
    inner_width = max(0, width - 2)
    track = snapshot.now_playing
    state_icon = "⏸" if snapshot.paused else "▶"
    style = PLAY_STYLE_LABELS[snapshot.play_style]
    title = f" Playing {style}  vol {int(round(snapshot.volume * 100))}% "

    body: List[Line] = []
    if track is None:
        body.append((" Nothing playing", theme.get("list_page")))
    else:
        body.append((f" {state_icon} {track.display_name}", theme.get("playing_name")))
        details = " · ".join(part for part in (track.artist, track.title, track.album) if part)
        body.append((f"   {details}", ""))
        body.append((" " + gauge(track, inner_width - 1), theme.get("gauge")))

    footer = f" {snapshot.error} " if snapshot.error else ""
    border = theme.get("error") if snapshot.error else theme.get("playlist_border")
    return _box(title, body, width, height, border, footer)


def render(snapshot: Snapshot, rows: int, cols: int, theme: Theme) -> List[str]:
    """Lay out the three panes for a ``rows`` x ``cols`` terminal."""
    left_width = max(12, int(cols * BROWSER_WIDTH_RATIO))
    right_width = max(0, cols - left_width)
    playing_rows = min(PLAYING_PANE_ROWS, rows)
    playlist_rows = max(0, rows - playing_rows)

    left = browser_pane(snapshot, left_width, rows, theme)
    right = (playlist_pane(snapshot, right_width, playlist_rows, theme)
             + playing_pane(snapshot, right_width, playing_rows, theme))

    lines = []
    for row in range(rows):
        l_part = left[row] if row < len(left) else " " * left_width
        r_part = right[row] if row < len(right) else ""
        lines.append(l_part + r_part)
    return lines


def draw(snapshot: Snapshot, rows: int, cols: int, theme: Theme) -> None:
    """Redraw the whole screen."""
    out = ["\033[H"]
    out.append("\033[K\n".join(render(snapshot, rows, cols, theme)))
    out.append("\033[J")
    sys.stdout.write("".join(out))
    sys.stdout.flush()
