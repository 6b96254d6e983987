"""
Path helpers shared by the browser and the playlist.
"""
import os


def display_name(path: str) -> str:
    """Return the final component of ``path`` for display.

    Trailing separators are ignored so ``/music/album/`` shows as ``album``.
    The filesystem root has no final component and is returned unchanged.
    """
    stripped = path.rstrip(os.sep)
    if not stripped:
        return path
    return os.path.basename(stripped)


def parent_directory(path: str) -> str:
    """Return the parent of ``path``; the root is its own parent."""
    stripped = path.rstrip(os.sep) or os.sep
    return os.path.dirname(stripped) or os.sep


def same_directory(a: str, b: str) -> bool:
    return os.path.normpath(a) == os.path.normpath(b)
