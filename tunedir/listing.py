"""
Directory listing for the file browser.
"""
import os
from collections import OrderedDict
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

from mutagen import File as MutagenFile
from mutagen import MutagenError

from tunedir.logging_config import get_logger
from tunedir.paths import display_name

logger = get_logger('listing')

SNIFF_CACHE_MAX_SIZE: int = 5000


class EntryKind(IntEnum):
    """Kind of a browser row. Directories sort before files."""
    DIRECTORY = 0
    FILE = 1


@dataclass(frozen=True, order=True)
class DirectoryEntry:
    """One row of a directory listing: a file or a sub-directory.

    Entries compare by ``(kind, path)`` so a sorted listing shows every
    directory first, then every file, each group ordered by path.
    """
    kind: EntryKind
    path: str

    @classmethod
    def file(cls, path: str) -> "DirectoryEntry":
        return cls(EntryKind.FILE, path)

    @classmethod
    def directory(cls, path: str) -> "DirectoryEntry":
        return cls(EntryKind.DIRECTORY, path)

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def name(self) -> str:
        return display_name(self.path)


def sort_entries(entries: List[DirectoryEntry]) -> List[DirectoryEntry]:
    return sorted(entries)


class DirectoryLister:
    """Lists a directory as ``DirectoryEntry`` rows.

    Files are kept only when their content looks like audio. Sniffing opens
    every file, so results are cached per path and invalidated when the
    file's mtime changes.
    """

    def __init__(self, cache_size: int = SNIFF_CACHE_MAX_SIZE):
        self.cache_size = cache_size
        self._sniff_cache: "OrderedDict[str, Tuple[float, bool]]" = OrderedDict()

    def list(self, directory: str, substring: Optional[str] = None) -> List[DirectoryEntry]:
        """List ``directory``, optionally keeping only names containing ``substring``.

        Raises:
            OSError: the directory cannot be read.
        """
        entries: List[DirectoryEntry] = []
        with os.scandir(directory) as it:
            for entry in it:
                if substring and substring not in entry.name:
                    continue
                try:
                    if entry.is_dir():
                        entries.append(DirectoryEntry.directory(entry.path))
                    elif entry.is_file() and self.is_audio_file(entry.path):
                        entries.append(DirectoryEntry.file(entry.path))
                except OSError as e:
                    logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
                    continue
        logger.debug(f"Listed {len(entries)} entries in {directory} (filter={substring!r})")
        return entries

    def is_audio_file(self, path: str) -> bool:
        """Check whether ``path`` holds a container mutagen can read as audio."""
        try:
            mtime = os.path.getmtime(path)
        except OSError:
            return False

        cached = self._sniff_cache.get(path)
        if cached is not None and cached[0] == mtime:
            self._sniff_cache.move_to_end(path)
            return cached[1]

        result = sniff_audio(path)

        while len(self._sniff_cache) >= self.cache_size:
            del self._sniff_cache[next(iter(self._sniff_cache))]
        self._sniff_cache[path] = (mtime, result)
        return result

    def clear_cache(self) -> None:
        self._sniff_cache.clear()


def sniff_audio(path: str) -> bool:
    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError, ValueError) as e:
        logger.debug(f"Not audio: {path} ({e})")
        return False
    return audio is not None and getattr(audio, "info", None) is not None
