"""
tunedir - terminal file browser and audio player.
"""

__version__ = "0.1.0"
__description__ = "A terminal file browser that queues and plays the audio files it finds."

from tunedir.listing import DirectoryEntry, DirectoryLister, EntryKind
from tunedir.modes import InputEvent, Key, Mode
from tunedir.navigation import NavigationCursor, Page, paginate
from tunedir.playlist import PlaylistManager, PlayStyle
from tunedir.state import Snapshot, StateManager
from tunedir.tracks import Track, TrackLoader

__all__ = [
    'DirectoryEntry',
    'DirectoryLister',
    'EntryKind',
    'InputEvent',
    'Key',
    'Mode',
    'NavigationCursor',
    'Page',
    'paginate',
    'PlaylistManager',
    'PlayStyle',
    'Snapshot',
    'StateManager',
    'Track',
    'TrackLoader',
]
