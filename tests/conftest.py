import random
from typing import Dict, List

import pytest

from fakes import FakeClock, FakeLister, FakeLoader, FakeSink, write_wav
from tunedir.listing import DirectoryEntry
from tunedir.state import StateManager


def music_tree() -> Dict[str, List[DirectoryEntry]]:
    """A small library, deliberately not in sorted order."""
    return {
        "/music": [
            DirectoryEntry.file("/music/b.mp3"),
            DirectoryEntry.directory("/music/rock"),
            DirectoryEntry.file("/music/a.mp3"),
            DirectoryEntry.directory("/music/jazz"),
            DirectoryEntry.file("/music/c.flac"),
            DirectoryEntry.directory("/music/locked"),
            DirectoryEntry.directory("/music/empty"),
        ],
        "/music/rock": [
            DirectoryEntry.file(f"/music/rock/{i:02d}.mp3") for i in range(1, 8)
        ],
        "/music/jazz": [
            DirectoryEntry.file("/music/jazz/so_what.mp3"),
        ],
        "/music/empty": [],
    }


@pytest.fixture
def lister():
    return FakeLister(music_tree(), broken={"/music/locked"})


@pytest.fixture
def loader():
    return FakeLoader()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state(lister, loader, sink, clock):
    """Engine started in /music with fake collaborators."""
    manager = StateManager(
        lister, loader, sink, "/music",
        clock=clock, viewport_height=3, rng=random.Random(1),
    )
    manager.start()
    return manager


@pytest.fixture
def temp_music_dir(tmp_path):
    """Create a temporary music directory with test files."""
    music_dir = tmp_path / "music"
    music_dir.mkdir()
    (music_dir / "subdir").mkdir()
    (music_dir / "another").mkdir()
    write_wav(music_dir / "tone.wav")
    write_wav(music_dir / "beep.wav")
    (music_dir / "notes.txt").write_text("not audio")
    write_wav(music_dir / "subdir" / "nested.wav")
    return music_dir
