"""Shared test fixtures."""

from pathlib import Path

import pytest

# Hard difficulty: muted red line before the song starts, duplicate volumes, a muted slider end and a BPM change
SOURCE_TIMING = [
    "-30,326.086956521739,4,2,1,5,1,0",
    "15,326.086956521739,4,2,0,30,1,0",
    "95,-100,4,2,0,30,0,0",
    "1319,-100,4,2,0,20,0,0",
    "1319,-100,4,2,0,20,0,0",
    "1563,-100,4,2,0,15,0,1",
    "1808,-100,4,2,0,10,0,0",
    "2053,-100,4,2,0,5,0,0",
    "2623,434.782608695652,4,2,0,20,1,0",
    "2800,-100,4,2,0,20,0,0",
]

# Easy difficulty of the same set
TARGET_TIMING = [
    "5,326.086956521739,4,2,1,5,1,0",
    "8,-100,4,2,1,5,0,0",
    "15,-100,4,2,0,30,0,0",
    "101,-100,4,2,0,30,0,0",
    "1400,-100,4,2,0,25,0,1",
    "1563,-100,4,2,0,15,0,0",
    "2053,-100,4,2,0,10,0,0",
    "2623,-100,4,2,0,20,0,0",
]

# Red line and green line on the same tick, the red line repeating the previous volume
SHARED_TIME_TIMING = [
    "0,500,4,2,0,30,1,0",
    "1000,400,4,2,0,30,1,0",
    "1000,-100,4,2,0,20,0,0",
    "2000,-100,4,2,0,40,0,0",
]


def make_osu(timing: list[str], version: str = "Hard", newline: str = "\r\n") -> str:
    return newline.join([
        "osu file format v14",
        "",
        "[General]",
        "AudioFilename: audio.mp3",
        "AudioLeadIn: 0",
        "",
        "[Metadata]",
        "Title:Test Song",
        f"Version:{version}",
        "",
        "[TimingPoints]",
        *timing,
        "",
        "",
        "[HitObjects]",
        "256,192,15,1,0,0:0:0:0:",
        "",
    ])


@pytest.fixture
def source_text() -> str:
    return make_osu(SOURCE_TIMING)


@pytest.fixture
def target_text() -> str:
    return make_osu(TARGET_TIMING, version="Easy")


@pytest.fixture
def beatmap_set(tmp_path: Path) -> dict[str, Path]:
    """Folder with a source difficulty, two targets and an unrelated file"""
    files = {
        "hard": tmp_path / "Artist - Song (Mapper) [Hard].osu",
        "easy": tmp_path / "Artist - Song (Mapper) [Easy].osu",
        "normal": tmp_path / "Artist - Song (Mapper) [Normal].osu",
    }
    files["hard"].write_bytes(make_osu(SOURCE_TIMING).encode())
    files["easy"].write_bytes(make_osu(TARGET_TIMING, version="Easy").encode())
    files["normal"].write_bytes(make_osu(TARGET_TIMING, version="Normal", newline="\n").encode())
    (tmp_path / "audio.mp3").write_bytes(b"\x00" * 16)
    return files
