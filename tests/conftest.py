"""Shared pytest fixtures for MediaInspector tests."""

import pytest

from mediainspector.config import Config
from mediainspector.models.file import BYTES_PER_GB, MediaFile
from mediainspector.models.track import AudioTrack, SubtitleTrack


@pytest.fixture
def default_config():
    """Default configuration (dry-run execution, sample catalog)."""
    return Config()


@pytest.fixture
def make_file():
    """Factory for media files with sensible defaults."""

    def _make_file(
        audio=("eng",),
        subtitles=(),
        size_gb=4.0,
        format="matroska,webm",
        path="/movies/Sample (2020).mkv",
    ):
        return MediaFile(
            name=path.rsplit("/", 1)[-1],
            path=path,
            size=round(size_gb * BYTES_PER_GB),
            format=format,
            duration=7200,
            audio_tracks=[AudioTrack(codec="aac", language=lang, channels=2) for lang in audio],
            subtitle_tracks=[SubtitleTrack(codec="subrip", language=lang) for lang in subtitles],
        )

    return _make_file


@pytest.fixture
def clean_file(make_file):
    """A file that needs nothing."""
    return make_file(audio=("eng", "jpn"), subtitles=("eng",))


@pytest.fixture
def mixed_unknown_file():
    """Audio track 0 and subtitle track 1 have unknown languages."""
    return MediaFile(
        name="Mixed (2015).mkv",
        path="/movies/Mixed (2015).mkv",
        size=6 * BYTES_PER_GB,
        format="matroska,webm",
        duration=5400,
        audio_tracks=[
            AudioTrack(codec="dts", language="und", channels=6),
            AudioTrack(codec="ac3", language="eng", channels=6),
        ],
        subtitle_tracks=[
            SubtitleTrack(codec="subrip", language="eng"),
            SubtitleTrack(codec="subrip", language=None),
        ],
    )
