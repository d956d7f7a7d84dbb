"""Catalog sources supplying media file descriptors for a directory."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Mapping

import yaml

from mediainspector.errors import InvalidMediaFileError
from mediainspector.models.file import BYTES_PER_GB, MediaFile
from mediainspector.models.track import AudioTrack, SubtitleTrack
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)


def _gb(value: float) -> int:
    return round(value * BYTES_PER_GB)


# Demo library served when no catalog file is configured
SAMPLE_RECORDS: List[dict] = [
    {
        "name": "The Matrix (1999).mkv",
        "path": "/movies/The Matrix (1999).mkv",
        "size": _gb(15.2),
        "sizeGB": 15.2,
        "format": "matroska,webm",
        "duration": 8160,
        "audioTracks": [
            {"codec": "dts", "language": "eng", "channels": 6},
            {"codec": "ac3", "language": "spa", "channels": 6},
            {"codec": "aac", "language": "und", "channels": 2},
        ],
        "subtitleTracks": [
            {"codec": "subrip", "language": "eng"},
            {"codec": "subrip", "language": "spa"},
            {"codec": "subrip", "language": "und"},
        ],
    },
    {
        "name": "Blade Runner 2049 (2017).mkv",
        "path": "/movies/Blade Runner 2049 (2017).mkv",
        "size": _gb(25.8),
        "sizeGB": 25.8,
        "format": "matroska,webm",
        "duration": 9840,
        "audioTracks": [
            {"codec": "truehd", "language": "eng", "channels": 8},
            {"codec": "ac3", "language": "eng", "channels": 6},
        ],
        "subtitleTracks": [
            {"codec": "pgs", "language": "eng"},
            {"codec": "pgs", "language": "fre"},
        ],
    },
    {
        "name": "Inception (2010).mp4",
        "path": "/movies/Inception (2010).mp4",
        "size": _gb(8.4),
        "sizeGB": 8.4,
        "format": "mov,mp4,m4a,3gp,3g2,mj2",
        "duration": 8880,
        "audioTracks": [{"codec": "aac", "language": "eng", "channels": 6}],
        "subtitleTracks": [],
    },
    {
        "name": "Interstellar (2014).mkv",
        "path": "/movies/Interstellar (2014).mkv",
        "size": _gb(22.1),
        "sizeGB": 22.1,
        "format": "matroska,webm",
        "duration": 10140,
        "audioTracks": [
            {"codec": "dts", "language": "unknown", "channels": 6},
            {"codec": "ac3", "language": "eng", "channels": 6},
        ],
        "subtitleTracks": [
            {"codec": "subrip", "language": "eng"},
            {"codec": "subrip", "language": "unknown"},
        ],
    },
    {
        "name": "Dune (2021).mkv",
        "path": "/movies/Dune (2021).mkv",
        "size": _gb(12.7),
        "sizeGB": 12.7,
        "format": "matroska,webm",
        "duration": 9360,
        "audioTracks": [
            {"codec": "eac3", "language": "eng", "channels": 8},
            {"codec": "ac3", "language": "fre", "channels": 6},
        ],
        "subtitleTracks": [
            {"codec": "subrip", "language": "eng"},
            {"codec": "subrip", "language": "fre"},
            {"codec": "subrip", "language": "ger"},
        ],
    },
    {
        "name": "Old Movie (1995).avi",
        "path": "/movies/Old Movie (1995).avi",
        "size": _gb(1.4),
        "sizeGB": 1.4,
        "format": "avi",
        "duration": 6720,
        "audioTracks": [{"codec": "mp3", "language": "eng", "channels": 2}],
        "subtitleTracks": [],
    },
    {
        "name": "Documentary (2020).wmv",
        "path": "/movies/Documentary (2020).wmv",
        "size": _gb(3.2),
        "sizeGB": 3.2,
        "format": "asf",
        "duration": 5400,
        "audioTracks": [{"codec": "wmav2", "language": "und", "channels": 2}],
        "subtitleTracks": [{"codec": "srt", "language": "unknown"}],
    },
]


def media_file_from_record(record: Mapping[str, Any]) -> MediaFile:
    """Convert one catalog record into a MediaFile.

    Records use the camelCase shape of the catalog format (``audioTracks``,
    ``subtitleTracks``, optional ``sizeGB``). Language tags are normalized
    here, at the boundary.

    Raises:
        InvalidMediaFileError: If the record is missing fields or inconsistent
    """
    try:
        path = record["path"]
        media_file = MediaFile(
            name=record.get("name") or Path(path).name,
            path=path,
            size=record["size"],
            format=record["format"],
            duration=record.get("duration", 0),
            audio_tracks=[
                AudioTrack(
                    codec=track.get("codec", ""),
                    language=track.get("language"),
                    channels=track.get("channels"),
                )
                for track in record.get("audioTracks") or []
            ],
            subtitle_tracks=[
                SubtitleTrack(codec=track.get("codec", ""), language=track.get("language"))
                for track in record.get("subtitleTracks") or []
            ],
        )
    except KeyError as e:
        raise InvalidMediaFileError(f"Catalog record missing field {e}") from None
    except (AttributeError, TypeError) as e:
        raise InvalidMediaFileError(f"Malformed catalog record: {e}") from None

    size_gb = record.get("sizeGB")
    if size_gb is not None and abs(media_file.size_gb - float(size_gb)) > 0.05:
        raise InvalidMediaFileError(
            f"sizeGB {size_gb} disagrees with size {media_file.size} for {media_file.path}"
        )

    return media_file


def rebase_path(path: str, root: str, directory: str) -> str:
    """Move a catalog path from ``root`` onto ``directory``."""
    root = root.rstrip("/")
    directory = directory.rstrip("/") or "/"
    if path == root:
        return directory
    if root and path.startswith(root + "/"):
        return directory.rstrip("/") + path[len(root):]
    return path


class CatalogSource(ABC):
    """Supplies an ordered sequence of media files for a directory."""

    @abstractmethod
    def scan(self, directory: str) -> list[MediaFile]:
        """List the media files under a directory.

        Args:
            directory: Directory scope requested by the caller

        Returns:
            Media files, in catalog order
        """


class RecordCatalog(CatalogSource):
    """Catalog backed by in-memory records whose paths live under ``root``."""

    def __init__(self, records: List[Mapping[str, Any]], root: str = "/movies"):
        self.records = list(records)
        self.root = root

    def scan(self, directory: str) -> list[MediaFile]:
        if not directory or not directory.strip():
            raise ValueError("Directory must not be empty")

        files = []
        for record in self.records:
            if not isinstance(record, Mapping):
                raise InvalidMediaFileError(f"Catalog record must be a mapping, got {record!r}")
            rebased = dict(record)
            rebased["path"] = rebase_path(record.get("path", ""), self.root, directory.strip())
            files.append(media_file_from_record(rebased))

        logger.info("Catalog scan complete", directory=directory, total_files=len(files))
        return files


class SampleCatalog(RecordCatalog):
    """The built-in demo library, authored under /movies."""

    def __init__(self):
        super().__init__(SAMPLE_RECORDS, root="/movies")


class FileCatalog(RecordCatalog):
    """Catalog loaded from a YAML or JSON file.

    The file holds either a top-level list of records or a mapping with a
    ``files`` list. The file is re-read on every scan so a refreshed catalog
    reflects remediation results.
    """

    def __init__(self, path: str | Path, root: str = "/movies"):
        self.path = Path(path)
        super().__init__([], root=root)

    def _load(self) -> List[Mapping[str, Any]]:
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            if self.path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)

        if raw is None:
            return []
        if isinstance(raw, dict):
            raw = raw.get("files") or []
        if not isinstance(raw, list):
            raise InvalidMediaFileError(f"Catalog file {self.path} must hold a list of records")

        logger.debug("Catalog file loaded", file=str(self.path), records=len(raw))
        return raw

    def scan(self, directory: str) -> list[MediaFile]:
        self.records = self._load()
        return super().scan(directory)
