"""Media file data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Sequence

from mediainspector.errors import InvalidMediaFileError
from mediainspector.models.plan import Classification, RemediationAction
from mediainspector.models.track import AudioTrack, SubtitleTrack, Track, TrackKind

BYTES_PER_GB = 1024**3


@dataclass
class MediaFile:
    """Represents one entry of a media catalog."""

    name: str
    path: str  # Unique key within a catalog scan
    size: int  # Bytes
    format: str  # Raw prober format name, e.g. "matroska,webm"
    duration: float = 0.0  # Seconds
    audio_tracks: list[AudioTrack] = field(default_factory=list)
    subtitle_tracks: list[SubtitleTrack] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.path:
            raise InvalidMediaFileError("Media file path must not be empty")
        if isinstance(self.size, bool) or not isinstance(self.size, (int, float)) or self.size < 0:
            raise InvalidMediaFileError(f"Invalid size for {self.path}: {self.size!r}")
        if not isinstance(self.duration, (int, float)) or self.duration < 0:
            raise InvalidMediaFileError(f"Invalid duration for {self.path}: {self.duration!r}")
        if not isinstance(self.format, str) or not self.format.strip():
            raise InvalidMediaFileError(f"Missing container format for {self.path}")
        self.size = int(self.size)
        self.audio_tracks = list(self.audio_tracks)
        self.subtitle_tracks = list(self.subtitle_tracks)

    @property
    def size_gb(self) -> float:
        """Size in GiB, derived from the byte count."""
        return self.size / BYTES_PER_GB

    def tracks(self, kind: TrackKind) -> Sequence[Track]:
        """Track sequence for a given kind."""
        if kind is TrackKind.AUDIO:
            return self.audio_tracks
        return self.subtitle_tracks

    def unknown_track_indexes(self, kind: TrackKind) -> list[int]:
        """Positions of the tracks of one kind whose language is Unknown."""
        return [idx for idx, track in enumerate(self.tracks(kind)) if track.is_unknown]

    @property
    def has_unknown_tracks(self) -> bool:
        """Whether any audio or subtitle track has an Unknown language."""
        return any(t.is_unknown for t in self.audio_tracks) or any(
            t.is_unknown for t in self.subtitle_tracks
        )

    @property
    def display_format(self) -> str:
        """Short format label ("MKV", "MOV", "AVI")."""
        return self.format.split(",")[0].replace("matroska", "MKV").upper()

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.name} ({self.display_format}, {self.size_gb:.1f} GB, "
            f"{len(self.audio_tracks)} audio, {len(self.subtitle_tracks)} subtitle)"
        )


@dataclass(frozen=True)
class FileReport:
    """A catalog entry together with its classification."""

    file: MediaFile
    classification: Classification

    @property
    def needs_remux(self) -> bool:
        return RemediationAction.REMUX in self.classification.actions

    @property
    def needs_reencode(self) -> bool:
        return RemediationAction.REENCODE in self.classification.actions


@dataclass
class RemuxResult:
    """Result of remediating a single file."""

    status: Literal["success", "dry_run", "skipped"]
    file_path: str
    output_path: Optional[Path] = None
    assignments: int = 0
    reason: Optional[str] = None  # Reason for skip
    report: Optional[FileReport] = None  # Catalog entry after the refresh

    def __str__(self) -> str:
        """Human-readable representation."""
        name = Path(self.file_path).name
        if self.status == "success":
            return f"✓ {name}: {self.assignments} track(s) retagged -> {self.output_path.name}"
        elif self.status == "dry_run":
            target = self.output_path.name if self.output_path else "?"
            return f"⊙ {name}: Would retag {self.assignments} track(s) -> {target} (dry run)"
        else:
            return f"⊘ {name}: Skipped ({self.reason})"
