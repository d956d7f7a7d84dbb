"""Audio and subtitle track data models."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from mediainspector.errors import InvalidMediaFileError
from mediainspector.utils.language import language_name, normalize_language_tag

# Sentinel for tracks without a usable language tag
UNKNOWN_LANGUAGE = None


class TrackKind(str, Enum):
    """Kinds of tracks a remediation plan can address."""

    AUDIO = "audio"
    SUBTITLE = "subtitle"

    @property
    def order(self) -> int:
        """Sort position (audio before subtitle)."""
        return 0 if self is TrackKind.AUDIO else 1


@dataclass(frozen=True)
class Track:
    """A single stream within a media container.

    Tracks are identified by their position within their kind's sequence,
    not by content: two tracks may share codec and language. Tracks are
    immutable; retag by replacing the track (``dataclasses.replace``), which
    normalizes the new tag again.
    """

    kind: ClassVar[TrackKind]

    codec: str  # Codec name (e.g., "aac", "subrip")
    language: Optional[str] = None  # ISO 639-2 code, None when unknown

    def __post_init__(self) -> None:
        if not isinstance(self.codec, str) or not self.codec.strip():
            raise InvalidMediaFileError("Track codec must be a non-empty string")
        object.__setattr__(self, "language", normalize_language_tag(self.language))

    @property
    def is_unknown(self) -> bool:
        """Whether the track's language is Unknown."""
        return self.language is UNKNOWN_LANGUAGE

    def codec_matches(self, codec: str) -> bool:
        """Case-insensitive codec comparison."""
        return self.codec.lower() == codec.lower()


@dataclass(frozen=True)
class AudioTrack(Track):
    """Represents an audio track in a media file."""

    kind: ClassVar[TrackKind] = TrackKind.AUDIO

    channels: Optional[int] = None  # Number of audio channels

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.channels is not None and (
            isinstance(self.channels, bool) or not isinstance(self.channels, int) or self.channels <= 0
        ):
            raise InvalidMediaFileError(
                f"Audio channel count must be a positive integer, got {self.channels!r}"
            )

    def __str__(self) -> str:
        """Human-readable representation."""
        channels_part = f" {self.channels}ch" if self.channels else ""
        return f"{language_name(self.language)} {self.codec.upper()}{channels_part}"


@dataclass(frozen=True)
class SubtitleTrack(Track):
    """Represents a subtitle track in a media file."""

    kind: ClassVar[TrackKind] = TrackKind.SUBTITLE

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{language_name(self.language)} {self.codec.upper()}"
