"""Remediation policy: decide what a media file needs."""

from types import MappingProxyType
from typing import Iterable, Optional

from mediainspector.config import InspectionConfig
from mediainspector.models.file import MediaFile
from mediainspector.models.plan import Classification, Reason, ReasonRule, RemediationAction
from mediainspector.models.track import TrackKind


class Inspector:
    """Classify media files into remediation actions.

    Rules are evaluated independently, in this order:

    1. Unknown language: any audio or subtitle track without a language tag
       needs a remux.
    2. File size: files strictly larger than ``max_size_gb`` need a re-encode.
    3. Container: formats containing none of the supported substrings need a
       re-encode.

    Classification is pure: no I/O, no state, same input gives same output.
    Container fitness is a substring match on the raw prober format string
    (e.g. "matroska,webm"), not a real format taxonomy.
    """

    def __init__(
        self,
        max_size_gb: float = 20.0,
        supported_containers: Iterable[str] = ("matroska", "mp4", "mov"),
    ):
        self.max_size_gb = max_size_gb
        self.supported_containers = tuple(c.lower() for c in supported_containers)

    @classmethod
    def from_config(cls, config: InspectionConfig) -> "Inspector":
        """Build an inspector from inspection settings."""
        return cls(
            max_size_gb=config.max_size_gb,
            supported_containers=config.supported_containers,
        )

    def classify(self, file: MediaFile) -> Classification:
        """Compute the actions a file requires and why.

        Args:
            file: Media file descriptor

        Returns:
            Classification with the action set and per-action ordered reasons
        """
        reasons: dict[RemediationAction, list[Reason]] = {}

        # Rule 1: unknown language tags
        unknown_audio = len(file.unknown_track_indexes(TrackKind.AUDIO))
        unknown_subtitles = len(file.unknown_track_indexes(TrackKind.SUBTITLE))
        if unknown_audio or unknown_subtitles:
            reasons.setdefault(RemediationAction.REMUX, []).append(
                Reason(
                    ReasonRule.UNKNOWN_LANGUAGE,
                    f"Fix unknown language tags on {unknown_audio} audio / "
                    f"{unknown_subtitles} subtitle track(s)",
                )
            )

        # Rule 2: file size
        size_gb = file.size_gb
        if size_gb > self.max_size_gb:
            reasons.setdefault(RemediationAction.REENCODE, []).append(
                Reason(ReasonRule.FILE_SIZE, f"Large file size ({size_gb:.1f} GB)")
            )

        # Rule 3: container format
        format_name = file.format.lower()
        if not any(container in format_name for container in self.supported_containers):
            reasons.setdefault(RemediationAction.REENCODE, []).append(
                Reason(ReasonRule.CONTAINER_FORMAT, f"Unsupported container format ({file.format})")
            )

        return Classification(
            actions=frozenset(reasons),
            reasons=MappingProxyType({action: tuple(items) for action, items in reasons.items()}),
        )


_DEFAULT_INSPECTOR = Inspector()


def classify(file: MediaFile, inspector: Optional[Inspector] = None) -> Classification:
    """Classify a file with the given inspector, or the default rules."""
    return (inspector or _DEFAULT_INSPECTOR).classify(file)
