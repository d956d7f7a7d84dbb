"""Remediation actions, reasons and plans."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from mediainspector.models.track import TrackKind


class RemediationAction(str, Enum):
    """What a file needs to be fixed."""

    REMUX = "remux"
    REENCODE = "reencode"


class ReasonRule(str, Enum):
    """Inspection rule that produced a reason."""

    UNKNOWN_LANGUAGE = "unknown_language"
    FILE_SIZE = "file_size"
    CONTAINER_FORMAT = "container_format"


@dataclass(frozen=True)
class Reason:
    """Why an action was recommended."""

    rule: ReasonRule
    detail: str

    def __str__(self) -> str:
        return self.detail


@dataclass(frozen=True)
class Classification:
    """Actions a file requires and the ordered reasons for each."""

    actions: frozenset[RemediationAction] = frozenset()
    reasons: Mapping[RemediationAction, tuple[Reason, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def needs_attention(self) -> bool:
        return bool(self.actions)

    def reason_texts(self, action: RemediationAction) -> list[str]:
        """Human-readable reasons for one action."""
        return [str(reason) for reason in self.reasons.get(action, ())]


@dataclass(frozen=True, order=True)
class LanguageAssignment:
    """Set the language of one track, addressed by kind and position."""

    kind: TrackKind
    index: int
    language: str

    @property
    def key(self) -> str:
        """Request key form, e.g. "audio_0"."""
        return f"{self.kind.value}_{self.index}"

    def __str__(self) -> str:
        return f"{self.key}→{self.language}"


@dataclass(frozen=True)
class RemediationPlan:
    """Validated, immutable language corrections for one file.

    Assignments are in canonical order: audio before subtitle, then by index.
    A plan is consumed once; retries build a new plan.
    """

    path: str
    assignments: tuple[LanguageAssignment, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "assignments", tuple(self.assignments))

    @property
    def is_empty(self) -> bool:
        return not self.assignments

    def for_kind(self, kind: TrackKind) -> list[LanguageAssignment]:
        """Assignments addressing one track kind."""
        return [a for a in self.assignments if a.kind is kind]

    def as_mapping(self) -> dict[str, str]:
        """Assignments as a ``{"audio_0": "eng"}`` mapping."""
        return {a.key: a.language for a in self.assignments}

    def __len__(self) -> int:
        return len(self.assignments)
