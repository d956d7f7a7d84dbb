"""Pydantic models for API requests and responses."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from mediainspector.models.file import FileReport, RemuxResult
from mediainspector.models.plan import RemediationAction


class TrackInfo(BaseModel):
    """One audio or subtitle track."""

    index: int
    codec: str
    language: Optional[str] = None  # None when unknown
    channels: Optional[int] = None


class ReasonInfo(BaseModel):
    """Structured reason for a recommended action."""

    rule: str
    detail: str


class FileInfo(BaseModel):
    """A scanned file with its recommendations."""

    name: str
    path: str
    size: int
    sizeGB: float
    format: str
    duration: float
    audioTracks: List[TrackInfo]
    subtitleTracks: List[TrackInfo]
    actions: List[Literal["remux", "reencode"]]
    reasons: Dict[str, List[ReasonInfo]]

    @classmethod
    def from_report(cls, report: FileReport) -> "FileInfo":
        file = report.file
        classification = report.classification
        # Stable action order for clients
        actions = [a for a in (RemediationAction.REMUX, RemediationAction.REENCODE) if a in classification.actions]

        return cls(
            name=file.name,
            path=file.path,
            size=file.size,
            sizeGB=round(file.size_gb, 1),
            format=file.format,
            duration=file.duration,
            audioTracks=[
                TrackInfo(index=i, codec=t.codec, language=t.language, channels=t.channels)
                for i, t in enumerate(file.audio_tracks)
            ],
            subtitleTracks=[
                TrackInfo(index=i, codec=t.codec, language=t.language)
                for i, t in enumerate(file.subtitle_tracks)
            ],
            actions=[a.value for a in actions],
            reasons={
                a.value: [ReasonInfo(rule=r.rule.value, detail=r.detail) for r in classification.reasons[a]]
                for a in actions
            },
        )


class ScanRequest(BaseModel):
    """Directory scan request."""

    path: str = Field(..., min_length=1, description="Directory to scan")


class ScanResponse(BaseModel):
    """Directory scan response."""

    path: str
    total: int
    files: List[FileInfo]


class RemuxRequest(BaseModel):
    """Language fix request for one file."""

    directory: str = Field(..., min_length=1, description="Directory the file was scanned from")
    file_path: str = Field(..., min_length=1, description="Catalog path of the file")
    languages: Dict[str, str] = Field(
        default_factory=dict, description='Track key to language code, e.g. {"audio_0": "eng"}'
    )
    leave_unknown: bool = Field(
        default=False, description="Confirm leaving unknown tracks untouched"
    )


class RemuxResponse(BaseModel):
    """Result of a language fix."""

    status: Literal["success", "dry_run", "skipped"]
    file_path: str
    output_path: Optional[str] = None
    assignments: int = 0
    reason: Optional[str] = None
    file: Optional[FileInfo] = None  # Refreshed catalog entry

    @classmethod
    def from_result(cls, result: RemuxResult) -> "RemuxResponse":
        return cls(
            status=result.status,
            file_path=result.file_path,
            output_path=str(result.output_path) if result.output_path else None,
            assignments=result.assignments,
            reason=result.reason,
            file=FileInfo.from_report(result.report) if result.report else None,
        )


class ReencodeRequest(BaseModel):
    """Re-encode handoff request."""

    directory: str = Field(..., min_length=1)
    file_path: str = Field(..., min_length=1)


class ReencodeResponse(BaseModel):
    """Re-encode handoff response."""

    file_path: str
    url: str


class LanguageOption(BaseModel):
    """Selectable language."""

    code: str
    name: str


class ErrorResponse(BaseModel):
    """Error payload."""

    status: Literal["error"] = "error"
    error: str
    message: str
    key: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str
    uptime_seconds: int
