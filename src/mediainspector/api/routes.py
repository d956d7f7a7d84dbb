"""API routes for scanning and remediation."""

import time
from typing import List

from fastapi import APIRouter, Request

from mediainspector import __version__
from mediainspector.api.models import (
    ErrorResponse,
    FileInfo,
    HealthResponse,
    LanguageOption,
    ReencodeRequest,
    ReencodeResponse,
    RemuxRequest,
    RemuxResponse,
    ScanRequest,
    ScanResponse,
)
from mediainspector.utils.language import LANGUAGE_OPTIONS
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()

# Documented error payloads for the file-level endpoints
FILE_ERRORS = {404: {"model": ErrorResponse}}
REMUX_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Health check endpoint."""
    app_state = request.app.state.mediainspector
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=int(time.time() - app_state.start_time),
    )


@router.get("/languages", response_model=List[LanguageOption])
async def languages():
    """Language codes offered for unknown tracks."""
    return [LanguageOption(code=code, name=name) for code, name in LANGUAGE_OPTIONS.items()]


@router.post("/scan", response_model=ScanResponse)
def scan(request: Request, payload: ScanRequest):
    """Scan a directory and classify every file."""
    service = request.app.state.mediainspector.service
    reports = service.scan(payload.path)

    return ScanResponse(
        path=payload.path,
        total=len(reports),
        files=[FileInfo.from_report(r) for r in reports],
    )


@router.post("/remux", response_model=RemuxResponse, responses=REMUX_ERRORS)
def remux(request: Request, payload: RemuxRequest):
    """Validate a language fix and hand the plan to the executor."""
    service = request.app.state.mediainspector.service

    logger.info(
        "Remux requested",
        file=payload.file_path,
        languages=payload.languages,
        leave_unknown=payload.leave_unknown,
    )

    result = service.remux(
        payload.directory,
        payload.file_path,
        payload.languages,
        allow_empty=payload.leave_unknown,
    )
    return RemuxResponse.from_result(result)


@router.post("/reencode", response_model=ReencodeResponse, responses=FILE_ERRORS)
def reencode(request: Request, payload: ReencodeRequest):
    """Return the handoff URL for the re-encode tool."""
    service = request.app.state.mediainspector.service
    url = service.reencode(payload.directory, payload.file_path)
    return ReencodeResponse(file_path=payload.file_path, url=url)
