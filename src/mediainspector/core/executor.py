"""Executors applying remediation plans to media files.

Every executor honors the same contract:

* The plan is applied to a copy of the source, never in place.
* The copy's track languages reflect exactly the plan's assignments; tracks
  not named in the plan keep their tags.
* Applying the same plan twice to the same source yields equivalent metadata
  (streams are copied, never re-encoded).
* On failure the source is untouched and no partial output exists under the
  final name: output is written to a hidden temp file in the destination
  directory and renamed into place only on success.
"""

import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from mediainspector.errors import ExecutionFailure
from mediainspector.models.plan import RemediationPlan
from mediainspector.models.track import TrackKind
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)

# ffmpeg stream specifier per track kind
_STREAM_SPECIFIERS = {TrackKind.AUDIO: "a", TrackKind.SUBTITLE: "s"}


def remuxed_path(source: Path, suffix: str = "_remuxed") -> Path:
    """Output path for the remuxed copy, e.g. ``Movie_remuxed.mkv``."""
    return source.with_name(f"{source.stem}{suffix}{source.suffix}")


def temp_path(output: Path) -> Path:
    """Hidden in-progress path in the output's directory.

    The media extension stays last, since ffmpeg picks the output muxer from it.
    """
    return output.parent / f".{output.stem}.tmp{output.suffix}"


def build_remux_command(
    ffmpeg_path: str, plan: RemediationPlan, source: Path, output: Path
) -> list[str]:
    """Build the ffmpeg command that retags languages with a stream copy.

    Args:
        ffmpeg_path: ffmpeg executable
        plan: Plan to apply
        source: Source media file
        output: Destination file

    Returns:
        Command list for subprocess
    """
    cmd = [
        ffmpeg_path,
        "-hide_banner",
        "-loglevel", "error",
        "-i", str(source),
        "-map", "0",  # Keep every stream
        "-c", "copy",  # No re-encode
    ]

    for assignment in plan.assignments:
        specifier = _STREAM_SPECIFIERS[assignment.kind]
        cmd.extend(
            [f"-metadata:s:{specifier}:{assignment.index}", f"language={assignment.language}"]
        )

    cmd.extend(["-y", str(output)])
    return cmd


class PlanExecutor(ABC):
    """Applies a remediation plan to a copy of a media file."""

    def __init__(self, output_suffix: str = "_remuxed"):
        self.output_suffix = output_suffix

    def output_path(self, source: Path) -> Path:
        """Final name of the remediated copy."""
        return remuxed_path(source, self.output_suffix)

    @abstractmethod
    def apply(self, plan: RemediationPlan, source: Path) -> Path:
        """Apply a plan to a copy of ``source``.

        Args:
            plan: Validated plan for ``source``
            source: Path to the source media file

        Returns:
            Path of the remediated copy

        Raises:
            ExecutionFailure: If the plan could not be applied
        """


class DryRunExecutor(PlanExecutor):
    """Logs the remux command it would run and touches nothing."""

    def apply(self, plan: RemediationPlan, source: Path) -> Path:
        output = self.output_path(source)
        cmd = build_remux_command("ffmpeg", plan, source, output)

        logger.info(
            "DRY RUN: Would remux file",
            file=str(source),
            output=str(output),
            assignments=plan.as_mapping(),
            command=" ".join(cmd),
        )
        return output


class FFmpegRemuxExecutor(PlanExecutor):
    """Executor remuxing with ffmpeg stream copy.

    Process:
    1. Check disk space (need at least the source size free)
    2. Remux into a hidden temp file next to the output
    3. Verify the temp file is non-empty
    4. Atomic rename of temp onto the final output name
    5. Remove the temp file on any failure
    """

    def __init__(self, output_suffix: str = "_remuxed", timeout_seconds: int = 300):
        """Initialize the executor.

        Args:
            output_suffix: Suffix for the remuxed copy's file name
            timeout_seconds: Maximum time for the ffmpeg run
        """
        super().__init__(output_suffix)
        self.timeout_seconds = timeout_seconds

        self.ffmpeg_path = shutil.which("ffmpeg")
        if not self.ffmpeg_path:
            raise ExecutionFailure(
                "ffmpeg not found in PATH", detail="ffmpeg is required when dry_run is disabled"
            )

    def _check_disk_space(self, source: Path) -> bool:
        """Check there is room for a full copy of the source."""
        required_space = source.stat().st_size
        available_space = shutil.disk_usage(source.parent).free

        if available_space < required_space:
            logger.error(
                "Insufficient disk space for remux",
                file=str(source),
                required_mb=round(required_space / 1024 / 1024, 2),
                available_mb=round(available_space / 1024 / 1024, 2),
            )
            return False

        return True

    def _cleanup(self, path: Path) -> None:
        try:
            if path.exists():
                path.unlink()
                logger.debug("Cleaned up file", file=str(path))
        except OSError as e:
            logger.warning("Failed to cleanup file", file=str(path), error=str(e))

    def apply(self, plan: RemediationPlan, source: Path) -> Path:
        """Remux ``source`` into its ``_remuxed`` copy with new language tags."""
        if not source.is_file():
            raise ExecutionFailure("Source file not found", path=str(source))

        output = self.output_path(source)
        if output == source:
            raise ExecutionFailure("Output would overwrite the source", path=str(source))

        if not self._check_disk_space(source):
            raise ExecutionFailure("Insufficient disk space", path=str(source))

        temp_file = temp_path(output)
        cmd = build_remux_command(self.ffmpeg_path, plan, source, temp_file)

        logger.info(
            "Remuxing file",
            file=str(source),
            output=str(output),
            assignments=plan.as_mapping(),
        )
        logger.debug("Executing ffmpeg remux", file=str(source), command=cmd)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            logger.error("ffmpeg timeout", file=str(source), timeout=self.timeout_seconds)
            self._cleanup(temp_file)
            raise ExecutionFailure(
                f"ffmpeg timed out after {self.timeout_seconds}s", path=str(source)
            ) from None
        except OSError as e:
            self._cleanup(temp_file)
            raise ExecutionFailure("Could not start ffmpeg", path=str(source), detail=str(e)) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()[-500:]
            logger.error(
                "ffmpeg failed",
                file=str(source),
                returncode=result.returncode,
                stderr=stderr,
            )
            self._cleanup(temp_file)
            raise ExecutionFailure(
                f"ffmpeg exited with status {result.returncode}", path=str(source), detail=stderr
            )

        if not temp_file.exists() or temp_file.stat().st_size == 0:
            logger.error("ffmpeg produced no output", file=str(source))
            self._cleanup(temp_file)
            raise ExecutionFailure("ffmpeg produced no output", path=str(source))

        try:
            temp_file.replace(output)
        except OSError as e:
            self._cleanup(temp_file)
            raise ExecutionFailure("Could not move output into place", path=str(source), detail=str(e)) from e

        logger.info(
            "Successfully remuxed file",
            file=str(source),
            output=str(output),
            assignments=len(plan),
        )
        return output


def get_executor(dry_run: bool, output_suffix: str = "_remuxed", timeout_seconds: int = 300) -> PlanExecutor:
    """Get the executor matching the execution settings.

    Args:
        dry_run: Log commands instead of running ffmpeg
        output_suffix: Suffix for remuxed copies
        timeout_seconds: ffmpeg timeout (ignored for dry runs)

    Returns:
        Executor instance
    """
    if dry_run:
        return DryRunExecutor(output_suffix)
    return FFmpegRemuxExecutor(output_suffix, timeout_seconds=timeout_seconds)
