"""Remediation workflow: scan, inspect, plan, execute, refresh."""

import time
from pathlib import Path
from typing import Mapping, Optional

from mediainspector.config import Config
from mediainspector.core.catalog import CatalogSource, FileCatalog, SampleCatalog
from mediainspector.core.executor import DryRunExecutor, PlanExecutor, get_executor
from mediainspector.core.inflight import InFlightRegistry
from mediainspector.core.inspector import Inspector
from mediainspector.core.launcher import ReencodeLauncher
from mediainspector.core.planner import build_plan
from mediainspector.errors import UnknownFileError
from mediainspector.models.file import FileReport, RemuxResult
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)


def build_catalog(config: Config) -> CatalogSource:
    """Catalog source selected by configuration."""
    if config.catalog.file:
        return FileCatalog(config.catalog.file, root=config.catalog.root)
    return SampleCatalog()


class RemediationService:
    """Orchestrates inspection and remediation of a media catalog."""

    def __init__(
        self,
        config: Config,
        catalog: Optional[CatalogSource] = None,
        executor: Optional[PlanExecutor] = None,
        launcher: Optional[ReencodeLauncher] = None,
        in_flight: Optional[InFlightRegistry] = None,
    ):
        """Initialize the service.

        Args:
            config: Application configuration
            catalog: Catalog source (defaults to the configured one)
            executor: Plan executor (defaults to the configured one)
            launcher: Re-encode launcher (defaults to the configured HandBrake URL)
            in_flight: Registry of pending plans, shared between callers
        """
        self.config = config
        self.catalog = catalog or build_catalog(config)
        self.inspector = Inspector.from_config(config.inspection)
        self._executor = executor
        self.launcher = launcher or ReencodeLauncher(config.reencode.handbrake_url)
        self.in_flight = in_flight or InFlightRegistry()
        # directory -> path -> report from the latest scan of that directory
        self._reports: dict[str, dict[str, FileReport]] = {}

    @property
    def executor(self) -> PlanExecutor:
        # Created lazily: the ffmpeg executor fails fast when ffmpeg is missing
        if self._executor is None:
            self._executor = get_executor(
                self.config.execution.dry_run,
                output_suffix=self.config.execution.output_suffix,
                timeout_seconds=self.config.execution.timeout_seconds,
            )
        return self._executor

    def scan(self, directory: str) -> list[FileReport]:
        """Scan a directory and classify every file.

        Args:
            directory: Directory scope for the catalog source

        Returns:
            One report per file, in catalog order
        """
        files = self.catalog.scan(directory)
        reports = [FileReport(f, self.inspector.classify(f)) for f in files]
        self._reports[directory] = {r.file.path: r for r in reports}

        logger.info(
            "Library inspected",
            directory=directory,
            total_files=len(reports),
            needs_remux=sum(1 for r in reports if r.needs_remux),
            needs_reencode=sum(1 for r in reports if r.needs_reencode),
        )
        return reports

    def find(self, directory: str, file_path: str) -> FileReport:
        """Current report for one file, read fresh from the catalog.

        Raises:
            UnknownFileError: If the path is not in the directory's catalog
        """
        for report in self.scan(directory):
            if report.file.path == file_path:
                return report
        raise UnknownFileError(file_path)

    def cached_report(self, directory: str, file_path: str) -> Optional[FileReport]:
        """Report for a file as of the last scan of its directory, without rescanning."""
        return self._reports.get(directory, {}).get(file_path)

    def remux(
        self,
        directory: str,
        file_path: str,
        languages: Mapping[str, str],
        allow_empty: bool = False,
    ) -> RemuxResult:
        """Fix unknown language tags on one file.

        The plan is validated against the file's current catalog entry, not
        an earlier scan. Only one plan per path may be in flight.

        Args:
            directory: Directory the file was scanned from
            file_path: Catalog path of the file
            languages: Mapping of "<kind>_<index>" keys to language codes
            allow_empty: Leave unknown tracks untouched when nothing is requested

        Returns:
            RemuxResult describing what was done

        Raises:
            UnknownFileError: File is not in the catalog
            InvalidTargetError: Bad track reference or language code
            EmptyPlanError: Nothing requested for a file with unknown tracks
            PlanInFlightError: Another plan for the file is still pending
            ExecutionFailure: The executor failed; no retry is attempted
        """
        start_time = time.time()
        report = self.find(directory, file_path)
        plan = build_plan(report.file, languages, allow_empty=allow_empty)

        if plan.is_empty:
            reason = "left_unknown" if report.file.has_unknown_tracks else "nothing_to_remux"
            logger.info("No language changes to apply", file=file_path, reason=reason)
            return RemuxResult(status="skipped", file_path=file_path, reason=reason)

        logger.info(
            "Remediation plan built",
            file=file_path,
            assignments=[str(a) for a in plan.assignments],
        )

        with self.in_flight.hold(file_path):
            output = self.executor.apply(plan, Path(file_path))

        duration_ms = int((time.time() - start_time) * 1000)
        dry_run = isinstance(self.executor, DryRunExecutor)

        logger.info(
            "Remux complete" if not dry_run else "Remux simulated",
            file=file_path,
            output=str(output),
            duration_ms=duration_ms,
        )

        # Refresh so callers see the catalog after remediation
        self.scan(directory)

        return RemuxResult(
            status="dry_run" if dry_run else "success",
            file_path=file_path,
            output_path=output,
            assignments=len(plan),
            report=self.cached_report(directory, file_path),
        )

    def reencode(self, directory: str, file_path: str) -> str:
        """Hand a file to the re-encode tool.

        Returns:
            The handoff URL

        Raises:
            UnknownFileError: File is not in the catalog
        """
        report = self.find(directory, file_path)
        if not report.needs_reencode:
            logger.info("Re-encode requested for file without re-encode reasons", file=file_path)
        return self.launcher.launch(file_path)
