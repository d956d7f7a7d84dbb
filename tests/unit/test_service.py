"""Unit tests for the remediation service and in-flight registry."""

import copy
from pathlib import Path

import pytest

from mediainspector.core.catalog import SAMPLE_RECORDS, RecordCatalog
from mediainspector.core.executor import PlanExecutor
from mediainspector.core.inflight import InFlightRegistry
from mediainspector.core.launcher import ReencodeLauncher, build_handoff_url
from mediainspector.core.service import RemediationService
from mediainspector.errors import (
    EmptyPlanError,
    ExecutionFailure,
    InvalidTargetError,
    PlanInFlightError,
    UnknownFileError,
)

DIRECTORY = "/media/movies"
MATRIX = "/media/movies/The Matrix (1999).mkv"


class RecordingExecutor(PlanExecutor):
    """Executor that records plans instead of running ffmpeg."""

    def __init__(self, error=None):
        super().__init__()
        self.plans = []
        self.error = error

    def apply(self, plan, source):
        self.plans.append((plan, source))
        if self.error:
            raise self.error
        return self.output_path(source)


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def service(default_config, executor):
    return RemediationService(
        default_config,
        executor=executor,
        launcher=ReencodeLauncher(default_config.reencode.handbrake_url, open_browser=False),
    )


class TestInFlightRegistry:
    def test_second_acquire_rejected(self):
        registry = InFlightRegistry()
        registry.acquire("/a.mkv")

        with pytest.raises(PlanInFlightError):
            registry.acquire("/a.mkv")

        registry.acquire("/b.mkv")
        assert registry.is_in_flight("/b.mkv")

    def test_hold_releases_on_error(self):
        registry = InFlightRegistry()

        with pytest.raises(RuntimeError):
            with registry.hold("/a.mkv"):
                assert registry.is_in_flight("/a.mkv")
                raise RuntimeError("abandoned")

        assert not registry.is_in_flight("/a.mkv")


class TestScan:
    def test_scan_classifies_sample_library(self, service):
        reports = {r.file.name: r for r in service.scan(DIRECTORY)}

        assert reports["The Matrix (1999).mkv"].needs_remux
        assert not reports["The Matrix (1999).mkv"].needs_reencode
        assert reports["Blade Runner 2049 (2017).mkv"].needs_reencode
        assert not reports["Inception (2010).mp4"].classification.needs_attention
        assert not reports["Dune (2021).mkv"].classification.needs_attention
        assert reports["Interstellar (2014).mkv"].needs_remux
        assert reports["Interstellar (2014).mkv"].needs_reencode
        assert reports["Old Movie (1995).avi"].needs_reencode
        assert reports["Documentary (2020).wmv"].needs_remux

    def test_find_unknown_file(self, service):
        with pytest.raises(UnknownFileError):
            service.find(DIRECTORY, "/media/movies/Missing.mkv")


class TestRemux:
    def test_remux_hands_canonical_plan_to_executor(self, service, executor):
        result = service.remux(DIRECTORY, MATRIX, {"subtitle_2": "eng", "audio_2": "eng"})

        assert result.status == "success"
        assert result.assignments == 2
        assert result.output_path == Path("/media/movies/The Matrix (1999)_remuxed.mkv")

        plan, source = executor.plans[0]
        assert source == Path(MATRIX)
        assert [a.key for a in plan.assignments] == ["audio_2", "subtitle_2"]

    def test_dry_run_by_default(self, default_config):
        service = RemediationService(default_config)

        result = service.remux(DIRECTORY, MATRIX, {"audio_2": "eng"})

        assert result.status == "dry_run"
        assert result.output_path.name == "The Matrix (1999)_remuxed.mkv"

    def test_tagged_track_is_refused(self, service, executor):
        with pytest.raises(InvalidTargetError):
            service.remux(DIRECTORY, MATRIX, {"audio_0": "fre"})

        assert executor.plans == []

    def test_empty_request_requires_opt_out(self, service, executor):
        with pytest.raises(EmptyPlanError):
            service.remux(DIRECTORY, MATRIX, {})

        result = service.remux(DIRECTORY, MATRIX, {}, allow_empty=True)

        assert result.status == "skipped"
        assert result.reason == "left_unknown"
        assert executor.plans == []

    def test_nothing_to_remux(self, service):
        result = service.remux(DIRECTORY, "/media/movies/Dune (2021).mkv", {})

        assert result.status == "skipped"
        assert result.reason == "nothing_to_remux"

    def test_second_plan_while_in_flight_is_rejected(self, service, executor):
        service.in_flight.acquire(MATRIX)

        with pytest.raises(PlanInFlightError):
            service.remux(DIRECTORY, MATRIX, {"audio_2": "eng"})

        assert executor.plans == []

    def test_execution_failure_propagates_and_releases_marker(self, default_config):
        executor = RecordingExecutor(error=ExecutionFailure("ffmpeg exited with status 1", path=MATRIX))
        service = RemediationService(default_config, executor=executor)

        with pytest.raises(ExecutionFailure):
            service.remux(DIRECTORY, MATRIX, {"audio_2": "eng"})

        assert len(executor.plans) == 1
        assert not service.in_flight.is_in_flight(MATRIX)

    def test_catalog_refreshed_after_remux(self, default_config):
        """The result and the cache carry the file as the catalog reports it after the fix."""
        catalog = RecordCatalog(copy.deepcopy(SAMPLE_RECORDS))

        class RetaggingExecutor(RecordingExecutor):
            def apply(self, plan, source):
                matrix = next(r for r in catalog.records if r["name"] == "The Matrix (1999).mkv")
                for assignment in plan.assignments:
                    matrix[f"{assignment.kind.value}Tracks"][assignment.index]["language"] = assignment.language
                return super().apply(plan, source)

        service = RemediationService(default_config, catalog=catalog, executor=RetaggingExecutor())
        service.scan(DIRECTORY)
        assert service.cached_report(DIRECTORY, MATRIX).needs_remux

        result = service.remux(DIRECTORY, MATRIX, {"audio_2": "eng", "subtitle_2": "eng"})

        assert result.report is service.cached_report(DIRECTORY, MATRIX)
        assert not result.report.needs_remux
        assert result.report.file.audio_tracks[2].language == "eng"

    def test_cache_is_per_directory(self, service):
        service.scan(DIRECTORY)

        assert service.cached_report(DIRECTORY, MATRIX) is not None
        assert service.cached_report("/elsewhere", MATRIX) is None
        assert service.cached_report(DIRECTORY, "/media/movies/Missing.mkv") is None

    def test_missing_ffmpeg_is_an_execution_failure(self, default_config, monkeypatch):
        default_config.execution.dry_run = False
        monkeypatch.setattr("shutil.which", lambda name: None)
        service = RemediationService(default_config)

        with pytest.raises(ExecutionFailure, match="ffmpeg not found"):
            service.remux(DIRECTORY, MATRIX, {"audio_2": "eng"})

        assert not service.in_flight.is_in_flight(MATRIX)


class TestReencode:
    def test_handoff_url(self):
        url = build_handoff_url("http://localhost:8080/", "/movies/Old Movie (1995).avi")

        assert url == "http://localhost:8080/?source=%2Fmovies%2FOld%20Movie%20%281995%29.avi"

    def test_service_reencode(self, service):
        url = service.reencode(DIRECTORY, "/media/movies/Old Movie (1995).avi")

        assert url.startswith("http://localhost:8080/?source=%2Fmedia%2Fmovies%2FOld")

    def test_launcher_opens_browser(self, monkeypatch):
        opened = []
        monkeypatch.setattr("webbrowser.open_new_tab", lambda url: opened.append(url) or True)

        url = ReencodeLauncher("http://handbrake:5800").launch("/movies/a.avi")

        assert opened == [url]
