"""Unit tests for the command-line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mediainspector import __version__
from mediainspector.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def test_scan_lists_recommendations(runner):
    result = runner.invoke(cli, ["scan", "/media/movies"], obj={})

    assert result.exit_code == 0
    assert "Found 7 file(s)" in result.output
    assert "[remux] Fix unknown language tags on 1 audio / 1 subtitle track(s)" in result.output
    assert "[reencode] Large file size (25.8 GB)" in result.output
    assert "[reencode] Unsupported container format (asf)" in result.output
    assert "5 file(s) need attention" in result.output


def test_scan_issues_only(runner):
    result = runner.invoke(cli, ["scan", "--issues-only", "/media/movies"], obj={})

    assert result.exit_code == 0
    assert "Dune (2021).mkv" not in result.output
    assert "Interstellar (2014).mkv" in result.output


def test_remux_dry_run(runner):
    result = runner.invoke(
        cli,
        [
            "remux",
            "/media/movies",
            "/media/movies/Interstellar (2014).mkv",
            "--set", "subtitle_1=eng",
            "--set", "audio_0=eng",
        ],
        obj={},
    )

    assert result.exit_code == 0
    assert "Would retag 2 track(s) -> Interstellar (2014)_remuxed.mkv" in result.output


def test_remux_rejects_tagged_track(runner):
    result = runner.invoke(
        cli,
        ["remux", "/media/movies", "/media/movies/Interstellar (2014).mkv", "--set", "audio_1=fre"],
        obj={},
    )

    assert result.exit_code == 1
    assert "already tagged" in result.output


def test_remux_without_choices_needs_leave_unknown(runner):
    args = ["remux", "/media/movies", "/media/movies/Interstellar (2014).mkv"]

    refused = runner.invoke(cli, args, obj={})
    confirmed = runner.invoke(cli, args + ["--leave-unknown"], obj={})

    assert refused.exit_code == 1
    assert confirmed.exit_code == 0
    assert "Skipped (left_unknown)" in confirmed.output


def test_remux_bad_set_syntax(runner):
    result = runner.invoke(
        cli, ["remux", "/media/movies", "/media/movies/Interstellar (2014).mkv", "--set", "audio_0"], obj={}
    )

    assert result.exit_code == 2


def test_reencode_prints_url(runner):
    result = runner.invoke(
        cli, ["reencode", "--no-browser", "/media/movies", "/media/movies/Old Movie (1995).avi"], obj={}
    )

    assert result.exit_code == 0
    assert "http://localhost:8080/?source=%2Fmedia%2Fmovies%2FOld%20Movie%20%281995%29.avi" in result.output


def test_languages(runner):
    result = runner.invoke(cli, ["languages"], obj={})

    assert "jpn  Japanese" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["version"], obj={})

    assert f"MediaInspector v{__version__}" in result.output


def test_remux_rejects_repeated_set_key(runner):
    result = runner.invoke(
        cli,
        [
            "remux",
            "/media/movies",
            "/media/movies/The Matrix (1999).mkv",
            "--set", "audio_2=eng",
            "--set", "audio_2=jpn",
        ],
        obj={},
    )

    assert result.exit_code == 2
    assert "audio_2 is set more than once" in result.output


def test_remux_without_ffmpeg_reports_error(runner, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("execution:\n  dry_run: false\n")

    with patch("shutil.which", return_value=None):
        result = runner.invoke(
            cli,
            [
                "-c", str(config_file),
                "remux",
                "/media/movies",
                "/media/movies/The Matrix (1999).mkv",
                "--set", "audio_2=eng",
            ],
            obj={},
        )

    assert result.exit_code == 1
    assert not isinstance(result.exception, RuntimeError)
    assert "ffmpeg not found in PATH" in result.output
