"""Unit tests for catalog sources."""

import json

import pytest
import yaml

from mediainspector.core.catalog import (
    FileCatalog,
    SampleCatalog,
    media_file_from_record,
    rebase_path,
)
from mediainspector.errors import InvalidMediaFileError
from mediainspector.models.file import BYTES_PER_GB


class TestRebasePath:
    def test_rebases_under_root(self):
        assert rebase_path("/movies/A.mkv", "/movies", "/mnt/media") == "/mnt/media/A.mkv"

    def test_trailing_slash_on_directory(self):
        assert rebase_path("/movies/A.mkv", "/movies", "/mnt/media/") == "/mnt/media/A.mkv"

    def test_path_outside_root_is_kept(self):
        assert rebase_path("/other/A.mkv", "/movies", "/mnt/media") == "/other/A.mkv"

    def test_similar_prefix_is_not_rebased(self):
        assert rebase_path("/movies2/A.mkv", "/movies", "/mnt") == "/movies2/A.mkv"


class TestMediaFileFromRecord:
    def test_normalizes_languages(self):
        file = media_file_from_record(
            {
                "path": "/movies/A.mkv",
                "size": 1024,
                "format": "matroska,webm",
                "audioTracks": [{"codec": "aac", "language": "unknown", "channels": 2}],
                "subtitleTracks": [{"codec": "subrip"}],
            }
        )

        assert file.name == "A.mkv"
        assert file.audio_tracks[0].is_unknown
        assert file.subtitle_tracks[0].is_unknown

    def test_missing_field(self):
        with pytest.raises(InvalidMediaFileError, match="format"):
            media_file_from_record({"path": "/movies/A.mkv", "size": 1})

    def test_size_gb_must_agree(self):
        with pytest.raises(InvalidMediaFileError, match="disagrees"):
            media_file_from_record(
                {"path": "/movies/A.mkv", "size": 2 * BYTES_PER_GB, "sizeGB": 3.0, "format": "avi"}
            )

    def test_negative_size_fails(self):
        with pytest.raises(InvalidMediaFileError):
            media_file_from_record({"path": "/movies/A.mkv", "size": -1, "format": "avi"})


class TestSampleCatalog:
    def test_scan_rebases_paths(self):
        files = SampleCatalog().scan("/media/films")

        assert len(files) == 7
        assert files[0].path == "/media/films/The Matrix (1999).mkv"
        assert all(f.path.startswith("/media/films/") for f in files)

    def test_sample_sizes_agree(self):
        blade_runner = SampleCatalog().scan("/movies")[1]

        assert blade_runner.name == "Blade Runner 2049 (2017).mkv"
        assert f"{blade_runner.size_gb:.1f}" == "25.8"

    def test_empty_directory_rejected(self):
        with pytest.raises(ValueError):
            SampleCatalog().scan("  ")


class TestFileCatalog:
    RECORDS = [
        {
            "name": "Show.mkv",
            "path": "/library/Show.mkv",
            "size": BYTES_PER_GB,
            "format": "matroska",
            "audioTracks": [{"codec": "aac", "language": "und"}],
        }
    ]

    def test_yaml_catalog(self, tmp_path):
        catalog_file = tmp_path / "catalog.yaml"
        catalog_file.write_text(yaml.safe_dump({"files": self.RECORDS}))

        files = FileCatalog(catalog_file, root="/library").scan("/srv/tv")

        assert [f.path for f in files] == ["/srv/tv/Show.mkv"]
        assert files[0].has_unknown_tracks

    def test_json_catalog(self, tmp_path):
        catalog_file = tmp_path / "catalog.json"
        catalog_file.write_text(json.dumps(self.RECORDS))

        files = FileCatalog(catalog_file, root="/library").scan("/library")

        assert files[0].path == "/library/Show.mkv"

    def test_rescan_rereads_file(self, tmp_path):
        catalog_file = tmp_path / "catalog.yaml"
        catalog_file.write_text(yaml.safe_dump(self.RECORDS))
        catalog = FileCatalog(catalog_file, root="/library")
        assert catalog.scan("/library")[0].has_unknown_tracks

        fixed = [dict(self.RECORDS[0], audioTracks=[{"codec": "aac", "language": "eng"}])]
        catalog_file.write_text(yaml.safe_dump(fixed))

        assert not catalog.scan("/library")[0].has_unknown_tracks

    def test_empty_file(self, tmp_path):
        catalog_file = tmp_path / "catalog.yaml"
        catalog_file.write_text("")

        assert FileCatalog(catalog_file).scan("/movies") == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileCatalog(tmp_path / "nope.yaml").scan("/movies")

    def test_non_list_catalog(self, tmp_path):
        catalog_file = tmp_path / "catalog.yaml"
        catalog_file.write_text("just a string\n")

        with pytest.raises(InvalidMediaFileError):
            FileCatalog(catalog_file).scan("/movies")
