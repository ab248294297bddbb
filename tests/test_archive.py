# tests/test_archive.py
"""
Tests for ZIP creation in updategen/archive.py.
"""

import zipfile

import pytest

from updategen.archive import ArchiveBuilder
from updategen.exceptions import ArchiveError


@pytest.fixture
def builder():
    return ArchiveBuilder()


@pytest.fixture
def staging(tmp_path):
    root = tmp_path / "staging"
    (root / "app" / "Models").mkdir(parents=True)
    (root / "app" / "Models" / "User.php").write_text("<?php // user", encoding="utf-8")
    (root / "composer.json").write_text("{}", encoding="utf-8")
    (root / "storage" / "logs").mkdir(parents=True)
    return root


class TestCreateZip:
    """Test suite for ArchiveBuilder.create_zip."""

    def test_preserves_relative_paths_and_empty_directories(
        self, builder, staging, tmp_path
    ):
        target = builder.create_zip(staging, tmp_path / "out" / "package.zip")

        with zipfile.ZipFile(target) as zf:
            names = zf.namelist()
            assert "app/Models/User.php" in names
            assert "composer.json" in names
            assert "storage/logs/" in names
            assert zf.read("app/Models/User.php") == b"<?php // user"
            assert zf.testzip() is None

    def test_replaces_existing_archive(self, builder, staging, tmp_path):
        target = tmp_path / "package.zip"
        target.write_bytes(b"not a zip")
        builder.create_zip(staging, target)
        assert zipfile.is_zipfile(target)

    def test_archive_inside_source_is_not_added_to_itself(self, builder, staging):
        target = builder.create_zip(staging, staging / "self.zip")
        with zipfile.ZipFile(target) as zf:
            assert "self.zip" not in zf.namelist()

    def test_missing_source(self, builder, tmp_path):
        with pytest.raises(ArchiveError, match="does not exist"):
            builder.create_zip(tmp_path / "missing", tmp_path / "package.zip")
        assert not (tmp_path / "package.zip").exists()

    def test_write_failure(self, builder, staging, tmp_path, mocker):
        mocker.patch(
            "updategen.archive.zipfile.ZipFile", side_effect=OSError("read-only")
        )
        with pytest.raises(ArchiveError, match="Failed to create ZIP archive"):
            builder.create_zip(staging, tmp_path / "package.zip")


class TestCreateNestedZip:
    """Test suite for ArchiveBuilder.create_nested_zip."""

    def test_contains_exactly_two_entries(self, builder, staging, tmp_path):
        inner = builder.create_zip(staging, tmp_path / "inner.zip")
        info = tmp_path / "info.php"
        info.write_text("<?php return array();", encoding="utf-8")

        outer = builder.create_nested_zip(inner, info, tmp_path / "Update 1-to-2.zip")

        with zipfile.ZipFile(outer) as zf:
            assert sorted(zf.namelist()) == ["source_code.zip", "version_info.php"]
            assert zf.read("source_code.zip") == inner.read_bytes()
            assert zf.read("version_info.php") == b"<?php return array();"

    def test_missing_inner_archive(self, builder, tmp_path):
        info = tmp_path / "info.php"
        info.write_text("x", encoding="utf-8")
        with pytest.raises(ArchiveError, match="Source ZIP does not exist"):
            builder.create_nested_zip(tmp_path / "inner.zip", info, tmp_path / "o.zip")

    def test_missing_version_info(self, builder, staging, tmp_path):
        inner = builder.create_zip(staging, tmp_path / "inner.zip")
        with pytest.raises(ArchiveError, match="Version info file does not exist"):
            builder.create_nested_zip(inner, tmp_path / "info.php", tmp_path / "o.zip")
        assert not (tmp_path / "o.zip").exists()
