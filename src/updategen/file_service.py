# updategen/file_service.py
# updategen: Builds update and installation packages from a git working tree.
# Copyright (C) 2025 Dank A. Saurus

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY;
# without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Copies project files into a staging directory before they are archived.

Two entry points exist: copy_files() takes an explicit list of relative
paths (the git change set), copy_all_files() walks a fixed set of top-level
directories and files for a full installation. Both apply exclusion rules
and never abort on a single failed copy; only a copied .env that cannot be
sanitized stops the copy.
"""

import os
import shutil
from pathlib import Path

from .exceptions import CopyError, PathError
from .exclusion import should_skip
from .logger import log
from .sanitizer import sanitize_env_file
from .utils import normalize_rel_path

ENV_FILE = ".env"

# Top-level directories copied for a new installation.
INSTALLATION_DIRECTORIES = [
    "app",
    "bootstrap",
    "config",
    "database",
    "lang",
    "public",
    "resources",
    "routes",
    "storage",
    "vendor",
    "tests",
]

# Top-level files copied for a new installation.
INSTALLATION_FILES = [
    ".env",
    ".env.example",
    ".editorconfig",
    ".gitattributes",
    ".gitignore",
    "artisan",
    "composer.json",
    "composer.lock",
    "package.json",
    "package-lock.json",
    "phpunit.xml",
    "README.md",
    "webpack.mix.js",
    "vite.config.js",
]


def is_nested(path: str | Path, parent: str | Path) -> bool:
    """True when path, once resolved, is parent itself or lies below it."""
    real_path = Path(path).resolve()
    real_parent = Path(parent).resolve()
    return real_path == real_parent or real_parent in real_path.parents


class FileService:
    """Copies files out of one source tree into staging directories."""

    def __init__(
        self,
        source_root: str | Path,
        additional_files: list[str] | None = None,
        sanitize_rules: dict[str, str] | None = None,
        sanitize_env: bool = True,
    ):
        self.source_root = Path(source_root)
        self.additional_files = additional_files or []
        self.sanitize_rules = sanitize_rules or {}
        self.sanitize_env = sanitize_env

    def copy_files(
        self,
        files: list[str],
        destination: str | Path,
        exclude_paths: list[str] | None = None,
        include_additional: bool = True,
    ) -> int:
        """
        Copies each listed path from the source root to the same relative
        path under destination and returns how many entries were copied.

        Directories are copied recursively and count as one entry. A path
        listed more than once is copied and counted once. With
        include_additional, the configured additional files are copied too,
        regardless of the exclusion rules.
        """
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        exclude_paths = exclude_paths or []
        copied: set[str] = set()

        for file in files:
            rel_path = normalize_rel_path(file)
            if not rel_path or rel_path in copied or should_skip(rel_path, exclude_paths):
                continue
            if self._safe_copy(self.source_root / rel_path, destination / rel_path):
                self._after_copy(rel_path, destination)
                copied.add(rel_path)

        additional = self.additional_files if include_additional else []
        for additional_file in additional:
            rel_path = normalize_rel_path(additional_file)
            source = self.source_root / rel_path
            if not rel_path or rel_path in copied or not source.exists():
                continue
            if self._safe_copy(source, destination / rel_path):
                copied.add(rel_path)
                log.info(
                    "Additional file included in update package: %s -> %s",
                    rel_path,
                    destination,
                )

        log.info(
            "Files copied successfully: %d of %d to %s",
            len(copied),
            len(files) + len(additional),
            destination,
        )
        return len(copied)

    def copy_all_files(
        self,
        source: str | Path,
        destination: str | Path,
        exclude_paths: list[str] | None = None,
    ) -> int:
        """
        Copies the installation directories and files from source into
        destination and returns the number of files copied.

        Raises PathError if source is missing or destination resolves to a
        location inside source.
        """
        source = Path(source)
        destination = Path(destination)
        exclude_paths = exclude_paths or []

        if not source.exists():
            raise PathError(f"Source path does not exist: {source}")
        if is_nested(destination, source):
            raise PathError(
                "Destination path cannot be inside source path to prevent infinite loops"
            )

        destination.mkdir(parents=True, exist_ok=True)
        copied_count = 0

        for directory in INSTALLATION_DIRECTORIES:
            source_dir = source / directory
            if source_dir.is_dir() and not should_skip(directory, exclude_paths):
                copied_count += self._copy_directory(
                    source_dir, destination / directory, directory, exclude_paths
                )

        for file in INSTALLATION_FILES:
            source_file = source / file
            if source_file.is_file() and not should_skip(file, exclude_paths):
                if self._safe_copy(source_file, destination / file):
                    self._after_copy(file, destination)
                    copied_count += 1

        log.info(
            "All files copied successfully: %d file(s) from %s to %s",
            copied_count,
            source,
            destination,
        )
        return copied_count

    def _copy_directory(
        self,
        source: Path,
        destination: Path,
        rel_dir: str,
        exclude_paths: list[str],
    ) -> int:
        # Checked at every level: the destination may have been created
        # inside this subtree after the walk started.
        if is_nested(destination, source):
            log.warning("Skipping %s: destination %s lies inside it", source, destination)
            return 0

        try:
            destination.mkdir(parents=True, exist_ok=True)
            with os.scandir(source) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            log.warning("Failed to read directory %s: %s", source, e)
            return 0

        copied_count = 0
        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}"
            if should_skip(rel_path, exclude_paths):
                continue
            if entry.is_symlink() and entry.is_dir():
                log.warning("Skipping symlinked directory %s", entry.path)
                continue
            if entry.is_dir(follow_symlinks=False):
                copied_count += self._copy_directory(
                    Path(entry.path), destination / entry.name, rel_path, exclude_paths
                )
            elif self._safe_copy(Path(entry.path), destination / entry.name):
                copied_count += 1
        return copied_count

    def _after_copy(self, rel_path: str, destination: Path) -> None:
        """
        Sanitizes a copied top-level .env file, never the source.

        If the copy cannot be sanitized it is deleted and CopyError is raised,
        so a raw .env never reaches an archive.
        """
        if rel_path != ENV_FILE or not self.sanitize_env or not self.sanitize_rules:
            return
        copied = destination / ENV_FILE
        try:
            sanitize_env_file(copied, self.sanitize_rules)
        except OSError as e:
            log.error("Failed to sanitize %s: %s", copied, e)
            try:
                copied.unlink(missing_ok=True)
            except OSError as unlink_error:
                log.error("Failed to remove unsanitized %s: %s", copied, unlink_error)
            raise CopyError(f"Failed to sanitize copied environment file: {e}") from e

    def _safe_copy(self, source: Path, destination: Path) -> bool:
        """Copies a file or a directory tree, logging instead of raising."""
        try:
            if source.is_file():
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
                return True
            if source.is_dir():
                if is_nested(destination, source):
                    log.warning(
                        "Skipping %s: destination %s lies inside it", source, destination
                    )
                    return False
                shutil.copytree(source, destination, dirs_exist_ok=True)
                return True
            log.warning("Failed to copy %s: source does not exist", source)
        except (OSError, shutil.Error) as e:
            log.warning("Failed to copy %s to %s: %s", source, destination, e)
        return False

    def create_version_info(
        self, current_version: str, update_version: str, file_path: str | Path
    ) -> Path:
        """Writes the version_info file read by the installer on the other side."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = (
            "<?php\nreturn array("
            f"'current_version' => '{current_version}',"
            f"'update_version' => '{update_version}');"
        )
        path.write_text(content, encoding="utf-8")

        log.info(
            "Version info file created: %s (%s -> %s)",
            path,
            current_version,
            update_version,
        )
        return path

    def cleanup(self, paths: list[str | Path]) -> None:
        """Deletes temporary files and directories. Failures are only logged."""
        for item in paths:
            path = Path(item)
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                elif path.exists() or path.is_symlink():
                    path.unlink()
            except OSError as e:
                log.warning("Failed to clean up %s: %s", path, e)

        log.info("Cleanup completed: %s", ", ".join(str(p) for p in paths))
