# updategen/archive.py
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
Writes ZIP archives from staging directories, and the nested update archive
that wraps a source archive together with its version_info file.
"""

import os
import zipfile
from pathlib import Path

from . import config
from .exceptions import ArchiveError
from .logger import log
from .utils import format_bytes


class ArchiveBuilder:
    """Builds standard ZIP containers with the zipfile module."""

    def create_zip(self, source_path: str | Path, zip_path: str | Path) -> Path:
        """
        Archives everything below source_path into zip_path.

        Entry names are relative to source_path; empty directories are kept.
        An existing file at zip_path is replaced.
        """
        source = Path(source_path)
        target = Path(zip_path)
        if not source.is_dir():
            raise ArchiveError(f"Source path does not exist: {source}")

        real_target = target.resolve()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.exists():
                target.unlink()
            with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for root, dirs, files in os.walk(source):
                    dirs.sort()
                    root_path = Path(root)
                    rel_root = root_path.relative_to(source)
                    if rel_root != Path("."):
                        zf.write(root_path, arcname=rel_root.as_posix())
                    for name in sorted(files):
                        file_path = root_path / name
                        # The archive may be written inside the tree it reads.
                        if file_path.resolve() == real_target:
                            continue
                        zf.write(file_path, arcname=(rel_root / name).as_posix())
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ArchiveError(f"Failed to create ZIP archive: {target}. {e}") from e

        if not target.is_file():
            raise ArchiveError(f"ZIP file was not created: {target}")

        log.info(
            "ZIP archive created successfully: %s (%s) from %s",
            target,
            format_bytes(target.stat().st_size),
            source,
        )
        return target

    def create_nested_zip(
        self,
        source_zip_path: str | Path,
        version_info_path: str | Path,
        final_zip_path: str | Path,
    ) -> Path:
        """
        Wraps an inner archive and its version_info file into final_zip_path.

        The result holds exactly two entries named config.SOURCE_ARCHIVE_ENTRY
        and config.VERSION_INFO_ENTRY.
        """
        source_zip = Path(source_zip_path)
        version_info = Path(version_info_path)
        target = Path(final_zip_path)

        if not source_zip.is_file():
            raise ArchiveError(f"Source ZIP does not exist: {source_zip}")
        if not version_info.is_file():
            raise ArchiveError(f"Version info file does not exist: {version_info}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.exists():
                target.unlink()
            with zipfile.ZipFile(target, "w") as zf:
                # Already compressed; store as-is.
                zf.write(
                    source_zip,
                    arcname=config.SOURCE_ARCHIVE_ENTRY,
                    compress_type=zipfile.ZIP_STORED,
                )
                zf.write(
                    version_info,
                    arcname=config.VERSION_INFO_ENTRY,
                    compress_type=zipfile.ZIP_DEFLATED,
                )
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ArchiveError(
                f"Failed to create final ZIP archive: {target}. {e}"
            ) from e

        if not target.is_file():
            raise ArchiveError(f"Final ZIP file was not created: {target}")

        log.info(
            "Nested ZIP archive created successfully: %s (%s)",
            target,
            format_bytes(target.stat().st_size),
        )
        return target
