# updategen/generator.py
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
Sequences the git query, staging copy and archiving steps into the update
and new-installation workflows.

Every workflow validates its input before touching the filesystem and
removes its temporary files whether it succeeds or fails. Errors propagate
unchanged.
"""

import re
import tempfile
import uuid
from pathlib import Path

from . import config
from .archive import ArchiveBuilder
from .exceptions import CopyError, ValidationError
from .file_service import FileService
from .git_service import GitService, validate_dates
from .logger import configure as configure_logging, log
from .settings import GeneratorConfig

VERSION_PATTERN = re.compile(r"[\d.]+")


def validate_version(version: str) -> None:
    """Raises ValidationError unless version consists of digits and dots only."""
    if not version or not VERSION_PATTERN.fullmatch(version):
        raise ValidationError("Invalid version format. Use format like 1.0.0")


def validate_versions(current_version: str, update_version: str) -> None:
    validate_version(current_version)
    validate_version(update_version)
    if current_version == update_version:
        raise ValidationError("Current version and update version cannot be the same")


class UpdateGenerator:
    """
    Builds update and installation packages for one project.

    Construct it once with a GeneratorConfig and pass it to whatever needs
    to generate packages. The services can be swapped out for tests.
    """

    def __init__(
        self,
        generator_config: GeneratorConfig,
        git_service: GitService | None = None,
        file_service: FileService | None = None,
        archive_builder: ArchiveBuilder | None = None,
    ):
        self.config = generator_config
        configure_logging(generator_config.enable_logging)
        self.git_service = git_service or GitService(
            generator_config.project_root, timeout=generator_config.git_timeout
        )
        self.file_service = file_service or FileService(
            generator_config.project_root,
            additional_files=generator_config.add_update_file,
            sanitize_rules=generator_config.sanitize_env,
            sanitize_env=generator_config.sanitize_env_enabled,
        )
        self.archive_builder = archive_builder or ArchiveBuilder()

    def generate_update(
        self, start_date: str, end_date: str, current_version: str, update_version: str
    ) -> list[Path]:
        """
        Packages the files changed between start_date and end_date.

        Returns a one-element list with the path of
        'Update {current}-to-{update}.zip' in the output directory.
        """
        validate_versions(current_version, update_version)
        validate_dates(start_date, end_date)

        output_dir = self._get_output_directory()
        suffix = uuid.uuid4().hex[:12]
        update_path = output_dir / f"update_temp_{suffix}"
        version_info_path = output_dir / f"version_info_{suffix}.php"
        source_zip_path = output_dir / f"source_code_{suffix}.zip"
        final_zip_path = output_dir / config.UPDATE_ARCHIVE_TEMPLATE.format(
            current=current_version, update=update_version
        )
        temporary = [update_path, source_zip_path, version_info_path]

        try:
            changed_files = self.git_service.get_changed_files(start_date, end_date)
            if not changed_files:
                raise ValidationError("No files found for the specified date range")

            copied_count = self.file_service.copy_files(
                changed_files, update_path, self.config.exclude_update
            )
            if copied_count == 0:
                raise CopyError("No files were copied after applying exclusions")

            if self.config.manifest_files:
                self.file_service.copy_files(
                    self.config.manifest_files, update_path, include_additional=False
                )

            self.file_service.create_version_info(
                current_version, update_version, version_info_path
            )
            self.archive_builder.create_zip(update_path, source_zip_path)
            self.archive_builder.create_nested_zip(
                source_zip_path, version_info_path, final_zip_path
            )
        except Exception:
            self.file_service.cleanup(temporary)
            raise

        self.file_service.cleanup(temporary)

        log.info(
            "Update package generated successfully: %s -> %s, %s to %s, "
            "%d file(s) processed, %d copied, %s",
            current_version,
            update_version,
            start_date,
            end_date,
            len(changed_files),
            copied_count,
            final_zip_path,
        )
        return [final_zip_path]

    def generate_new_installation(self, version: str) -> list[Path]:
        """
        Packages the whole project as 'New_Installation_V{version}.zip'.

        Files are staged under the system temp directory so the staging area
        is never inside the project tree being copied.
        """
        validate_version(version)

        output_dir = self._get_output_directory()
        new_path = Path(tempfile.gettempdir()) / (
            config.INSTALLATION_STAGING_PREFIX + uuid.uuid4().hex[:12]
        )
        final_zip_path = output_dir / config.INSTALLATION_ARCHIVE_TEMPLATE.format(
            version=version
        )

        try:
            copied_count = self.file_service.copy_all_files(
                self.config.project_root, new_path, self.config.exclude_new
            )
            if copied_count == 0:
                raise CopyError("No files were copied after applying exclusions")

            self.archive_builder.create_zip(new_path, final_zip_path)
        except Exception:
            self.file_service.cleanup([new_path])
            raise

        self.file_service.cleanup([new_path])

        log.info(
            "New installation package generated successfully: version %s, "
            "%d file(s) copied, %s",
            version,
            copied_count,
            final_zip_path,
        )
        return [final_zip_path]

    def generate_both(
        self, start_date: str, end_date: str, current_version: str, update_version: str
    ) -> list[Path]:
        """Runs the update workflow, then the installation workflow for update_version."""
        update_files = self.generate_update(
            start_date, end_date, current_version, update_version
        )
        installation_files = self.generate_new_installation(update_version)
        return update_files + installation_files

    def _get_output_directory(self) -> Path:
        output_dir = self.config.output_directory
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir
