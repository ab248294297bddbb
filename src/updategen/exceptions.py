# updategen/exceptions.py
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
Error kinds raised while building packages. Each kind carries the label the
command line prints in front of its message, so callers should catch by
class rather than by message.
"""


class UpdateGeneratorError(Exception):
    """Base exception for update generator errors."""

    label = "Update Generator Error"


class ValidationError(UpdateGeneratorError):
    """Bad user input: version format, equal versions, package type, missing options."""

    label = "Validation Error"


class DateError(ValidationError):
    """A date could not be parsed, or the range is reversed."""

    label = "Date Error"


class RepositoryError(UpdateGeneratorError):
    """Custom exception for git-related failures."""

    label = "Git Error"

    def __init__(self, message: str, stderr: str = "", command: list[str] | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.command = command or []

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr:
            return f"{message}: {self.stderr.strip()}"
        return message


class PathError(UpdateGeneratorError):
    """A source path is missing, or a destination lies inside its source."""

    label = "Path Error"


class ArchiveError(UpdateGeneratorError):
    """A ZIP archive could not be written or is missing afterwards."""

    label = "Archive Error"


class CopyError(UpdateGeneratorError):
    """Nothing survived the copy step, or a copied .env could not be sanitized."""

    label = "Copy Error"
