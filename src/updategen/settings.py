# updategen/settings.py
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
User settings stored as JSON and merged over built-in defaults, plus the
explicit GeneratorConfig that is built from them once per run.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import config, utils
from .logger import log


def _get_default_settings() -> dict[str, Any]:
    """Returns a dictionary of the default application settings."""
    return {
        # --- Update packages ---
        "exclude_update": [
            "storage",
            "vendor",
            ".env",
            "node_modules",
            ".git",
            ".idea",
            "composer.lock",
            "package-lock.json",
            "yarn.lock",
            "public/storage",
            "public/uploads",
            "tests",
            "phpunit.xml",
            ".gitignore",
            ".env.example",
            "README.md",
            "CHANGELOG.md",
        ],
        # Copied into every update package even when excluded above.
        "add_update_file": [
            "vendor/autoload.php",
            "vendor/composer",
        ],
        "manifest_files": ["composer.json"],
        # --- New installation packages ---
        # .env is kept for fresh installs and sanitized instead.
        "exclude_new": [
            "storage",
            "vendor",
            "node_modules",
            ".git",
            ".idea",
            "composer.lock",
            "package-lock.json",
            "yarn.lock",
            "public/storage",
            "public/uploads",
            "tests",
            "phpunit.xml",
            ".gitignore",
            ".env.example",
            "README.md",
            "CHANGELOG.md",
        ],
        # --- General ---
        "output_directory": "storage/app/update_files",
        "git_timeout": config.GIT_COMMAND_TIMEOUT,
        "enable_logging": True,
        # --- Environment sanitization ---
        "sanitize_env_enabled": True,
        "sanitize_env": {
            "APP_DEBUG": "false",
            "APP_SECRET": "",
            "APP_KEY": config.APP_KEY_PLACEHOLDER,
            "DB_PASSWORD": "",
            "MAIL_PASSWORD": "",
            "AWS_SECRET_ACCESS_KEY": "",
            "PUSHER_APP_SECRET": "",
            "JWT_SECRET": "",
            "OAUTH_CLIENT_SECRET": "",
        },
    }


def _load_settings() -> dict[str, Any]:
    """Loads settings from the JSON file, merging them with defaults."""
    defaults = _get_default_settings()
    if not config.SETTINGS_FILE.exists():
        return defaults
    try:
        with open(config.SETTINGS_FILE, encoding="utf-8") as f:
            user_settings = json.load(f)
        defaults.update(user_settings)
        return defaults
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Could not load settings file: %s. Using defaults.", e)
        return defaults


def save_setting(key: str, value: str) -> bool:
    """Saves a single setting to the JSON file after type conversion."""
    default_settings = _get_default_settings()
    if key not in default_settings:
        print(f"{utils.SYSTEM_MSG}--> Unknown setting: '{key}'.{utils.RESET_COLOR}")
        return False

    current_settings = _load_settings()
    original_type = type(default_settings.get(key))
    converted_value: Any = value

    try:
        if original_type == bool:
            if value.lower() in ["true", "yes", "1"]:
                converted_value = True
            elif value.lower() in ["false", "no", "0"]:
                converted_value = False
            else:
                raise ValueError("Invalid boolean value. Use true/false.")
        elif original_type == int:
            converted_value = int(value)
        elif original_type == list:
            converted_value = [item.strip() for item in value.split(",") if item.strip()]
        elif original_type == dict:
            raise ValueError(
                f"'{key}' is a mapping. Edit {config.SETTINGS_FILE} directly."
            )
    except ValueError as e:
        print(f"{utils.SYSTEM_MSG}--> Error: {e}{utils.RESET_COLOR}")
        return False

    current_settings[key] = converted_value

    user_settings_to_save = {
        k: v for k, v in current_settings.items() if k in default_settings
    }

    try:
        utils.ensure_dir_exists(config.CONFIG_DIR)
        with open(config.SETTINGS_FILE, "w", encoding="utf-8") as f:
            json.dump(user_settings_to_save, f, indent=2)
        print(
            f"{utils.SYSTEM_MSG}--> Setting '{key}' updated to '{converted_value}'.{utils.RESET_COLOR}"
        )
        settings[key] = converted_value
        return True
    except OSError as e:
        log.error("Failed to save settings: %s", e)
        return False


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything one packaging run needs, resolved up front."""

    project_root: Path
    output_directory: Path
    exclude_update: list[str] = field(default_factory=list)
    exclude_new: list[str] = field(default_factory=list)
    add_update_file: list[str] = field(default_factory=list)
    manifest_files: list[str] = field(default_factory=list)
    git_timeout: int = config.GIT_COMMAND_TIMEOUT
    enable_logging: bool = True
    sanitize_env_enabled: bool = True
    sanitize_env: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(
        cls,
        values: dict[str, Any],
        project_root: str | Path | None = None,
        output_directory: str | Path | None = None,
    ) -> "GeneratorConfig":
        """
        Builds a config from a settings mapping.

        Explicit arguments win over the UPDATEGEN_PROJECT_ROOT and
        UPDATEGEN_OUTPUT_DIRECTORY environment variables, which win over the
        settings. A relative output directory is taken from the project root.
        """
        root = Path(
            project_root or os.getenv("UPDATEGEN_PROJECT_ROOT") or Path.cwd()
        ).expanduser().resolve()
        out = Path(
            output_directory
            or os.getenv("UPDATEGEN_OUTPUT_DIRECTORY")
            or values["output_directory"]
        ).expanduser()
        if not out.is_absolute():
            out = root / out

        return cls(
            project_root=root,
            output_directory=out,
            exclude_update=list(values.get("exclude_update", [])),
            exclude_new=list(values.get("exclude_new", [])),
            add_update_file=list(values.get("add_update_file", [])),
            manifest_files=list(values.get("manifest_files", [])),
            git_timeout=int(values.get("git_timeout", config.GIT_COMMAND_TIMEOUT)),
            enable_logging=bool(values.get("enable_logging", True)),
            sanitize_env_enabled=bool(values.get("sanitize_env_enabled", True)),
            sanitize_env=dict(values.get("sanitize_env", {})),
        )


settings: dict[str, Any] = _load_settings()
