# updategen/config.py
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


import os
from pathlib import Path

# Base directory for user-specific configuration files.
CONFIG_DIR = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')) / 'updategen'

# Base directory for all application-generated data files.
DATA_DIR = Path(os.environ.get('XDG_DATA_HOME', Path.home() / '.local/share')) / 'updategen'

# --- Log Directories (under DATA_DIR) ---
LOG_DIRECTORY = DATA_DIR / "logs"

# --- Specific File Paths ---
SETTINGS_FILE = CONFIG_DIR / "settings.json"
DOTENV_FILE = CONFIG_DIR / ".env"
ROTATING_LOG_FILE = LOG_DIRECTORY / "updategen.log"

# --- Git ---
# Seconds a single git invocation may run before it is killed.
GIT_COMMAND_TIMEOUT = 300

# --- Package Layout ---
# Entry names inside the outer update archive. The installer on the receiving
# side looks for exactly these names.
SOURCE_ARCHIVE_ENTRY = "source_code.zip"
VERSION_INFO_ENTRY = "version_info.php"

UPDATE_ARCHIVE_TEMPLATE = "Update {current}-to-{update}.zip"
INSTALLATION_ARCHIVE_TEMPLATE = "New_Installation_V{version}.zip"

# Prefix of the staging directory created under the system temp dir for
# installation packages. It must live outside the project tree.
INSTALLATION_STAGING_PREFIX = "updategen_installation_"

# --- Environment Sanitization ---
# A sanitize rule with this value is replaced by a freshly generated
# application key instead of the literal.
APP_KEY_PLACEHOLDER = "base64:generate"
