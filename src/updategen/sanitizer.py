# updategen/sanitizer.py
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
Rewrites sensitive values in a copied environment file.

Only ``KEY=VALUE`` lines whose key appears in the rule set are touched;
comments, blank lines and every other line are written back unchanged.
"""

import base64
import secrets
from pathlib import Path

from . import config
from .logger import log

EMPTY_MARKER = "(empty)"


def mask_value(value: str) -> str:
    """Hides a value for logging: 'ab******yz', '***' for short values."""
    if not value:
        return EMPTY_MARKER
    # Undecodable bytes show up as U+FFFD.
    value = value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    if len(value) <= 4:
        return "*" * len(value)
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


def generate_app_key() -> str:
    """Returns a fresh random application key in the 'base64:' format."""
    return "base64:" + base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def _replacement_for(rule_value: str) -> str:
    if rule_value == config.APP_KEY_PLACEHOLDER:
        return generate_app_key()
    return rule_value


def sanitize_lines(
    lines: list[str], rules: dict[str, str]
) -> tuple[list[str], list[str]]:
    """
    Applies the rules to already split lines.

    Returns the new lines and the keys that were rewritten.
    """
    result: list[str] = []
    changed: list[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in line:
            result.append(line)
            continue

        raw_key, old_value = line.split("=", 1)
        key = raw_key.strip()
        if key not in rules:
            result.append(line)
            continue

        new_value = _replacement_for(rules[key])
        result.append(f"{key}={new_value}")
        changed.append(key)
        log.info(
            "Sanitized %s: %s -> %s",
            key,
            mask_value(old_value.strip()),
            mask_value(new_value),
        )
    return result, changed


def sanitize_env_file(env_file: str | Path, rules: dict[str, str]) -> list[str]:
    """
    Sanitizes an environment file in place and returns the rewritten keys.

    Line endings are normalized to '\\n' and the file always ends with one.
    Bytes that are not valid UTF-8 are written back unchanged. Raises OSError
    if the file cannot be read or written.
    """
    path = Path(env_file)
    content = path.read_text(encoding="utf-8", errors="surrogateescape")
    raw_lines = content.replace("\r\n", "\n").split("\n")
    if raw_lines[-1] == "":
        raw_lines.pop()
    lines, changed = sanitize_lines(raw_lines, rules)
    path.write_text(
        "\n".join(lines) + "\n", encoding="utf-8", errors="surrogateescape"
    )
    return changed
