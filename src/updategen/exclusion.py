# updategen/exclusion.py
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
Decides whether a repository-relative path is left out of a package.

A rule matches a path when it is equal to it, when the path lies underneath
it (``rule + "/"`` is a prefix), or, for rules containing ``*``, when the
whole path matches the rule with every ``*`` standing for one or more
characters of any kind, slashes included. Matching is case-sensitive.
"""

import re
from functools import lru_cache

WILDCARD = "*"


@lru_cache(maxsize=256)
def _compile_glob(rule: str) -> re.Pattern[str]:
    parts = (re.escape(part) for part in rule.split(WILDCARD))
    return re.compile(r"\A" + ".+".join(parts) + r"\Z", re.DOTALL)


def matches_rule(path: str, rule: str) -> bool:
    """Checks one path against one rule."""
    if not rule:
        return False
    if path == rule:
        return True
    if path.startswith(rule + "/"):
        return True
    if WILDCARD in rule:
        return _compile_glob(rule).match(path) is not None
    return False


def should_skip(path: str, rules: list[str] | tuple[str, ...] | None) -> bool:
    """Returns True if any rule excludes the path. Rules are tried in order."""
    for rule in rules or ():
        if matches_rule(path, rule):
            return True
    return False
