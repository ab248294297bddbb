# tests/conftest.py
"""
This module contains shared fixtures for the pytest suite.
Fixtures defined here are automatically available to all test functions.
"""

import os
import shutil
import subprocess

import pytest
from pyfakefs.fake_filesystem_unittest import Patcher

from updategen.logger import log
from updategen.settings import GeneratorConfig, _get_default_settings

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git is not installed"
)


def run_git(repo, *args, date=None):
    """Runs git in repo with a fixed identity and, optionally, a fixed date."""
    env = dict(os.environ)
    env.update(
        {
            "HOME": str(repo.parent),
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        }
    )
    if date:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
    return subprocess.run(
        ["git", "-c", "commit.gpgsign=false", *args],
        cwd=repo,
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )


@pytest.fixture(autouse=True)
def restore_log_level():
    """Undoes any logger.configure() call made during a test."""
    level = log.level
    yield
    log.setLevel(level)


@pytest.fixture
def fake_fs():
    """
    Initializes a fake filesystem using pyfakefs for tests that
    copy, sanitize or delete files.
    """
    with Patcher() as patcher:
        yield patcher.fs


@pytest.fixture
def make_config():
    """Returns a factory building a GeneratorConfig from the default settings."""

    def _make(project_root, output_directory=None, **overrides):
        values = _get_default_settings()
        values.update(overrides)
        return GeneratorConfig.from_settings(
            values, project_root=project_root, output_directory=output_directory
        )

    return _make


@pytest.fixture
def git_project(tmp_path):
    """
    A small project with two commits:
    one on 2024-12-15 and one on 2025-02-15 that modifies app/Http/Kernel.php.
    """
    repo = tmp_path / "project"
    (repo / "app" / "Http").mkdir(parents=True)
    (repo / "routes").mkdir()
    run_git(repo, "init", "-q")

    (repo / "app" / "Http" / "Kernel.php").write_text("<?php // v1\n", encoding="utf-8")
    (repo / "routes" / "web.php").write_text("<?php // routes\n", encoding="utf-8")
    (repo / "composer.json").write_text('{"name": "acme/app"}\n', encoding="utf-8")
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "-q", "-m", "Initial import", date="2024-12-15T12:00:00")

    (repo / "app" / "Http" / "Kernel.php").write_text("<?php // v2\n", encoding="utf-8")
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "-q", "-m", "Update kernel", date="2025-02-15T12:00:00")
    return repo
