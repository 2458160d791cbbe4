"""
Shared pytest fixtures and configuration for changelog-gen tests.

This module provides:
- Settings cache and environment isolation
- structlog reset between tests
- Paths to the changelog and git fixtures
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import structlog

from changelog_gen.core.logging import clear_context
from changelog_gen.core.settings import clear_settings_cache

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CHANGELOG_FIXTURES = FIXTURES_DIR / "changelogs"
REPO_FIXTURE = FIXTURES_DIR / "changelog_repo"


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Drop CHANGELOG_*/GITHUB_* variables and cached settings around each test."""
    for key in list(os.environ):
        if key.startswith("CHANGELOG_") or key in ("GITHUB_REPOSITORY", "GITHUB_TOKEN"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Fixture paths
# =============================================================================


@pytest.fixture
def changelog_fixtures() -> Path:
    return CHANGELOG_FIXTURES


@pytest.fixture
def repo_fixture() -> Path:
    return REPO_FIXTURE
