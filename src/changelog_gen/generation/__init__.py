"""Collaborators that feed the document core: git, the code host and commit classification.

Stability: stable
Since: 0.2.0
Dependencies: httpx, pydantic, structlog
Doc-Types: API_REFERENCE
Tags: changelog, generation, git, github

Usage::

    from changelog_gen.generation import GenerateOptions, NoteGenerator, open_repository

    repo = open_repository(repo_dir=Path("."))
    report = NoteGenerator(repo, GenerateOptions()).generate(changelog.unreleased_or_default())
"""

from __future__ import annotations

from .generator import GenerateOptions, GenerationReport, NoteGenerator
from .git_scan import FixtureGitRepository, GitRepository, LiveGitRepository, RawCommit, open_repository
from .parse_commits import Commit, classify, should_ignore
from .provider import GitHubProvider, RelatedPr, provider_for

__all__ = [
    "GenerateOptions",
    "GenerationReport",
    "NoteGenerator",
    "GitRepository",
    "LiveGitRepository",
    "FixtureGitRepository",
    "RawCommit",
    "open_repository",
    "Commit",
    "classify",
    "should_ignore",
    "GitHubProvider",
    "RelatedPr",
    "provider_for",
]
