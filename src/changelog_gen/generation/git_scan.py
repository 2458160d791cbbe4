"""Git access for note generation and release promotion.

Stability: stable
Since: 0.2.0
Dependencies: structlog
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: changelog, git, scanner

Reads commits and tags from a git repository through ``subprocess``
calls, or from a fixture file for deterministic testing.

Architecture::

    ┌─────────────────────────────────────────────────┐
    │                  git_scan.py                     │
    ├─────────────────────┬───────────────────────────┤
    │  LiveGitRepository  │  FixtureGitRepository     │
    │  (subprocess calls) │  (reads commits.json)     │
    └─────────────────────┴───────────────────────────┘
                │                     │
                ▼                     ▼
           RawCommit / Version   RawCommit / Version

Usage::

    from changelog_gen.generation.git_scan import open_repository

    # Live git
    repo = open_repository(repo_dir=Path("."))

    # From fixtures
    repo = open_repository(fixture_dir=Path("tests/fixtures/changelog_repo"))

    for sha in repo.commits_in_range("1.0.0", "HEAD"):
        commit = repo.commit(sha)
"""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..core.errors import GitError, InvalidVersionFormat
from ..core.logging import get_logger
from ..document.version import Version

logger = get_logger(__name__)

# SHA, author, subject, body; records separated by a marker line.
_GIT_SHOW_FORMAT = "%H%n%aN%n%s%n%b"


@dataclass(frozen=True)
class RawCommit:
    """Commit metadata needed to derive a changelog note.

    Attributes:
        sha: Full commit hash.
        author: Author name.
        title: Subject line.
        body: Message body without the subject.
        files: Paths touched by the commit.
    """

    sha: str
    author: str = ""
    title: str = ""
    body: str = ""
    files: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class GitRepository(Protocol):
    """Read-only view of a repository's history."""

    def last_commit_sha(self) -> str: ...

    def commit(self, sha: str) -> RawCommit: ...

    def commits_in_range(self, since: str | None, until: str | None) -> list[str]: ...

    def tags_sorted_ascending(self) -> list[Version]: ...

    def last_tag(self) -> Version | None: ...


def _versions_from_tags(names: list[str]) -> list[Version]:
    versions: list[Version] = []
    for name in names:
        try:
            versions.append(Version.parse(name))
        except InvalidVersionFormat:
            logger.warning("tag_skipped", tag=name, reason="not a version")
    return sorted(versions)


# ---------------------------------------------------------------------------
# Live repository
# ---------------------------------------------------------------------------


class LiveGitRepository:
    """Repository backed by the ``git`` executable."""

    def __init__(self, repo_dir: Path, *, timeout: float = 30.0):
        self.repo_dir = repo_dir
        self.timeout = timeout

    def _git(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd, capture_output=True, cwd=str(self.repo_dir),
                check=True, timeout=self.timeout,
            )
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else ""
            raise GitError(f"git {args[0]} failed: {stderr or exc}", cause=exc).with_context(
                command=" ".join(cmd)
            )
        except (subprocess.TimeoutExpired, FileNotFoundError) as exc:
            raise GitError(f"git {args[0]} failed: {exc}", cause=exc).with_context(
                command=" ".join(cmd)
            )
        return result.stdout.decode("utf-8", errors="replace")

    def last_commit_sha(self) -> str:
        return self._git("rev-parse", "HEAD").strip()

    def commit(self, sha: str) -> RawCommit:
        output = self._git("show", "-s", f"--format={_GIT_SHOW_FORMAT}", sha)
        lines = output.split("\n", 3)
        if len(lines) < 3:
            raise GitError(f"Unexpected git show output for {sha}").with_context(sha=sha)
        files = self._git("diff-tree", "--root", "--no-commit-id", "--name-only", "-r", sha)
        return RawCommit(
            sha=lines[0].strip(),
            author=lines[1].strip(),
            title=lines[2].strip(),
            body=lines[3].strip() if len(lines) > 3 else "",
            files=tuple(line.strip() for line in files.splitlines() if line.strip()),
        )

    def commits_in_range(self, since: str | None, until: str | None) -> list[str]:
        """Commit SHAs after ``since`` up to and including ``until``, oldest first."""
        until = until or "HEAD"
        rev = f"{since}..{until}" if since else until
        output = self._git("log", "--reverse", "--format=%H", rev)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def tags_sorted_ascending(self) -> list[Version]:
        output = self._git("tag", "--list")
        return _versions_from_tags([line.strip() for line in output.splitlines() if line.strip()])

    def last_tag(self) -> Version | None:
        tags = self.tags_sorted_ascending()
        return tags[-1] if tags else None


# ---------------------------------------------------------------------------
# Fixture repository
# ---------------------------------------------------------------------------


class FixtureGitRepository:
    """Repository read from a ``commits.json`` fixture.

    Expected fixture structure::

        fixture_dir/
        └── commits.json

    ``commits.json`` lists commits oldest first::

        [
            {
                "sha": "abc1234...",
                "author": "Jane Doe",
                "message": "feat(cli): add --stdout\\n\\nLonger description",
                "files": ["src/cli.py"],
                "tags": ["1.0.0"]
            }
        ]
    """

    def __init__(self, fixture_dir: Path):
        commits_file = fixture_dir / "commits.json"
        if not commits_file.is_file():
            raise GitError(f"No commits.json in fixture dir: {fixture_dir}").with_context(
                path=str(commits_file)
            )
        raw = json.loads(commits_file.read_text(encoding="utf-8"))

        self._commits: list[RawCommit] = []
        self._tags: dict[str, int] = {}
        for index, entry in enumerate(raw):
            message = entry.get("message", "")
            title, _, body = message.partition("\n")
            self._commits.append(
                RawCommit(
                    sha=entry["sha"],
                    author=entry.get("author", ""),
                    title=title.strip(),
                    body=body.strip(),
                    files=tuple(entry.get("files", [])),
                )
            )
            for tag in entry.get("tags", []):
                self._tags[tag] = index

    def _index(self, ref: str) -> int:
        if ref == "HEAD":
            return len(self._commits) - 1
        if ref in self._tags:
            return self._tags[ref]
        for index, commit in enumerate(self._commits):
            if commit.sha.startswith(ref):
                return index
        raise GitError(f"Unknown revision: {ref}").with_context(ref=ref)

    def last_commit_sha(self) -> str:
        if not self._commits:
            raise GitError("The fixture repository has no commits")
        return self._commits[-1].sha

    def commit(self, sha: str) -> RawCommit:
        return self._commits[self._index(sha)]

    def commits_in_range(self, since: str | None, until: str | None) -> list[str]:
        end = self._index(until or "HEAD")
        start = self._index(since) + 1 if since else 0
        return [commit.sha for commit in self._commits[start:end + 1]]

    def tags_sorted_ascending(self) -> list[Version]:
        return _versions_from_tags(list(self._tags))

    def last_tag(self) -> Version | None:
        tags = self.tags_sorted_ascending()
        return tags[-1] if tags else None


def open_repository(
    *,
    repo_dir: Path | None = None,
    fixture_dir: Path | None = None,
    timeout: float = 30.0,
) -> GitRepository:
    """Open a live or fixture repository.

    Exactly one of ``repo_dir`` or ``fixture_dir`` must be provided.

    Raises:
        ValueError: If neither or both are provided.
    """
    if (repo_dir is None) == (fixture_dir is None):
        msg = "Provide either repo_dir or fixture_dir"
        raise ValueError(msg)
    if fixture_dir is not None:
        return FixtureGitRepository(fixture_dir)
    return LiveGitRepository(repo_dir, timeout=timeout)


__all__ = [
    "RawCommit",
    "GitRepository",
    "LiveGitRepository",
    "FixtureGitRepository",
    "open_repository",
]
