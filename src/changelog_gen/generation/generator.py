"""Generate unreleased changelog notes from git commits.

Stability: stable
Since: 0.2.0
Dependencies: structlog
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: changelog, generator, git, commits

The orchestrator behind ``changelog-gen generate``: reads commits from a
:class:`~.git_scan.GitRepository`, drops the ones that opt out, classifies
the rest, decorates them with their pull request and stages the notes in
the unreleased release.

Architecture::

    ┌──────────────┐   ┌───────────────┐   ┌──────────────┐
    │ GitRepository│   │  SectionMap   │   │   CodeHost   │
    └──────┬───────┘   └───────┬───────┘   └──────┬───────┘
           │ RawCommit         │ classify()       │ related_pr()
           ▼                   ▼                  ▼
    ┌──────────────────────────────────────────────────────┐
    │                    NoteGenerator                      │
    │   ignore? → classify → decorate → insert_note         │
    └──────────────────────────┬───────────────────────────┘
                               ▼
                     ChangeLog.unreleased

Three modes: one ``specific`` commit, a ``since``/``until`` range, or the
last commit when neither is given. A failing commit aborts single-commit
modes; in range mode it is logged, reported and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.errors import ChangelogError, CommitClassificationError, ProviderError
from ..core.logging import get_logger
from ..core.settings import DEFAULT_SECTION_MAP, ParsingMode, SectionMap
from ..document.lifecycle import insert_note
from ..document.model import Release, ReleaseSectionNote
from .git_scan import GitRepository, RawCommit
from .parse_commits import classify, ignore_reason
from .provider import CodeHost, RelatedPr

logger = get_logger(__name__)


@dataclass(frozen=True)
class GenerateOptions:
    """Switches of the generate workflow.

    Attributes:
        changelog_path: Repository-relative changelog path; commits touching it are ignored.
        section_map: Commit type to section mapping.
        parsing: ``smart`` or ``strict`` subject parsing.
        exclude_unidentified: Fail commits no section claims instead of filing them as Unidentified.
        exclude_not_pr: Fail commits that were not merged through a pull request.
        omit_pr_link: Do not append `` in [#N](url)``.
        omit_thanks: Do not append `` by [@author](url)``.
    """

    changelog_path: str | None = "CHANGELOG.md"
    section_map: SectionMap = field(default_factory=lambda: DEFAULT_SECTION_MAP)
    parsing: ParsingMode = ParsingMode.SMART
    exclude_unidentified: bool = False
    exclude_not_pr: bool = False
    omit_pr_link: bool = False
    omit_thanks: bool = False


@dataclass
class GenerationReport:
    """What a generate run did, commit by commit."""

    added: list[tuple[str, ReleaseSectionNote]] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class NoteGenerator:
    """Turns commits into notes staged in a release.

    Examples:
        >>> generator = NoteGenerator(repo, GenerateOptions(), provider=None)
        >>> report = generator.generate(changelog.unreleased_or_default())
        >>> [section for section, _ in report.added]
        ['Fixed']
    """

    def __init__(
        self,
        repository: GitRepository,
        options: GenerateOptions | None = None,
        *,
        provider: CodeHost | None = None,
        repo: str | None = None,
    ):
        self.repository = repository
        self.options = options or GenerateOptions()
        self.provider = provider
        self.repo = repo

    def generate(
        self,
        release: Release,
        *,
        specific: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> GenerationReport:
        """Stage notes into ``release`` and report what happened.

        Raises:
            ChangelogError: In single-commit modes, whatever the commit failed with.
        """
        report = GenerationReport()

        if since is not None or until is not None:
            for sha in self.repository.commits_in_range(since, until):
                try:
                    self._apply(self.repository.commit(sha), release, report)
                except ChangelogError as exc:
                    logger.error("commit_failed", sha=sha, error=exc.message)
                    report.failed.append((sha, exc.message))
            return report

        sha = specific or self.repository.last_commit_sha()
        self._apply(self.repository.commit(sha), release, report)
        return report

    def _apply(self, commit: RawCommit, release: Release, report: GenerationReport) -> None:
        reason = ignore_reason(commit, self.options.changelog_path)
        if reason is not None:
            logger.info("commit_ignored", sha=commit.sha, reason=reason)
            report.skipped.append((commit.sha, reason))
            return
        section, release_note = self._classified_note(commit)
        insert_note(release, section, release_note)
        report.added.append((section, release_note))

    def release_note(self, commit: RawCommit) -> tuple[str, ReleaseSectionNote] | None:
        """Section and note for ``commit``, or None when it opts out."""
        reason = ignore_reason(commit, self.options.changelog_path)
        if reason is not None:
            logger.info("commit_ignored", sha=commit.sha, reason=reason)
            return None
        return self._classified_note(commit)

    def _classified_note(self, commit: RawCommit) -> tuple[str, ReleaseSectionNote]:
        options = self.options
        classified = classify(
            commit.title,
            commit.body,
            section_map=options.section_map,
            mode=options.parsing,
            exclude_unidentified=options.exclude_unidentified,
            sha=commit.sha,
        )
        message = classified.message

        related = self._related_pr(commit)
        if related is not None:
            if not options.omit_pr_link:
                message += f" in [{related.pr_id}]({related.url})"
            if not options.omit_thanks:
                message += f" by [@{related.author}]({related.author_link})"
        elif options.exclude_not_pr:
            raise CommitClassificationError(
                f"The commit {commit.sha} was not attached to a pull request.", sha=commit.sha
            )

        return classified.section, ReleaseSectionNote(scope=classified.scope, message=message)

    def _related_pr(self, commit: RawCommit) -> RelatedPr | None:
        options = self.options
        wanted = not (options.omit_pr_link and options.omit_thanks) or options.exclude_not_pr
        if not wanted or self.provider is None or self.repo is None:
            return None
        try:
            return self.provider.related_pr(self.repo, commit.sha)
        except ProviderError as exc:
            logger.warning("related_pr_failed", sha=commit.sha, error=exc.message)
            return None


__all__ = ["GenerateOptions", "GenerationReport", "NoteGenerator"]
