"""Release lifecycle: addressing, staging notes and promoting releases.

Stability: stable
Since: 0.1.0
Dependencies: structlog
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: changelog, release, lifecycle

Operations on a parsed :class:`~changelog_gen.document.model.ChangeLog`:

- :func:`last_version`, :func:`nth_release`, :func:`find_releases` address
  releases (``-1`` is the unreleased staging area, ``0`` the newest
  release, ``k`` the k-th next-oldest);
- :func:`insert_note` stages a note into a release section;
- :func:`promote` turns the unreleased notes into a new version;
- :func:`remove_release` drops a release by index.

Architecture::

    promote(changelog, options, tags=..., provider=..., repo=...)
        │
        ├── resolve version ──────── options.version or tags.last_tag()
        ├── check conflicts ──────── VersionAlreadyExists unless force
        ├── check previous ───────── PreviousVersionGreaterThanNew
        ├── take unreleased, relabel, prepend header, release link
        ├── merge dev versions ───── same (major, minor, patch) pre-releases
        ├── diff footer ──────────── "Full Changelog: <link>"
        ├── insert + fresh unreleased
        └── sanitize + format ────── PromoteResult(version, text)

All validation happens before the document is touched, so a failed
promotion leaves the changelog as it was. Tag and link collaborators are
plain protocols; their errors propagate unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..core.errors import (
    AddressingError,
    NoVersionAvailable,
    PreviousVersionGreaterThanNew,
    VersionAlreadyExists,
)
from ..core.logging import get_logger
from .formatter import FormatOptions, format_changelog
from .model import ChangeLog, Release, ReleaseSectionNote, default_unreleased
from .sanitizer import SanitizeOptions, sanitize
from .version import Version

logger = get_logger(__name__)

DIFF_LABEL = "Full Changelog"


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class TagSource(Protocol):
    """Anything able to report the newest version tag."""

    def last_tag(self) -> Version | None: ...


@runtime_checkable
class LinkProvider(Protocol):
    """Builds the URLs attached to a promoted release."""

    def diff_link(self, repo: str, previous: Version | None, new: Version) -> str: ...

    def release_link(self, repo: str, version: Version) -> str: ...


# ---------------------------------------------------------------------------
# Addressing
# ---------------------------------------------------------------------------


@dataclass
class NthRelease:
    """A release together with its key (None for the unreleased one)."""

    version: Version | None
    release: Release

    @property
    def is_unreleased(self) -> bool:
        return self.version is None


def last_version(changelog: ChangeLog) -> Version | None:
    """Highest stored version, or None when nothing was released yet."""
    if not changelog.releases:
        return None
    return max(changelog.releases)


def nth_release(changelog: ChangeLog, n: int) -> NthRelease:
    """Address a release by recency.

    Raises:
        AddressingError: If ``n`` is below -1 or past the oldest release.
    """
    if n == -1:
        return NthRelease(None, changelog.unreleased_or_default())
    versions = changelog.versions_descending()
    if n < -1 or n >= len(versions):
        raise AddressingError(n, len(versions))
    version = versions[n]
    return NthRelease(version, changelog.releases[version])


def find_releases(changelog: ChangeLog, pattern: str | re.Pattern[str]) -> list[NthRelease]:
    """All releases whose version label matches ``pattern`` (searched), newest first."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    found: list[NthRelease] = []
    if changelog.unreleased is not None and regex.search(changelog.unreleased.title.version):
        found.append(NthRelease(None, changelog.unreleased))
    for version in changelog.versions_descending():
        release = changelog.releases[version]
        if regex.search(release.title.version):
            found.append(NthRelease(version, release))
    return found


def remove_release(changelog: ChangeLog, n: int) -> NthRelease:
    """Remove the nth release; ``-1`` empties the unreleased staging area."""
    target = nth_release(changelog, n)
    if target.version is None:
        changelog.unreleased = default_unreleased()
    else:
        changelog.remove_release(target.version)
    return target


def remove_matching(changelog: ChangeLog, pattern: str | re.Pattern[str]) -> list[Version]:
    """Remove every stored release whose version label matches ``pattern``."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    removed = [
        version
        for version, release in changelog.releases.items()
        if regex.search(release.title.version)
    ]
    for version in removed:
        changelog.remove_release(version)
    return removed


# ---------------------------------------------------------------------------
# Staging
# ---------------------------------------------------------------------------


def insert_note(release: Release, section_title: str, note: ReleaseSectionNote) -> None:
    """Append ``note`` to ``section_title``, creating the section if needed.

    No deduplication happens here; :func:`~.sanitizer.sanitize` does that.
    """
    release.section(section_title).notes.append(note)


# ---------------------------------------------------------------------------
# Promotion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PromoteOptions:
    """Inputs of :func:`promote`.

    Attributes:
        version: New version; taken from the newest tag when None.
        previous_version: Base of the diff link; inferred when None.
        force: Replace an existing release at ``version``.
        header: Line prepended to the promoted release header.
        merge_dev_versions: Fold pre-releases of the same version into it.
        omit_diff: Do not append the diff footer.
        sanitize: Options for the final sanitize pass.
        format: Options for the returned text.
    """

    version: Version | None = None
    previous_version: Version | None = None
    force: bool = False
    header: str | None = None
    merge_dev_versions: bool = False
    omit_diff: bool = False
    sanitize: SanitizeOptions = field(default_factory=SanitizeOptions)
    format: FormatOptions = field(default_factory=FormatOptions)


@dataclass(frozen=True)
class PromoteResult:
    version: Version
    text: str
    overwritten: bool = False
    merged: tuple[Version, ...] = ()


def _resolve_version(options: PromoteOptions, tags: TagSource | None) -> Version:
    if options.version is not None:
        return options.version
    if tags is not None:
        version = tags.last_tag()
        if version is not None:
            return version
    raise NoVersionAvailable()


def _dev_versions(changelog: ChangeLog, version: Version) -> list[Version]:
    return [
        key
        for key in changelog.releases
        if key.triple == version.triple and key != version
    ]


def _previous_version(
    changelog: ChangeLog, version: Version, excluded: list[Version]
) -> Version | None:
    older = [key for key in changelog.releases if key < version and key not in excluded]
    return max(older) if older else None


def promote(
    changelog: ChangeLog,
    options: PromoteOptions | None = None,
    *,
    tags: TagSource | None = None,
    provider: LinkProvider | None = None,
    repo: str | None = None,
) -> PromoteResult:
    """Promote the unreleased notes of ``changelog`` into a new release.

    The document is modified in place and also returned formatted in
    :attr:`PromoteResult.text`.

    Raises:
        NoVersionAvailable: Neither ``options.version`` nor a tag is available.
        VersionAlreadyExists: A release exists at the version and ``force`` is off.
        PreviousVersionGreaterThanNew: ``options.previous_version`` exceeds the version.
    """
    options = options or PromoteOptions()

    version = _resolve_version(options, tags)

    overwritten = version in changelog.releases
    if overwritten and not options.force:
        raise VersionAlreadyExists(str(version))

    if options.previous_version is not None and options.previous_version > version:
        raise PreviousVersionGreaterThanNew(str(version), str(options.previous_version))

    merged: list[Version] = []
    if options.merge_dev_versions and not version.is_prerelease:
        merged = _dev_versions(changelog, version)

    links_enabled = provider is not None and repo is not None
    release_link = provider.release_link(repo, version) if links_enabled else None
    diff_link = None
    if links_enabled and not options.omit_diff:
        previous = options.previous_version or _previous_version(changelog, version, merged)
        diff_link = provider.diff_link(repo, previous, version)

    # ── Mutations start here ─────────────────────────────────────────

    if overwritten:
        changelog.remove_release(version)
        logger.warning("release_overwritten", version=str(version))

    release = changelog.unreleased or default_unreleased()
    changelog.unreleased = default_unreleased()

    release.title.version = str(version)
    if release_link is not None:
        release.title.release_link = release_link
    if options.header:
        release.header = f"{options.header}\n{release.header}" if release.header else options.header

    for key in merged:
        dev = changelog.remove_release(key)
        if dev is not None:
            release.extend_sections(dev.sections.values())
    if merged:
        logger.debug("dev_versions_merged", version=str(version), merged=[str(v) for v in merged])

    if diff_link is not None:
        line = f"{DIFF_LABEL}: {diff_link}"
        release.footer = f"{release.footer}\n\n{line}" if release.footer else line

    changelog.insert_release(version, release)
    sanitize(changelog, options.sanitize)

    logger.debug("release_promoted", version=str(version))
    return PromoteResult(
        version=version,
        text=format_changelog(changelog, options.format),
        overwritten=overwritten,
        merged=tuple(merged),
    )


__all__ = [
    "DIFF_LABEL",
    "TagSource",
    "LinkProvider",
    "NthRelease",
    "last_version",
    "nth_release",
    "find_releases",
    "remove_release",
    "remove_matching",
    "insert_note",
    "PromoteOptions",
    "PromoteResult",
    "promote",
]
