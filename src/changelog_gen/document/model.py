"""Document model for Keep a Changelog files.

Stability: stable
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: changelog, model, dataclass

Plain dataclasses describing a parsed changelog::

    ChangeLog
    ├── header            free text before the first release
    ├── unreleased        Release | None  (staging area, "version -1")
    ├── releases          {Version: Release}, ascending
    └── footer_links      [FooterLink]

    Release
    ├── title             ReleaseTitle(version, release_link, title)
    ├── header / footer   free text around the sections
    └── sections          {title: ReleaseSection}, insertion ordered

Unlike the rest of the package these types are mutable: the parser
builds them, then the lifecycle manager and the sanitizer edit them in
place before the formatter writes them out.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .version import Version

#: Version label of the staging release.
UNRELEASED = "Unreleased"


# ---------------------------------------------------------------------------
# Notes and sections
# ---------------------------------------------------------------------------


@dataclass
class ReleaseSectionNote:
    """A single bullet of a section.

    Attributes:
        scope: Optional prefix grouping related notes (``- cli: ...``).
        message: Note body.
        context: Indented continuation lines, order significant.
    """

    scope: str | None = None
    message: str = ""
    context: list[str] = field(default_factory=list)

    def key(self) -> tuple[str | None, str, tuple[str, ...]]:
        """Identity used for deduplication."""
        return (self.scope, self.message, tuple(self.context))


@dataclass
class ReleaseSection:
    """A ``### Title`` block and its notes."""

    title: str
    notes: list[ReleaseSectionNote] = field(default_factory=list)

    def deduplicate(self) -> None:
        """Drop repeated notes, keeping the first occurrence of each."""
        seen: set[tuple] = set()
        unique: list[ReleaseSectionNote] = []
        for note in self.notes:
            key = note.key()
            if key in seen:
                continue
            seen.add(key)
            unique.append(note)
        self.notes = unique

    def remove_empty(self) -> None:
        self.notes = [note for note in self.notes if note.message]

    def group_by_scope(self) -> None:
        """Gather notes sharing a scope into contiguous blocks.

        Blocks are ordered by descending size, ties keep the order in
        which each scope first appeared. Scopeless notes go last in their
        original order.
        """
        blocks: dict[str, list[ReleaseSectionNote]] = {}
        scopeless: list[ReleaseSectionNote] = []
        for note in self.notes:
            if note.scope is None:
                scopeless.append(note)
            else:
                blocks.setdefault(note.scope, []).append(note)

        # sorted() is stable, so equal sizes keep first-encounter order.
        ordered = sorted(blocks.values(), key=len, reverse=True)
        self.notes = [note for block in ordered for note in block] + scopeless


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------


@dataclass
class ReleaseTitle:
    """The ``## [version](link) - title`` line."""

    version: str
    release_link: str | None = None
    title: str | None = None


@dataclass
class Release:
    """One version's entry, or the unreleased staging area."""

    title: ReleaseTitle
    header: str | None = None
    sections: dict[str, ReleaseSection] = field(default_factory=dict)
    footer: str | None = None

    @property
    def is_unreleased(self) -> bool:
        return self.title.version == UNRELEASED

    def section(self, title: str) -> ReleaseSection:
        """Return the section called ``title``, appending an empty one if needed."""
        section = self.sections.get(title)
        if section is None:
            section = ReleaseSection(title)
            self.sections[title] = section
        return section

    def extend_sections(self, sections: Iterable[ReleaseSection]) -> None:
        """Append notes section by section, creating missing sections at the end."""
        for incoming in sections:
            self.section(incoming.title).notes.extend(incoming.notes)

    def deduplicate(self) -> None:
        for section in self.sections.values():
            section.deduplicate()

    def remove_empty(self) -> None:
        for section in self.sections.values():
            section.remove_empty()
        self.sections = {
            title: section for title, section in self.sections.items() if section.notes
        }

    def sort_sections(self, order: Iterable[str]) -> None:
        """Move the sections named in ``order`` to the front, in that order."""
        remaining = dict(self.sections)
        ordered: dict[str, ReleaseSection] = {}
        for title in order:
            if title in remaining:
                ordered[title] = remaining.pop(title)
        ordered.update(remaining)
        self.sections = ordered

    def sort_scopes(self) -> None:
        for section in self.sections.values():
            section.group_by_scope()


def default_unreleased() -> Release:
    """A fresh, empty unreleased release."""
    return Release(title=ReleaseTitle(version=UNRELEASED))


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass
class FooterLink:
    """A ``[text]: link`` reference line at the end of the document."""

    text: str
    link: str


@dataclass
class ChangeLog:
    """Root of the document.

    ``releases`` is kept in ascending version order; use
    :meth:`insert_release` rather than assigning keys directly.
    """

    header: str | None = None
    unreleased: Release | None = None
    releases: dict[Version, Release] = field(default_factory=dict)
    footer_links: list[FooterLink] = field(default_factory=list)

    @classmethod
    def new(cls) -> ChangeLog:
        return cls(unreleased=default_unreleased())

    def unreleased_or_default(self) -> Release:
        """Return the unreleased release, materializing an empty one if absent."""
        if self.unreleased is None:
            self.unreleased = default_unreleased()
        return self.unreleased

    def insert_release(self, version: Version, release: Release) -> None:
        """Store ``release`` at ``version``, replacing any release with an equal key."""
        releases = {key: value for key, value in self.releases.items() if key != version}
        releases[version] = release
        self.releases = dict(sorted(releases.items(), key=lambda item: item[0]))

    def remove_release(self, version: Version) -> Release | None:
        return self.releases.pop(version, None)

    def versions_descending(self) -> list[Version]:
        return sorted(self.releases, reverse=True)

    def releases_descending(self) -> list[Release]:
        return [self.releases[version] for version in self.versions_descending()]
