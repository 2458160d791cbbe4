"""Parser for the Keep a Changelog Markdown dialect.

Stability: stable
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: changelog, parser, grammar

Hand-written recursive descent over the document string. Each rule is a
method taking a position and returning ``(value, new_position)`` or
``None``; a failed rule leaves nothing behind, so ordered choice is just
trying the next alternative at the same position. Character-class runs
are anchored ``re`` patterns matched with ``pattern.match(text, pos)``.

Grammar::

    changelog     := header release* footer_links
    header        := (!release_title .)*
    release       := release_title run section* run
    run           := (!release_title !section !footer_links .)*
    release_title := "## [" [^\\n\\]]+ "]" ("(" [^\\n)]+ ")")? (" - " [^\\n\\]]+)?
    section       := ws "### " [^\\n]+ "\\n" ws note*
    note          := [ \\n]* "- " (scope ":")? [^\\n]+ "\\n" context*
    scope         := [^ \\t\\r`:\\n]+
    context       := [ \\t] [^\\n]+ "\\n"
    footer_links  := ws footer_link* ws END
    footer_link   := "[" [^\\n\\]]+ "]: " [^\\n]+ "\\n"

Every captured string is stripped; empty free text is stored as ``None``.
The title suffix stops at ``]`` so existing files keep their bytes; a
title containing ``]`` is cut there and the rest lands in the release
header.

Usage::

    from changelog_gen.document.parser import parse_changelog

    changelog = parse_changelog(Path("CHANGELOG.md").read_text())
"""

from __future__ import annotations

import re

from ..core.errors import InvalidVersionFormat, ParseError
from .model import (
    UNRELEASED,
    ChangeLog,
    FooterLink,
    Release,
    ReleaseSection,
    ReleaseSectionNote,
    ReleaseTitle,
)
from .version import Version

_RELEASE_TITLE_RE = re.compile(
    r"## \[(?P<version>[^\n\]]+)\]"
    r"(?:\((?P<link>[^\n)]+)\))?"
    r"(?: - (?P<title>[^\n\]]+))?"
)
_SECTION_TITLE_RE = re.compile(r"[ \t\r\n]*### (?P<title>[^\n]+)\n[ \t\r\n]*")
_NOTE_RE = re.compile(r"[ \n]*- (?:(?P<scope>[^ \t\r`:\n]+):)?(?P<message>[^\n]+)\n")
_CONTEXT_RE = re.compile(r"[ \t](?P<line>[^\n]+)\n")
_FOOTER_LINK_RE = re.compile(r"\[(?P<text>[^\n\]]+)\]: (?P<link>[^\n]+)\n")
_SPACE_RE = re.compile(r"[ \t\r\n]*")

# Only these characters can start a release title, a section or a footer block.
_RUN_STOP_RE = re.compile(r"[#\[ \t\r\n]")


def _text_or_none(raw: str) -> str | None:
    text = raw.strip()
    return text or None


class _Parser:
    """One-shot parser over a single document."""

    def __init__(self, text: str):
        self.text = text
        self._footer_memo: dict[int, list[FooterLink] | None] = {}

    # ── Entry points ─────────────────────────────────────────────────

    def changelog(self) -> ChangeLog:
        header, pos = self._header(0)

        releases: list[tuple[Release, int]] = []
        while True:
            parsed = self._release(pos)
            if parsed is None:
                break
            release, end = parsed
            releases.append((release, pos))
            pos = end

        footer_links = self._footer_links(pos)
        if footer_links is None:
            raise self._error("Unexpected content after the last release", pos)

        changelog = ChangeLog(header=header, footer_links=footer_links)
        self._collect_releases(changelog, releases)
        return changelog

    def single_release(self) -> Release:
        start = _SPACE_RE.match(self.text, 0).end()
        parsed = self._release(start)
        if parsed is None:
            raise self._error("Expected a release title", start)
        release, pos = parsed
        end = _SPACE_RE.match(self.text, pos).end()
        if end != len(self.text):
            raise self._error("Unexpected content after the release", end)
        return release

    # ── Releases ─────────────────────────────────────────────────────

    def _collect_releases(self, changelog: ChangeLog, releases: list[tuple[Release, int]]) -> None:
        """Route each parsed release to its slot.

        A release titled exactly ``Unreleased`` becomes the staging area;
        every other title must be a version. Later duplicates replace
        earlier ones.
        """
        for release, offset in releases:
            label = release.title.version
            if label == UNRELEASED:
                changelog.unreleased = release
                continue
            try:
                version = Version.parse(label)
            except InvalidVersionFormat as exc:
                raise self._error(f"Invalid release version {label!r}", offset, cause=exc)
            changelog.insert_release(version, release)

    def _header(self, pos: int) -> tuple[str | None, int]:
        match = _RELEASE_TITLE_RE.search(self.text, pos)
        end = match.start() if match else len(self.text)
        return _text_or_none(self.text[pos:end]), end

    def _release(self, pos: int) -> tuple[Release, int] | None:
        parsed = self._release_title(pos)
        if parsed is None:
            return None
        title, pos = parsed

        header, pos = self._run(pos)

        sections: dict[str, ReleaseSection] = {}
        while True:
            parsed_section = self._section(pos)
            if parsed_section is None:
                break
            section, pos = parsed_section
            sections[section.title] = section

        footer, pos = self._run(pos)
        return Release(title=title, header=header, sections=sections, footer=footer), pos

    def _release_title(self, pos: int) -> tuple[ReleaseTitle, int] | None:
        match = _RELEASE_TITLE_RE.match(self.text, pos)
        if match is None:
            return None
        title = ReleaseTitle(
            version=match["version"].strip(),
            release_link=_text_or_none(match["link"] or ""),
            title=_text_or_none(match["title"] or ""),
        )
        return title, match.end()

    def _run(self, pos: int) -> tuple[str | None, int]:
        """Consume free text up to the next title, section or footer block."""
        start = pos
        length = len(self.text)
        while pos < length:
            stop = _RUN_STOP_RE.search(self.text, pos)
            if stop is None:
                pos = length
                break
            pos = stop.start()
            if (
                _RELEASE_TITLE_RE.match(self.text, pos)
                or _SECTION_TITLE_RE.match(self.text, pos)
                or self._footer_links(pos) is not None
            ):
                return _text_or_none(self.text[start:pos]), pos
            pos += 1
        # At end of input the footer block matches empty.
        return _text_or_none(self.text[start:pos]), pos

    # ── Sections and notes ───────────────────────────────────────────

    def _section(self, pos: int) -> tuple[ReleaseSection, int] | None:
        match = _SECTION_TITLE_RE.match(self.text, pos)
        if match is None:
            return None
        section = ReleaseSection(title=match["title"].strip())
        pos = match.end()
        while True:
            parsed = self._note(pos)
            if parsed is None:
                break
            note, pos = parsed
            section.notes.append(note)
        return section, pos

    def _note(self, pos: int) -> tuple[ReleaseSectionNote, int] | None:
        match = _NOTE_RE.match(self.text, pos)
        if match is None:
            return None
        scope = match["scope"]
        note = ReleaseSectionNote(
            scope=scope.strip() if scope is not None else None,
            message=match["message"].strip(),
        )
        pos = match.end()
        while True:
            context = _CONTEXT_RE.match(self.text, pos)
            if context is None:
                break
            note.context.append(context["line"].strip())
            pos = context.end()
        return note, pos

    # ── Footer ───────────────────────────────────────────────────────

    def _footer_links(self, pos: int) -> list[FooterLink] | None:
        """Match the trailing link block, which must run to end of input."""
        if pos in self._footer_memo:
            return self._footer_memo[pos]

        links: list[FooterLink] = []
        cursor = _SPACE_RE.match(self.text, pos).end()
        while True:
            match = _FOOTER_LINK_RE.match(self.text, cursor)
            if match is None:
                break
            links.append(FooterLink(text=match["text"].strip(), link=match["link"].strip()))
            cursor = match.end()
        cursor = _SPACE_RE.match(self.text, cursor).end()

        result = links if cursor == len(self.text) else None
        self._footer_memo[pos] = result
        return result

    # ── Errors ───────────────────────────────────────────────────────

    def _error(self, message: str, pos: int, *, cause: Exception | None = None) -> ParseError:
        pos = _SPACE_RE.match(self.text, pos).end()
        line = self.text.count("\n", 0, pos) + 1
        line_start = self.text.rfind("\n", 0, pos) + 1
        line_end = self.text.find("\n", pos)
        if line_end == -1:
            line_end = len(self.text)
        return ParseError(
            message,
            line=line,
            column=pos - line_start + 1,
            snippet=self.text[line_start:line_end],
            cause=cause,
        )


def parse_changelog(text: str) -> ChangeLog:
    """Parse a whole changelog document.

    Raises:
        ParseError: If the text does not match the grammar or a release
            title is not a valid version.
    """
    return _Parser(text).changelog()


def parse_release(text: str) -> Release:
    """Parse text holding exactly one release block (title included)."""
    return _Parser(text).single_release()


__all__ = ["parse_changelog", "parse_release"]
