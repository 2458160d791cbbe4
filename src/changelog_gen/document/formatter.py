"""Canonical text output for the changelog document model.

Stability: stable
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: changelog, formatter, markdown

Each block (document header, release, footer links; inside a release the
title, header, sections and footer) is rendered on its own and the
non-empty blocks are joined with one blank line. Every line ends with
``\\n``. Output depends only on the model, so formatting the same model
twice gives the same bytes.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model import ChangeLog, FooterLink, Release, ReleaseSection, ReleaseSectionNote


@dataclass(frozen=True)
class FormatOptions:
    """Formatter switches.

    Attributes:
        serialize_title: Emit the ``## [version]`` line. Turned off to show
            a bare release; the unreleased block is then skipped entirely
            when a whole document is formatted.
    """

    serialize_title: bool = True


def _join_blocks(blocks: list[str]) -> str:
    return "\n".join(block for block in blocks if block)


def format_note(note: ReleaseSectionNote) -> str:
    if note.scope is not None:
        out = f"- {note.scope}: {note.message}\n"
    else:
        out = f"- {note.message}\n"
    for line in note.context:
        out += f"  {line}\n"
    return out


def format_section(section: ReleaseSection) -> str:
    if not section.notes:
        return ""
    return f"### {section.title}\n\n" + "".join(format_note(note) for note in section.notes)


def format_title(release: Release) -> str:
    title = release.title
    out = f"## [{title.version}]"
    if title.release_link:
        out += f"({title.release_link})"
    if title.title:
        out += f" - {title.title}"
    return out + "\n"


def format_release(release: Release, options: FormatOptions | None = None) -> str:
    """Render one release (title line optional)."""
    options = options or FormatOptions()
    blocks: list[str] = []
    if options.serialize_title:
        blocks.append(format_title(release))
    if release.header:
        blocks.append(f"{release.header}\n")
    blocks.extend(format_section(section) for section in release.sections.values())
    if release.footer:
        blocks.append(f"{release.footer}\n")
    return _join_blocks(blocks)


def format_footer_links(links: list[FooterLink]) -> str:
    return "".join(f"[{link.text}]: {link.link}\n" for link in links)


def format_changelog(changelog: ChangeLog, options: FormatOptions | None = None) -> str:
    """Render a whole document: header, unreleased, releases newest first, links."""
    options = options or FormatOptions()
    blocks: list[str] = []
    if changelog.header:
        blocks.append(f"{changelog.header}\n")
    if changelog.unreleased is not None and options.serialize_title:
        blocks.append(format_release(changelog.unreleased, options))
    blocks.extend(format_release(release, options) for release in changelog.releases_descending())
    blocks.append(format_footer_links(changelog.footer_links))
    return _join_blocks(blocks)


__all__ = [
    "FormatOptions",
    "format_changelog",
    "format_release",
    "format_section",
    "format_title",
    "format_note",
    "format_footer_links",
]
