"""Keep a Changelog document model, parser, formatter and release lifecycle.

Stability: stable
Since: 0.1.0
Dependencies: structlog (lifecycle logging only)
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: changelog, document, parser, formatter

Control flow::

    text ──parse_changelog──▶ ChangeLog ──insert_note / promote──▶ ChangeLog
                                                                    │
    text ◀──format_changelog── ChangeLog ◀────────sanitize──────────┘

Usage::

    from changelog_gen.document import parse_changelog, sanitize, format_changelog

    changelog = parse_changelog(Path("CHANGELOG.md").read_text())
    sanitize(changelog, SanitizeOptions(section_order=["Added", "Fixed"]))
    Path("CHANGELOG.md").write_text(format_changelog(changelog))
"""

from __future__ import annotations

from .formatter import FormatOptions, format_changelog, format_release
from .lifecycle import (
    NthRelease,
    PromoteOptions,
    PromoteResult,
    find_releases,
    insert_note,
    last_version,
    nth_release,
    promote,
    remove_matching,
    remove_release,
)
from .model import (
    UNRELEASED,
    ChangeLog,
    FooterLink,
    Release,
    ReleaseSection,
    ReleaseSectionNote,
    ReleaseTitle,
    default_unreleased,
)
from .parser import parse_changelog, parse_release
from .sanitizer import SanitizeOptions, sanitize
from .version import Version, parse_version

DEFAULT_CHANGELOG = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]
"""

__all__ = [
    "DEFAULT_CHANGELOG",
    "UNRELEASED",
    "ChangeLog",
    "FooterLink",
    "Release",
    "ReleaseSection",
    "ReleaseSectionNote",
    "ReleaseTitle",
    "default_unreleased",
    "Version",
    "parse_version",
    "parse_changelog",
    "parse_release",
    "FormatOptions",
    "format_changelog",
    "format_release",
    "SanitizeOptions",
    "sanitize",
    "NthRelease",
    "PromoteOptions",
    "PromoteResult",
    "find_releases",
    "insert_note",
    "last_version",
    "nth_release",
    "promote",
    "remove_matching",
    "remove_release",
]
