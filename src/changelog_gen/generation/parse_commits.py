"""Commit message classification for changelog notes.

Stability: stable
Since: 0.2.0
Dependencies: pydantic (SectionMap)
Doc-Types: API_REFERENCE
Tags: changelog, commit, conventional-commits, parser

Turns a commit subject like ``fix(parser): handle CRLF`` into a
:class:`Commit` (section ``Fixed``, scope ``parser``, message
``handle CRLF``) using a :class:`~changelog_gen.core.settings.SectionMap`.

Two parsing modes:

- ``strict``: the subject must be a conventional commit whose type is in
  the section map.
- ``smart``: unknown or malformed subjects are matched against the map by
  keyword in the title and body, then fall back to the ``Unidentified``
  section unless unidentified commits are excluded.

Commits can opt out of the changelog with ``(skip changelog)``,
``(ignore log)``, ``!notes`` and the like in their title or body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.errors import CommitClassificationError
from ..core.settings import UNIDENTIFIED_SECTION, ParsingMode, SectionMap
from .git_scan import RawCommit

# type(scope)!: message
_CONVENTIONAL_RE = re.compile(
    r"^(?P<type>[^ :(!]+)(?:\((?P<scope>[^()]+)\))?!?:[ \t\r]*(?P<message>.+)$",
    re.DOTALL,
)
_WORD_RE = re.compile(r"[A-Za-z]+")

IGNORE_NAMES = ("changelog", "log", "chglog", "notes")


@dataclass(frozen=True)
class Commit:
    """Classification result: where the note goes and what it says."""

    section: str
    scope: str | None
    message: str


def ignore_reason(commit: RawCommit, changelog_path: str | None = None) -> str | None:
    """Why ``commit`` should stay out of the changelog, or None if it should not."""
    if changelog_path and changelog_path in commit.files:
        return "The changelog was modified in this commit."

    for name in IGNORE_NAMES:
        for pattern in (f"(skip {name})", f"(ignore {name})", f"!{name}"):
            if pattern in commit.title or pattern in commit.body:
                return f'The pattern "{pattern}" was matched in the commit message or description.'
    return None


def should_ignore(commit: RawCommit, changelog_path: str | None = None) -> bool:
    return ignore_reason(commit, changelog_path) is not None


def find_section(section_map: SectionMap, title: str, body: str = "") -> str | None:
    """Return the first section whose commit types appear as words in the text."""
    words = {word.lower() for word in _WORD_RE.findall(f"{title}\n{body}")}
    for section, types in section_map.root.items():
        if any(commit_type.lower() in words for commit_type in types):
            return section
    return None


def parse_conventional(title: str) -> tuple[str, str | None, str] | None:
    """Split a conventional subject into ``(type, scope, message)``."""
    match = _CONVENTIONAL_RE.match(title.strip())
    if match is None:
        return None
    scope = match["scope"].strip() if match["scope"] else None
    return match["type"].strip(), scope or None, match["message"].strip()


def classify(
    title: str,
    body: str = "",
    *,
    section_map: SectionMap,
    mode: ParsingMode = ParsingMode.SMART,
    exclude_unidentified: bool = False,
    sha: str | None = None,
) -> Commit:
    """Classify a commit subject and body into a changelog note.

    Raises:
        CommitClassificationError: In strict mode for malformed subjects or
            unknown types, in any mode for unidentified commits when
            ``exclude_unidentified`` is set.
    """
    parsed = parse_conventional(title)

    if parsed is not None:
        commit_type, scope, message = parsed
        section = section_map.section_for(commit_type)
        if section is None and mode is ParsingMode.STRICT:
            raise CommitClassificationError(f"No commit type found for this: {commit_type}", sha=sha)
    else:
        if mode is ParsingMode.STRICT:
            raise CommitClassificationError(f"Invalid commit syntax: {title!r}", sha=sha)
        scope, message = None, title.strip()
        section = None

    if section is None:
        section = find_section(section_map, title, body)
    if section is None:
        if exclude_unidentified:
            raise CommitClassificationError("Unidentified commit type", sha=sha)
        section = UNIDENTIFIED_SECTION

    return Commit(section=section, scope=scope, message=message)


__all__ = [
    "Commit",
    "IGNORE_NAMES",
    "ignore_reason",
    "should_ignore",
    "find_section",
    "parse_conventional",
    "classify",
]
