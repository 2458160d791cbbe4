"""Normalization pass run before a changelog is written back.

Stability: stable
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: changelog, sanitize, normalize

For the unreleased release and every stored release, in this order:

1. drop repeated notes (first occurrence wins),
2. drop notes without a message and sections left without notes,
3. move the sections listed in ``section_order`` to the front, then
   optionally group notes by scope.

Finally an empty unreleased release is materialized if the document had
none. The pass is total and idempotent.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .model import ChangeLog, Release


@dataclass(frozen=True)
class SanitizeOptions:
    """Sorting switches for :func:`sanitize`.

    Attributes:
        section_order: Section titles placed first, in this order.
        sort_scope: Group notes sharing a scope inside each section.
    """

    section_order: Sequence[str] = ()
    sort_scope: bool = False


def sanitize_release(release: Release, options: SanitizeOptions) -> None:
    release.deduplicate()
    release.remove_empty()
    release.sort_sections(options.section_order)
    if options.sort_scope:
        release.sort_scopes()


def sanitize(changelog: ChangeLog, options: SanitizeOptions | None = None) -> ChangeLog:
    """Normalize ``changelog`` in place and return it."""
    options = options or SanitizeOptions()
    if changelog.unreleased is not None:
        sanitize_release(changelog.unreleased, options)
    for release in changelog.releases.values():
        sanitize_release(release, options)
    changelog.unreleased_or_default()
    return changelog


__all__ = ["SanitizeOptions", "sanitize", "sanitize_release"]
