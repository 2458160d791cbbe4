"""Version parsing and ordering for changelog releases.

Stability: stable
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: changelog, version, semver

A release key is either a strict semantic version (``1.2.3-rc.1+build``)
or a *partial* dotted numeric form such as ``24.04`` that calendar-style
projects use. Partial forms are read as ``(major, minor, 0)`` and keep
their original spelling for display, so ``24.04`` is written back as
``24.04`` while still comparing equal to ``24.4.0``.

Ordering follows semver precedence: the numeric triple first, then a
pre-release sorts before the matching release. Build metadata only breaks
ties so that two builds of the same version remain distinct keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from ..core.errors import InvalidVersionFormat

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

_UNSIGNED_RE = re.compile(r"^\d+$", re.ASCII)


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # Numeric identifiers sort before alphanumeric ones, numerically.
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A comparable release version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component (always 0 for partial forms).
        prerelease: Dot-separated pre-release identifiers, empty if none.
        build: Dot-separated build metadata, empty if none.
        text: Original spelling for partial forms, None for strict ones.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()
    text: str | None = field(default=None)

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def new(cls, major: int, minor: int, patch: int) -> Version:
        return cls(major, minor, patch)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``text`` as a strict semver, falling back to the partial form.

        Raises:
            InvalidVersionFormat: If ``text`` is neither.
        """
        match = SEMVER_RE.match(text)
        if match:
            major, minor, patch, pre, build = match.groups()
            return cls(
                int(major),
                int(minor),
                int(patch),
                tuple(pre.split(".")) if pre else (),
                tuple(build.split(".")) if build else (),
            )

        parts = text.split(".")
        if len(parts) >= 2 and _UNSIGNED_RE.match(parts[0]) and _UNSIGNED_RE.match(parts[1]):
            return cls(int(parts[0]), int(parts[1]), 0, text=text)

        raise InvalidVersionFormat(text)

    # ── Properties ───────────────────────────────────────────────────

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def is_partial(self) -> bool:
        return self.text is not None

    def _sort_key(self) -> tuple:
        # A release outranks any of its pre-releases.
        if self.prerelease:
            pre = (0, tuple(_identifier_key(p) for p in self.prerelease))
        else:
            pre = (1, ())
        build = tuple(_identifier_key(b) for b in self.build)
        return (self.triple, pre, build)

    # ── Comparison ───────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    # ── Display ──────────────────────────────────────────────────────

    def __str__(self) -> str:
        if self.text is not None:
            return self.text
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(self.prerelease)
        if self.build:
            out += "+" + ".".join(self.build)
        return out

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


def parse_version(text: str) -> Version:
    """Shorthand for :meth:`Version.parse`."""
    return Version.parse(text)
