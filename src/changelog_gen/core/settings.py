"""
Centralized settings for changelog-gen.

Manifesto:
    One validated, cached settings object replaces ad-hoc ``os.environ``
    lookups scattered through the commands. Every option the CLI exposes
    has an environment fallback here, so CI jobs can configure the tool
    without long command lines.

All fields can be set via ``CHANGELOG_*`` environment variables (e.g.
``CHANGELOG_SORT_SCOPE=true``) or a ``.env`` file. The repository and the
API token also honour the variables GitHub Actions exports
(``GITHUB_REPOSITORY``, ``GITHUB_TOKEN``).

Tags:
    configuration, settings, pydantic, caching, changelog

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, RootModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError, InvalidConfigError

UNIDENTIFIED_SECTION = "Unidentified"


class Provider(str, Enum):
    """Code-hosting provider used for links and pull-request lookups."""

    GITHUB = "github"
    OTHER = "other"


class ParsingMode(str, Enum):
    """How commit subjects are turned into notes."""

    SMART = "smart"
    STRICT = "strict"


class SectionMap(RootModel[dict[str, list[str]]]):
    """Ordered mapping of changelog section title to the commit types it collects.

    The key order doubles as the default section order used by the
    sanitizer, so a custom map also reorders the document.
    """

    @field_validator("root")
    @classmethod
    def _non_empty_types(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for section, types in value.items():
            if not section.strip():
                raise ValueError("section titles must not be empty")
            if any(not t.strip() for t in types):
                raise ValueError(f"section {section!r} lists an empty commit type")
        return value

    @property
    def sections(self) -> list[str]:
        return list(self.root)

    def section_for(self, commit_type: str) -> str | None:
        """Return the section collecting ``commit_type`` (case-insensitive)."""
        wanted = commit_type.lower()
        for section, types in self.root.items():
            if wanted in (t.lower() for t in types):
                return section
        return None


DEFAULT_SECTION_MAP = SectionMap(
    {
        "Security": ["security", "sec"],
        "Added": ["feat", "add"],
        "Changed": ["improve", "impr", "refactor", "perf", "change"],
        "Removed": ["remove", "rm"],
        "Fixed": ["fix", "bugfix", "hotfix"],
        "Deprecated": ["deprecate", "depr"],
        "Documentation": ["docs", "doc"],
    }
)

DEFAULT_SECTION_ORDER: tuple[str, ...] = tuple(DEFAULT_SECTION_MAP.sections)


class ChangelogSettings(BaseSettings):
    """changelog-gen configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHANGELOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Document ─────────────────────────────────────────────────
    file: Path = Field(default=Path("CHANGELOG.md"), description="Changelog path")
    section_order: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTION_ORDER))
    sort_scope: bool = Field(default=True)
    merge_dev_versions: bool = Field(default=False)
    map_file: Path | None = Field(default=None, description="JSON section map")

    # ── Provider ─────────────────────────────────────────────────
    provider: Provider = Field(default=Provider.GITHUB)
    repo: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHANGELOG_REPO", "GITHUB_REPOSITORY"),
    )
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHANGELOG_GITHUB_TOKEN", "GITHUB_TOKEN"),
        repr=False,
    )
    http_timeout: float = Field(default=10.0, gt=0)

    # ── Git ──────────────────────────────────────────────────────
    git_timeout: float = Field(default=30.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_json: bool | None = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, ChangelogSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ChangelogSettings:
    """Load, validate, and cache a :class:`ChangelogSettings` instance.

    Raises:
        InvalidConfigError: If an environment value fails validation.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    try:
        settings = ChangelogSettings()
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first["loc"]) or "settings"
        raise InvalidConfigError(key, first.get("input"), f"Invalid configuration for {key}: {first['msg']}") from exc
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


def load_section_map(path: Path | None) -> SectionMap:
    """Load a JSON section map, or return the default one when ``path`` is None.

    The file holds an object of ``{"Section": ["type", ...]}`` pairs; key
    order is preserved.
    """
    if path is None:
        return DEFAULT_SECTION_MAP
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Section map not found: {path}", cause=exc).with_context(path=str(path))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Section map is not valid JSON: {exc.msg}", cause=exc).with_context(path=str(path))
    try:
        return SectionMap.model_validate(raw)
    except ValidationError as exc:
        raise InvalidConfigError("map_file", str(path), f"Invalid section map {path}: {exc.errors()[0]['msg']}") from exc


__all__ = [
    "UNIDENTIFIED_SECTION",
    "Provider",
    "ParsingMode",
    "SectionMap",
    "DEFAULT_SECTION_MAP",
    "DEFAULT_SECTION_ORDER",
    "ChangelogSettings",
    "get_settings",
    "clear_settings_cache",
    "load_section_map",
]
