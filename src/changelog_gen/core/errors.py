"""
Structured error types for changelog-gen.

Every failure the library can report is a typed ``ChangelogError`` subclass
carrying a category, structured context and an optional chained cause. The
document core never prints or logs; it raises one of these and lets the
caller (usually the CLI) render it.

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure the caller can act on
    - **Rich Context:** Errors carry the offending text/version for rendering
    - **Error Chaining:** Preserve original exceptions via ``cause=``
    - **Never partial:** A parse failure invalidates the whole document

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       ChangelogError                             │
        │               (category, context, cause)                         │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ParseError             ValidationError        ConflictError     │
        │  (PARSE)                (VALIDATION)           (CONFLICT)        │
        │                              │                      │            │
        │                   InvalidVersionFormat      VersionAlreadyExists │
        │                   NoVersionAvailable                             │
        │                   PreviousVersionGreaterThanNew                  │
        │                   AddressingError                                │
        │                   CommitClassificationError                      │
        │                                                                  │
        │  ConfigError            GitError               ProviderError     │
        │  (CONFIG)               (SOURCE)               (NETWORK)         │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = VersionAlreadyExists("1.0.0")
    >>> error.category
    <ErrorCategory.CONFLICT: 'CONFLICT'>
    >>> error.version
    '1.0.0'

    >>> error = ParseError("unexpected input", line=3, column=1)
    >>> error.to_dict()["context"]
    {'line': 3, 'column': 1}

Guardrails:
    ❌ DON'T: Raise plain ValueError from the document core
    ✅ DO: Raise the ChangelogError subclass naming the failure

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, changelog

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and rendering.

    Attributes:
        PARSE: The changelog text does not match the grammar
        VALIDATION: A value (version, index, commit) is not acceptable
        CONFLICT: The requested change collides with existing content
        CONFIG: Missing or invalid settings
        SOURCE: The changelog input or the git collaborator failed
        NETWORK: The code-hosting collaborator failed
        INTERNAL: Bugs, unexpected state
    """

    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    CONFIG = "CONFIG"
    SOURCE = "SOURCE"
    NETWORK = "NETWORK"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        path: File the failing document was read from
        line: 1-based line of the offending position
        column: 1-based column of the offending position
        version: Version text involved in the failure
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    path: str | None = None
    line: int | None = None
    column: int | None = None
    version: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["path", "line", "column", "version", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ChangelogError(Exception):
    """
    Base exception for all changelog-gen errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``with_context()`` attaches metadata after creation and
    returns the error so it can be used inline in a ``raise``.

    Examples:
        >>> error = ChangelogError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = ChangelogError("Bad file").with_context(path="CHANGELOG.md")
        >>> error.context.path
        'CHANGELOG.md'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ChangelogError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParseError("unexpected input").with_context(path="CHANGELOG.md")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            context_dict = self.context.to_dict()
            if context_dict:
                result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PARSE ERRORS
# =============================================================================


class ParseError(ChangelogError):
    """
    The changelog text does not match the grammar.

    Fatal for the whole document: the parser never returns a partial
    result. ``line``/``column`` locate the offending position and
    ``snippet`` holds the text found there.
    """

    default_category = ErrorCategory.PARSE

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        snippet: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.line = line
        self.column = column
        self.snippet = snippet
        if line is not None:
            self.context.line = line
        if column is not None:
            self.context.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        location = f"line {self.line}, column {self.column}"
        if self.snippet:
            return f"{self.message} at {location}: {self.snippet!r}"
        return f"{self.message} at {location}"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ChangelogError):
    """A value supplied to an operation is not acceptable."""

    default_category = ErrorCategory.VALIDATION


class InvalidVersionFormat(ValidationError):
    """The text is neither a semantic version nor a dotted numeric form."""

    def __init__(self, text: str, message: str | None = None):
        self.text = text
        super().__init__(message or f"Invalid version format: {text}")
        self.context.version = text


class NoVersionAvailable(ValidationError):
    """Promotion requested without an explicit version or any tag."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No version was provided and no version tag could be found. "
            "Use the --version option to specify the new version."
        )


class PreviousVersionGreaterThanNew(ValidationError):
    """The previous version used for the diff link exceeds the new version."""

    def __init__(self, new: str, previous: str):
        self.new = new
        self.previous = previous
        super().__init__(
            f"The new version {new} is inferior to the previous version {previous}"
        )
        self.context.version = new


class AddressingError(ValidationError):
    """An nth-release index does not address any release."""

    def __init__(self, n: int, available: int):
        self.n = n
        self.available = available
        super().__init__(
            f"Release index {n} is out of range: the changelog has "
            f"{available} release(s), use -1 for the unreleased section"
        )


class CommitClassificationError(ValidationError):
    """A commit could not be turned into a changelog note."""

    def __init__(self, message: str, *, sha: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.sha = sha
        if sha is not None:
            self.context.metadata["sha"] = sha


# =============================================================================
# CONFLICT ERRORS
# =============================================================================


class ConflictError(ChangelogError):
    """The requested change collides with existing content."""

    default_category = ErrorCategory.CONFLICT


class VersionAlreadyExists(ConflictError):
    """A release already exists at the version being promoted."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Version {version} already exist. Create a new tag or use the "
            "--version option. You can also use the --force option to "
            "override the existing release."
        )
        self.context.version = version


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ChangelogError):
    """Configuration error. The settings must be fixed."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# COLLABORATOR ERRORS
# =============================================================================


class ChangelogNotFound(ChangelogError):
    """Neither stdin nor the changelog path provided any text."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Changelog not found: {path}")
        self.context.path = path


class GitError(ChangelogError):
    """A git command failed or returned unusable output."""

    default_category = ErrorCategory.SOURCE


class ProviderError(ChangelogError):
    """The code-hosting API failed or returned unusable data."""

    default_category = ErrorCategory.NETWORK


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ChangelogError",
    # Parse
    "ParseError",
    # Validation
    "ValidationError",
    "InvalidVersionFormat",
    "NoVersionAvailable",
    "PreviousVersionGreaterThanNew",
    "AddressingError",
    "CommitClassificationError",
    # Conflict
    "ConflictError",
    "VersionAlreadyExists",
    # Config
    "ConfigError",
    "InvalidConfigError",
    # Collaborators
    "ChangelogNotFound",
    "GitError",
    "ProviderError",
]
