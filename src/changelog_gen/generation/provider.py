"""Code-hosting links and pull-request lookups.

Stability: stable
Since: 0.2.0
Dependencies: httpx, structlog
Doc-Types: API_REFERENCE
Tags: changelog, github, http, provider

:class:`GitHubProvider` builds compare/commit/release URLs and asks the
GitHub REST API which pull request a commit belongs to. The ``other``
provider has no host, so :func:`provider_for` returns None for it and
callers simply omit links.

Usage::

    provider = GitHubProvider(token=settings.github_token)
    provider.diff_link("owner/repo", Version.parse("1.0.0"), Version.parse("1.1.0"))
    # 'https://github.com/owner/repo/compare/1.0.0...1.1.0'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from ..core.errors import ProviderError
from ..core.logging import get_logger
from ..core.settings import Provider
from ..document.version import Version

logger = get_logger(__name__)

GITHUB_URL = "https://github.com"
GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class RelatedPr:
    """Pull request a commit was merged through.

    Attributes:
        pr_id: Display id, e.g. ``#42``.
        url: Pull request page.
        author: Login of the pull request author.
        author_link: Profile page of the author.
    """

    pr_id: str
    url: str
    author: str
    author_link: str


@runtime_checkable
class CodeHost(Protocol):
    def diff_link(self, repo: str, previous: Version | None, new: Version) -> str: ...

    def release_link(self, repo: str, version: Version) -> str: ...

    def related_pr(self, repo: str, sha: str) -> RelatedPr | None: ...


class GitHubProvider:
    """GitHub links plus the ``commits/{sha}/pulls`` REST lookup."""

    def __init__(
        self,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "changelog-gen",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=GITHUB_API_URL,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubProvider:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ── Links ────────────────────────────────────────────────────────

    def diff_link(self, repo: str, previous: Version | None, new: Version) -> str:
        if previous is None:
            return f"{GITHUB_URL}/{repo}/commits/{new}"
        return f"{GITHUB_URL}/{repo}/compare/{previous}...{new}"

    def release_link(self, repo: str, version: Version) -> str:
        return f"{GITHUB_URL}/{repo}/releases/tag/{version}"

    # ── API ──────────────────────────────────────────────────────────

    def _get(self, path: str) -> Any:
        try:
            response = self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"GitHub API returned status {exc.response.status_code} for {path}",
                cause=exc,
            ).with_context(url=str(exc.request.url), http_status=exc.response.status_code)
        except httpx.HTTPError as exc:
            raise ProviderError(f"GitHub API request failed for {path}: {exc}", cause=exc).with_context(
                url=f"{GITHUB_API_URL}{path}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"GitHub API returned invalid JSON for {path}", cause=exc)

    def related_pr(self, repo: str, sha: str) -> RelatedPr | None:
        """First pull request associated with ``sha``, or None."""
        payload = self._get(f"/repos/{repo}/commits/{sha}/pulls")
        if not payload:
            logger.debug("no_related_pr", repo=repo, sha=sha)
            return None
        pr = payload[0]
        try:
            login = pr["user"]["login"]
            return RelatedPr(
                pr_id=f"#{pr['number']}",
                url=pr["html_url"],
                author=login,
                author_link=f"{GITHUB_URL}/{login}",
            )
        except (KeyError, TypeError) as exc:
            raise ProviderError(f"Unexpected pull request payload for {sha}: missing {exc}", cause=exc)


def provider_for(
    provider: Provider,
    *,
    token: str | None = None,
    timeout: float = 10.0,
) -> GitHubProvider | None:
    """Instantiate the configured provider; ``other`` has none."""
    if provider is Provider.GITHUB:
        return GitHubProvider(token=token, timeout=timeout)
    return None


__all__ = [
    "GITHUB_URL",
    "GITHUB_API_URL",
    "RelatedPr",
    "CodeHost",
    "GitHubProvider",
    "provider_for",
]
