"""
CLI utility helpers: changelog input/output and error rendering.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from changelog_gen.core.errors import ChangelogError, ChangelogNotFound
from changelog_gen.core.settings import DEFAULT_SECTION_MAP, ChangelogSettings, SectionMap
from changelog_gen.document.sanitizer import SanitizeOptions

console = Console()
err_console = Console(stderr=True)


# ── Input / output ───────────────────────────────────────────────────────


def read_input(path: Path) -> str:
    """Read the changelog from piped stdin, falling back to ``path``.

    Stdin wins only when it is not a terminal and actually holds text.
    """
    if not sys.stdin.isatty():
        piped = sys.stdin.read()
        if piped:
            return piped
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ChangelogNotFound(str(path)) from exc


def write_output(text: str, path: Path, *, stdout: bool = False) -> None:
    """Write ``text`` to stdout or back to ``path``."""
    if stdout:
        typer.echo(text, nl=False)
    else:
        path.write_text(text, encoding="utf-8")


# ── Options ──────────────────────────────────────────────────────────────


def sanitize_options(settings: ChangelogSettings, section_map: SectionMap) -> SanitizeOptions:
    """Section order of a custom map wins over the configured order."""
    if section_map is DEFAULT_SECTION_MAP:
        order = tuple(settings.section_order)
    else:
        order = tuple(section_map.sections)
    return SanitizeOptions(section_order=order, sort_scope=settings.sort_scope)


# ── Errors ───────────────────────────────────────────────────────────────


def fail(error: ChangelogError | str) -> NoReturn:
    """Print an error line to stderr and exit with status 1."""
    if isinstance(error, ChangelogError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(str(error))}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {escape(error)}")
    raise typer.Exit(code=1)
