"""
Root Typer application for the changelog-gen CLI.

Every command loads the changelog (piped stdin first, then ``--file``),
works on the parsed document, and writes the result back to the file or
to stdout with ``--stdout``. Failures are printed as one red line on
stderr with exit status 1.
"""

from __future__ import annotations

import re
from pathlib import Path

import typer
from typer import Typer

from changelog_gen import __version__
from changelog_gen.core.errors import ChangelogError
from changelog_gen.core.logging import LogContext, configure_logging
from changelog_gen.core.settings import ParsingMode, Provider, get_settings, load_section_map
from changelog_gen.document import DEFAULT_CHANGELOG
from changelog_gen.document.formatter import FormatOptions, format_changelog, format_note, format_release
from changelog_gen.document.lifecycle import (
    PromoteOptions,
    find_releases,
    nth_release,
    promote,
    remove_matching,
    remove_release,
)
from changelog_gen.document.parser import parse_changelog
from changelog_gen.document.sanitizer import SanitizeOptions, sanitize
from changelog_gen.document.version import Version
from changelog_gen.generation.generator import GenerateOptions, NoteGenerator
from changelog_gen.generation.git_scan import open_repository
from changelog_gen.generation.provider import provider_for

from .utils import console, err_console, fail, read_input, sanitize_options, write_output

app = Typer(
    name="changelog-gen",
    help="changelog-gen — generate, validate and release Keep a Changelog files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("changelog-gen")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"changelog-gen {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug events to stderr."),
) -> None:
    """changelog-gen CLI — manage a CHANGELOG.md from the command line."""
    try:
        settings = get_settings()
    except ChangelogError as exc:
        fail(exc)
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_format=settings.log_json)


# ── Shared option helpers ────────────────────────────────────────────────

FileOption = typer.Option(None, "--file", "-f", help="Changelog path (default: CHANGELOG.md).")
StdoutOption = typer.Option(False, "--stdout", help="Print the result instead of writing the file.")
MapOption = typer.Option(None, "--map", help="JSON file mapping sections to commit types.")
ProviderOption = typer.Option(None, "--provider", help="Code-hosting provider.")
RepoOption = typer.Option(None, "--repo", help="owner/name of the repository (default: $GITHUB_REPOSITORY).")


def _changelog_path(file: Path | None) -> Path:
    return file or get_settings().file


def _parse_version(text: str | None, option: str) -> Version | None:
    if text is None:
        return None
    try:
        return Version.parse(text)
    except ChangelogError as exc:
        raise typer.BadParameter(exc.message, param_hint=option) from exc


def _compile(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise typer.BadParameter(f"invalid regex: {exc}", param_hint="--version") from exc


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def generate(
    file: Path | None = FileOption,
    map_file: Path | None = MapOption,
    parsing: ParsingMode = typer.Option(ParsingMode.SMART, "--parsing", help="Commit subject parsing mode."),
    exclude_unidentified: bool = typer.Option(False, "--exclude-unidentified", help="Fail commits no section claims."),
    exclude_not_pr: bool = typer.Option(False, "--exclude-not-pr", help="Fail commits not merged through a PR."),
    provider: Provider | None = ProviderOption,
    repo: str | None = RepoOption,
    omit_pr_link: bool = typer.Option(False, "--omit-pr-link", help="Do not link the pull request."),
    omit_thanks: bool = typer.Option(False, "--omit-thanks", help="Do not credit the pull request author."),
    stdout: bool = StdoutOption,
    specific: str | None = typer.Option(None, "--specific", help="Generate a note for this commit only."),
    since: str | None = typer.Option(None, "--since", help="Start of the commit range (exclusive)."),
    until: str | None = typer.Option(None, "--until", help="End of the commit range (inclusive, default HEAD)."),
) -> None:
    """Add notes for recent commits to the unreleased section."""
    settings = get_settings()
    path = _changelog_path(file)
    host = None
    try:
        with LogContext(command="generate"):
            changelog = parse_changelog(read_input(path))
            section_map = load_section_map(map_file or settings.map_file)
            host = provider_for(
                provider or settings.provider,
                token=settings.github_token,
                timeout=settings.http_timeout,
            )
            generator = NoteGenerator(
                open_repository(repo_dir=Path.cwd(), timeout=settings.git_timeout),
                GenerateOptions(
                    changelog_path=path.as_posix(),
                    section_map=section_map,
                    parsing=parsing,
                    exclude_unidentified=exclude_unidentified,
                    exclude_not_pr=exclude_not_pr,
                    omit_pr_link=omit_pr_link,
                    omit_thanks=omit_thanks,
                ),
                provider=host,
                repo=repo or settings.repo,
            )
            report = generator.generate(
                changelog.unreleased_or_default(),
                specific=specific,
                since=since,
                until=until,
            )
            sanitize(changelog, sanitize_options(settings, section_map))
            write_output(format_changelog(changelog), path, stdout=stdout)
    except ChangelogError as exc:
        fail(exc)
    finally:
        if host is not None:
            host.close()

    for sha, reason in report.skipped:
        err_console.print(f"Ignoring commit {sha[:7]}. {reason}", highlight=False, markup=False)
    for section, note in report.added:
        err_console.print(
            f"Release note:\n{format_note(note)}successfully added in the {section} section.",
            highlight=False,
            markup=False,
        )
    for sha, reason in report.failed:
        err_console.print(f"Commit {sha[:7]} skipped: {reason}", highlight=False, markup=False)


@app.command()
def release(
    file: Path | None = FileOption,
    version: str | None = typer.Option(None, "--version", help="New version (default: newest git tag)."),
    previous_version: str | None = typer.Option(None, "--previous-version", help="Base of the diff link."),
    provider: Provider | None = ProviderOption,
    repo: str | None = RepoOption,
    header: str | None = typer.Option(None, "--header", help="Line prepended to the release header."),
    merge_dev_versions: bool | None = typer.Option(
        None,
        "--merge-dev-versions/--no-merge-dev-versions",
        help="Fold pre-releases of the same version into the release.",
    ),
    omit_diff: bool = typer.Option(False, "--omit-diff", help="Do not append the diff link."),
    stdout: bool = StdoutOption,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing release."),
) -> None:
    """Promote the unreleased section to a new version."""
    settings = get_settings()
    path = _changelog_path(file)
    new_version = _parse_version(version, "--version")
    previous = _parse_version(previous_version, "--previous-version")
    host = None
    try:
        with LogContext(command="release"):
            changelog = parse_changelog(read_input(path))
            host = provider_for(
                provider or settings.provider,
                token=settings.github_token,
                timeout=settings.http_timeout,
            )
            section_map = load_section_map(settings.map_file)
            result = promote(
                changelog,
                PromoteOptions(
                    version=new_version,
                    previous_version=previous,
                    force=force,
                    header=header,
                    merge_dev_versions=(
                        settings.merge_dev_versions if merge_dev_versions is None else merge_dev_versions
                    ),
                    omit_diff=omit_diff,
                    sanitize=sanitize_options(settings, section_map),
                ),
                tags=open_repository(repo_dir=Path.cwd(), timeout=settings.git_timeout),
                provider=host,
                repo=repo or settings.repo,
            )
            write_output(result.text, path, stdout=stdout)
    except ChangelogError as exc:
        fail(exc)
    finally:
        if host is not None:
            host.close()

    if result.overwritten:
        err_console.print(f"[yellow]Warning[/yellow] The release {result.version} was overwritten.")
    err_console.print(f"New release {result.version} successfully created.", highlight=False)


@app.command()
def validate(
    file: Path | None = FileOption,
    fmt: bool = typer.Option(False, "--format", help="Rewrite the changelog in canonical form."),
    map_file: Path | None = MapOption,
    ast: bool = typer.Option(False, "--ast", help="Print the parsed document."),
    stdout: bool = StdoutOption,
) -> None:
    """Check that the changelog parses, optionally reformatting it."""
    settings = get_settings()
    path = _changelog_path(file)
    try:
        changelog = parse_changelog(read_input(path))
        if ast:
            err_console.print(changelog)
        if fmt:
            section_map = load_section_map(map_file or settings.map_file)
            sanitize(changelog, sanitize_options(settings, section_map))
            write_output(format_changelog(changelog), path, stdout=stdout)
    except ChangelogError as exc:
        fail(exc)

    err_console.print("Changelog parsed with success!")


@app.command()
def show(
    file: Path | None = FileOption,
    n: int = typer.Option(0, "-n", "--nth", help="-1 for unreleased, 0 for the newest release, 1 for the one before..."),
    version: str | None = typer.Option(None, "--version", help="Regex matched against release versions."),
) -> None:
    """Print releases without their title line."""
    path = _changelog_path(file)
    pattern = _compile(version)
    try:
        changelog = parse_changelog(read_input(path))
        if pattern is not None:
            releases = [found.release for found in find_releases(changelog, pattern)]
        else:
            releases = [nth_release(changelog, n).release]
    except ChangelogError as exc:
        fail(exc)

    if not releases:
        fail("No release found")

    options = FormatOptions(serialize_title=False)
    typer.echo("\n".join(format_release(release, options) for release in releases), nl=False)


@app.command()
def new(
    path: Path | None = typer.Option(None, "--path", "-p", help="Where to create the changelog."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Create a changelog from the default template."""
    target = _changelog_path(path)
    if target.exists() and not force:
        fail("Path already exist. Delete it or use the --force option")
    target.write_text(DEFAULT_CHANGELOG, encoding="utf-8")
    console.print("Changelog successfully created!")


@app.command()
def remove(
    file: Path | None = FileOption,
    stdout: bool = StdoutOption,
    n: int = typer.Option(0, "-n", "--nth", help="-1 for unreleased, 0 for the newest release, 1 for the one before..."),
    version: str | None = typer.Option(None, "--version", help="Remove every release matching this regex."),
) -> None:
    """Remove releases from the changelog."""
    path = _changelog_path(file)
    pattern = _compile(version)
    try:
        changelog = parse_changelog(read_input(path))
        if pattern is not None:
            remove_matching(changelog, pattern)
        else:
            remove_release(changelog, n)
        sanitize(changelog, SanitizeOptions())
        write_output(format_changelog(changelog), path, stdout=stdout)
    except ChangelogError as exc:
        fail(exc)
