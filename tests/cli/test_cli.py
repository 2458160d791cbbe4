"""Tests for changelog_gen.cli.app — the changelog-gen Typer application.

Covers every command against a changelog in a temporary directory, with
git and GitHub collaborators patched out.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from changelog_gen.cli.app import app
from changelog_gen.document import DEFAULT_CHANGELOG
from changelog_gen.document.version import Version
from changelog_gen.generation.git_scan import FixtureGitRepository

runner = CliRunner()

FIXTURE = Path(__file__).parent.parent / "fixtures" / "changelog_repo"

CHANGELOG = """\
# Changelog

## [Unreleased]

### Fixed

- staged fix

## [1.1.0]

### Added

- feature two

## [1.0.0]

### Added

- feature one
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
    return tmp_path


def _links() -> MagicMock:
    provider = MagicMock()
    provider.release_link.side_effect = lambda repo, version: f"https://github.com/{repo}/releases/tag/{version}"
    provider.diff_link.side_effect = (
        lambda repo, previous, new: f"https://github.com/{repo}/compare/{previous}...{new}"
    )
    return provider


class TestAppBasics:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("changelog-gen ")

    @pytest.mark.parametrize("command", ["generate", "release", "validate", "show", "new", "remove"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_invalid_settings(self, workdir, monkeypatch):
        monkeypatch.setenv("CHANGELOG_LOG_LEVEL", "LOUD")
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert "CONFIG" in result.output


class TestNew:
    def test_creates_template(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["new"])
        assert result.exit_code == 0
        assert "Changelog successfully created!" in result.output
        assert (tmp_path / "CHANGELOG.md").read_text() == DEFAULT_CHANGELOG

    def test_refuses_to_overwrite(self, workdir):
        result = runner.invoke(app, ["new"])
        assert result.exit_code == 1
        assert "Path already exist" in result.output
        assert (workdir / "CHANGELOG.md").read_text() == CHANGELOG

    def test_force(self, workdir):
        result = runner.invoke(app, ["new", "--force"])
        assert result.exit_code == 0
        assert (workdir / "CHANGELOG.md").read_text() == DEFAULT_CHANGELOG

    def test_custom_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["new", "--path", "CHANGES.md"])
        assert result.exit_code == 0
        assert (tmp_path / "CHANGES.md").exists()


class TestValidate:
    def test_success(self, workdir):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "Changelog parsed with success!" in result.output

    def test_parse_error(self, workdir):
        (workdir / "CHANGELOG.md").write_text("## [next]\n")
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert "PARSE" in result.output

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert "Changelog not found" in result.output

    def test_format_rewrites_file(self, workdir):
        (workdir / "CHANGELOG.md").write_text("## [1.0.0]\n### Fixed\n- a\n- a\n### Added\n- b\n")
        result = runner.invoke(app, ["validate", "--format"])
        assert result.exit_code == 0
        assert (workdir / "CHANGELOG.md").read_text() == (
            "## [Unreleased]\n\n## [1.0.0]\n\n### Added\n\n- b\n\n### Fixed\n\n- a\n"
        )

    def test_format_to_stdout_keeps_file(self, workdir):
        (workdir / "CHANGELOG.md").write_text("## [1.0.0]\n### Fixed\n- a\n")
        result = runner.invoke(app, ["validate", "--format", "--stdout"])
        assert result.exit_code == 0
        assert "## [Unreleased]\n\n## [1.0.0]\n\n### Fixed\n\n- a\n" in result.output
        assert (workdir / "CHANGELOG.md").read_text() == "## [1.0.0]\n### Fixed\n- a\n"

    def test_reads_stdin(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["validate", "--format", "--stdout"], input="## [2.0.0]\n")
        assert result.exit_code == 0
        assert "## [2.0.0]" in result.output

    def test_custom_map_orders_sections(self, workdir):
        (workdir / "map.json").write_text('{"Fixed": ["fix"], "Added": ["feat"]}')
        (workdir / "CHANGELOG.md").write_text("## [1.0.0]\n### Added\n- b\n### Fixed\n- a\n")
        result = runner.invoke(app, ["validate", "--format", "--map", "map.json"])
        assert result.exit_code == 0
        text = (workdir / "CHANGELOG.md").read_text()
        assert text.index("### Fixed") < text.index("### Added")

    def test_ast(self, workdir):
        result = runner.invoke(app, ["validate", "--ast"])
        assert result.exit_code == 0
        assert "ChangeLog" in result.output


class TestShow:
    def test_newest(self, workdir):
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert result.output == "### Added\n\n- feature two\n"

    def test_nth(self, workdir):
        result = runner.invoke(app, ["show", "--nth", "1"])
        assert result.output == "### Added\n\n- feature one\n"

    def test_unreleased(self, workdir):
        result = runner.invoke(app, ["show", "--nth=-1"])
        assert result.output == "### Fixed\n\n- staged fix\n"

    def test_out_of_range(self, workdir):
        result = runner.invoke(app, ["show", "--nth", "5"])
        assert result.exit_code == 1
        assert "VALIDATION" in result.output

    def test_version_regex(self, workdir):
        result = runner.invoke(app, ["show", "--version", r"^1\."])
        assert result.exit_code == 0
        assert result.output == "### Added\n\n- feature two\n\n### Added\n\n- feature one\n"

    def test_version_regex_no_match(self, workdir):
        result = runner.invoke(app, ["show", "--version", "^9"])
        assert result.exit_code == 1
        assert "No release found" in result.output

    def test_bad_regex(self, workdir):
        result = runner.invoke(app, ["show", "--version", "("])
        assert result.exit_code == 2
        assert "invalid regex" in result.output


class TestRemove:
    def test_newest(self, workdir):
        result = runner.invoke(app, ["remove"])
        assert result.exit_code == 0
        text = (workdir / "CHANGELOG.md").read_text()
        assert "## [1.1.0]" not in text
        assert "## [1.0.0]" in text

    def test_unreleased(self, workdir):
        runner.invoke(app, ["remove", "--nth=-1"])
        text = (workdir / "CHANGELOG.md").read_text()
        assert "staged fix" not in text
        assert "## [Unreleased]" in text

    def test_regex(self, workdir):
        result = runner.invoke(app, ["remove", "--version", r"^1\.", "--stdout"])
        assert result.exit_code == 0
        assert result.output == "# Changelog\n\n## [Unreleased]\n\n### Fixed\n\n- staged fix\n"
        assert (workdir / "CHANGELOG.md").read_text() == CHANGELOG


class TestRelease:
    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_explicit_version(self, mock_open, mock_provider, workdir):
        mock_provider.return_value = None
        result = runner.invoke(app, ["release", "--version", "1.2.0"])

        assert result.exit_code == 0
        assert "New release 1.2.0 successfully created." in result.output
        text = (workdir / "CHANGELOG.md").read_text()
        assert text.startswith("# Changelog\n\n## [Unreleased]\n\n## [1.2.0]\n\n### Fixed\n\n- staged fix\n")
        mock_open.return_value.last_tag.assert_not_called()

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_version_from_tag(self, mock_open, mock_provider, workdir):
        mock_provider.return_value = None
        mock_open.return_value.last_tag.return_value = Version.parse("2.0.0")
        result = runner.invoke(app, ["release"])
        assert result.exit_code == 0
        assert "## [2.0.0]" in (workdir / "CHANGELOG.md").read_text()

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_no_version(self, mock_open, mock_provider, workdir):
        mock_provider.return_value = None
        mock_open.return_value.last_tag.return_value = None
        result = runner.invoke(app, ["release"])
        assert result.exit_code == 1
        assert "VALIDATION" in result.output
        assert (workdir / "CHANGELOG.md").read_text() == CHANGELOG

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_conflict_and_force(self, mock_open, mock_provider, workdir):
        mock_provider.return_value = None
        result = runner.invoke(app, ["release", "--version", "1.1.0"])
        assert result.exit_code == 1
        assert "CONFLICT" in result.output

        result = runner.invoke(app, ["release", "--version", "1.1.0", "--force"])
        assert result.exit_code == 0
        assert "was overwritten" in result.output
        assert "feature two" not in (workdir / "CHANGELOG.md").read_text()

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_links(self, mock_open, mock_provider, workdir, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
        provider = _links()
        mock_provider.return_value = provider
        result = runner.invoke(app, ["release", "--version", "1.2.0", "--header", "Codename: Otter"])

        assert result.exit_code == 0
        text = (workdir / "CHANGELOG.md").read_text()
        assert "## [1.2.0](https://github.com/owner/repo/releases/tag/1.2.0)\n\nCodename: Otter\n" in text
        assert "Full Changelog: https://github.com/owner/repo/compare/1.1.0...1.2.0\n" in text
        provider.close.assert_called_once()

    def test_invalid_version_option(self, workdir):
        result = runner.invoke(app, ["release", "--version", "banana"])
        assert result.exit_code == 2
        assert "Invalid version format" in result.output

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_previous_greater(self, mock_open, mock_provider, workdir):
        mock_provider.return_value = None
        result = runner.invoke(app, ["release", "--version", "1.2.0", "--previous-version", "3.0.0"])
        assert result.exit_code == 1
        assert "inferior" in result.output

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_merge_dev_versions_from_env(self, mock_open, mock_provider, workdir, monkeypatch):
        monkeypatch.setenv("CHANGELOG_MERGE_DEV_VERSIONS", "true")
        mock_provider.return_value = None
        (workdir / "CHANGELOG.md").write_text(
            "## [Unreleased]\n\n### Fixed\n\n- final\n\n## [2.0.0-rc.1]\n\n### Added\n\n- rc\n"
        )
        result = runner.invoke(app, ["release", "--version", "2.0.0", "--stdout"])
        assert result.exit_code == 0
        assert "2.0.0-rc.1" not in result.output.split("New release")[0]
        assert "- rc\n" in result.output


class TestGenerate:
    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_last_commit(self, mock_open, mock_provider, workdir):
        mock_open.return_value = FixtureGitRepository(FIXTURE)
        mock_provider.return_value = None
        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 0
        assert "successfully added in the Changed section" in result.output
        text = (workdir / "CHANGELOG.md").read_text()
        assert "### Changed\n\n- faster sanitize pass\n" in text

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_range_to_stdout(self, mock_open, mock_provider, workdir):
        mock_open.return_value = FixtureGitRepository(FIXTURE)
        mock_provider.return_value = None
        result = runner.invoke(app, ["generate", "--since", "1.0.0", "--stdout"])

        assert result.exit_code == 0
        assert "- parser: handle CRLF line endings\n" in result.output
        assert "### Unidentified\n\n- Update readme wording\n" in result.output
        assert (workdir / "CHANGELOG.md").read_text() == CHANGELOG

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_ignored_commit(self, mock_open, mock_provider, workdir):
        mock_open.return_value = FixtureGitRepository(FIXTURE)
        mock_provider.return_value = None
        result = runner.invoke(app, ["generate", "--specific", "3000000"])
        assert result.exit_code == 0
        assert "Ignoring commit 3000000" in result.output

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_strict_failure(self, mock_open, mock_provider, workdir):
        mock_open.return_value = FixtureGitRepository(FIXTURE)
        mock_provider.return_value = None
        result = runner.invoke(app, ["generate", "--specific", "6000000", "--parsing", "strict"])
        assert result.exit_code == 1
        assert "Invalid commit syntax" in result.output
        assert (workdir / "CHANGELOG.md").read_text() == CHANGELOG

    @patch("changelog_gen.cli.app.provider_for")
    @patch("changelog_gen.cli.app.open_repository")
    def test_pull_request_decoration(self, mock_open, mock_provider, workdir, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
        mock_open.return_value = FixtureGitRepository(FIXTURE)
        provider = MagicMock()
        provider.related_pr.return_value = MagicMock(
            pr_id="#9", url="https://github.com/owner/repo/pull/9", author="octo", author_link="https://github.com/octo"
        )
        mock_provider.return_value = provider
        result = runner.invoke(app, ["generate", "--specific", "2000000"])

        assert result.exit_code == 0
        text = (workdir / "CHANGELOG.md").read_text()
        assert "- cli: add --stdout option in [#9](https://github.com/owner/repo/pull/9) by [@octo]" in text
        provider.close.assert_called_once()
