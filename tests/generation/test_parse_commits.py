"""Tests for changelog_gen.generation.parse_commits — commit classification."""

from __future__ import annotations

import pytest

from changelog_gen.core.errors import CommitClassificationError
from changelog_gen.core.settings import DEFAULT_SECTION_MAP, ParsingMode, SectionMap
from changelog_gen.generation.git_scan import RawCommit
from changelog_gen.generation.parse_commits import (
    classify,
    find_section,
    ignore_reason,
    parse_conventional,
    should_ignore,
)


class TestParseConventional:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("fix: crash", ("fix", None, "crash")),
            ("feat(cli): add --stdout", ("feat", "cli", "add --stdout")),
            ("feat(api)!: drop v1", ("feat", "api", "drop v1")),
            ("fix!: breaking", ("fix", None, "breaking")),
            ("refactor( core ):   tidy", ("refactor", "core", "tidy")),
        ],
    )
    def test_valid(self, title, expected):
        assert parse_conventional(title) == expected

    @pytest.mark.parametrize("title", ["Update readme", "fix crash", ": nothing", "fix:"])
    def test_invalid(self, title):
        assert parse_conventional(title) is None


class TestClassify:
    def test_known_type(self):
        commit = classify("fix(parser): handle CRLF", section_map=DEFAULT_SECTION_MAP)
        assert (commit.section, commit.scope, commit.message) == ("Fixed", "parser", "handle CRLF")

    def test_type_is_case_insensitive(self):
        assert classify("FEAT: shout", section_map=DEFAULT_SECTION_MAP).section == "Added"

    def test_smart_unknown_type_falls_back_to_keywords(self):
        commit = classify("chore: remove dead code", section_map=DEFAULT_SECTION_MAP)
        assert commit.section == "Removed"
        assert commit.message == "remove dead code"

    def test_smart_free_text(self):
        commit = classify("Fix crash when file is empty", section_map=DEFAULT_SECTION_MAP)
        assert commit.section == "Fixed"
        assert commit.scope is None
        assert commit.message == "Fix crash when file is empty"

    def test_smart_keyword_in_body(self):
        commit = classify("Tidy things", "perf improvements inside", section_map=DEFAULT_SECTION_MAP)
        assert commit.section == "Changed"

    def test_smart_unidentified(self):
        commit = classify("Update readme wording", section_map=DEFAULT_SECTION_MAP)
        assert commit.section == "Unidentified"

    def test_exclude_unidentified(self):
        with pytest.raises(CommitClassificationError) as exc_info:
            classify(
                "Update readme wording",
                section_map=DEFAULT_SECTION_MAP,
                exclude_unidentified=True,
                sha="abc",
            )
        assert exc_info.value.message == "Unidentified commit type"
        assert exc_info.value.sha == "abc"

    def test_strict_unknown_type(self):
        with pytest.raises(CommitClassificationError) as exc_info:
            classify("chore: bump", section_map=DEFAULT_SECTION_MAP, mode=ParsingMode.STRICT)
        assert exc_info.value.message == "No commit type found for this: chore"

    def test_strict_invalid_syntax(self):
        with pytest.raises(CommitClassificationError) as exc_info:
            classify("Fix things", section_map=DEFAULT_SECTION_MAP, mode=ParsingMode.STRICT)
        assert exc_info.value.message.startswith("Invalid commit syntax")

    def test_custom_map(self):
        section_map = SectionMap({"Features": ["feature"], "Bugs": ["bug"]})
        assert classify("bug: oops", section_map=section_map).section == "Bugs"
        assert classify("fix: oops", section_map=section_map).section == "Unidentified"


class TestFindSection:
    def test_first_section_in_map_order_wins(self):
        assert find_section(DEFAULT_SECTION_MAP, "fix security hole") == "Security"

    def test_whole_words_only(self):
        assert find_section(DEFAULT_SECTION_MAP, "prefix suffix") is None


class TestIgnore:
    @pytest.mark.parametrize(
        "title, body",
        [
            ("fix: typo (skip changelog)", ""),
            ("fix: typo", "details\n(ignore log)"),
            ("chore: bump !notes", ""),
            ("docs: (skip chglog)", ""),
        ],
    )
    def test_patterns(self, title, body):
        commit = RawCommit(sha="abc", title=title, body=body)
        assert should_ignore(commit)
        assert "was matched" in ignore_reason(commit)

    def test_changelog_touched(self):
        commit = RawCommit(sha="abc", title="docs: release", files=("CHANGELOG.md", "README.md"))
        assert ignore_reason(commit, "CHANGELOG.md") == "The changelog was modified in this commit."
        assert not should_ignore(commit, None)

    def test_regular_commit(self):
        commit = RawCommit(sha="abc", title="fix: crash", files=("src/app.py",))
        assert ignore_reason(commit, "CHANGELOG.md") is None
