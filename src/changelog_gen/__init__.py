"""
changelog-gen: keep a Keep a Changelog file in shape.

Parses ``CHANGELOG.md`` into a document model, stages notes generated from
git commits, promotes the unreleased section into a new version and writes
the document back in canonical form.

Packages:
    core        errors, structured logging and settings
    document    version, model, parser, formatter, sanitizer, release lifecycle
    generation  git access, commit classification, GitHub lookups, note generator
    cli         the ``changelog-gen`` Typer application
"""

__version__ = "0.3.0"
