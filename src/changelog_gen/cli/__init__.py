"""
Command-line interface for changelog-gen.

Usage:
    changelog-gen generate --since 1.2.0
    changelog-gen release --version 1.3.0
    changelog-gen validate --format
    changelog-gen show -n 0
"""

from changelog_gen.cli.app import app

__all__ = ["app"]
