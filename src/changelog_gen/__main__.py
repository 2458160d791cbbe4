"""Allow ``python -m changelog_gen``."""

from changelog_gen.cli.app import app

if __name__ == "__main__":
    app()
