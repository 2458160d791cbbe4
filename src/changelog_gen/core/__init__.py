"""Ambient plumbing shared by the document core, the collaborators and the CLI.

- ``errors``: typed exception hierarchy
- ``logging``: structlog configuration
- ``settings``: pydantic-settings configuration and the section map
"""
