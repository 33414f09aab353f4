#!/usr/bin/env python3
"""Exception hierarchy for snapshot-mirror."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for failures inside a single repository sync."""


class GitCommandError(SyncError):
    """A critical git invocation exited non-zero."""


class CloneError(GitCommandError):
    """Mirror clone of the source repository failed."""


class PushError(GitCommandError):
    """Adding the target remote or pushing refs to it failed."""


class RewriteError(GitCommandError):
    """Snapshotting a branch failed."""

    def __init__(self, branch: str, detail: str) -> None:
        super().__init__(f"failed to snapshot branch '{branch}': {detail}")
        self.branch = branch
        self.detail = detail


class SourceError(SyncError):
    """Repository metadata could not be read from the source platform."""


class ProvisionError(SyncError):
    """Target repository could not be created."""


class ConfigError(ValueError):
    """Required configuration is missing or invalid."""
