#!/usr/bin/env python3
"""Scratch workspace holding one repository's bare mirror."""

from __future__ import annotations

import os
import shutil
import tempfile

from logging_utils import Logger, RepoLogger
from security import SecurityValidator

MIRROR_DIR_NAME = "repo.git"


class ScratchWorkspace:
    """Exclusively owned temporary directory for one repository sync.

    Each instance creates a fresh directory; it is never reused.
    """

    def __init__(self, base_dir: str, repo_name: str, log: RepoLogger) -> None:
        self.base_dir = base_dir
        self.repo_name = repo_name
        self.log = log
        self.path = self._create()

    @property
    def mirror_dir(self) -> str:
        return os.path.join(self.path, MIRROR_DIR_NAME)

    def _create(self) -> str:
        # Permissions are set only on a base created here; an existing base
        # keeps its mode and each repository still gets a private mkdtemp
        try:
            os.makedirs(self.base_dir, mode=0o700)
        except FileExistsError:
            if not os.path.isdir(self.base_dir):
                raise
        else:
            os.chmod(self.base_dir, 0o700)
            Logger.security_event(
                "WORKSPACE_BASE_CREATED",
                f"created private base directory {self.base_dir}",
            )

        path = tempfile.mkdtemp(prefix=f"sync-{self.repo_name}-", dir=self.base_dir)
        os.chmod(path, 0o700)
        self.log.debug(f"workspace created: {path}")
        return path

    def release(self) -> None:
        """Best-effort removal of the workspace; never raises."""
        if not os.path.exists(self.path):
            return
        try:
            # Pack files are read-only; make everything writable first
            for root, dirs, files in os.walk(self.path):
                for d in dirs:
                    os.chmod(os.path.join(root, d), 0o700)
                for f in files:
                    os.chmod(os.path.join(root, f), 0o600)
            shutil.rmtree(self.path)
            self.log.debug("workspace cleaned up")
        except OSError as e:
            Logger.security_event(
                "CLEANUP_FAILED",
                f"failed to clean up temporary directory for {self.repo_name}",
            )
            shutil.rmtree(self.path, ignore_errors=True)
            safe_error = SecurityValidator.sanitize_for_logging(str(e))
            self.log.warn(f"failed to clean up workspace {self.path}: {safe_error}")
