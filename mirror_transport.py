#!/usr/bin/env python3
"""Git transport: mirror clone, LFS transfer and forced push to the target."""

from __future__ import annotations

from errors import CloneError, PushError
from logging_utils import Logger, RepoLogger
from process_runner import ProcessRunner
from utils import build_auth_url

TARGET_REMOTE = "target"

# Every branch and every tag, overwriting whatever the target holds
PUSH_REFSPECS = ["refs/heads/*:refs/heads/*", "refs/tags/*:refs/tags/*"]


def install_large_object_support(runner: ProcessRunner) -> None:
    """Install git-lfs hooks globally and enable lock verification.

    Idempotent; failures are warnings because the environment may already be
    configured.
    """
    Logger.info("installing git lfs support")
    runner.git(
        ["lfs", "install"],
        ".",
        critical=False,
        failure="git lfs install failed",
    )
    runner.git(
        ["config", "--global", "lfs.locksverify", "true"],
        ".",
        critical=False,
        failure="git lfs config failed",
    )


class MirrorTransport:
    """Moves a bare mirror between the source and the target remote."""

    def __init__(self, runner: ProcessRunner, log: RepoLogger) -> None:
        self.runner = runner
        self.log = log

    def clone_mirror(self, source_url: str, target_dir: str) -> None:
        self.log.info("cloning mirror...")
        self.runner.git(
            ["clone", "--mirror", source_url, target_dir],
            ".",
            error_cls=CloneError,
            failure="failed to clone",
            log=self.log,
        )

    def fetch_large_objects(self, repo_dir: str, source_url: str) -> None:
        self.log.info("fetching LFS objects...")
        self.runner.git(
            ["lfs", "fetch", "--all", source_url],
            repo_dir,
            critical=False,
            failure="LFS fetch failed",
            log=self.log,
        )

    def push_branches_and_tags(
        self, repo_dir: str, target_url: str, username: str, password: str
    ) -> None:
        """Force-push every branch and tag to ``target_url``."""
        self.log.info("pushing to target...")
        auth_url = build_auth_url(target_url, username, password)
        self.runner.git(
            ["remote", "add", TARGET_REMOTE, auth_url],
            repo_dir,
            error_cls=PushError,
            failure="failed to add target remote",
            log=self.log,
        )
        self.runner.git(
            ["config", f"lfs.{target_url}/info/lfs.locksverify", "true"],
            repo_dir,
            critical=False,
            failure="failed to enable LFS lock verification for target",
            log=self.log,
        )
        self.runner.git(
            ["push", "--force", TARGET_REMOTE, *PUSH_REFSPECS],
            repo_dir,
            error_cls=PushError,
            failure="failed to push",
            log=self.log,
        )

    def push_large_objects(self, repo_dir: str) -> None:
        self.log.info("pushing LFS objects...")
        self.runner.git(
            ["lfs", "push", "--all", TARGET_REMOTE],
            repo_dir,
            critical=False,
            failure="LFS push failed",
            log=self.log,
        )
