#!/usr/bin/env python3
"""Rewrite every branch tip of a bare mirror into a parentless snapshot commit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from errors import GitCommandError, RewriteError
from logging_utils import RepoLogger
from process_runner import ProcessRunner

HEADS_PREFIX = "refs/heads/"

# Single-line fields only; the message is read separately. %e is the
# encoding header, empty for UTF-8 commits.
METADATA_FORMAT = "format:%H%x00%T%x00%an%x00%ae%x00%aI%x00%cn%x00%ce%x00%cI%x00%e"
METADATA_FIELDS = 9

# Print stored bytes as they are instead of re-encoding to UTF-8
RAW_ENCODING = "--encoding=none"


@dataclass(frozen=True)
class BranchRef:
    name: str
    ref: str


@dataclass(frozen=True)
class CommitMetadata:
    """Identity, timestamps, message and tree of one branch tip."""
    commit_id: str
    tree_id: str
    author_name: str
    author_email: str
    author_date: str
    committer_name: str
    committer_email: str
    committer_date: str
    message: str
    encoding: str = ""

    def identity_env(self) -> Dict[str, str]:
        return {
            "GIT_AUTHOR_NAME": self.author_name,
            "GIT_AUTHOR_EMAIL": self.author_email,
            "GIT_AUTHOR_DATE": self.author_date,
            "GIT_COMMITTER_NAME": self.committer_name,
            "GIT_COMMITTER_EMAIL": self.committer_email,
            "GIT_COMMITTER_DATE": self.committer_date,
        }


class SnapshotRewriter:
    """Replaces each branch's history with a single root commit of its tip."""

    def __init__(self, runner: ProcessRunner, log: RepoLogger) -> None:
        self.runner = runner
        self.log = log

    def list_branches(self, repo_dir: str) -> List[BranchRef]:
        result = self.runner.git(
            ["for-each-ref", "--format=%(refname)", HEADS_PREFIX],
            repo_dir,
            failure="failed to list branches",
        )
        branches: List[BranchRef] = []
        for line in result.stdout.splitlines():
            ref = line.strip()
            if ref:
                branches.append(BranchRef(name=ref[len(HEADS_PREFIX):], ref=ref))
        return branches

    def read_commit_metadata(self, repo_dir: str, ref: str) -> CommitMetadata:
        """Capture the tip commit of ``ref``.

        The message comes from its own ``%B`` query so multi-line bodies are
        kept byte for byte; ``format:`` adds no trailing terminator. A message
        stored in a legacy encoding is read raw and its encoding kept.
        """
        fields_result = self.runner.git(
            ["log", "-1", f"--format={METADATA_FORMAT}", RAW_ENCODING, ref, "--"],
            repo_dir,
            failure="failed to read commit info",
        )
        fields = fields_result.stdout.split("\x00")
        if len(fields) != METADATA_FIELDS:
            raise GitCommandError(
                f"unexpected commit info for {ref}: got {len(fields)} fields"
            )

        message_result = self.runner.git(
            ["log", "-1", "--format=format:%B", RAW_ENCODING, ref, "--"],
            repo_dir,
            failure="failed to read commit message",
        )

        (commit_id, tree_id, author_name, author_email, author_date,
         committer_name, committer_email, committer_date, encoding) = fields
        return CommitMetadata(
            commit_id=commit_id.strip(),
            tree_id=tree_id,
            author_name=author_name,
            author_email=author_email,
            author_date=author_date,
            committer_name=committer_name,
            committer_email=committer_email,
            committer_date=committer_date,
            message=message_result.stdout,
            encoding=encoding.strip(),
        )

    def create_orphan_commit(self, repo_dir: str, metadata: CommitMetadata) -> str:
        """Write a parentless commit of ``metadata.tree_id`` and return its id.

        Identity goes through the environment and the message through stdin,
        so neither can be parsed as a command-line option. A non-UTF-8
        encoding header is written again through ``i18n.commitEncoding``.
        """
        args = ["commit-tree", "--no-gpg-sign", metadata.tree_id]
        if metadata.encoding:
            args = ["-c", f"i18n.commitEncoding={metadata.encoding}", *args]
        result = self.runner.git(
            args,
            repo_dir,
            env=metadata.identity_env(),
            input_text=metadata.message,
            failure="failed to create orphan commit",
        )
        return result.stdout.strip()

    def update_branch_ref(
        self, repo_dir: str, branch: BranchRef, new_id: str, old_id: str
    ) -> None:
        # Passing the old value makes the update a compare-and-swap
        self.runner.git(
            ["update-ref", branch.ref, new_id, old_id],
            repo_dir,
            failure=f"failed to update ref {branch.ref}",
        )

    def create_snapshot_commits(self, repo_dir: str) -> Dict[str, str]:
        """Snapshot every branch; returns branch name -> new commit id.

        Tags are left alone. The first failing branch aborts the rewrite.
        """
        self.log.info("creating snapshot commits...")
        branches = self.list_branches(repo_dir)
        self.log.info(f"found {len(branches)} branches")

        captured: List[Tuple[BranchRef, CommitMetadata]] = []
        for branch in branches:
            try:
                captured.append((branch, self.read_commit_metadata(repo_dir, branch.ref)))
            except GitCommandError as e:
                raise RewriteError(branch.name, str(e)) from e

        snapshots: Dict[str, str] = {}
        for branch, metadata in captured:
            try:
                new_id = self.create_orphan_commit(repo_dir, metadata)
                self.update_branch_ref(repo_dir, branch, new_id, metadata.commit_id)
            except GitCommandError as e:
                raise RewriteError(branch.name, str(e)) from e
            snapshots[branch.name] = new_id
            self.log.info(f"snapshot created for branch '{branch.name}': {new_id[:8]}")
        return snapshots
