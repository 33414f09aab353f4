#!/usr/bin/env python3
"""Single repository pipeline: metadata, target, clone, snapshot, push."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from cnb_target import CnbTarget
from config import Config, RepositoryInfo, SyncResult, TargetPlatform
from errors import ProvisionError, SyncError
from github_source import GitHubSource
from logging_utils import Logger
from mirror_transport import MirrorTransport
from process_runner import ProcessRunner
from security import SecurityValidator
from snapshot_rewriter import SnapshotRewriter
from utils import build_source_url, build_target_repo_url
from workspace import ScratchWorkspace

Step = Tuple[str, Callable[[], None]]


class RepositorySync:
    """Drives one repository through its sync steps.

    Steps run strictly in order; the first failure ends the pipeline and the
    workspace is released whatever state was reached. ``run`` never raises.
    """

    def __init__(
        self,
        name: str,
        cfg: Config,
        runner: ProcessRunner,
        source: GitHubSource,
        provisioner: Optional[CnbTarget] = None,
    ) -> None:
        self.name = name
        self.cfg = cfg
        self.source = source
        self.provisioner = provisioner
        self.log = Logger.repo(name)
        self.transport = MirrorTransport(runner, self.log)
        self.rewriter = SnapshotRewriter(runner, self.log)
        self.state = "start"
        self.repo_info: Optional[RepositoryInfo] = None
        self.workspace: Optional[ScratchWorkspace] = None
        self.source_url = build_source_url(
            cfg.source.api_url, cfg.source.token, cfg.source.org, name
        )
        self.target_url = build_target_repo_url(cfg.target.url, name)

    def steps(self) -> List[Step]:
        return [
            ("metadata-fetched", self._fetch_metadata),
            ("target-ensured", self._ensure_target),
            ("workspace-created", self._create_workspace),
            ("cloned", self._clone),
            ("lfs-fetched", self._fetch_lfs),
            ("snapshotted", self._snapshot),
            ("pushed", self._push),
            ("lfs-pushed", self._push_lfs),
        ]

    def run(self) -> SyncResult:
        if self.cfg.behavior.dry_run:
            self.log.info(
                f"would sync: {self.cfg.source.org}/{self.name} -> {self.target_url}"
            )
            return SyncResult(repo_name=self.name, success=True)

        try:
            for state, step in self.steps():
                step()
                self.state = state
                self.log.debug(f"state: {state}")
        except Exception as e:
            message = SecurityValidator.sanitize_for_logging(str(e)) or type(e).__name__
            if not isinstance(e, SyncError):
                message = f"unexpected error: {message}"
            self.log.error(f"sync failed after '{self.state}': {message}")
            return SyncResult(repo_name=self.name, success=False, error_message=message)
        finally:
            if self.workspace is not None:
                self.workspace.release()

        self.log.info("sync completed successfully")
        return SyncResult(repo_name=self.name, success=True)

    @property
    def mirror_dir(self) -> str:
        if self.workspace is None:
            raise SyncError("workspace not created")
        return self.workspace.mirror_dir

    def _fetch_metadata(self) -> None:
        self.log.info("fetching repo info from GitHub...")
        self.repo_info = self.source.get_repository_info(self.cfg.source.org, self.name)

    def _ensure_target(self) -> None:
        if self.cfg.target.platform != TargetPlatform.CNB:
            return
        if self.provisioner is None:
            raise ProvisionError("CNB provisioner not configured")

        self.log.info("creating repo on CNB...")
        description = self.repo_info.description if self.repo_info else None
        result = self.provisioner.ensure_repository(self.name, description)
        if not result.success:
            raise ProvisionError(f"failed to create CNB repo: {result.error}")
        if result.already_exists:
            self.log.info("repo already exists on CNB")
        else:
            self.log.info("repo created on CNB")

    def _create_workspace(self) -> None:
        self.workspace = ScratchWorkspace(
            self.cfg.behavior.clone_temp_dir, self.name, self.log
        )

    def _clone(self) -> None:
        self.transport.clone_mirror(self.source_url, self.mirror_dir)

    def _fetch_lfs(self) -> None:
        self.transport.fetch_large_objects(self.mirror_dir, self.source_url)

    def _snapshot(self) -> None:
        self.rewriter.create_snapshot_commits(self.mirror_dir)

    def _push(self) -> None:
        self.transport.push_branches_and_tags(
            self.mirror_dir,
            self.target_url,
            self.cfg.target.username,
            self.cfg.target.password,
        )

    def _push_lfs(self) -> None:
        self.transport.push_large_objects(self.mirror_dir)
