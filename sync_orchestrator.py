#!/usr/bin/env python3
"""Batch orchestrator mirroring a list of GitHub repositories as snapshots."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from cnb_target import CnbTarget
from config import Config, SyncResult, TargetPlatform
from errors import SourceError
from github_source import GitHubSource
from logging_utils import Logger
from mirror_transport import install_large_object_support
from process_runner import ProcessRunner
from repository_sync import RepositorySync

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


class SyncOrchestrator:
    def __init__(self, cfg: Config, runner: Optional[ProcessRunner] = None) -> None:
        self.cfg = cfg
        self.runner = runner or ProcessRunner()
        self.source = GitHubSource(cfg.source.api_url, cfg.source.token)
        self.provisioner: Optional[CnbTarget] = None
        if cfg.target.platform == TargetPlatform.CNB:
            self.provisioner = CnbTarget(
                cfg.cnb.api_url, cfg.cnb.token or "", cfg.cnb.org_path or ""
            )

    def run(self) -> int:
        try:
            self.source.connect()
            names = self._resolve_repo_names()

            Logger.info(f"starting sync for {len(names)} repos")
            Logger.info(f"source org: {self.cfg.source.org}")
            Logger.info(f"target platform: {self.cfg.target.platform.value}")
            Logger.info(f"max parallel: {self.cfg.behavior.max_parallel}")

            if not self.cfg.behavior.dry_run:
                install_large_object_support(self.runner)

            results = self.sync_all(names)
            return self._report(results)
        except SourceError as e:
            Logger.error(f"{e}")
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def _resolve_repo_names(self) -> List[str]:
        if not self.cfg.source.all_repos:
            return list(self.cfg.source.repos)
        discovered = [
            repo.name for repo in self.source.list_org_repositories(self.cfg.source.org)
        ]
        # Explicitly listed names first, then the rest of the organization
        names = list(self.cfg.source.repos)
        names.extend(n for n in discovered if n not in names)
        return names

    def sync_repository(self, name: str) -> SyncResult:
        return RepositorySync(
            name, self.cfg, self.runner, self.source, self.provisioner
        ).run()

    def sync_all(self, names: List[str]) -> List[SyncResult]:
        """Sync every repository with at most ``max_parallel`` in flight.

        Results keep the order of ``names``; a failure never stops the batch.
        """
        if not names:
            return []
        results: List[Optional[SyncResult]] = [None] * len(names)

        with ThreadPoolExecutor(
            max_workers=self.cfg.behavior.max_parallel,
            thread_name_prefix="sync",
        ) as executor:
            futures: Dict[Future, int] = {
                executor.submit(self.sync_repository, name): idx
                for idx, name in enumerate(names)
            }
            for future in as_completed(futures):
                idx = futures[future]
                try:
                    results[idx] = future.result()
                except Exception as e:
                    Logger.error(f"[{names[idx]}] sync failed: {e}")
                    results[idx] = SyncResult(
                        repo_name=names[idx], success=False, error_message=str(e)
                    )

        return [r for r in results if r is not None]

    @staticmethod
    def _report(results: List[SyncResult]) -> int:
        succeeded = sum(1 for r in results if r.success)
        failed = [r.repo_name for r in results if not r.success]

        Logger.info(f"sync completed: {succeeded} succeeded, {len(failed)} failed")
        if failed:
            Logger.error(f"failed to sync repos: {', '.join(failed)}")
            return EXIT_EXECUTION_ERROR

        Logger.info("mission accomplished")
        return EXIT_SUCCESS
