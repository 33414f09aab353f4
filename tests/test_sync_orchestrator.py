"""Tests for the batch SyncOrchestrator."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

from conftest import make_config
from config import RepositoryInfo, SyncResult
from errors import SourceError
from process_runner import ProcessResult, ProcessRunner
from sync_orchestrator import EXIT_EXECUTION_ERROR, EXIT_SUCCESS, SyncOrchestrator


class ConcurrencyCountingRunner(ProcessRunner):
    """Tracks how many git processes are in flight at once."""

    def __init__(self, fail_repo: str = '') -> None:
        self.fail_repo = fail_repo
        self.lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    def run(self, command, args, cwd, env=None, input_text=None) -> ProcessResult:
        with self.lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(0.01)
            if self.fail_repo and args[0] == 'clone' and f'/{self.fail_repo}.git' in args[2]:
                return ProcessResult(128, '', 'fatal: repository not found')
            return ProcessResult(0, '', '')
        finally:
            with self.lock:
                self.in_flight -= 1


def _orchestrator(tmp_path: Path, runner: ProcessRunner, max_parallel: int = 4) -> SyncOrchestrator:
    orchestrator = SyncOrchestrator(make_config(tmp_path, max_parallel=max_parallel), runner)
    orchestrator.source = MagicMock()
    orchestrator.source.get_repository_info.side_effect = lambda org, name: RepositoryInfo(
        name=name, description=None, clone_url='', default_branch='main'
    )
    return orchestrator


def test_isolation_one_bad_repository(tmp_path: Path) -> None:
    """Exactly the invalid repository fails; every other one is still synced."""
    names = ['alpha', 'missing', 'gamma', 'delta']
    orchestrator = _orchestrator(tmp_path, ConcurrencyCountingRunner(fail_repo='missing'))

    results = orchestrator.sync_all(names)

    assert [r.repo_name for r in results] == names
    assert [r.success for r in results] == [True, False, True, True]
    assert 'repository not found' in results[1].error_message


def test_ceiling_is_respected(tmp_path: Path) -> None:
    runner = ConcurrencyCountingRunner()
    orchestrator = _orchestrator(tmp_path, runner, max_parallel=2)

    results = orchestrator.sync_all(['r1', 'r2', 'r3', 'r4', 'r5'])

    assert len(results) == 5
    assert all(r.success for r in results)
    assert 1 <= runner.max_in_flight <= 2


def test_results_keep_input_order(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, ConcurrencyCountingRunner())
    delays = {'slow': 0.05, 'fast': 0.0}

    def fake_sync(name: str) -> SyncResult:
        time.sleep(delays[name])
        return SyncResult(repo_name=name, success=True)

    orchestrator.sync_repository = fake_sync

    assert [r.repo_name for r in orchestrator.sync_all(['slow', 'fast'])] == ['slow', 'fast']


def test_unexpected_worker_exception_becomes_failure(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, ConcurrencyCountingRunner())
    orchestrator.sync_repository = MagicMock(side_effect=RuntimeError('boom'))

    results = orchestrator.sync_all(['alpha'])

    assert results == [SyncResult(repo_name='alpha', success=False, error_message='boom')]


def test_run_reports_failure_exit_code(tmp_path: Path) -> None:
    runner = ConcurrencyCountingRunner(fail_repo='beta')
    orchestrator = _orchestrator(tmp_path, runner)

    assert orchestrator.run() == EXIT_EXECUTION_ERROR


def test_run_succeeds_and_installs_lfs_once(tmp_path: Path) -> None:
    runner = ConcurrencyCountingRunner()
    runner.run = MagicMock(wraps=runner.run)
    orchestrator = _orchestrator(tmp_path, runner)

    assert orchestrator.run() == EXIT_SUCCESS

    issued = [call.args[1] for call in runner.run.call_args_list]
    assert issued.count(['lfs', 'install']) == 1
    assert issued[0] == ['lfs', 'install']


def test_all_repos_discovery_merges_explicit_names(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, ConcurrencyCountingRunner())
    orchestrator.cfg.source.all_repos = True
    orchestrator.source.list_org_repositories.return_value = [
        RepositoryInfo(name=n, description=None, clone_url='', default_branch='main')
        for n in ('beta', 'gamma')
    ]

    assert orchestrator._resolve_repo_names() == ['alpha', 'beta', 'gamma']


def test_discovery_failure_aborts_run(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, ConcurrencyCountingRunner())
    orchestrator.cfg.source.all_repos = True
    orchestrator.source.list_org_repositories.side_effect = SourceError('no access')

    assert orchestrator.run() == EXIT_EXECUTION_ERROR
    orchestrator.source.get_repository_info.assert_not_called()


def test_empty_batch(tmp_path: Path) -> None:
    assert _orchestrator(tmp_path, ConcurrencyCountingRunner()).sync_all([]) == []
