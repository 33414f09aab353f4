"""Shared fixtures: configuration builders and real git repositories."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from config import (CnbConfig, Config, SourceConfig, SyncBehaviorConfig,
                    TargetConfig, TargetPlatform)

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason='git not installed')

MULTILINE_MESSAGE = 'Title\n\nBody line one\nBody line two\n'


def make_config(
    tmp_path: Path,
    platform: TargetPlatform = TargetPlatform.OTHER,
    max_parallel: int = 4,
    dry_run: bool = False,
) -> Config:
    return Config(
        source=SourceConfig(
            api_url='https://api.github.com',
            token='ghp_sourcetoken',
            org='example-org',
            repos=['alpha', 'beta'],
        ),
        target=TargetConfig(
            url='https://git.example.com/mirror',
            username='bot',
            password='s3cret',
            platform=platform,
        ),
        cnb=CnbConfig(
            api_url='https://api.cnb.cool',
            token='cnb-token' if platform == TargetPlatform.CNB else None,
            org_path='example/group' if platform == TargetPlatform.CNB else None,
        ),
        behavior=SyncBehaviorConfig(
            max_parallel=max_parallel,
            clone_temp_dir=str(tmp_path / 'clones'),
            dry_run=dry_run,
        ),
    )


def git(cwd: Path, *args: str, env: Optional[Dict[str, str]] = None) -> str:
    full_env = os.environ.copy()
    full_env.update({
        'GIT_CONFIG_GLOBAL': os.devnull,
        'GIT_CONFIG_NOSYSTEM': '1',
    })
    if env:
        full_env.update(env)
    completed = subprocess.run(
        ['git', *args],
        cwd=str(cwd),
        env=full_env,
        capture_output=True,
        encoding='utf-8',
        check=True,
    )
    return completed.stdout


def git_raw(
    cwd: Path,
    *args: str,
    stdin: Optional[bytes] = None,
    env: Optional[Dict[str, str]] = None,
) -> bytes:
    """Like ``git`` but with binary pipes, for byte-exact object checks."""
    full_env = os.environ.copy()
    full_env.update({
        'GIT_CONFIG_GLOBAL': os.devnull,
        'GIT_CONFIG_NOSYSTEM': '1',
    })
    if env:
        full_env.update(env)
    completed = subprocess.run(
        ['git', *args],
        cwd=str(cwd),
        env=full_env,
        input=stdin,
        capture_output=True,
        check=True,
    )
    return completed.stdout


def commit(
    work: Path,
    files: Dict[str, str],
    message: str,
    author: str = 'Ada Lovelace',
    email: str = 'ada@example.com',
    date: str = '2024-01-02T03:04:05+02:00',
) -> None:
    for rel, content in files.items():
        path = work / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    git(work, 'add', '-A')
    git(
        work, 'commit', '-q', '--no-gpg-sign', '--cleanup=verbatim', '-m', message,
        env={
            'GIT_AUTHOR_NAME': author,
            'GIT_AUTHOR_EMAIL': email,
            'GIT_AUTHOR_DATE': date,
            'GIT_COMMITTER_NAME': 'Grace Hopper',
            'GIT_COMMITTER_EMAIL': 'grace@example.com',
            'GIT_COMMITTER_DATE': '2024-02-03T04:05:06-05:00',
        },
    )


def rev_list(repo: Path, ref: str) -> List[str]:
    return git(repo, 'rev-list', ref).split()


@pytest.fixture
def source_repo(tmp_path: Path) -> Path:
    """Working repository with history on 'main' and 'feature' plus a tag."""
    work = tmp_path / 'work'
    work.mkdir()
    git(work, 'init', '-q')
    git(work, 'symbolic-ref', 'HEAD', 'refs/heads/main')
    commit(work, {'README.md': 'first\n'}, 'Initial commit\n')
    commit(work, {'README.md': 'second\n', 'src/app.py': 'print(1)\n'}, 'Second commit\n')
    git(work, 'tag', 'v1.0')
    commit(work, {'src/app.py': 'print(2)\n'}, MULTILINE_MESSAGE)
    git(work, 'checkout', '-q', '-b', 'feature')
    commit(
        work, {'feature.txt': 'feature\n'}, 'Add feature\n',
        author='Zoë Ünicode', email='zoe@example.com', date='2023-06-07T08:09:10+00:00',
    )
    git(work, 'checkout', '-q', 'main')
    return work


@pytest.fixture
def mirror_repo(tmp_path: Path, source_repo: Path) -> Path:
    mirror = tmp_path / 'mirror.git'
    git(tmp_path, 'clone', '-q', '--mirror', str(source_repo), str(mirror))
    return mirror
