"""Tests for ScratchWorkspace."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

from workspace import ScratchWorkspace


def test_each_workspace_is_fresh_and_private(tmp_path: Path) -> None:
    base = tmp_path / 'clones'
    first = ScratchWorkspace(str(base), 'demo', MagicMock())
    second = ScratchWorkspace(str(base), 'demo', MagicMock())

    assert first.path != second.path
    assert os.stat(first.path).st_mode & 0o777 == 0o700
    assert first.mirror_dir == os.path.join(first.path, 'repo.git')
    assert os.path.basename(first.path).startswith('sync-demo-')


def test_release_removes_read_only_content(tmp_path: Path) -> None:
    ws = ScratchWorkspace(str(tmp_path / 'clones'), 'demo', MagicMock())
    pack = Path(ws.mirror_dir) / 'objects' / 'pack' / 'pack-1.pack'
    pack.parent.mkdir(parents=True)
    pack.write_bytes(b'PACK')
    pack.chmod(0o444)

    ws.release()

    assert not os.path.exists(ws.path)


def test_release_twice_is_harmless(tmp_path: Path) -> None:
    ws = ScratchWorkspace(str(tmp_path / 'clones'), 'demo', MagicMock())

    ws.release()
    ws.release()

    assert not os.path.exists(ws.path)


def test_existing_base_directory_keeps_its_mode(tmp_path: Path) -> None:
    """A shared directory such as /tmp is not locked down."""
    base = tmp_path / 'shared'
    base.mkdir()
    base.chmod(0o1777)

    ws = ScratchWorkspace(str(base), 'demo', MagicMock())

    assert os.stat(base).st_mode & 0o7777 == 0o1777
    assert os.stat(ws.path).st_mode & 0o777 == 0o700


def test_new_base_directory_is_private(tmp_path: Path) -> None:
    base = tmp_path / 'fresh' / 'clones'

    ScratchWorkspace(str(base), 'demo', MagicMock())

    assert os.stat(base).st_mode & 0o777 == 0o700
