"""Tests for Logger output."""

from __future__ import annotations

import pytest

from logging_utils import Logger


def _annotations(out: str) -> list:
    return [line for line in out.splitlines() if line.startswith('::')]


def test_warning_annotation_escapes_workflow_data(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """Percent signs and carriage returns are escaped along with newlines."""
    monkeypatch.setenv('GITHUB_ACTIONS', 'true')

    Logger.warn('100% done, literal %0A\r\nnext line')

    assert _annotations(capsys.readouterr().out) == [
        '::warning::100%25 done, literal %250A%0D%0Anext line'
    ]


def test_error_annotation_is_redacted(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setenv('GITHUB_ACTIONS', 'true')

    Logger.error('push to https://bot:pw@git.example.com/r.git failed')

    annotations = _annotations(capsys.readouterr().out)
    assert len(annotations) == 1
    assert annotations[0].startswith('::error::')
    assert 'bot:pw' not in annotations[0]


def test_no_annotations_outside_actions(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.delenv('GITHUB_ACTIONS', raising=False)

    Logger.warn('careful')

    assert _annotations(capsys.readouterr().out) == []
