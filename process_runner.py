#!/usr/bin/env python3
"""External process execution for git operations."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from errors import GitCommandError
from logging_utils import Logger, RepoLogger
from security import SecurityValidator

# Exit code reported when the executable cannot be started
EXIT_COMMAND_NOT_FOUND = 127


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


@dataclass(frozen=True)
class ProcessResult:
    """Captured outcome of one external process."""
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner:
    """Runs external commands to completion and captures their output.

    The runner never raises on a non-zero exit status; callers decide what a
    failure means. There is no timeout: a hung process is bounded only by the
    job that runs this tool.
    """

    DEFAULT_ENV = {
        # Never block on an interactive credential prompt
        "GIT_TERMINAL_PROMPT": "0",
    }

    def run(
        self,
        command: str,
        args: List[str],
        cwd: str,
        env: Optional[Dict[str, str]] = None,
        input_text: Optional[str] = None,
    ) -> ProcessResult:
        full_env = os.environ.copy()
        full_env.update(self.DEFAULT_ENV)
        if env:
            full_env.update(env)

        # Pipes stay binary so no newline translation touches the bytes
        stdin = _encode(input_text) if input_text is not None else None
        try:
            completed = subprocess.run(
                [command, *args],
                cwd=cwd,
                env=full_env,
                input=stdin,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            return ProcessResult(EXIT_COMMAND_NOT_FOUND, "", f"{command}: {e}")

        return ProcessResult(
            completed.returncode, _decode(completed.stdout), _decode(completed.stderr)
        )

    def git(
        self,
        args: List[str],
        cwd: str,
        env: Optional[Dict[str, str]] = None,
        *,
        critical: bool = True,
        error_cls: Type[Exception] = GitCommandError,
        failure: str = "git command failed",
        log: Optional[RepoLogger] = None,
        input_text: Optional[str] = None,
    ) -> ProcessResult:
        """Run git and apply the fatal/best-effort policy for its exit status.

        Critical failures raise ``error_cls`` carrying the redacted stderr.
        Non-critical failures are logged as warnings and the result returned.
        """
        result = self.run("git", args, cwd, env=env, input_text=input_text)
        if result.ok:
            if result.stderr and log is not None:
                log.debug(result.stderr)
            return result

        detail = SecurityValidator.sanitize_for_logging(result.stderr.strip())
        if critical:
            raise error_cls(f"{failure}: {detail}")

        message = f"{failure} (continuing): {detail}"
        if log is not None:
            log.warn(message)
        else:
            Logger.warn(message)
        return result
