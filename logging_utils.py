#!/usr/bin/env python3
"""Logging utilities for snapshot-mirror."""

import os
import sys
import threading
import time

import colorama

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Handles formatted console output with colors and security-aware logging."""

    PROCESS_NAME = "snapshot-mirror"

    # One line at a time, repositories log from worker threads
    _lock = threading.Lock()

    @classmethod
    def debug(cls, *messages: str) -> None:
        sanitized_messages = [
            SecurityValidator.sanitize_for_logging(msg) for msg in messages
        ]
        cls._write_stdout(colorama.Fore.LIGHTBLACK_EX, *sanitized_messages)

    @classmethod
    def info(cls, *messages: str) -> None:
        sanitized_messages = [
            SecurityValidator.sanitize_for_logging(msg) for msg in messages
        ]
        cls._write_stdout(colorama.Fore.CYAN, *sanitized_messages)

    @classmethod
    def warn(cls, *messages: str) -> None:
        sanitized_messages = [
            SecurityValidator.sanitize_for_logging(msg) for msg in messages
        ]
        cls._write_stdout(colorama.Fore.YELLOW, *sanitized_messages)
        cls._workflow_command("warning", *sanitized_messages)

    @classmethod
    def error(cls, *messages: str) -> None:
        sanitized_messages = [
            SecurityValidator.sanitize_for_logging(msg) for msg in messages
        ]
        cls._write_stderr(colorama.Fore.RED, *sanitized_messages)
        cls._workflow_command("error", *sanitized_messages)

    @classmethod
    def security_event(cls, event_type: str, details: str) -> None:
        """Log security events with appropriate sanitization."""
        sanitized_details = SecurityValidator.sanitize_for_logging(details)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        cls._write_stderr(
            colorama.Fore.MAGENTA,
            f"[SECURITY:{event_type}] {timestamp}: {sanitized_details}",
        )

    @classmethod
    def repo(cls, name: str) -> "RepoLogger":
        return RepoLogger(name)

    @classmethod
    def _workflow_command(cls, command: str, *messages: str) -> None:
        """Surface warnings and errors as GitHub Actions annotations."""
        if os.getenv("GITHUB_ACTIONS") != "true":
            return
        message = cls._escape_workflow_data(" ".join(str(m) for m in messages))
        with cls._lock:
            sys.stdout.write(f"::{command}::{message}\n")

    @staticmethod
    def _escape_workflow_data(text: str) -> str:
        # '%' first so the escapes added below are not escaped again
        return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")

    @classmethod
    def _write_stdout(cls, color: str, *messages: str) -> None:
        line = cls._format_line(color, *messages) + "\n"
        with cls._lock:
            sys.stdout.write(line)

    @classmethod
    def _write_stderr(cls, color: str, *messages: str) -> None:
        line = cls._format_line(color, *messages) + "\n"
        with cls._lock:
            sys.stderr.write(line)

    @classmethod
    def _get_header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def _format_line(cls, color: str, *messages: str) -> str:
        header = cls._get_header()
        message = " ".join(str(m) for m in messages)
        return f"{color}{header}{colorama.Style.RESET_ALL} {message}"


class RepoLogger:
    """Logger bound to one repository; every line is prefixed with its name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def _lines(self, message: str):
        for line in str(message).split("\n"):
            if line.strip():
                yield f"[{self.name}] {line}"

    def debug(self, message: str) -> None:
        for line in self._lines(message):
            Logger.debug(line)

    def info(self, message: str) -> None:
        for line in self._lines(message):
            Logger.info(line)

    def warn(self, message: str) -> None:
        Logger.warn(f"[{self.name}] {message}")

    def error(self, message: str) -> None:
        Logger.error(f"[{self.name}] {message}")
