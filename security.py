#!/usr/bin/env python3
"""Security validation utilities for snapshot-mirror."""

import os
import re
from typing import List, Optional
from urllib.parse import urlsplit

from errors import ConfigError


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    # Maximum lengths to prevent buffer overflow attacks
    MAX_REPO_NAME_LENGTH = 100
    MAX_URL_LENGTH = 2048
    MAX_ORG_LENGTH = 100
    MAX_NAMESPACE_LENGTH = 255
    MAX_PATH_LENGTH = 500

    # Allowed characters for various inputs
    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_ORG_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9._/-]+$")

    PRIVATE_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")
    PRIVATE_PREFIXES = ("10.", "192.168.", "169.254.")

    @staticmethod
    def _reject_control_chars(value: str, label: str) -> None:
        if "\x00" in value or any(ord(c) < 32 for c in value):
            raise ConfigError(f"{label} contains null bytes or control characters")

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate a source repository name.

        Names are checked, never rewritten: the same name is used for the
        GitHub lookup and for the target repository.
        """
        if not name or not isinstance(name, str):
            raise ConfigError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ConfigError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        # Check for path traversal attempts
        if ".." in name or "/" in name or "\\" in name:
            raise ConfigError(
                f"Repository name '{name}' contains invalid path characters"
            )

        cls._reject_control_chars(name, "Repository name")

        if not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ConfigError(f"Repository name '{name}' contains invalid characters")

        return name

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate URL for security."""
        if not url or not isinstance(url, str):
            raise ConfigError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ConfigError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        cls._reject_control_chars(url, "URL")

        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme not in ("http", "https") or not parts.netloc:
            raise ConfigError("URL must be an absolute http or https URL")

        if allowed_schemes and scheme not in allowed_schemes:
            raise ConfigError(
                f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
            )

        host = (parts.hostname or "").lower()
        if host in cls.PRIVATE_HOSTS or host.startswith(cls.PRIVATE_PREFIXES):
            # Use print here to avoid circular dependency
            print(f"WARNING: URL points at a private or local host: {host}")

        return url

    @classmethod
    def validate_org(cls, org: str) -> str:
        """Validate a GitHub organization name."""
        if not org or not isinstance(org, str):
            raise ConfigError("Organization must be a non-empty string")

        if len(org) > cls.MAX_ORG_LENGTH:
            raise ConfigError(
                f"Organization exceeds maximum length of {cls.MAX_ORG_LENGTH}"
            )

        cls._reject_control_chars(org, "Organization")

        if not cls.SAFE_ORG_PATTERN.match(org):
            raise ConfigError("Organization contains invalid characters")

        return org

    @classmethod
    def validate_namespace(cls, namespace: str) -> str:
        """Validate a slash-separated namespace such as a CNB org path."""
        if not namespace or not isinstance(namespace, str):
            raise ConfigError("Namespace must be a non-empty string")

        if len(namespace) > cls.MAX_NAMESPACE_LENGTH:
            raise ConfigError(
                f"Namespace exceeds maximum length of {cls.MAX_NAMESPACE_LENGTH}"
            )

        cls._reject_control_chars(namespace, "Namespace")

        # Check for path traversal attempts
        if ".." in namespace:
            raise ConfigError("Namespace contains path traversal sequences")

        if not cls.SAFE_NAMESPACE_PATTERN.match(namespace):
            raise ConfigError("Namespace contains invalid characters")

        return namespace.strip("/")

    @classmethod
    def validate_file_path(cls, path: str) -> str:
        """Validate file path for security."""
        if not path or not isinstance(path, str):
            raise ConfigError("File path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ConfigError(
                f"File path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ConfigError("File path contains null bytes")

        if ".." in path:
            raise ConfigError("File path contains path traversal sequences")

        return os.path.normpath(path)

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        # Patterns to redact
        patterns = [
            (r"(https?://)[^/\s@]+@", r"\1[REDACTED]@"),  # URL user-info
            (r"(Bearer\s+)[^\s]+", r"\1[REDACTED]"),  # Authorization headers
            (r"token[=:]\s*[^\s]+", "token=[REDACTED]"),  # Token assignments
            (r"password[=:]\s*[^\s]+", "password=[REDACTED]"),  # Password assignments
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained PATs
            (r"ghp_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
            (r"gho_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub OAuth tokens
            (r"ghu_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub user tokens
            (r"ghs_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub server tokens
            (r"ghr_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub refresh tokens
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
