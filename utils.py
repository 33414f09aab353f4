#!/usr/bin/env python3
"""Utility functions for snapshot-mirror."""

import threading
import time
from typing import List
from urllib.parse import quote, urlsplit, urlunsplit

import yaml

from errors import ConfigError
from logging_utils import Logger


class RateLimiter:
    """Rate limiter shared by worker threads to respect API limits."""

    def __init__(self, max_requests_per_minute: int = 60):
        self.max_requests = max_requests_per_minute
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    Logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    current_time = time.time()
                    self._clean_old_requests(current_time)
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def build_auth_url(base_url: str, username: str, password: str) -> str:
    """Embed percent-encoded credentials as the user-info of ``base_url``.

    Any user-info already present in ``base_url`` is replaced.
    """
    parts = urlsplit(base_url)
    host = parts.netloc.rpartition("@")[2]
    userinfo = f"{quote(username, safe='')}:{quote(password, safe='')}"
    return urlunsplit(
        (parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment)
    )


def build_target_repo_url(base_url: str, repo_name: str) -> str:
    """Return ``<base_url>/<repo_name>.git`` with exactly one separator."""
    return f"{base_url.rstrip('/')}/{repo_name}.git"


def git_base_url_from_api(api_url: str) -> str:
    """Return the git web base URL for a GitHub API endpoint.

    Example: 'https://github.acme.com/api/v3' -> 'https://github.acme.com'
    """
    parsed = urlsplit(api_url)
    if parsed.netloc == "api.github.com":
        return "https://github.com"

    base_path = parsed.path.rstrip("/")
    if base_path.endswith("/api/v3"):
        base_path = base_path[: -len("/api/v3")]
    return f"{parsed.scheme}://{parsed.netloc}{base_path}"


def build_source_url(api_url: str, token: str, org: str, repo_name: str) -> str:
    """Return the token-authenticated HTTPS clone URL of a GitHub repository."""
    parts = urlsplit(git_base_url_from_api(api_url))
    netloc = f"{quote(token, safe='')}@{parts.netloc}"
    path = f"{parts.path}/{org}/{repo_name}.git"
    return urlunsplit((parts.scheme, netloc, path, "", ""))


def parse_repo_list(raw: str) -> List[str]:
    """Parse a repository list given as a YAML array or a comma/newline list."""
    if not raw or not raw.strip():
        return []
    try:
        # No implicit typing, so 0123 or on stay repository names
        loaded = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"source repos is not valid YAML: {e}") from e

    if isinstance(loaded, list):
        items = loaded
    elif isinstance(loaded, str):
        items = raw.replace("\n", ",").split(",")
    else:
        raise ConfigError("source repos must be a YAML array of repository names")

    names: List[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ConfigError(f"invalid repository entry: {item!r}")
        name = item.strip()
        if name:
            names.append(name)
    return names
