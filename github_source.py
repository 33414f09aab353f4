#!/usr/bin/env python3
"""GitHub API wrapper for reading source repository metadata."""

from __future__ import annotations

from typing import List, Optional

import github

from config import RepositoryInfo
from errors import SourceError
from logging_utils import Logger
from utils import RateLimiter


class GitHubSource:
    """Wrapper around the GitHub API to describe source repositories."""

    def __init__(self, api_url: str, token: str) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.api: Optional[github.Github] = None
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=50
        )  # GitHub's standard rate limit

    def connect(self) -> None:
        Logger.info(f"init github API: {self.api_url}")
        auth = github.Auth.Token(self.token)
        if self.api_url != "https://api.github.com":
            self.api = github.Github(base_url=self.api_url, auth=auth)
        else:
            self.api = github.Github(auth=auth)

    def _require_api(self) -> github.Github:
        if self.api is None:
            raise SourceError("github API not initialized")
        return self.api

    def get_repository_info(self, org: str, repo_name: str) -> RepositoryInfo:
        api = self._require_api()
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            repo = api.get_repo(f"{org}/{repo_name}")
            return RepositoryInfo(
                name=repo.name,
                description=repo.description,
                clone_url=repo.clone_url,
                default_branch=repo.default_branch,
            )
        except github.BadCredentialsException as e:
            raise SourceError("authentication failed (github): invalid token") from e
        except github.UnknownObjectException as e:
            raise SourceError(f"repository '{org}/{repo_name}' not found") from e
        except github.GithubException as e:
            raise SourceError(
                f"failed to fetch repo info for '{org}/{repo_name}': {e}"
            ) from e

    def list_org_repositories(self, org: str) -> List[RepositoryInfo]:
        """Return every repository of ``org``; pagination is handled by PyGithub."""
        api = self._require_api()
        Logger.info(f"discovering repositories under: {org}")
        repos: List[RepositoryInfo] = []
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            organization = api.get_organization(org)
            for repo in organization.get_repos():
                repos.append(
                    RepositoryInfo(
                        name=repo.name,
                        description=repo.description,
                        clone_url=repo.clone_url or "",
                        default_branch=repo.default_branch or "main",
                    )
                )
                Logger.debug(f"found: {org}/{repo.name}")
        except github.GithubException as e:
            raise SourceError(f"failed to list repositories under '{org}': {e}") from e

        Logger.info(f"found {len(repos)} repositories to process")
        return repos
