#!/usr/bin/env python3
"""CNB API wrapper for creating target repositories."""

from __future__ import annotations

from typing import Optional

import requests

from config import ProvisionResult
from utils import RateLimiter

DEFAULT_CNB_API_URL = "https://api.cnb.cool"


class CnbTarget:
    """Creates repositories on CNB; an existing repository counts as success."""

    def __init__(self, api_url: str, token: str, org_path: str) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.org_path = org_path.strip("/")
        self.rate_limiter = RateLimiter(max_requests_per_minute=60)

    def _get_api_headers(self) -> dict:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def ensure_repository(
        self, repo_name: str, description: Optional[str]
    ) -> ProvisionResult:
        url = f"{self.api_url}/{self.org_path}/-/repos"
        payload = {
            "name": repo_name,
            "description": description or f"Mirror of GitHub repo {repo_name}",
            "visibility": "public",
        }
        try:
            self.rate_limiter.wait_if_needed("CNB API")
            r = requests.post(
                url, json=payload, headers=self._get_api_headers(), timeout=30
            )
        except requests.RequestException as e:
            return ProvisionResult(success=False, already_exists=False, error=str(e))

        if r.ok:
            return ProvisionResult(success=True, already_exists=False)
        if r.status_code == 409:
            return ProvisionResult(success=True, already_exists=True)
        return ProvisionResult(
            success=False,
            already_exists=False,
            error=f"HTTP {r.status_code}: {r.text}",
        )
