#!/usr/bin/env python3
"""Configuration dataclasses for snapshot-mirror."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TargetPlatform(Enum):
    """Enumeration for supported target hosting platforms."""
    CNB = "cnb"
    OTHER = "other"


@dataclass
class SourceConfig:
    """GitHub source configuration."""
    api_url: str
    token: str
    org: str
    repos: List[str] = field(default_factory=list)
    all_repos: bool = False


@dataclass
class TargetConfig:
    """Git push target configuration."""
    url: str
    username: str
    password: str
    platform: TargetPlatform = TargetPlatform.OTHER


@dataclass
class CnbConfig:
    """CNB API configuration, used only for the cnb target platform."""
    api_url: str
    token: Optional[str]
    org_path: Optional[str]


@dataclass
class SyncBehaviorConfig:
    """Sync behavior configuration."""
    max_parallel: int = 4
    clone_temp_dir: str = "/tmp/snapshot-mirror"
    dry_run: bool = False


@dataclass
class Config:
    """Main configuration for a snapshot mirror run."""
    source: SourceConfig
    target: TargetConfig
    cnb: CnbConfig
    behavior: SyncBehaviorConfig


@dataclass(frozen=True)
class RepositoryInfo:
    """Source repository metadata."""
    name: str
    description: Optional[str]
    clone_url: str
    default_branch: str


@dataclass(frozen=True)
class ProvisionResult:
    """Outcome of ensuring a target repository exists."""
    success: bool
    already_exists: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SyncResult:
    """Terminal outcome of one repository's sync."""
    repo_name: str
    success: bool
    error_message: Optional[str] = None
