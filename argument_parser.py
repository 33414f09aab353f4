#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
import tempfile
from typing import List, Optional, Tuple

from cnb_target import DEFAULT_CNB_API_URL
from config import (CnbConfig, Config, SourceConfig, SyncBehaviorConfig,
                    TargetConfig, TargetPlatform)
from errors import ConfigError
from logging_utils import Logger
from security import SecurityValidator
from utils import parse_repo_list

# Exit codes
EXIT_AUTH_ERROR = 40
EXIT_MISSING_ARGUMENTS = 2

DEFAULT_MAX_PARALLEL = 4
MAX_PARALLEL_LIMIT = 32


def _env(*names: str) -> Optional[str]:
    """Return the first non-empty environment variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _input(value: Optional[str], name: str, *fallbacks: str) -> Optional[str]:
    """Resolve an option from its flag, its GitHub Actions input, then fallbacks."""
    if value:
        return value
    return _env(f"INPUT_{name.upper()}", *fallbacks)


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Mirror GitHub repositories to another git host as single "
            "snapshot commits per branch"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Every option can also be supplied as a GitHub Actions input
(INPUT_SOURCE_ORG, INPUT_SOURCE_REPOS, ...).

Examples:
  %(prog)s --source-org acme --source-repos "[api, web]" \\
           --target-url https://git.example.com/acme \\
           --target-username bot
  %(prog)s --source-org acme --source-repos "api,web" \\
           --target-url https://cnb.cool/acme --target-username cnb \\
           --target-platform cnb --cnb-org-path acme --max-parallel 8
  %(prog)s --source-org acme --all-repos --target-url https://git.example.com/acme \\
           --target-username bot --dry-run
        """,
    )
    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitHub source arguments to parser."""
    parser.add_argument(
        "--source-org",
        dest="source_org",
        help="GitHub organization that owns the source repositories",
    )
    parser.add_argument(
        "--source-token",
        dest="source_token",
        help="GitHub token (or set SOURCE_TOKEN / GITHUB_TOKEN env var)",
    )
    parser.add_argument(
        "--source-repos",
        dest="source_repos",
        help="Repositories to sync, as a YAML array or comma separated list",
    )
    parser.add_argument(
        "--all-repos",
        action="store_true",
        dest="all_repos",
        help="Sync every repository of the source organization",
    )
    parser.add_argument(
        "--gh-api",
        dest="gh_api_url",
        help="Base URL of the GitHub API (default: https://api.github.com)",
    )


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    """Add push target arguments to parser."""
    parser.add_argument(
        "--target-url",
        dest="target_url",
        help="Base URL the repositories are pushed under (<url>/<repo>.git)",
    )
    parser.add_argument(
        "--target-username",
        dest="target_username",
        help="Username for HTTPS push to the target",
    )
    parser.add_argument(
        "--target-password",
        dest="target_password",
        help="Password or token for HTTPS push (or set TARGET_PASSWORD env var)",
    )
    parser.add_argument(
        "--target-platform",
        dest="target_platform",
        choices=[platform.value for platform in TargetPlatform],
        help="Target platform; 'cnb' creates missing repositories (default: other)",
    )
    parser.add_argument(
        "--cnb-api",
        dest="cnb_api_url",
        help=f"Base URL of the CNB API (default: {DEFAULT_CNB_API_URL})",
    )
    parser.add_argument(
        "--cnb-api-token",
        dest="cnb_api_token",
        help="CNB API token (or set CNB_API_TOKEN env var)",
    )
    parser.add_argument(
        "--cnb-org-path",
        dest="cnb_org_path",
        help="CNB organization path repositories are created in",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "-p",
        "--max-parallel",
        dest="max_parallel",
        help=f"Maximum repositories synced at once (default: {DEFAULT_MAX_PARALLEL})",
    )
    parser.add_argument(
        "--clone-temp-dir",
        dest="clone_temp_dir",
        help="Base directory for temporary mirrors "
        "(default: <system temp>/snapshot-mirror)",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="List actions without doing them",
    )


def _require(value: Optional[str], flag: str, name: str) -> str:
    if not value:
        raise ConfigError(f"{flag} is required (or set INPUT_{name.upper()})")
    return value


def _parse_max_parallel(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_MAX_PARALLEL
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"max parallel must be an integer, got '{raw}'") from e
    if value < 1 or value > MAX_PARALLEL_LIMIT:
        raise ConfigError(f"max parallel must be between 1 and {MAX_PARALLEL_LIMIT}")
    return value


def _validate_parsed_arguments(args) -> Tuple[SourceConfig, TargetConfig, CnbConfig,
                                              SyncBehaviorConfig]:
    """Validate and sanitize parsed arguments; raises ConfigError."""
    source_org = SecurityValidator.validate_org(
        _require(_input(args.source_org, "source_org"), "--source-org", "source_org")
    )
    gh_api_url = SecurityValidator.validate_url(
        _input(args.gh_api_url, "github_api_url") or "https://api.github.com",
        ["https", "http"],
    )

    repos: List[str] = [
        SecurityValidator.validate_repo_name(name)
        for name in parse_repo_list(_input(args.source_repos, "source_repos") or "")
    ]
    all_repos = args.all_repos or _input(None, "all_repos") == "true"
    if not repos and not all_repos:
        raise ConfigError(
            "no repositories to sync (use --source-repos or --all-repos)"
        )

    target_url = SecurityValidator.validate_url(
        _require(_input(args.target_url, "target_url"), "--target-url", "target_url"),
        ["https", "http"],
    )
    target_username = _require(
        _input(args.target_username, "target_username"),
        "--target-username",
        "target_username",
    )

    platform_value = _input(args.target_platform, "target_platform") or "other"
    try:
        platform = TargetPlatform(platform_value)
    except ValueError as e:
        raise ConfigError("target platform must be 'cnb' or 'other'") from e

    cnb_org_path = _input(args.cnb_org_path, "cnb_org_path")
    cnb_api_token = _input(args.cnb_api_token, "cnb_api_token", "CNB_API_TOKEN")
    if platform == TargetPlatform.CNB:
        if not cnb_api_token or not cnb_org_path:
            raise ConfigError(
                "cnb api token and cnb org path are required for the cnb platform"
            )
        cnb_org_path = SecurityValidator.validate_namespace(cnb_org_path)
    cnb_api_url = SecurityValidator.validate_url(
        _input(args.cnb_api_url, "cnb_api_url") or DEFAULT_CNB_API_URL, ["https"]
    )

    clone_temp_dir = SecurityValidator.validate_file_path(
        _input(args.clone_temp_dir, "clone_temp_dir")
        or os.path.join(tempfile.gettempdir(), "snapshot-mirror")
    )

    Logger.security_event(
        "CONFIG_VALIDATION", "successfully validated all configuration inputs"
    )

    return (
        SourceConfig(
            api_url=gh_api_url.rstrip("/"),
            token="",
            org=source_org,
            repos=repos,
            all_repos=all_repos,
        ),
        TargetConfig(
            url=target_url,
            username=target_username,
            password="",
            platform=platform,
        ),
        CnbConfig(api_url=cnb_api_url, token=cnb_api_token, org_path=cnb_org_path),
        SyncBehaviorConfig(
            max_parallel=_parse_max_parallel(_input(args.max_parallel, "max_parallel")),
            clone_temp_dir=clone_temp_dir,
            dry_run=args.dry_run or _input(None, "dry_run") == "true",
        ),
    )


def _get_and_validate_tokens(args) -> Tuple[str, str]:
    """Get the source token and target password."""
    source_token = _input(args.source_token, "source_token", "SOURCE_TOKEN", "GITHUB_TOKEN")
    target_password = _input(args.target_password, "target_password", "TARGET_PASSWORD")
    if not source_token:
        Logger.error(
            "error: source token not provided (use --source-token or SOURCE_TOKEN)"
        )
        sys.exit(EXIT_AUTH_ERROR)
    if not target_password:
        Logger.error(
            "error: target password not provided "
            "(use --target-password or TARGET_PASSWORD)"
        )
        sys.exit(EXIT_AUTH_ERROR)
    return source_token, target_password


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_source_arguments(parser)
    _add_target_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)

    try:
        source, target, cnb, behavior = _validate_parsed_arguments(args)
    except ConfigError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)

    source.token, target.password = _get_and_validate_tokens(args)

    return Config(source=source, target=target, cnb=cnb, behavior=behavior)
