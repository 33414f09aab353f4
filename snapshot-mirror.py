#!/usr/bin/env python3
"""
Snapshot Mirror - Mirror GitHub repositories to another git host as
single snapshot commits.

Each repository is cloned as a bare mirror, every branch tip is rewritten
into a parentless commit with the same tree, author, committer and message,
and all branches, tags and LFS objects are force-pushed to the target.
Repositories are synced concurrently and independently.

Copyright (c) 2025 Michele Tavella <meeghele@proton.me>
Licensed under the MIT License. See LICENSE file for details.

Author: Michele Tavella <meeghele@proton.me>
License: MIT
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from sync_orchestrator import SyncOrchestrator

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    orchestrator = SyncOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
