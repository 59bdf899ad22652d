"""GitHub token resolution for the search queries.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable
  2. `gh auth token` (an existing GitHub CLI login)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source provides one."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI token lookup unavailable: %s", e)
        return None

    if result.returncode != 0:
        logger.debug("gh auth token exited %d: %s", result.returncode, result.stderr.strip())
        return None
    return result.stdout.strip() or None
