"""
Identify the commit this copy of the plugin was built from.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Optional

from .errors import BuildInfoError


logger = logging.getLogger(__name__)

COMMIT_ENV = "MENUBAR_VERSION_COMMIT"
_SOURCE_DIR = Path(__file__).resolve().parent


def plugin_commit(
    environ: Optional[Mapping[str, str]] = None,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    source_dir: Path = _SOURCE_DIR,
) -> str:
    """Return the build's commit hash.

    ``MENUBAR_VERSION_COMMIT`` takes precedence; otherwise the hash is read
    from the git checkout the package is running from.
    """
    environ = os.environ if environ is None else environ
    pinned = environ.get(COMMIT_ENV)
    if pinned:
        return pinned.strip()

    try:
        result = runner(
            ["git", "rev-parse", "HEAD"],
            cwd=source_dir,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        raise BuildInfoError(f"could not run git to identify this build: {e}") from e

    if result.returncode != 0:
        raise BuildInfoError(
            f"could not identify this build (set {COMMIT_ENV}): {result.stderr.strip()}"
        )
    commit = result.stdout.strip()
    logger.debug("Plugin built from commit %s", commit)
    return commit
