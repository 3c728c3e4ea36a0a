# wfdispatch/core/git.py
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(*args: str, cwd: Optional[Path] = None) -> str:
    """Run a git command and return its stripped stdout; raises CalledProcessError on failure."""
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd else None,
        stderr=subprocess.PIPE,
        text=True,
    )
    return out.strip()


def get_current_branch_name(cwd: Optional[Path] = None) -> str:
    """
    Name of the branch checked out in `cwd`.
    Fails on a detached HEAD, where there is no branch to report.
    """
    return _git("symbolic-ref", "--short", "HEAD", cwd=cwd)


def get_repository_root(cwd: Optional[Path] = None) -> Path:
    """Top-level directory of the working copy containing `cwd`."""
    return Path(_git("rev-parse", "--show-toplevel", cwd=cwd))
