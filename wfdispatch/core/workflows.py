# wfdispatch/core/workflows.py
from __future__ import annotations

"""Workflow models and selection
--------------------------------
Pydantic models for the GitHub Actions workflow listing, plus the rules that
decide which workflows can be dispatched and how a user-supplied name maps
onto one of them.
"""

import locale
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Annotated, Callable, Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.functional_validators import BeforeValidator

from wfdispatch.core.errors import ConfigurationError
from wfdispatch.utils.logger import get_logger


ACTIVE_STATE = "active"
WORKFLOWS_DIR = ".github/workflows"


# ---------- Helpers ----------


def _none_to_empty(v):
    return "" if v is None else v


# GitHub occasionally returns null/empty names or paths
LenientStr = Annotated[str, BeforeValidator(_none_to_empty)]


# ---------- Models ----------


class Workflow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Numeric workflow ID assigned by GitHub")
    name: LenientStr = Field(default="")
    path: LenientStr = Field(default="", description="Path relative to the repository root")
    state: LenientStr = Field(default="")

    @property
    def is_active(self) -> bool:
        return self.state == ACTIVE_STATE


class WorkflowList(BaseModel):
    """Body of `GET /repos/{owner}/{repo}/actions/workflows`."""
    model_config = ConfigDict(extra="ignore")

    total_count: int = Field(default=0, ge=0)
    workflows: list[Workflow] = Field(default_factory=list)


class DispatchRequest(BaseModel):
    workflow_id: int
    ref: str

    @field_validator("ref")
    @classmethod
    def _ref_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("ref cannot be empty")
        return v


# ---------- Filtering ----------


def _path_exists(root: Path, relative: str) -> bool:
    try:
        return (root / relative).exists()
    except OSError:
        return False


def sort_by_name(workflows: Iterable[Workflow]) -> list[Workflow]:
    """Sort ascending by name using the current collation locale (stable)."""
    return sorted(workflows, key=lambda wf: locale.strxfrm(wf.name))


def filter_eligible(
    workflows: Sequence[Workflow],
    repo_root: Path,
    *,
    max_workers: int = 8,
) -> list[Workflow]:
    """
    Keep workflows that can actually be dispatched from this checkout:
    non-empty name and path, active state, and a config file that still exists
    under `repo_root`. File checks run concurrently and all finish before the
    result is built. Returned list is sorted by name.
    """
    log = get_logger(__name__)
    candidates = [wf for wf in workflows if wf.name and wf.path and wf.is_active]

    exists: dict[int, bool] = {}
    if candidates:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(candidates)))) as ex:
            fut_map = {ex.submit(_path_exists, repo_root, wf.path): idx for idx, wf in enumerate(candidates)}
            for fut in as_completed(fut_map):
                exists[fut_map[fut]] = fut.result()

    eligible = [wf for idx, wf in enumerate(candidates) if exists.get(idx, False)]
    log.debug(f"{len(eligible)} of {len(workflows)} workflow(s) eligible under {repo_root}")
    return sort_by_name(eligible)


# ---------- Resolution ----------


def workflow_path_for(slug: str) -> str:
    return f"{WORKFLOWS_DIR}/{slug}.yml"


def match_workflow(workflows: Sequence[Workflow], workflow_name: str) -> Optional[Workflow]:
    """First workflow whose name or conventional config path matches, case-insensitively."""
    slug = workflow_name.lower()
    expected_path = workflow_path_for(slug)
    for wf in workflows:
        if wf.name.lower() == slug or wf.path.lower() == expected_path:
            return wf
    return None


def find_workflow_id(
    workflows: Sequence[Workflow],
    workflow_name: Optional[str],
    *,
    interactive: bool,
    prompt: Callable[[Sequence[Workflow]], int],
) -> Optional[int]:
    """
    Resolve the workflow ID from a name/slug, or ask the user when no name is given.
    Raises ConfigurationError when a choice is required but prompting is not allowed.
    """
    if not workflow_name:
        if not interactive:
            raise ConfigurationError("Command requires `workflowName` argument when run on the CI.")
        return prompt(workflows)

    wf = match_workflow(workflows, workflow_name)
    return wf.id if wf else None


__all__ = [
    "ACTIVE_STATE",
    "Workflow",
    "WorkflowList",
    "DispatchRequest",
    "sort_by_name",
    "filter_eligible",
    "match_workflow",
    "find_workflow_id",
]
