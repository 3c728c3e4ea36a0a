# wfdispatch/core/errors.py
from __future__ import annotations

from typing import Optional


class DispatcherError(RuntimeError):
    pass


class ConfigurationError(DispatcherError):
    """Missing credential, or a choice that cannot be made without a terminal."""


class WorkflowNotFoundError(DispatcherError):
    def __init__(self, workflow_id: Optional[int], message: Optional[str] = None) -> None:
        self.workflow_id = workflow_id
        super().__init__(message or f"Unable to find workflow with ID `{workflow_id}`.")


class RemoteDispatchError(DispatcherError):
    """GitHub answered the dispatch request with something other than 204."""

    def __init__(self, status_code: int, details: str) -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(f"Dispatching workflow failed with status {status_code}")


__all__ = [
    "DispatcherError",
    "ConfigurationError",
    "WorkflowNotFoundError",
    "RemoteDispatchError",
]
