# wfdispatch/core/dispatcher.py
from __future__ import annotations

"""Workflow dispatcher
----------------------
Lists the repository's workflows, resolves the one to run and the ref to run
it against, then fires a workflow_dispatch event. Every stage either succeeds
or ends the invocation; nothing is retried.
"""

from typing import Callable, Optional, Sequence

from wfdispatch.core.errors import ConfigurationError, RemoteDispatchError, WorkflowNotFoundError
from wfdispatch.core.git import get_current_branch_name
from wfdispatch.core.github import GitHubClient, serialize_response
from wfdispatch.core.prompt import prompt_workflow_id
from wfdispatch.core.workflows import DispatchRequest, Workflow, filter_eligible, find_workflow_id
from wfdispatch.utils.config import Settings, get_settings
from wfdispatch.utils.logger import get_logger, log_with_context


def list_workflows(client: GitHubClient, settings: Settings) -> list[Workflow]:
    """Eligible workflows for the configured repository, sorted by name."""
    return filter_eligible(
        client.list_workflows(),
        settings.REPO_ROOT,
        max_workers=settings.MAX_WORKERS,
    )


def dispatch_workflow(client: GitHubClient, request: DispatchRequest) -> None:
    log = log_with_context(get_logger(__name__), workflow_id=request.workflow_id, ref=request.ref)
    response = client.create_dispatch(request)
    if response.status_code != 204:
        details = serialize_response(response)
        log.error(f"💥 Dispatching workflow failed with response {details}")
        raise RemoteDispatchError(response.status_code, details)
    log.info("🎉 Successfully dispatched workflow event")


def dispatch(
    workflow_name: Optional[str] = None,
    ref: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    prompt: Optional[Callable[[Sequence[Workflow]], int]] = None,
) -> DispatchRequest:
    """
    Dispatch a workflow by name or config slug (or interactively picked) on `ref`,
    defaulting to the currently checked-out branch. Returns the request sent.
    """
    settings = settings or get_settings()
    if not settings.GITHUB_TOKEN:
        raise ConfigurationError("Environment variable `GITHUB_TOKEN` must be set.")

    log = get_logger(__name__)
    with GitHubClient(settings) as client:
        workflows = list_workflows(client, settings)
        log.debug(f"Found {len(workflows)} dispatchable workflow(s) in {settings.repo_slug}")

        workflow_id = find_workflow_id(
            workflows,
            workflow_name,
            interactive=not settings.ci,
            prompt=prompt or prompt_workflow_id,
        )
        resolved_ref = ref or get_current_branch_name(settings.REPO_ROOT)

        if not workflow_id or not any(wf.id == workflow_id for wf in workflows):
            raise WorkflowNotFoundError(workflow_id)

        request = DispatchRequest(workflow_id=workflow_id, ref=resolved_ref)
        log.info(f"Dispatching workflow {workflow_id} on `{resolved_ref}`")
        dispatch_workflow(client, request)
        return request
