# wfdispatch/core/github.py
from __future__ import annotations

"""GitHub REST client
---------------------
Small synchronous wrapper over httpx for the two Actions endpoints we need:
listing workflows and creating a workflow_dispatch event.
"""

import json
from typing import Any, Optional

import httpx

from wfdispatch.core.workflows import DispatchRequest, Workflow, WorkflowList
from wfdispatch.utils.config import Settings, get_settings
from wfdispatch.utils.logger import get_logger


API_VERSION = "2022-11-28"
PER_PAGE = 100


def serialize_response(response: httpx.Response) -> str:
    """Full response (status, url, headers, body) as indented JSON, for error logs."""
    try:
        data: Any = response.json()
    except ValueError:
        data = response.text
    payload = {
        "status": response.status_code,
        "url": str(response.request.url),
        "headers": dict(response.headers),
        "data": data,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


class GitHubClient:
    """Talks to the repository configured by GITHUB_OWNER/GITHUB_REPO."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.log = get_logger(__name__)
        headers = {
            "accept": "application/vnd.github+json",
            "x-github-api-version": API_VERSION,
            "user-agent": "wfdispatch",
        }
        if self.settings.GITHUB_TOKEN:
            headers["authorization"] = f"token {self.settings.GITHUB_TOKEN}"
        self._client = httpx.Client(
            base_url=self.settings.GITHUB_API_URL,
            headers=headers,
            timeout=self.settings.HTTP_TIMEOUT,
            transport=transport,
        )

    # ---------- lifecycle ----------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------- endpoints ----------

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.settings.GITHUB_OWNER}/{self.settings.GITHUB_REPO}"

    def list_workflows(self) -> list[Workflow]:
        """All workflows of the repository, following pagination links."""
        url: Optional[str] = f"{self._repo_path}/actions/workflows"
        params: Optional[dict] = {"per_page": PER_PAGE}
        workflows: list[Workflow] = []

        while url:
            resp = self._client.get(url, params=params)
            resp.raise_for_status()
            page = WorkflowList.model_validate(resp.json())
            workflows.extend(page.workflows)
            # `next` links already carry the query string
            url = resp.links.get("next", {}).get("url")
            params = None

        self.log.debug(f"Fetched {len(workflows)} workflow(s) from {self.settings.repo_slug}")
        return workflows

    def create_dispatch(self, request: DispatchRequest) -> httpx.Response:
        """POST the dispatch event. The caller decides what a non-204 status means."""
        return self._client.post(
            f"{self._repo_path}/actions/workflows/{request.workflow_id}/dispatches",
            json={"ref": request.ref},
        )
