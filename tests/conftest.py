import json
from pathlib import Path

import httpx
import pytest

import wfdispatch.cli as cli_module
from wfdispatch.core import dispatcher
from wfdispatch.core.github import GitHubClient
from wfdispatch.utils.config import get_settings


BUILD = {"id": 1, "name": "Build", "path": ".github/workflows/build.yml", "state": "active"}
TEST = {"id": 2, "name": "Test", "path": ".github/workflows/test.yml", "state": "active"}


class FakeGitHub:
    """In-memory stand-in for the two GitHub Actions endpoints."""

    def __init__(self, workflows, dispatch_status=204, dispatch_body=None):
        self.workflows = list(workflows)
        self.dispatch_status = dispatch_status
        self.dispatch_body = dispatch_body or {"message": "Not Found"}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and request.url.path.endswith("/actions/workflows"):
            return httpx.Response(200, json={"total_count": len(self.workflows), "workflows": self.workflows})
        if request.method == "POST" and request.url.path.endswith("/dispatches"):
            if self.dispatch_status == 204:
                return httpx.Response(204)
            return httpx.Response(self.dispatch_status, json=self.dispatch_body)
        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, settings=None):
        return GitHubClient(settings, transport=httpx.MockTransport(self.handler))

    @property
    def listings(self):
        return [r for r in self.requests if r.method == "GET"]

    @property
    def dispatches(self):
        return [r for r in self.requests if r.method == "POST"]

    def dispatched_body(self, index: int = 0) -> dict:
        return json.loads(self.dispatches[index].content)


def write_workflow_files(root: Path, *workflows: dict) -> None:
    for wf in workflows:
        p = root / wf["path"]
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("on: workflow_dispatch\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    for var in ("GITHUB_TOKEN", "CI", "GITHUB_OWNER", "GITHUB_REPO", "GITHUB_API_URL", "LOG_TO_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REPO_ROOT", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


@pytest.fixture
def repo_root(isolated_env: Path) -> Path:
    write_workflow_files(isolated_env, BUILD, TEST)
    return isolated_env


@pytest.fixture
def current_branch(monkeypatch):
    calls = []

    def fake_branch(cwd=None):
        calls.append(cwd)
        return "main"

    monkeypatch.setattr(dispatcher, "get_current_branch_name", fake_branch)
    return calls


@pytest.fixture
def fake_github(monkeypatch):
    def _make(workflows=(BUILD, TEST), **kwargs) -> FakeGitHub:
        fake = FakeGitHub(workflows, **kwargs)
        monkeypatch.setattr(dispatcher, "GitHubClient", fake.client)
        monkeypatch.setattr(cli_module, "GitHubClient", fake.client)
        return fake

    return _make
