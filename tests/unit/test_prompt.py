import io

import pytest
from rich.console import Console

from wfdispatch.core.errors import WorkflowNotFoundError
from wfdispatch.core.prompt import prompt_workflow_id
from wfdispatch.core.workflows import Workflow


WORKFLOWS = [
    Workflow(id=10, name="Build", path=".github/workflows/build.yml", state="active"),
    Workflow(id=20, name="Test [ios]", path=".github/workflows/test.yml", state="active"),
]


def quiet_console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120)


def test_prompt_lists_all_and_returns_id():
    console = quiet_console()
    chosen = prompt_workflow_id(WORKFLOWS, console=console, stream=io.StringIO("2\n"))
    assert chosen == 20
    out = console.file.getvalue()
    assert "Build" in out and "Test [ios]" in out
    assert "Which workflow do you want to dispatch?" in out


def test_prompt_reasks_on_invalid_choice():
    console = quiet_console()
    chosen = prompt_workflow_id(WORKFLOWS, console=console, stream=io.StringIO("7\nabc\n1\n"))
    assert chosen == 10


def test_prompt_without_workflows():
    with pytest.raises(WorkflowNotFoundError, match="no workflows to choose from"):
        prompt_workflow_id([], console=quiet_console(), stream=io.StringIO("1\n"))
