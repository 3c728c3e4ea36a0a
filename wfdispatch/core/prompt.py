# wfdispatch/core/prompt.py
from __future__ import annotations

"""Interactive workflow picker
------------------------------
Lists every eligible workflow at once and blocks until the user picks one.
There is no timeout; Ctrl+C is the only way out.
"""

from typing import Optional, Sequence, TextIO

from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt

from wfdispatch.core.errors import WorkflowNotFoundError
from wfdispatch.core.workflows import Workflow


QUESTION = "Which workflow do you want to dispatch?"


def prompt_workflow_id(
    workflows: Sequence[Workflow],
    *,
    console: Optional[Console] = None,
    stream: Optional[TextIO] = None,
) -> int:
    if not workflows:
        raise WorkflowNotFoundError(None, "There are no workflows to choose from.")

    console = console or Console()
    width = len(str(len(workflows)))
    for idx, wf in enumerate(workflows, start=1):
        console.print(f"  [bold cyan]{idx:>{width}}[/]  {escape(wf.name)}", highlight=False)

    choice = IntPrompt.ask(
        QUESTION,
        console=console,
        choices=[str(i) for i in range(1, len(workflows) + 1)],
        show_choices=False,
        stream=stream,
    )
    return workflows[choice - 1].id
