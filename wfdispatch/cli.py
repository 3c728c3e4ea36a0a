# wfdispatch/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
`workflow-dispatch` (aliases `dispatch`, `wd`) triggers a GitHub Actions workflow;
`list` shows which workflows can be dispatched from this checkout; `config`
prints the effective settings.
"""
import json
import locale
import sys
from typing import Optional

import click

from wfdispatch.core.dispatcher import dispatch, list_workflows
from wfdispatch.core.errors import DispatcherError, RemoteDispatchError
from wfdispatch.core.github import GitHubClient
from wfdispatch.utils.config import get_settings
from wfdispatch.utils.logger import get_logger, bind, unbind, set_log_level


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _use_user_collation() -> None:
    # Workflow names sort with the user's locale, as a terminal user would expect
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        get_logger(__name__).debug("Falling back to the C collation locale")


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="wfdispatch")
def cli(log_level: Optional[str]):
    # Initialize settings + logger once at process start
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())
    _use_user_collation()


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    _echo_json(get_settings().masked())


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print workflows as a JSON array")
def cmd_list(as_json: bool):
    """List workflows that can be dispatched from this checkout."""
    settings = get_settings()
    with GitHubClient(settings) as client:
        workflows = list_workflows(client, settings)

    if as_json:
        _echo_json([wf.model_dump() for wf in workflows])
        return

    if not workflows:
        click.echo("No workflows found.")
        return

    click.echo(f"Found {len(workflows)} workflow(s) in {settings.repo_slug}:\n")
    for wf in workflows:
        click.echo(f" - [{wf.id}] {wf.name}  <- {wf.path}")


@cli.command("workflow-dispatch")
@click.argument("workflow_name", required=False)
@click.option(
    "-r", "--ref",
    type=str,
    default=None,
    help="The reference of the workflow run. The reference can be a branch, tag, or a commit SHA.",
)
def cmd_workflow_dispatch(workflow_name: Optional[str], ref: Optional[str]):
    """
    Dispatches an event that triggers a workflow on GitHub Actions.
    Requires GITHUB_TOKEN env variable to be set.

    Examples:
      wfdispatch workflow-dispatch ios-unit-tests --ref main
      wfdispatch wd
    """
    settings = get_settings()
    bind(repo=settings.repo_slug)
    try:
        dispatch(workflow_name, ref, settings=settings)
    except RemoteDispatchError:
        # already logged together with the full response
        sys.exit(1)
    except DispatcherError as e:
        raise click.ClickException(str(e)) from e
    finally:
        unbind("repo")


cli.add_command(cmd_workflow_dispatch, "dispatch")
cli.add_command(cmd_workflow_dispatch, "wd")


def main() -> None:
    cli(prog_name="wfdispatch")


if __name__ == "__main__":
    main()
