import shutil
import subprocess

import pytest

from wfdispatch.core import git
from wfdispatch.core.git import get_current_branch_name, get_repository_root


def test_current_branch_runs_symbolic_ref(tmp_path, monkeypatch):
    calls = []

    def fake_check_output(args, **kwargs):
        calls.append((args, kwargs.get("cwd")))
        return "feature/dispatch\n"

    monkeypatch.setattr(git.subprocess, "check_output", fake_check_output)

    assert get_current_branch_name(tmp_path) == "feature/dispatch"
    assert calls == [(["git", "symbolic-ref", "--short", "HEAD"], str(tmp_path))]


def test_detached_head_error_propagates(monkeypatch):
    def detached(args, **kwargs):
        raise subprocess.CalledProcessError(128, args, stderr="fatal: ref HEAD is not a symbolic ref")

    monkeypatch.setattr(git.subprocess, "check_output", detached)

    with pytest.raises(subprocess.CalledProcessError):
        get_current_branch_name()


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_current_branch_in_real_repository(tmp_path):
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    subprocess.run(["git", "-C", str(tmp_path), "symbolic-ref", "HEAD", "refs/heads/topic"], check=True)
    assert get_current_branch_name(tmp_path) == "topic"


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_repository_root_from_subdirectory(tmp_path):
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    tools = tmp_path / "tools"
    tools.mkdir()
    assert get_repository_root(tools).resolve() == tmp_path.resolve()


def test_repository_root_outside_checkout_raises(tmp_path, monkeypatch):
    def not_a_repo(args, **kwargs):
        raise subprocess.CalledProcessError(128, args, stderr="fatal: not a git repository")

    monkeypatch.setattr(git.subprocess, "check_output", not_a_repo)
    with pytest.raises(subprocess.CalledProcessError):
        get_repository_root(tmp_path)
