"""Shared fixtures: package trees, upstream repositories with PR refs, fake runners."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from git import Repo
from rich.console import Console

from review.config import ReviewConfig

FOO_MANIFEST = """\
[package]
name = "foo"
version = "1.0.0"
entrypoint = "lib.typ"
authors = ["Jane Doe"]
license = "MIT"
description = "A package"
exclude = ["*.pdf", "docs/"]
"""

BAR_MANIFEST = """\
[package]
name = "bar"
version = "2.0.0"
entrypoint = "src/lib.typ"
exclude = ["./thumbnail.png"]

[template]
path = "template"
entrypoint = "main.typ"
thumbnail = "thumbnail.png"
"""


def write_files(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def package_files(name: str, version: str, manifest: str, files: dict[str, str]) -> dict:
    prefix = f"packages/preview/{name}/{version}"
    result = {f"{prefix}/typst.toml": manifest}
    result.update({f"{prefix}/{rel}": content for rel, content in files.items()})
    return result


def commit_files(repo: Repo, files: dict[str, str], message: str):
    root = Path(repo.working_tree_dir)
    write_files(root, files)
    repo.index.add([str(root / relative) for relative in files])
    return repo.index.commit(message)


def add_pull_request(repo: Repo, pr_number: int, files: dict[str, str]) -> str:
    """Commit ``files`` on top of main and expose it as ``refs/pull/<n>/head``."""
    side = f"pr-{pr_number}"
    repo.git.checkout("-b", side, "main")
    commit = commit_files(repo, files, f"Submit PR #{pr_number}")
    repo.git.update_ref(f"refs/pull/{pr_number}/head", commit.hexsha)
    repo.git.checkout("main")
    repo.delete_head(side, force=True)
    return commit.hexsha


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def workspace(tmp_path):
    """A config whose roots all live under a temporary directory."""
    return ReviewConfig(
        repo_dir=tmp_path / "packages",
        data_dir=tmp_path / "data",
        test_dir=tmp_path / "test",
        open_output=False,
    )


@pytest.fixture
def upstream(tmp_path):
    """An upstream package repository with PRs #12 and #13.

    Returns the repo and a mapping of PR number to head commit sha.
    """
    repo = Repo.init(tmp_path / "upstream")
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Reviewer")
        cw.set_value("user", "email", "reviewer@example.com")

    commit_files(repo, {"README.md": "# packages\n"}, "Initial commit")
    repo.git.branch("-M", "main")

    shas = {
        12: add_pull_request(
            repo,
            12,
            package_files(
                "foo",
                "1.0.0",
                FOO_MANIFEST,
                {"lib.typ": "#let foo = 1\n", "manual.pdf": "pdf", "docs/guide.md": "g"},
            ),
        ),
        13: add_pull_request(
            repo,
            13,
            package_files(
                "bar",
                "2.0.0",
                BAR_MANIFEST,
                {
                    "src/lib.typ": "#let bar = 2\n",
                    "template/main.typ": "#import \"@preview/bar:2.0.0\"\n",
                    "thumbnail.png": "png",
                },
            ),
        ),
    }
    return repo, shas


@pytest.fixture
def checkout(upstream, workspace):
    """A clone of the upstream at ``workspace.repo_dir``, on main."""
    repo, _ = upstream
    return Repo.clone_from(repo.working_tree_dir, workspace.repo_dir)


class FakeRunner:
    """Records commands instead of running them.

    ``failures`` maps ``(command, needle)`` to an exit status, returned when
    ``needle`` is one of the arguments of a call to ``command``.
    """

    def __init__(self, failures: dict | None = None):
        self.failures = failures or {}
        self.calls: list[tuple[str, list[str]]] = []

    def run(self, command, args):
        args = list(args)
        self.calls.append((command, args))
        for (cmd, needle), status in self.failures.items():
            if cmd == command and needle in args:
                return status
        return 0


@pytest.fixture
def fake_runner():
    return FakeRunner()
