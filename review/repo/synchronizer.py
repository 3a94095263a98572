"""Repository synchronizer — check out a pull request under a session branch.

Brings the local package repository to exactly the commit at the head of a
pull request::

    sync = RepoSynchronizer(config)
    sync.sync(session)
    # the working tree now matches pull/<n>/head on branch session.branch_name

No rollback is performed: if the fetch fails after a stale session branch
was deleted, the branch stays deleted.
"""

from __future__ import annotations

from pathlib import Path

from git import GitCommandError, Head, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import BadName
from rich.console import Console

from review import output
from review.config import ReviewConfig
from review.errors import (
    BranchError,
    FetchError,
    InvariantViolation,
    RepositoryNotFound,
)
from review.models import ReviewSession


def open_repo(repo_path: str | Path) -> Repo:
    """Open the Git repository at ``repo_path``.

    Raises:
        RepositoryNotFound: If the path is missing or not a Git repository.
    """
    try:
        return Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryNotFound(str(repo_path)) from e


def checkout_branch(repo: Repo, branch_name: str) -> Head:
    """Update the working tree to ``branch_name`` and point HEAD at it."""
    try:
        head = repo.heads[branch_name]
    except IndexError as e:
        raise BranchError(f"branch `{branch_name}` does not exist") from e
    try:
        head.checkout()
    except GitCommandError as e:
        raise BranchError(f"failed to check out branch `{branch_name}`") from e
    return head


def is_on_branch(repo: Repo, branch_name: str) -> bool:
    if repo.head.is_detached:
        return False
    return repo.active_branch.name == branch_name


class RepoSynchronizer:
    """Owns every branch state transition of the local package repository."""

    def __init__(self, config: ReviewConfig, console: Console | None = None):
        self.config = config
        self.console = console or output.console

    def sync(self, session: ReviewSession) -> str:
        """Check out the head of ``session``'s pull request.

        Returns:
            The hexsha of the checked-out commit.

        Raises:
            RepositoryNotFound: The repository directory is not a Git repo.
            BranchError: The primary branch or session branch could not be
                checked out, deleted or created.
            FetchError: The remote is missing or the PR ref could not be fetched.
            InvariantViolation: The fetched ref did not resolve to a commit.
        """
        branch_name = session.branch_name
        repo = open_repo(self.config.repo_dir)

        self.ensure_primary_branch(repo)

        # Drop the stale session branch so the PR head is always re-fetched
        for head in repo.heads:
            if head.name == branch_name:
                self.console.print(f"remove existing branch {output.removed(branch_name)}")
                self._delete_branch(repo, head)
                break

        commit = self._fetch_pr_commit(repo, session.refspec)

        self.console.print(f"checkout {output.ref(branch_name)}")
        try:
            repo.create_head(branch_name, commit, force=True)
        except (GitCommandError, ValueError, OSError) as e:
            raise BranchError(f"failed to create branch `{branch_name}`") from e

        checkout_branch(repo, branch_name)
        return commit.hexsha

    def ensure_primary_branch(self, repo: Repo) -> None:
        """Check out the primary branch unless HEAD already points at it."""
        if not is_on_branch(repo, self.config.primary_branch):
            checkout_branch(repo, self.config.primary_branch)

    def remove_other_branches(self) -> list[str]:
        """Delete every local branch except the primary one.

        Returns:
            Names of the deleted branches, in repository order.
        """
        repo = open_repo(self.config.repo_dir)
        self.ensure_primary_branch(repo)

        removed = []
        for head in list(repo.heads):
            if head.name == self.config.primary_branch:
                continue
            self.console.print(f"remove branch {output.removed(head.name)}")
            self._delete_branch(repo, head)
            removed.append(head.name)
        return removed

    def _delete_branch(self, repo: Repo, head: Head) -> None:
        name = head.name
        try:
            # -D: review branches are never merged into the primary branch
            repo.delete_head(head, force=True)
        except GitCommandError as e:
            raise BranchError(f"failed to delete branch `{name}`") from e

    def _fetch_pr_commit(self, repo: Repo, refspec: str):
        remote_name = self.config.remote
        try:
            remote = repo.remote(remote_name)
        except ValueError as e:
            raise FetchError(remote_name, refspec, "remote not found") from e

        self.console.print(f"fetching {output.ref(refspec)}")
        try:
            remote.fetch(refspec)
        except GitCommandError as e:
            raise FetchError(remote_name, refspec) from e

        try:
            return repo.commit("FETCH_HEAD")
        except (BadName, ValueError) as e:
            raise InvariantViolation(
                f"`{refspec}` was fetched but FETCH_HEAD does not resolve to a commit"
            ) from e
