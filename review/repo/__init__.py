"""Bring the local package repository to the head commit of a pull request."""

from review.repo.synchronizer import RepoSynchronizer

__all__ = ["RepoSynchronizer"]
