"""Remove cached packages, template instances and review branches."""

from __future__ import annotations

import shutil
from pathlib import Path

from rich.console import Console

from review import output
from review.config import ReviewConfig
from review.errors import CleanError, SyncError
from review.repo.synchronizer import RepoSynchronizer


def clear_directory(directory: Path, console: Console | None = None) -> list[Path]:
    """Remove every entry directly inside ``directory``, keeping the directory.

    A missing directory is reported and treated as already clean.

    Returns:
        The removed paths.
    """
    console = console or output.console
    if not directory.is_dir():
        console.print(f"directory wasn't found at: `{output.ref(directory)}`")
        return []

    removed = []
    for entry in sorted(directory.iterdir()):
        console.print(f"remove {output.removed(entry)}")
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as e:
            raise CleanError(f"failed to remove `{entry}`") from e
        removed.append(entry)
    return removed


def clean(config: ReviewConfig, console: Console | None = None) -> None:
    """Sweep the package cache namespace, the test directory, and branches."""
    console = console or output.console
    clear_directory(config.cache_namespace_dir, console)
    clear_directory(config.test_dir, console)
    try:
        RepoSynchronizer(config, console).remove_other_branches()
    except SyncError as e:
        raise CleanError("failed to clean branches") from e
