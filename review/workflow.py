"""Review workflow — run the fetch, install and test phases in order.

The repository must be synchronized before anything is installed from it,
installation stops at the first failing package, and testing keeps going
past failures so every package is reported on.
"""

from __future__ import annotations

from enum import Enum

from rich.console import Console

from review import output
from review.config import ReviewConfig
from review.harness.driver import HarnessReport, TemplateHarness
from review.harness.runner import CommandRunner
from review.install.installer import PackageInstaller
from review.models import ReviewSession
from review.repo.synchronizer import RepoSynchronizer


class Phase(Enum):
    """Which phases a command runs."""

    REVIEW = "review"
    FETCH = "fetch"
    INSTALL = "install"

    @property
    def fetches(self) -> bool:
        return self in (Phase.REVIEW, Phase.FETCH)

    @property
    def installs(self) -> bool:
        return self in (Phase.REVIEW, Phase.INSTALL)


def print_session(session: ReviewSession, console: Console) -> None:
    console.print(f"PR {output.ref(f'#{session.pr_number}')}")
    for package in session.packages:
        console.print(f"  {output.name(package.name)} v{package.version}")
    console.print()


def run_review(
    phase: Phase,
    session: ReviewSession,
    config: ReviewConfig,
    runner: CommandRunner | None = None,
    console: Console | None = None,
) -> HarnessReport | None:
    """Run the phases selected by ``phase`` for one session.

    Returns:
        The harness report when the test phase ran, otherwise None.

    Raises:
        ReviewError: The first error of the fetch or install phase, or the
            first package failure of the test phase once all packages ran.
    """
    console = console or output.console
    print_session(session, console)

    if phase.fetches:
        console.print("=== Fetch ===")
        RepoSynchronizer(config, console).sync(session)
        console.print()

    if not phase.installs:
        return None

    console.print("=== Install ===")
    installer = PackageInstaller(config, console)
    manifests = installer.install_all(list(session.packages))
    console.print()

    console.print("=== Test ===")
    harness = TemplateHarness(config, runner=runner, console=console)
    report = harness.test_all(list(zip(session.packages, manifests)))
    report.raise_first()
    return report
