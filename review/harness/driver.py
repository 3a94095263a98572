"""Template harness — instantiate each package template and compile it.

For every installed package that ships a template, the harness:
1. Removes any previous instance under the test directory
2. Runs ``typst init @<namespace>/<name>:<version> <dir>``
3. Runs ``typst compile <dir>/<entrypoint>``
4. Opens the rendered PDF with the platform viewer (optional)

Across packages the first failure is remembered but testing continues, so a
single run reports on every package.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from review import output
from review.config import ReviewConfig
from review.errors import (
    CompileFailed,
    HarnessError,
    TemplateInitFailed,
    ViewerFailed,
)
from review.harness.runner import CommandRunner, SubprocessRunner
from review.models import PackageManifest, PackageRequest


@dataclass
class HarnessReport:
    """Outcome of testing a sequence of packages."""

    tested: list[PackageRequest] = field(default_factory=list)
    skipped: list[PackageRequest] = field(default_factory=list)
    failures: list[tuple[PackageRequest, HarnessError]] = field(default_factory=list)

    @property
    def first_error(self) -> HarnessError | None:
        return self.failures[0][1] if self.failures else None

    @property
    def passed(self) -> bool:
        return not self.failures

    def raise_first(self) -> None:
        """Raise the first recorded failure, if any."""
        if self.failures:
            raise self.first_error


class TemplateHarness:
    """Drives template initialization and compilation through a CommandRunner."""

    def __init__(
        self,
        config: ReviewConfig,
        runner: CommandRunner | None = None,
        console: Console | None = None,
    ):
        self.config = config
        self.runner = runner or SubprocessRunner()
        self.console = console or output.console

    def test_package(self, package: PackageRequest, manifest: PackageManifest) -> bool:
        """Instantiate and compile one package's template.

        Returns:
            False if the package has no template and nothing was run.

        Raises:
            TemplateInitFailed: ``typst init`` failed or the old instance
                could not be removed.
            CompileFailed: The template entrypoint did not compile.
            ViewerFailed: The rendered PDF could not be opened.
            ToolLaunchError: An external tool could not be started.
        """
        template = manifest.template
        if template is None:
            return False

        spec = package.spec(self.config.namespace)
        self.console.print(f"initialize template {output.template(spec)}")

        template_dir = self.config.template_dir(package)
        if template_dir.exists():
            self.console.print(f"remove existing template {output.removed(template_dir)}")
            try:
                shutil.rmtree(template_dir)
            except OSError as e:
                raise TemplateInitFailed(
                    f"failed to remove existing template `{template_dir}`"
                ) from e

        typst = self.config.typst_command
        if self.runner.run(typst, ["init", spec, str(template_dir)]) != 0:
            raise TemplateInitFailed(f"failed to initialize template `{spec}`")

        entrypoint = template_dir / template.entrypoint
        self.console.print(f"compile template {output.template(entrypoint)}")
        if self.runner.run(typst, ["compile", str(entrypoint)]) != 0:
            raise CompileFailed(f"failed to compile template `{entrypoint}` of `{spec}`")

        if self.config.open_output:
            pdf = entrypoint.with_suffix(".pdf")
            viewer = self.config.viewer_command
            if self.runner.run(viewer, [str(pdf)]) != 0:
                raise ViewerFailed(f"failed to open `{pdf}` with `{viewer}`")

        return True

    def test_all(
        self, items: Sequence[tuple[PackageRequest, PackageManifest]]
    ) -> HarnessReport:
        """Test every package in order, latching failures without stopping."""
        test_dir = self.config.test_dir
        try:
            test_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HarnessError(f"failed to create `{test_dir}` directory") from e

        report = HarnessReport()
        for package, manifest in items:
            try:
                ran = self.test_package(package, manifest)
            except HarnessError as e:
                label = output.name(str(package))
                self.console.print(f"[red]x[/] {label}: {escape(str(e))}")
                report.failures.append((package, e))
                continue
            if ran:
                report.tested.append(package)
            else:
                report.skipped.append(package)
        return report
