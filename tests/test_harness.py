"""Tests for the template test harness."""

import sys

import pytest

from review.errors import (
    CompileFailed,
    TemplateInitFailed,
    ToolLaunchError,
    ViewerFailed,
)
from review.harness.driver import TemplateHarness
from review.harness.runner import SubprocessRunner
from review.install.manifest import parse_manifest
from review.models import PackageRequest

from conftest import BAR_MANIFEST, FOO_MANIFEST


def _template_manifest(name, version="1.0.0", entrypoint="main.typ"):
    return parse_manifest(
        f'[package]\nname = "{name}"\nversion = "{version}"\nentrypoint = "lib.typ"\n'
        f'\n[template]\npath = "template"\nentrypoint = "{entrypoint}"\n'
    )


def test_package_without_template_is_noop(workspace, fake_runner, console):
    harness = TemplateHarness(workspace, fake_runner, console)
    ran = harness.test_package(PackageRequest("foo", "1.0.0"), parse_manifest(FOO_MANIFEST))
    assert ran is False
    assert fake_runner.calls == []


def test_template_is_initialized_and_compiled(workspace, fake_runner, console):
    package = PackageRequest("bar", "2.0.0")
    harness = TemplateHarness(workspace, fake_runner, console)

    assert harness.test_package(package, parse_manifest(BAR_MANIFEST)) is True

    template_dir = workspace.test_dir / "bar"
    assert fake_runner.calls == [
        ("typst", ["init", "@preview/bar:2.0.0", str(template_dir)]),
        ("typst", ["compile", str(template_dir / "main.typ")]),
    ]


def test_rendered_pdf_is_opened_when_enabled(workspace, fake_runner, console):
    config = workspace.with_overrides(open_output=True, viewer_command="viewer")
    harness = TemplateHarness(config, fake_runner, console)
    harness.test_package(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))
    assert fake_runner.calls[-1] == ("viewer", [str(workspace.test_dir / "bar" / "main.pdf")])


def test_existing_template_instance_is_removed(workspace, fake_runner, console):
    stale = workspace.test_dir / "bar" / "stale.typ"
    stale.parent.mkdir(parents=True)
    stale.write_text("old")

    harness = TemplateHarness(workspace, fake_runner, console)
    harness.test_package(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))

    assert not stale.exists()
    assert "remove existing template" in console.file.getvalue()


def test_init_failure(workspace, fake_runner, console):
    fake_runner.failures = {("typst", "init"): 1}
    harness = TemplateHarness(workspace, fake_runner, console)
    with pytest.raises(TemplateInitFailed, match="@preview/bar:2.0.0"):
        harness.test_package(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))
    assert len(fake_runner.calls) == 1


def test_compile_failure(workspace, fake_runner, console):
    fake_runner.failures = {("typst", "compile"): 1}
    harness = TemplateHarness(workspace, fake_runner, console)
    with pytest.raises(CompileFailed):
        harness.test_package(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))


def test_viewer_failure(workspace, fake_runner, console):
    pdf = str(workspace.test_dir / "bar" / "main.pdf")
    fake_runner.failures = {("xdg-open", pdf): 4}
    config = workspace.with_overrides(open_output=True, viewer_command="xdg-open")
    harness = TemplateHarness(config, fake_runner, console)
    with pytest.raises(ViewerFailed):
        harness.test_package(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))


def test_failures_do_not_stop_remaining_packages(workspace, fake_runner, console):
    packages = [PackageRequest(n, "1.0.0") for n in ("first", "second", "third")]
    items = [(p, _template_manifest(p.name)) for p in packages]
    fake_runner.failures = {("typst", str(workspace.test_dir / "second" / "main.typ")): 1}

    report = TemplateHarness(workspace, fake_runner, console).test_all(items)

    compiled = [args[1] for _, args in fake_runner.calls if args[0] == "compile"]
    assert compiled == [
        str(workspace.test_dir / name / "main.typ") for name in ("first", "second", "third")
    ]
    assert report.tested == [packages[0], packages[2]]
    assert isinstance(report.first_error, CompileFailed)
    assert "second" in str(report.first_error)
    with pytest.raises(CompileFailed):
        report.raise_first()


def test_first_failure_is_latched(workspace, fake_runner, console):
    packages = [PackageRequest(n, "1.0.0") for n in ("a", "b", "c")]
    items = [(p, _template_manifest(p.name)) for p in packages]
    fake_runner.failures = {
        ("typst", "@preview/b:1.0.0"): 1,
        ("typst", str(workspace.test_dir / "c" / "main.typ")): 1,
    }

    report = TemplateHarness(workspace, fake_runner, console).test_all(items)

    assert [p.name for p, _ in report.failures] == ["b", "c"]
    assert isinstance(report.first_error, TemplateInitFailed)
    assert workspace.test_dir.is_dir()


def test_packages_without_templates_are_skipped(workspace, fake_runner, console):
    foo = PackageRequest("foo", "1.0.0")
    report = TemplateHarness(workspace, fake_runner, console).test_all(
        [(foo, parse_manifest(FOO_MANIFEST))]
    )
    assert report.passed
    assert report.skipped == [foo]


def test_subprocess_runner_returns_exit_status():
    runner = SubprocessRunner()
    assert runner.run(sys.executable, ["-c", "raise SystemExit(3)"]) == 3
    assert runner.run(sys.executable, ["-c", "pass"]) == 0


def test_subprocess_runner_launch_failure():
    with pytest.raises(ToolLaunchError, match="does-not-exist"):
        SubprocessRunner().run("typst-review-does-not-exist", [])


def test_launch_failure_aborts_test_phase(workspace, console):
    class Unlaunchable:
        def run(self, command, args):
            raise ToolLaunchError(command, "not found")

    items = [(PackageRequest("bar", "2.0.0"), parse_manifest(BAR_MANIFEST))]
    with pytest.raises(ToolLaunchError):
        TemplateHarness(workspace, Unlaunchable(), console).test_all(items)
