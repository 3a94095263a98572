"""typst-review CLI — the main entry point for reviewing package submissions."""

import click

from review import __version__
from review.output import console, err_console

SESSION_HELP = (
    "PACKAGES are `name:version` tokens, optionally joined with `, and`, "
    "followed by the PR number as `#<number>`."
)


def _fail(error) -> None:
    from rich.markup import escape

    from review.errors import format_error_chain

    err_console.print(f"[red]{escape(format_error_chain(error))}[/]")
    raise SystemExit(1)


def _load_config(ctx: click.Context):
    from review.config import ReviewConfig, load_config
    from review.errors import ConfigError

    options = ctx.obj
    try:
        config = load_config(options["config"]) if options["config"] else ReviewConfig()
    except ConfigError as e:
        _fail(e)
    return config.with_overrides(
        repo_dir=options["repo"],
        data_dir=options["data_dir"],
        test_dir=options["test_dir"],
        open_output=False if options["no_open"] else None,
    )


def _run_phase(ctx: click.Context, phase_name: str, args: tuple[str, ...]) -> None:
    from review.args import parse_args
    from review.errors import ReviewError
    from review.workflow import Phase, run_review

    try:
        session = parse_args(args)
    except ReviewError as e:
        _fail(e)

    config = _load_config(ctx)
    try:
        run_review(Phase(phase_name), session, config, console=console)
    except ReviewError as e:
        _fail(e)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config",
    envvar="TYPST_REVIEW_CONFIG",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML config file",
)
@click.option("--repo", default=None, help="Package repository checkout (default: ./packages)")
@click.option("--data-dir", default=None, help="Data directory holding the package cache")
@click.option("--test-dir", default=None, help="Scratch directory for template instances")
@click.option("--no-open", is_flag=True, help="Do not open compiled templates")
@click.pass_context
def main(ctx, config, repo, data_dir, test_dir, no_open):
    """typst-review — vet package submissions to the Typst package repository.

    Checks out a pull request, installs its packages into the local package
    cache, and compiles their templates.
    """
    ctx.obj = {
        "config": config,
        "repo": repo,
        "data_dir": data_dir,
        "test_dir": test_dir,
        "no_open": no_open,
    }


# ── Review ───────────────────────────────────────────────────────────


@main.command(epilog=SESSION_HELP)
@click.argument("packages", nargs=-1, required=True)
@click.pass_context
def review(ctx, packages: tuple[str, ...]):
    """Fetch the PR, install its packages, and test their templates.

    Example: typst-review review foo:1.0.0, and bar:2.0.0 '#42'
    """
    _run_phase(ctx, "review", packages)


@main.command(epilog=SESSION_HELP)
@click.argument("packages", nargs=-1, required=True)
@click.pass_context
def fetch(ctx, packages: tuple[str, ...]):
    """Check out the PR on a review branch without installing anything."""
    _run_phase(ctx, "fetch", packages)


@main.command(epilog=SESSION_HELP)
@click.argument("packages", nargs=-1, required=True)
@click.pass_context
def install(ctx, packages: tuple[str, ...]):
    """Install and test packages from the current checkout."""
    _run_phase(ctx, "install", packages)


# ── Clean ────────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def clean(ctx):
    """Remove installed packages, template instances, and review branches."""
    from review.clean import clean as clean_all
    from review.errors import ReviewError

    config = _load_config(ctx)
    try:
        clean_all(config, console)
    except ReviewError as e:
        _fail(e)


if __name__ == "__main__":
    main()
