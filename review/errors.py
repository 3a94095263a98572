"""Error taxonomy for review runs.

Errors carry a human-readable message naming the failing operation and the
identifiers involved (package, branch, path). They are grouped into broad
categories only; callers are expected to read the message.
"""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for every error the tool reports to the operator."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Input & configuration ────────────────────────────────────────────


class InputError(ReviewError):
    """Malformed command-line arguments. Raised before any side effect."""


class ConfigError(ReviewError):
    """The configuration file is unreadable or invalid."""


# ── Repository synchronization ───────────────────────────────────────


class SyncError(ReviewError):
    """Base class for repository synchronization failures."""


class RepositoryNotFound(SyncError):
    """The repository path is absent or not a Git repository."""

    def __init__(self, repo_path: str):
        super().__init__(f"no git repository found at `{repo_path}`")
        self.repo_path = repo_path


class BranchError(SyncError):
    """A branch could not be resolved, checked out, created or deleted."""


class FetchError(SyncError):
    """Fetching the pull request ref from the remote failed."""

    def __init__(self, remote: str, refspec: str, reason: str = ""):
        message = f"failed to fetch `{refspec}` from remote `{remote}`"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.remote = remote
        self.refspec = refspec


class InvariantViolation(SyncError):
    """A state that must hold after a successful step does not."""


# ── Installation ─────────────────────────────────────────────────────


class InstallError(ReviewError):
    """Base class for package installation failures."""


class ManifestMissing(InstallError):
    """The package has no readable ``typst.toml``."""

    def __init__(self, manifest_path: str):
        super().__init__(f"failed to read package manifest `{manifest_path}`")
        self.manifest_path = manifest_path


class ManifestInvalid(InstallError):
    """The manifest is not valid TOML or does not match the schema."""


class InvalidExcludePattern(InstallError):
    """An exclude glob is negated or does not compile."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"{reason} - `{pattern}`")
        self.pattern = pattern


class InstallIOError(InstallError):
    """Removing the old tree or copying the new one failed."""


# ── Template testing ─────────────────────────────────────────────────


class HarnessError(ReviewError):
    """Base class for a single package's template test failure."""


class TemplateInitFailed(HarnessError):
    """The template could not be initialized."""


class CompileFailed(HarnessError):
    """The template entrypoint did not compile."""


class ViewerFailed(HarnessError):
    """The rendered document could not be opened."""


class ToolLaunchError(ReviewError):
    """An external executable could not be started at all."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"failed to execute `{command}`: {reason}")
        self.command = command


# ── Clean ────────────────────────────────────────────────────────────


class CleanError(ReviewError):
    """Sweeping cached packages, test directories or branches failed."""


def format_error_chain(exc: BaseException) -> str:
    """Render an error followed by each of its chained causes."""
    lines = [str(exc)]
    seen = {id(exc)}
    cause = exc.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        text = str(cause).strip()
        if text:
            lines.append(f"caused by: {text}")
        cause = cause.__cause__
    return "\n".join(lines)
