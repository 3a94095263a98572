"""Configuration — filesystem roots and external tool names for a review run.

Every ambient location the tool touches (the package repository checkout,
the platform data directory holding the package cache, the scratch test
directory) lives on ``ReviewConfig`` so it can be redirected, for example
to temporary directories in tests.

A config file is a flat YAML mapping of field names to values::

    repo_dir: ~/src/typst-packages
    open_output: false
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import platformdirs
import yaml

from review.errors import ConfigError
from review.models import PackageRequest

PATH_FIELDS = {"repo_dir", "data_dir", "test_dir"}


def default_data_dir() -> Path:
    """Return the per-user data directory the Typst compiler reads packages from.

    On Windows this is the roaming ``%APPDATA%`` directory.
    """
    return platformdirs.user_data_path(roaming=True)


def default_viewer() -> str:
    """Return the platform's command for opening a document."""
    if sys.platform == "darwin":
        return "open"
    if sys.platform.startswith("win"):
        return "explorer"
    return "xdg-open"


@dataclass
class ReviewConfig:
    """Roots and tools used by the synchronizer, installer and harness."""

    repo_dir: Path = Path("packages")
    data_dir: Path = field(default_factory=default_data_dir)
    test_dir: Path = Path("test")
    namespace: str = "preview"
    remote: str = "origin"
    primary_branch: str = "main"
    typst_command: str = "typst"
    viewer_command: str = field(default_factory=default_viewer)
    open_output: bool = True

    @property
    def source_root(self) -> Path:
        """Directory holding all namespaces inside the repository checkout."""
        return self.repo_dir / "packages"

    @property
    def cache_namespace_dir(self) -> Path:
        """Directory of the namespace inside the local package cache."""
        return self.data_dir / "typst" / "packages" / self.namespace

    def source_package_dir(self, package: PackageRequest) -> Path:
        return self.source_root / self.namespace / package.name / package.version

    def cache_package_dir(self, package: PackageRequest) -> Path:
        return self.cache_namespace_dir / package.name / package.version

    def template_dir(self, package: PackageRequest) -> Path:
        return self.test_dir / package.name

    def with_overrides(self, **overrides) -> "ReviewConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in PATH_FIELDS & changes.keys():
            changes[key] = Path(changes[key]).expanduser()
        return replace(self, **changes)


def load_config(path: str | Path) -> ReviewConfig:
    """Load a ReviewConfig from a YAML file.

    Missing keys keep their defaults.

    Raises:
        ConfigError: If the file cannot be read, is not a mapping, or names
            an unknown key.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file `{path}`") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config file `{path}`") from e

    if data is None:
        return ReviewConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"config file `{path}` must contain a mapping")

    known = {f.name for f in fields(ReviewConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys in `{path}`: {', '.join(unknown)}")

    if "open_output" in data and not isinstance(data["open_output"], bool):
        raise ConfigError(f"`open_output` must be true or false in `{path}`")
    for key, value in data.items():
        if key != "open_output" and not isinstance(value, str):
            raise ConfigError(f"`{key}` must be a string in `{path}`")

    return ReviewConfig().with_overrides(**data)
