"""Package installer — copy a filtered package tree into the package cache.

An install always replaces the previous tree of the same (name, version):
the target directory is removed before the new files are copied, so
repeated installs converge on the current source content. A copy failure
midway leaves a partially populated target.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator

from rich.console import Console

from review import output
from review.config import ReviewConfig
from review.errors import InstallIOError
from review.install.exclude import ExcludeFilter, compile_excludes
from review.install.manifest import load_manifest
from review.models import PackageManifest, PackageRequest


def walk_package_files(package_dir: Path, include: ExcludeFilter) -> Iterator[Path]:
    """Yield package-relative paths of the regular files to install.

    Excluded directories are pruned. Symlinks and special files are skipped.
    """
    for dirpath, dirnames, filenames in os.walk(package_dir, followlinks=False):
        current = Path(dirpath)
        relative_dir = current.relative_to(package_dir)

        dirnames[:] = sorted(
            d for d in dirnames if include.includes(relative_dir / d, is_dir=True)
        )

        for filename in sorted(filenames):
            full_path = current / filename
            if full_path.is_symlink() or not full_path.is_file():
                continue
            relative_path = relative_dir / filename
            if include(relative_path):
                yield relative_path


class PackageInstaller:
    """Installs reviewed packages from the repository checkout into the cache."""

    def __init__(self, config: ReviewConfig, console: Console | None = None):
        self.config = config
        self.console = console or output.console

    def install(self, package: PackageRequest) -> PackageManifest:
        """Install one package and return its parsed manifest.

        Raises:
            ManifestMissing: The package has no ``typst.toml``.
            ManifestInvalid: The manifest does not parse or validate.
            InvalidExcludePattern: An exclude glob is negated or malformed.
            InstallIOError: Removing the old tree or copying a file failed.
        """
        package_dir = self.config.source_package_dir(package)
        target_dir = self.config.cache_package_dir(package)

        self.console.print(f"install {output.ref(package_dir)}")

        manifest = load_manifest(package_dir)
        include = compile_excludes(manifest.exclude)

        if target_dir.exists():
            self.console.print(f"remove existing package {output.removed(target_dir)}")
            try:
                shutil.rmtree(target_dir)
            except OSError as e:
                raise InstallIOError(
                    f"failed to remove existing package `{target_dir}`"
                ) from e

        copy_tree(package_dir, target_dir, include)
        return manifest

    def install_all(self, packages: list[PackageRequest]) -> list[PackageManifest]:
        """Install packages in order, stopping at the first failure."""
        return [self.install(package) for package in packages]


def copy_tree(package_dir: Path, target_dir: Path, include: ExcludeFilter) -> list[Path]:
    """Copy every included regular file of ``package_dir`` into ``target_dir``.

    Returns:
        The package-relative paths that were copied.
    """
    if not package_dir.is_dir():
        raise InstallIOError(f"package directory `{package_dir}` does not exist")

    copied = []
    try:
        for relative_path in walk_package_files(package_dir, include):
            target_path = target_dir / relative_path
            parent = target_path.parent
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise InstallIOError(
                    f"failed to create parent directory `{parent}`"
                ) from e
            try:
                shutil.copy(package_dir / relative_path, target_path)
            except OSError as e:
                raise InstallIOError(f"failed to copy to `{target_path}`") from e
            copied.append(relative_path)
    except OSError as e:
        raise InstallIOError(f"failed to traverse `{package_dir}`") from e
    return copied
