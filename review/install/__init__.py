"""Package installation — manifest parsing, exclude filtering, and copying.

This package provides:
- Manifest: parsing and validating ``typst.toml``
- Exclude: compiling manifest exclude globs into a path predicate
- Installer: replacing a package's tree in the local package cache
"""

from review.install.exclude import ExcludeFilter, compile_excludes
from review.install.installer import PackageInstaller
from review.install.manifest import load_manifest, parse_manifest

__all__ = [
    "ExcludeFilter",
    "compile_excludes",
    "PackageInstaller",
    "load_manifest",
    "parse_manifest",
]
