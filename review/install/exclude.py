"""Exclude filter — compile manifest exclude globs into a path predicate.

Globs use gitignore matching rules: a pattern without a slash matches at any
depth, a pattern containing a slash is anchored at the package root, and a
pattern matching a directory excludes everything below it. Excludes only
ever remove files; negated (``!``) patterns are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable

import pathspec

from review.errors import InvalidExcludePattern

NEGATION_MARKER = "!"


@dataclass(frozen=True)
class ExcludeFilter:
    """Pure predicate deciding whether a package-relative path is installed."""

    patterns: tuple[str, ...]
    spec: pathspec.PathSpec

    def includes(self, relative_path: str | PurePath, is_dir: bool = False) -> bool:
        """Return True unless ``relative_path`` matches an exclude pattern.

        Paths are relative to the package root. Directories are matched with
        a trailing slash so directory-only patterns (``docs/``) apply.
        """
        path = PurePath(relative_path).as_posix()
        if is_dir:
            path += "/"
        return not self.spec.match_file(path)

    def __call__(self, relative_path: str | PurePath) -> bool:
        return self.includes(relative_path)


def normalize_pattern(pattern: str) -> str:
    """Strip any leading ``./`` from an exclude glob and validate it.

    Raises:
        InvalidExcludePattern: If the stripped pattern is negated.
    """
    glob = pattern
    while glob.startswith("./"):
        glob = glob[2:]
    if glob.startswith(NEGATION_MARKER):
        raise InvalidExcludePattern(pattern, "exclude globs cannot start with `!`")
    return glob


def compile_excludes(patterns: Iterable[str]) -> ExcludeFilter:
    """Compile manifest exclude globs into an ExcludeFilter.

    Every pattern is validated before any is used, so a bad pattern fails
    the install before the filesystem is touched.

    Raises:
        InvalidExcludePattern: If a pattern is negated or is not a valid glob.
    """
    normalized = []
    for pattern in patterns:
        glob = normalize_pattern(pattern)
        try:
            pathspec.GitIgnoreSpec.from_lines([glob])
        except ValueError as e:
            raise InvalidExcludePattern(pattern, "invalid exclude glob") from e
        normalized.append(glob)

    return ExcludeFilter(
        patterns=tuple(normalized),
        spec=pathspec.GitIgnoreSpec.from_lines(normalized),
    )
