"""Argument grammar for the package/PR tail of review commands.

The tail is a space-joined list of tokens whose last token is the pull
request number prefixed with ``#``. Every other token is ``name:version``,
optionally followed by a comma; the literal ``and`` is a separator::

    foo:1.0.0, and bar:2.0.0 #42
"""

from __future__ import annotations

from typing import Iterable

from review.errors import InputError
from review.models import PackageRequest, ReviewSession

SEPARATOR_WORD = "and"


def tokenize(args: Iterable[str]) -> list[str]:
    """Join raw arguments with spaces and split them back into tokens."""
    return [t for t in " ".join(args).split(" ") if t]


def parse_pr_number(token: str) -> int:
    if not token.startswith("#"):
        raise InputError(f"PR number must start with `#` - `{token}`")
    digits = token[1:]
    if not digits.isdecimal() or int(digits) <= 0:
        raise InputError(f"PR number is not valid - `{digits}`")
    return int(digits)


def parse_package(token: str) -> PackageRequest:
    name, sep, version = token.partition(":")
    if not sep:
        raise InputError(
            f"package name and version must be separated by `:` - `{token}`"
        )
    if not name or not version:
        raise InputError(f"package name and version must not be empty - `{token}`")
    return PackageRequest(name=name, version=version)


def parse_args(args: Iterable[str]) -> ReviewSession:
    """Parse the package/PR tail into a ReviewSession.

    Raises:
        InputError: If the tail is malformed. Nothing has been touched yet.
    """
    tokens = tokenize(args)
    if len(tokens) < 2:
        raise InputError("expected at least one package and the PR number")

    *package_tokens, pr_token = tokens
    pr_number = parse_pr_number(pr_token)

    packages: list[PackageRequest] = []
    for token in package_tokens:
        name_version = token.rstrip(",")
        if name_version == SEPARATOR_WORD:
            continue
        if not name_version:
            raise InputError(
                f"package name and version must be separated by `:` - `{token}`"
            )
        package = parse_package(name_version)
        if package in packages:
            raise InputError(f"package listed more than once - `{package}`")
        packages.append(package)

    if not packages:
        raise InputError("expected at least one package and the PR number")

    return ReviewSession(packages=tuple(packages), pr_number=pr_number)
