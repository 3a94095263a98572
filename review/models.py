"""Review data models — package requests, sessions, and package manifests."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PackageRequest:
    """One package version submitted for review."""

    name: str
    version: str

    @property
    def token(self) -> str:
        """The ``name_version`` token used in branch identifiers."""
        return f"{self.name}_{self.version}"

    def spec(self, namespace: str = "preview") -> str:
        """Fully-qualified package spec, e.g. ``@preview/foo:1.0.0``."""
        return f"@{namespace}/{self.name}:{self.version}"

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


@dataclass(frozen=True)
class ReviewSession:
    """The packages of one pull request under review.

    The order of ``packages`` is preserved; it is only meaningful for
    display and for the branch identifier.
    """

    packages: tuple[PackageRequest, ...]
    pr_number: int

    @property
    def branch_name(self) -> str:
        """Session-scoped branch, e.g. ``foo_1.0.0,bar_2.0.0_#12``."""
        tokens = ",".join(p.token for p in self.packages)
        return f"{tokens}_#{self.pr_number}"

    @property
    def refspec(self) -> str:
        """Remote ref holding the head of the pull request."""
        return f"pull/{self.pr_number}/head"


@dataclass(frozen=True)
class TemplateInfo:
    """The ``[template]`` table of a package manifest."""

    path: str
    entrypoint: str
    thumbnail: str | None = None


@dataclass(frozen=True)
class PackageInfo:
    """The ``[package]`` table of a package manifest."""

    name: str
    version: str
    entrypoint: str
    authors: tuple[str, ...] = ()
    license: str | None = None
    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    keywords: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    disciplines: tuple[str, ...] = ()
    compiler: str | None = None
    exclude: tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageManifest:
    """A parsed ``typst.toml``. Immutable once read."""

    package: PackageInfo
    template: TemplateInfo | None = None
    extra: dict = field(default_factory=dict, compare=False)

    @property
    def exclude(self) -> tuple[str, ...]:
        return self.package.exclude
