"""Core data structures for root-pkg-ws."""

from __future__ import annotations

import enum
from dataclasses import dataclass

DEFAULT_REGISTRY_URL = "https://github.com/rust-lang/crates.io-index"
DEFAULT_REGISTRY_ALIAS = "crates.io"


class GitRefKind(enum.Enum):
    """How a git dependency is pinned."""

    TAG = "tag"
    BRANCH = "branch"
    REV = "rev"
    DEFAULT_BRANCH = "default"


@dataclass(frozen=True)
class GitReference:
    """A git reference: a kind plus its value (None for the default branch)."""

    kind: GitRefKind
    value: str | None = None

    @classmethod
    def tag(cls, value: str) -> GitReference:
        return cls(GitRefKind.TAG, value)

    @classmethod
    def branch(cls, value: str) -> GitReference:
        return cls(GitRefKind.BRANCH, value)

    @classmethod
    def rev(cls, value: str) -> GitReference:
        return cls(GitRefKind.REV, value)

    @classmethod
    def default_branch(cls) -> GitReference:
        return cls(GitRefKind.DEFAULT_BRANCH)


@dataclass(frozen=True)
class RegistrySource:
    """A crate fetched from a registry index."""

    host: str
    path: str
    name: str
    version: str


@dataclass(frozen=True)
class GitSource:
    """A crate fetched from a git repository."""

    url: str
    reference: GitReference


@dataclass(frozen=True)
class PathSource:
    """A crate living on the local filesystem."""

    filesystem_path: str


SourceKind = RegistrySource | GitSource | PathSource


@dataclass(frozen=True)
class GitDescriptor:
    """A deduplicated git repository entry for the recipe.

    At most one of tag, branch and commit is set. None set means the
    default branch, unpinned.
    """

    url: str
    tag: str | None = None
    branch: str | None = None
    commit: str | None = None

    def __post_init__(self) -> None:
        pins = [p for p in (self.tag, self.branch, self.commit) if p is not None]
        if len(pins) > 1:
            raise ValueError(
                f"{self.url}: tag, branch and commit are mutually exclusive"
            )

    @property
    def protocol(self) -> str:
        """URL scheme, the text before ``://``."""
        return self.url.partition("://")[0]

    @property
    def host_and_path(self) -> str:
        """Everything after ``://``."""
        return self.url.partition("://")[2]

    @property
    def folder(self) -> str:
        """Checkout directory name: last path segment without ``.git``."""
        last = self.host_and_path.rstrip("/").rsplit("/", 1)[-1]
        return last.removesuffix(".git")
