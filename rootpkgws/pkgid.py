"""Tokenizers for the two package identifier formats cargo emits.

Cargo 1.77 and newer report each resolved package as a package ID spec::

    registry+https://github.com/rust-lang/crates.io-index#serde@1.0.197
    git+https://github.com/x/y.git?branch=main#y@0.1.0
    path+file:///home/u/proj#0.1.0

Older releases use a whitespace-delimited triple::

    serde 1.0.197 (registry+https://github.com/rust-lang/crates.io-index)
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlsplit

from rootpkgws.models import GitReference

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


class PackageIdError(ValueError):
    """Raised when an identifier does not match its grammar."""


class SpecKind(enum.Enum):
    """The ``<kind>+`` prefix of a package ID spec url."""

    GIT = "git"
    REGISTRY = "registry"
    SPARSE = "sparse"
    PATH = "path"
    LOCAL_REGISTRY = "local-registry"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class PackageIdSpec:
    """A parsed package ID spec.

    ``url`` never carries the query or fragment. The kind prefix is stripped
    except for sparse registries, whose url keeps ``sparse+``.
    """

    name: str
    version: str | None = None
    url: str | None = None
    kind: SpecKind | None = None
    git_reference: GitReference | None = None


@dataclass(frozen=True)
class LegacyPackageId:
    """A parsed ``name version (source)`` identifier."""

    name: str
    version: str
    source: str


def parse_package_id_spec(raw: str) -> PackageIdSpec:
    """Parse a package ID spec into its named fields.

    Args:
        raw: The identifier as reported by ``cargo metadata``.

    Returns:
        The parsed spec.

    Raises:
        PackageIdError: If the identifier is not a well-formed spec.
    """
    if "://" not in raw:
        if "/" in raw or "\\" in raw:
            raise PackageIdError("expected a package name, found a path")
        name, version = _split_name_version(raw) or (raw, None)
        _check_name(name)
        return PackageIdSpec(name=name, version=version)

    scheme = raw.split("://", 1)[0]
    if not _URL_SCHEME.match(scheme):
        raise PackageIdError(f"invalid url scheme {scheme!r}")

    rest, _, fragment = raw.partition("#")
    base, _, query = rest.partition("?")

    kind: SpecKind | None = None
    git_reference: GitReference | None = None
    url = base
    kind_str, plus, inner_scheme = scheme.partition("+")
    if plus:
        try:
            kind = SpecKind(kind_str)
        except ValueError:
            raise PackageIdError(
                f"unsupported source protocol {kind_str!r}"
            ) from None
        if kind is SpecKind.GIT:
            git_reference = _git_reference_from_query(query)
        elif query:
            raise PackageIdError(f"unexpected query string {query!r}")
        if kind is SpecKind.PATH and inner_scheme != "file":
            raise PackageIdError(
                f"path+ requires a file:// url, got {inner_scheme!r}"
            )
        if kind is not SpecKind.SPARSE:
            url = base[len(kind_str) + 1 :]
    elif query:
        raise PackageIdError(f"unexpected query string {query!r}")

    try:
        path_name = urlsplit(url).path.rsplit("/", 1)[-1]
    except ValueError as exc:
        raise PackageIdError(f"invalid url {url!r}: {exc}") from exc
    name, version = _name_version_from_fragment(fragment, path_name)
    _check_name(name)

    return PackageIdSpec(
        name=name,
        version=version,
        url=url,
        kind=kind,
        git_reference=git_reference,
    )


def parse_legacy_package_id(raw: str) -> LegacyPackageId:
    """Split a legacy identifier into name, version and source annotation.

    Raises:
        PackageIdError: If fewer than three whitespace-separated fields.
    """
    fields = raw.split()
    if len(fields) < 3:
        raise PackageIdError("expected 'name version (source)'")
    return LegacyPackageId(name=fields[0], version=fields[1], source=fields[2])


def _git_reference_from_query(query: str) -> GitReference:
    """Decode ``branch=``/``tag=``/``rev=`` query pairs; the last one wins."""
    reference = GitReference.default_branch()
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in ("branch", "ref"):
            reference = GitReference.branch(value)
        elif key == "tag":
            reference = GitReference.tag(value)
        elif key == "rev":
            reference = GitReference.rev(value)
    return reference


def _name_version_from_fragment(
    fragment: str, path_name: str
) -> tuple[str, str | None]:
    """Resolve name and version from a spec fragment.

    A fragment is ``name@version``, a bare ``name`` (starts with a letter),
    or a bare ``version``, in which case the name is the url's last path
    segment.
    """
    if not fragment:
        return path_name, None
    split = _split_name_version(fragment)
    if split is not None:
        return split
    if fragment[0].isalpha():
        return fragment, None
    return path_name, fragment


def _split_name_version(spec: str) -> tuple[str, str] | None:
    name, sep, version = spec.rpartition("@")
    if not sep:
        return None
    if not version:
        raise PackageIdError(f"empty version after '@' in {spec!r}")
    return name, version


def _check_name(name: str) -> None:
    if not name or any(c.isspace() for c in name):
        raise PackageIdError(f"invalid package name {name!r}")
