"""Classify package identifiers into source kinds and build descriptors."""

from __future__ import annotations

import enum
import re
from collections.abc import Callable
from urllib.parse import urlsplit

from rootpkgws.models import (
    DEFAULT_REGISTRY_ALIAS,
    DEFAULT_REGISTRY_URL,
    GitDescriptor,
    GitRefKind,
    GitReference,
    GitSource,
    PathSource,
    RegistrySource,
    SourceKind,
)
from rootpkgws.pkgid import (
    PackageIdError,
    SpecKind,
    parse_legacy_package_id,
    parse_package_id_spec,
)

# Cargo 1.77 switched `cargo metadata` ids to package ID specs.
# See https://github.com/rust-lang/cargo/pull/12914.
SPEC_FORMAT_MIN_CARGO: tuple[int, int] = (1, 77)

_LEGACY_DEFAULT_REGISTRY = f"(registry+{DEFAULT_REGISTRY_URL})"
_FILE_URL = "file://"


class ClassificationMiss(ValueError):
    """An identifier that could not be classified. Not fatal for a run."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"{raw}: {reason}")
        self.raw = raw
        self.reason = reason


class IdFormat(enum.Enum):
    """Which identifier grammar the producing cargo speaks."""

    SPEC = "spec"
    LEGACY = "legacy"


def classify_package_id_spec(raw: str) -> SourceKind:
    """Classify a package ID spec (cargo >= 1.77).

    Raises:
        ClassificationMiss: For malformed specs, missing url or version,
            and source kinds that have no recipe representation.
    """
    try:
        spec = parse_package_id_spec(raw)
    except PackageIdError as exc:
        raise ClassificationMiss(raw, str(exc)) from exc

    if spec.kind is None:
        raise ClassificationMiss(raw, "no source kind")

    if spec.kind in (SpecKind.REGISTRY, SpecKind.SPARSE):
        if spec.url is None:
            raise ClassificationMiss(raw, f"{spec.name} doesn't have url")
        if spec.version is None:
            raise ClassificationMiss(raw, f"{spec.name} doesn't have version")
        if spec.url == DEFAULT_REGISTRY_URL:
            host, path = DEFAULT_REGISTRY_ALIAS, ""
        else:
            # Query and fragment are dropped: the recipe's crate fetcher
            # appends its own download suffix.
            try:
                parts = urlsplit(spec.url)
            except ValueError as exc:
                raise ClassificationMiss(raw, f"invalid url: {exc}") from exc
            host, path = parts.netloc, parts.path
        return RegistrySource(
            host=host, path=path, name=spec.name, version=spec.version
        )

    if spec.kind is SpecKind.GIT:
        if spec.url is None:
            raise ClassificationMiss(raw, f"{spec.name} doesn't have url")
        _check_git_url(raw, spec.url)
        reference = spec.git_reference or GitReference.default_branch()
        return GitSource(url=spec.url, reference=reference)

    if spec.kind is SpecKind.PATH:
        if spec.url is None or not spec.url.startswith(_FILE_URL):
            raise ClassificationMiss(raw, f"{spec.name} doesn't have a file:// url")
        return PathSource(filesystem_path=spec.url[len(_FILE_URL) :])

    raise ClassificationMiss(raw, f"unsupported source kind {spec.kind.value!r}")


def classify_legacy_package_id(raw: str) -> SourceKind:
    """Classify a ``name version (source)`` identifier (cargo < 1.77).

    Git pins are always recorded as a revision: this format cannot tell a
    tag from a branch.

    Raises:
        ClassificationMiss: For malformed identifiers and unknown sources.
    """
    try:
        pkg = parse_legacy_package_id(raw)
    except PackageIdError as exc:
        raise ClassificationMiss(raw, str(exc)) from exc

    source = pkg.source
    if source == _LEGACY_DEFAULT_REGISTRY:
        return RegistrySource(
            host=DEFAULT_REGISTRY_ALIAS, path="", name=pkg.name, version=pkg.version
        )

    if "(path+" in source:
        location = source.partition("+")[2].replace(")", "")
        if _FILE_URL not in location:
            raise ClassificationMiss(raw, "path source without file:// url")
        return PathSource(filesystem_path=location.split(_FILE_URL, 1)[1])

    if "(git+" in source:
        location = source.partition("+")[2].replace(")", "")
        segments = re.split(r"[?#]", location)
        if len(segments) > 2:
            commit = segments[2]
        elif len(segments) == 2:
            commit = segments[1]
        else:
            raise ClassificationMiss(raw, "git source without pinned revision")
        _check_git_url(raw, segments[0])
        return GitSource(url=segments[0], reference=GitReference.rev(commit))

    raise ClassificationMiss(raw, f"unsupported source {source}")


CLASSIFIERS: dict[IdFormat, Callable[[str], SourceKind]] = {
    IdFormat.SPEC: classify_package_id_spec,
    IdFormat.LEGACY: classify_legacy_package_id,
}


def id_format_for_cargo_version(version: tuple[int, int] | None) -> IdFormat:
    """Pick the identifier grammar for a cargo ``(major, minor)`` version.

    An unknown version is treated as an old cargo.
    """
    if version is not None and version >= SPEC_FORMAT_MIN_CARGO:
        return IdFormat.SPEC
    return IdFormat.LEGACY


def registry_descriptor(source: RegistrySource) -> str:
    """Render the ``crate://`` deduplication key for a registry crate."""
    return f"crate://{source.host}{source.path}/{source.name}/{source.version}"


def git_descriptor(source: GitSource) -> GitDescriptor:
    """Build a GitDescriptor with only the field matching the pin kind set."""
    ref = source.reference
    if ref.kind is GitRefKind.TAG:
        return GitDescriptor(url=source.url, tag=ref.value)
    if ref.kind is GitRefKind.BRANCH:
        return GitDescriptor(url=source.url, branch=ref.value)
    if ref.kind is GitRefKind.REV:
        return GitDescriptor(url=source.url, commit=ref.value)
    return GitDescriptor(url=source.url)


def _check_git_url(raw: str, url: str) -> None:
    if "://" not in url:
        raise ClassificationMiss(raw, f"git url without scheme: {url}")
