"""Aggregate classified package sources into deduplicated collections."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from rootpkgws.classify import ClassificationMiss, git_descriptor, registry_descriptor
from rootpkgws.models import (
    GitDescriptor,
    GitSource,
    PathSource,
    RegistrySource,
    SourceKind,
)
from rootpkgws.ordered import OrderedSet


@dataclass
class RecipeSources:
    """Everything collected from one dependency graph, ready for rendering."""

    crates: OrderedSet[str] = field(default_factory=OrderedSet)
    git: OrderedSet[GitDescriptor] = field(default_factory=OrderedSet)
    # Kept in order and not deduplicated; not rendered into the recipe.
    paths: list[str] = field(default_factory=list)
    misses: list[ClassificationMiss] = field(default_factory=list)


def register(sources: RecipeSources, kind: SourceKind) -> None:
    """Add one classified package to the matching collection."""
    if isinstance(kind, RegistrySource):
        sources.crates.add(registry_descriptor(kind))
    elif isinstance(kind, GitSource):
        sources.git.add(git_descriptor(kind))
    elif isinstance(kind, PathSource):
        sources.paths.append(kind.filesystem_path)
    else:
        raise TypeError(f"unknown source kind: {kind!r}")


def collect_sources(
    ids: Iterable[str],
    classify: Callable[[str], SourceKind],
    *,
    on_miss: Callable[[ClassificationMiss], None] | None = None,
) -> RecipeSources:
    """Classify every package identifier and collect the results.

    Identifiers that cannot be classified are recorded in ``misses``,
    passed to ``on_miss`` if given, and skipped.

    Args:
        ids: Raw package identifiers, in graph order.
        classify: The identifier classifier for the active format.
        on_miss: Called once per identifier that could not be classified.

    Returns:
        The collected recipe sources.
    """
    sources = RecipeSources()
    for raw in ids:
        try:
            kind = classify(raw)
        except ClassificationMiss as miss:
            sources.misses.append(miss)
            if on_miss is not None:
                on_miss(miss)
            continue
        register(sources, kind)
    return sources
