"""Shared test fixtures for root-pkg-ws."""

from __future__ import annotations

from pathlib import Path

import pytest

from rootpkgws.collect import RecipeSources
from rootpkgws.models import GitDescriptor

ROOT_ID = "path+file:///home/u/proj#0.1.0"
SERDE_ID = "registry+https://github.com/rust-lang/crates.io-index#serde@1.0.197"
LIBC_ID = "registry+https://github.com/rust-lang/crates.io-index#libc@0.2.153"
BRANCH_ID = "git+https://github.com/x/y.git?branch=main#y@0.3.0"
REV_ID = "git+https://github.com/x/z?rev=abc123#0.1.0"
LOCAL_REGISTRY_ID = "local-registry+file:///srv/registry#foo@1.0.0"

LEGACY_ROOT_ID = "proj 0.1.0 (path+file:///home/u/proj)"
LEGACY_SERDE_ID = "serde 1.0.197 (registry+https://github.com/rust-lang/crates.io-index)"
LEGACY_GIT_ID = "y 0.3.0 (git+https://github.com/x/y.git?branch=main#abc123)"


def _metadata(ids: list[str], edges: dict[str, list[str]]) -> dict:
    return {
        "packages": [],
        "workspace_members": [ids[0]],
        "resolve": {
            "nodes": [
                {"id": pkg_id, "dependencies": edges.get(pkg_id, []), "features": []}
                for pkg_id in ids
            ],
            "root": ids[0],
        },
        "version": 1,
    }


@pytest.fixture()
def spec_metadata() -> dict:
    """Metadata as reported by cargo >= 1.77."""
    ids = [ROOT_ID, SERDE_ID, BRANCH_ID, REV_ID, LIBC_ID, LOCAL_REGISTRY_ID]
    return _metadata(ids, {ROOT_ID: [SERDE_ID, BRANCH_ID, REV_ID], REV_ID: [LIBC_ID]})


@pytest.fixture()
def legacy_metadata() -> dict:
    """Metadata as reported by cargo < 1.77."""
    ids = [LEGACY_ROOT_ID, LEGACY_SERDE_ID, LEGACY_GIT_ID]
    return _metadata(ids, {LEGACY_ROOT_ID: [LEGACY_SERDE_ID, LEGACY_GIT_ID]})


@pytest.fixture()
def manifest(tmp_path: Path) -> Path:
    """A Cargo.toml on disk; its contents are never read by the tests."""
    path = tmp_path / "Cargo.toml"
    path.write_text('[package]\nname = "proj"\nversion = "0.1.0"\n', encoding="utf-8")
    return path


@pytest.fixture()
def sample_sources() -> RecipeSources:
    """Pre-built sources covering every rendered section."""
    sources = RecipeSources()
    sources.crates.add("crate://crates.io/foo/1.2.3")
    sources.crates.add("crate://my.registry.io/index/bar/0.1.0")
    sources.git.add(GitDescriptor(url="https://github.com/x/y.git", branch="main"))
    sources.git.add(GitDescriptor(url="https://github.com/x/z", commit="abc123"))
    sources.paths.append("/home/u/proj")
    return sources
