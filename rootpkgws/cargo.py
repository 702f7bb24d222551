"""Invocation of the cargo binary: version detection and metadata."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

_VERSION_TIMEOUT = 10
_METADATA_TIMEOUT = 600


class MetadataError(RuntimeError):
    """Raised when the dependency graph cannot be obtained. Fatal for a run."""


def parse_cargo_version(text: str) -> tuple[int, int]:
    """Extract ``(major, minor)`` from ``cargo --version`` output.

    Args:
        text: Output such as ``cargo 1.77.0 (3fe68eabf 2024-02-29)``.

    Returns:
        The major and minor numbers. Missing or unparsable parts read as 0.
    """
    fields = text.split()
    number = fields[1] if len(fields) > 1 else "0.0.0"
    parts = number.split(".")
    return _to_int(parts[0]), _to_int(parts[1] if len(parts) > 1 else "0")


def cargo_version(cargo: str = "cargo") -> tuple[int, int] | None:
    """Return the ``(major, minor)`` version of cargo.

    Returns:
        The version, or None if cargo is unavailable or fails.
    """
    try:
        result = subprocess.run(
            [cargo, "--version"],
            capture_output=True,
            text=True,
            timeout=_VERSION_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return parse_cargo_version(result.stdout)


def load_metadata(manifest_path: Path, cargo: str = "cargo") -> dict:
    """Run ``cargo metadata`` for a manifest with all features enabled.

    Args:
        manifest_path: Path to the Cargo.toml to resolve.
        cargo: The cargo binary to run.

    Returns:
        The decoded metadata JSON document.

    Raises:
        MetadataError: If cargo cannot be run, fails, or prints invalid JSON.
    """
    cmd = [
        cargo,
        "metadata",
        "--format-version",
        "1",
        "--all-features",
        "--manifest-path",
        str(manifest_path),
    ]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=_METADATA_TIMEOUT,
            check=False,
        )
    except OSError as exc:
        raise MetadataError(f"cannot run {cargo}: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise MetadataError(f"cargo metadata timed out after {exc.timeout}s") from exc
    if result.returncode != 0:
        raise MetadataError(
            f"cargo metadata failed for {manifest_path}: {result.stderr.strip()}"
        )
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise MetadataError(f"cargo metadata printed invalid JSON: {exc}") from exc


def _to_int(part: str) -> int:
    try:
        return int(part)
    except ValueError:
        return 0
