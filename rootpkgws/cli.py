"""CLI entry point for root-pkg-ws."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Annotated

import typer

from rootpkgws import __version__
from rootpkgws.cargo import MetadataError, cargo_version, load_metadata
from rootpkgws.classify import (
    CLASSIFIERS,
    ClassificationMiss,
    IdFormat,
    id_format_for_cargo_version,
)
from rootpkgws.collect import collect_sources
from rootpkgws.graph import build_graph, package_ids
from rootpkgws.recipe import render_recipe


class IdFormatOption(str, enum.Enum):
    """Values accepted by --id-format."""

    AUTO = "auto"
    SPEC = "spec"
    LEGACY = "legacy"


def _resolve_id_format(option: IdFormatOption, cargo: str) -> IdFormat:
    """Map the --id-format option to a grammar, detecting cargo for auto."""
    if option is IdFormatOption.AUTO:
        return id_format_for_cargo_version(cargo_version(cargo))
    return IdFormat(option.value)


def _report_miss(miss: ClassificationMiss) -> None:
    typer.echo(f"Warning: not handled: {miss.raw}: {miss.reason}", err=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"root-pkg-ws {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="root-pkg-ws",
    help="Lists Yocto recipe sources for a root package workspace.",
    no_args_is_help=False,
)


@app.command()
def main(
    manifest_path: Annotated[
        Path,
        typer.Option(
            "--manifest-path",
            help="Path to the Cargo.toml to resolve.",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    id_format: Annotated[
        IdFormatOption,
        typer.Option(
            "--id-format",
            case_sensitive=False,
            help="Package id format cargo reports; auto detects it "
            "from the cargo version.",
        ),
    ] = IdFormatOption.AUTO,
    cargo: Annotated[
        str,
        typer.Option("--cargo", envvar="CARGO", help="Cargo binary to run."),
    ] = "cargo",
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Resolve a manifest and print its SRC_URI/SRCREV recipe fragment."""
    classify = CLASSIFIERS[_resolve_id_format(id_format, cargo)]

    try:
        metadata = load_metadata(manifest_path, cargo=cargo)
        graph = build_graph(metadata)
    except MetadataError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    sources = collect_sources(package_ids(graph), classify, on_miss=_report_miss)
    typer.echo(render_recipe(sources))
