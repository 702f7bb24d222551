"""BitBake recipe fragment encoder."""

from __future__ import annotations

from rootpkgws.collect import RecipeSources
from rootpkgws.models import GitDescriptor


def render_recipe(sources: RecipeSources) -> str:
    """Render collected sources as BitBake recipe text.

    Args:
        sources: Deduplicated crates and git repositories.

    Returns:
        Recipe text (no trailing newline). Path sources are not rendered.
    """
    entries = list(sources.crates)
    entries.extend(git_src_uri(desc) for desc in sources.git)
    parts = [_format_block('SRC_URI += " \\', entries)]

    srcrevs: list[str] = []
    for desc in sources.git:
        srcrevs.extend(srcrev_lines(desc))
    if srcrevs:
        parts.append("\n".join(srcrevs))

    if sources.git:
        paths = [f"${{WORKDIR}}/{desc.folder}" for desc in sources.git]
        parts.append(_format_block('EXTRA_OECARGO_PATHS += "\\', paths))

    return "\n\n".join(parts)


def git_src_uri(desc: GitDescriptor) -> str:
    """Format the ``git://`` SRC_URI entry for a repository.

    Only a branch or tag is placed in the entry; a pinned commit goes to
    SRCREV instead.
    """
    if desc.branch is not None:
        pin = f"branch={desc.branch};"
    elif desc.tag is not None:
        pin = f"tag={desc.tag};"
    else:
        pin = ""
    folder = desc.folder
    return (
        f"git://{desc.host_and_path};lfs=0;nobranch=1;{pin}"
        f"protocol={desc.protocol};destsuffix={folder};name={folder}"
    )


def srcrev_lines(desc: GitDescriptor) -> list[str]:
    """Return the SRCREV_FORMAT/SRCREV pair for a commit-pinned repository."""
    if desc.commit is None:
        return []
    return [
        f'SRCREV_FORMAT .= "_{desc.folder}"',
        f'SRCREV_{desc.folder} = "{desc.commit}"',
    ]


def _format_block(header: str, entries: list[str]) -> str:
    """Format a quoted, backslash-continued BitBake variable assignment."""
    lines = [header]
    lines.extend(f"    {entry} \\" for entry in entries)
    lines.append('"')
    return "\n".join(lines)
