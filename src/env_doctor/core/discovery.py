"""Source file discovery with gitignore-style include and exclude globs."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable

import pathspec

from env_doctor.utils.logging import get_logger

logger = get_logger("discovery")

_BRACES = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, which gitwildmatch does not support.

    ``src/**/*.{ts,js}`` becomes ``src/**/*.ts`` and ``src/**/*.js``.
    """
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def build_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile glob patterns into a PathSpec."""
    lines: list[str] = []
    for pattern in patterns:
        if pattern and pattern.strip():
            lines.extend(expand_braces(pattern.strip()))
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def discover_source_files(
    root: str | Path,
    include: Iterable[str],
    exclude: Iterable[str] = (),
) -> list[Path]:
    """Find source files under a root.

    Excluded directories are not descended into.

    Args:
        root: Project directory
        include: Globs relative to the root
        exclude: Globs of files or directories to skip

    Returns:
        Sorted absolute paths
    """
    root = Path(root).resolve()
    include_spec = build_spec(include)
    exclude_spec = build_spec(exclude)

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        dirnames[:] = sorted(
            d for d in dirnames if not exclude_spec.match_file(f"{prefix}{d}/")
        )
        for filename in filenames:
            relative = f"{prefix}{filename}"
            if exclude_spec.match_file(relative):
                continue
            if include_spec.match_file(relative):
                found.append(root / relative)

    found.sort()
    logger.debug("Found %d files to scan under %s", len(found), root)
    return found
