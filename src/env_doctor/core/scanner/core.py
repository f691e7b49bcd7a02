"""Usage scanning entry points: language dispatch and fallback."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable

from env_doctor.core.frameworks import FrameworkProfile, get_framework_profile
from env_doctor.core.scanner.base import (
    MAX_FILE_BYTES,
    MAX_STRUCTURAL_BYTES,
    ScanContext,
    StructuralScan,
)
from env_doctor.core.scanner.fallback import scan_with_regex
from env_doctor.core.scanner.javascript import LANGUAGES, scan_javascript
from env_doctor.core.scanner.python import scan_python
from env_doctor.models.env import DYNAMIC_NAME, UsedVariable
from env_doctor.utils.errors import ScanError
from env_doctor.utils.logging import get_logger

logger = get_logger("scanner")

PYTHON_EXTENSIONS = frozenset({".py", ".pyi"})


def _display_path(file: str | Path, root: str | Path | None) -> str:
    path = PurePath(file)
    if root is not None and path.is_absolute():
        try:
            return path.relative_to(Path(root).resolve()).as_posix()
        except ValueError:
            try:
                return path.relative_to(Path(root)).as_posix()
            except ValueError:
                pass
    return path.as_posix()


def _profile(framework: str | FrameworkProfile | None) -> FrameworkProfile:
    if isinstance(framework, FrameworkProfile):
        return framework
    return get_framework_profile(framework)


def structural_scan(context: ScanContext, source: bytes) -> StructuralScan:
    """Run the structural scanner for the file's language."""
    if len(source) > MAX_STRUCTURAL_BYTES:
        return StructuralScan.failed("file too large for structural parsing")

    suffix = PurePath(context.file).suffix.lower()
    if suffix in PYTHON_EXTENSIONS:
        return scan_python(context, source)
    language = LANGUAGES.get(suffix)
    if language is None:
        return StructuralScan.failed(f"no structural scanner for {suffix or 'files without extension'}")
    return scan_javascript(context, source, language)


def scan_source(
    file: str | Path,
    content: str | bytes,
    framework: str | FrameworkProfile | None,
    root: str | Path | None = None,
) -> tuple[list[UsedVariable], bool]:
    """Scan file contents, returning usages and whether the fallback ran.

    Usages are sorted by line and column.
    """
    source = content.encode("utf-8", errors="replace") if isinstance(content, str) else content
    context = ScanContext(_display_path(file, root), _profile(framework), source)

    try:
        result = structural_scan(context, source)
    except (ValueError, RecursionError, MemoryError) as e:
        result = StructuralScan.failed(f"structural parser error: {e}")

    used_fallback = not result.succeeded
    if result.succeeded:
        usages = result.usages or []
    else:
        logger.debug("Using regex fallback for %s: %s", context.file, result.reason)
        usages = scan_with_regex(context)

    usages.sort(key=lambda u: (u.location.line, u.location.column or 0))
    return usages, used_fallback


def scan_usages(
    file: str | Path,
    content: str | bytes,
    framework: str | FrameworkProfile | None = None,
    root: str | Path | None = None,
) -> list[UsedVariable]:
    """Find every environment variable read in one file's contents.

    The language is chosen from the file extension. When structural parsing
    fails the file is scanned line by line instead. Never raises for
    malformed source.

    Args:
        file: File path, used for language dispatch and locations
        content: File contents
        framework: Framework name or profile used for client classification
        root: Project root; absolute paths are reported relative to it

    Returns:
        Usages sorted by line and column
    """
    usages, _ = scan_source(file, content, framework, root)
    return usages


def scan_file(
    path: str | Path,
    root: str | Path | None = None,
    framework: str | FrameworkProfile | None = None,
) -> tuple[list[UsedVariable], bool]:
    """Read and scan one source file.

    Args:
        path: File to scan
        root: Project root locations are made relative to
        framework: Framework name or profile

    Returns:
        Tuple of (usages, used_fallback)

    Raises:
        ScanError: If the file is too large
        OSError: If the file cannot be read
    """
    path = Path(path)
    size = path.stat().st_size
    if size > MAX_FILE_BYTES:
        raise ScanError(
            f"File too large to scan ({size} bytes, limit {MAX_FILE_BYTES})",
            file=str(path),
        )
    return scan_source(path, path.read_bytes(), framework, root)


def get_unique_variable_names(usages: Iterable[UsedVariable]) -> list[str]:
    """Distinct statically known names, in first-seen order."""
    names: dict[str, None] = {}
    for usage in usages:
        if usage.name != DYNAMIC_NAME and not usage.is_dynamic:
            names.setdefault(usage.name)
    return list(names)
