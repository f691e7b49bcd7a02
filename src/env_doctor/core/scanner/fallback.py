"""Line-based regex scanning for files the structural scanners cannot handle.

Only literal names are recovered; dynamic and destructuring reads are not.
Every pattern is linear in the line length.
"""

from __future__ import annotations

import re

from env_doctor.core.scanner.base import ScanContext
from env_doctor.models.env import AccessIdiom, UsedVariable

_NAME = r"([A-Za-z_][A-Za-z0-9_]*)"

# (pattern, idiom, read through import.meta)
FALLBACK_PATTERNS: tuple[tuple[re.Pattern[str], AccessIdiom, bool], ...] = (
    (re.compile(r"\bprocess\.env\??\." + _NAME), AccessIdiom.DIRECT, False),
    (re.compile(r"\bprocess\.env\[\s*['\"`]" + _NAME + r"['\"`]\s*\]"), AccessIdiom.BRACKET, False),
    (re.compile(r"\bimport\.meta\.env\??\." + _NAME), AccessIdiom.DIRECT, True),
    (re.compile(r"\bimport\.meta\.env\[\s*['\"`]" + _NAME + r"['\"`]\s*\]"), AccessIdiom.BRACKET, True),
    (re.compile(r"\bos\.environ\[\s*['\"]" + _NAME + r"['\"]\s*\]"), AccessIdiom.BRACKET, False),
    (re.compile(r"\bos\.getenv\(\s*['\"]" + _NAME + r"['\"]"), AccessIdiom.DIRECT, False),
    (re.compile(r"\bos\.environ\.get\(\s*['\"]" + _NAME + r"['\"]"), AccessIdiom.DIRECT, False),
)


def scan_with_regex(context: ScanContext) -> list[UsedVariable]:
    """Scan a file's lines for literal env reads."""
    usages: list[UsedVariable] = []
    for row, raw in enumerate(context.lines):
        line = raw.decode("utf-8", errors="replace")
        if "env" not in line:
            continue
        for pattern, idiom, via_import_meta in FALLBACK_PATTERNS:
            for match in pattern.finditer(line):
                usages.append(
                    context.usage(
                        match.group(1),
                        idiom,
                        row,
                        len(line[: match.start(1)].encode("utf-8")),
                        via_import_meta=via_import_meta,
                    )
                )
    return usages
