"""Shared scanner types: the structural scan result and per-file context."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from env_doctor.core.frameworks import FrameworkProfile, is_client_accessible
from env_doctor.models.common import SourceLocation
from env_doctor.models.env import (
    DYNAMIC_NAME,
    AccessIdiom,
    InferredType,
    UsedVariable,
)

# Files larger than this skip structural parsing and go to the regex fallback.
MAX_STRUCTURAL_BYTES = 2 * 1024 * 1024
# Files larger than this are not scanned at all.
MAX_FILE_BYTES = 10 * 1024 * 1024

MAX_SNIPPET_CHARS = 200

CLIENT_FILE_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"/components/",
        r"/pages/",
        r"/app/.*page\.(tsx?|jsx?)$",
        r"/hooks/",
        r"\.client\.(tsx?|jsx?)$",
    )
)


class StructuralScan(BaseModel):
    """Outcome of a structural scan: usages on success, a reason on failure."""

    model_config = {"frozen": True}

    usages: list[UsedVariable] | None = Field(default=None, description="Usages when parsing succeeded")
    reason: str | None = Field(default=None, description="Why parsing failed")

    @classmethod
    def ok(cls, usages: list[UsedVariable]) -> "StructuralScan":
        return cls(usages=usages)

    @classmethod
    def failed(cls, reason: str) -> "StructuralScan":
        return cls(reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.usages is not None


def is_client_side_file(path: str) -> bool:
    """Whether a path follows a client-code convention."""
    path = "/" + path.replace("\\", "/").lstrip("/")
    return any(p.search(path) for p in CLIENT_FILE_PATTERNS)


def char_column(line: bytes, byte_column: int) -> int:
    """Convert a UTF-8 byte offset within a line into a character offset."""
    return len(line[:byte_column].decode("utf-8", errors="replace"))


class ScanContext:
    """Per-file facts every usage needs: path, framework and source lines."""

    def __init__(self, file: str, profile: FrameworkProfile, source: bytes):
        self.file = file
        self.profile = profile
        self.is_client_file = is_client_side_file(file)
        self.lines = source.split(b"\n")

    def line_bytes(self, row: int) -> bytes:
        """Raw bytes of a 0-based line."""
        if 0 <= row < len(self.lines):
            return self.lines[row]
        return b""

    def snippet(self, row: int) -> str:
        text = self.line_bytes(row).decode("utf-8", errors="replace").strip()
        return text[:MAX_SNIPPET_CHARS]

    def is_client_side(self, name: str, via_import_meta: bool = False) -> bool:
        """Classify a read as client-side for this file and framework."""
        if self.profile.server_only:
            return False
        if via_import_meta or self.is_client_file:
            return True
        return name != DYNAMIC_NAME and is_client_accessible(name, self.profile)

    def usage(
        self,
        name: str,
        idiom: AccessIdiom,
        row: int,
        byte_column: int,
        inferred_type: InferredType = InferredType.UNKNOWN,
        via_import_meta: bool = False,
    ) -> UsedVariable:
        """Build a usage at a 0-based row and byte column."""
        if idiom == AccessIdiom.DYNAMIC:
            name = DYNAMIC_NAME
        return UsedVariable(
            name=name,
            location=SourceLocation(
                file=self.file,
                line=row + 1,
                column=char_column(self.line_bytes(row), byte_column),
            ),
            access_idiom=idiom,
            inferred_type=inferred_type,
            is_client_side=self.is_client_side(name, via_import_meta),
            snippet=self.snippet(row),
        )
