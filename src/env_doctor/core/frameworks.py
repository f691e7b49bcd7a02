"""Framework profiles: client prefixes, env file conventions and detection."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, Field

from env_doctor.utils.logging import get_logger

logger = get_logger("frameworks")

DEFAULT_FRAMEWORK = "node"

JS_EXTENSIONS = ("ts", "tsx", "js", "jsx", "mjs", "cjs", "mts", "cts")
JS_SOURCE_DIRS = ("src", "app", "pages", "lib")

BASE_ENV_FILES = (".env", ".env.local")
MODE_ENV_FILES = (
    ".env.development",
    ".env.development.local",
    ".env.production",
    ".env.production.local",
)
TEST_ENV_FILES = (".env.test", ".env.test.local")


class FrameworkProfile(BaseModel):
    """How one framework exposes environment variables."""

    model_config = {"frozen": True}

    name: str = Field(description="Framework identifier")
    display_name: str = Field(description="Human-readable name")
    client_prefixes: tuple[str, ...] = Field(
        default=(), description="Prefixes that expose a variable to client bundles"
    )
    server_only: bool = Field(default=True, description="Whether no code runs in a browser")
    config_files: tuple[str, ...] = Field(default=(), description="Files whose presence identifies it")
    auto_ignore: frozenset[str] = Field(
        default=frozenset(), description="Variables the framework itself reads"
    )
    env_file_patterns: tuple[str, ...] = Field(
        default=BASE_ENV_FILES, description="Definition files the framework loads"
    )
    source_globs: tuple[str, ...] = Field(default=(), description="Default source include globs")


def _js_globs() -> tuple[str, ...]:
    return tuple(f"{d}/**/*.{ext}" for d in JS_SOURCE_DIRS for ext in JS_EXTENSIONS)


FRAMEWORKS: Mapping[str, FrameworkProfile] = MappingProxyType({
    "nextjs": FrameworkProfile(
        name="nextjs",
        display_name="Next.js",
        client_prefixes=("NEXT_PUBLIC_",),
        server_only=False,
        config_files=("next.config.js", "next.config.mjs", "next.config.ts"),
        auto_ignore=frozenset({
            "NEXT_TELEMETRY_DISABLED",
            "NEXT_RUNTIME",
            "VERCEL",
            "VERCEL_ENV",
            "VERCEL_URL",
            "VERCEL_REGION",
        }),
        env_file_patterns=BASE_ENV_FILES + MODE_ENV_FILES + TEST_ENV_FILES,
        source_globs=_js_globs(),
    ),
    "vite": FrameworkProfile(
        name="vite",
        display_name="Vite",
        client_prefixes=("VITE_",),
        server_only=False,
        config_files=("vite.config.js", "vite.config.ts", "vite.config.mjs"),
        auto_ignore=frozenset({"VITE_CJS_TRACE", "VITE_CJS_IGNORE_WARNING"}),
        env_file_patterns=BASE_ENV_FILES + MODE_ENV_FILES,
        source_globs=_js_globs(),
    ),
    "cra": FrameworkProfile(
        name="cra",
        display_name="Create React App",
        client_prefixes=("REACT_APP_",),
        server_only=False,
        auto_ignore=frozenset({"BROWSER", "GENERATE_SOURCEMAP", "CI"}),
        env_file_patterns=BASE_ENV_FILES + MODE_ENV_FILES + TEST_ENV_FILES,
        source_globs=_js_globs(),
    ),
    "node": FrameworkProfile(
        name="node",
        display_name="Node.js",
        source_globs=_js_globs(),
    ),
    "python": FrameworkProfile(
        name="python",
        display_name="Python",
        source_globs=("**/*.py",),
    ),
})

# package.json dependencies that identify a framework, checked in order.
_PACKAGE_MARKERS = (("next", "nextjs"), ("vite", "vite"), ("react-scripts", "cra"))
_PYTHON_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", "requirements.txt")


def get_framework_profile(name: str | None) -> FrameworkProfile:
    """Get the profile for a framework; unknown names and "auto" give node."""
    if not name:
        return FRAMEWORKS[DEFAULT_FRAMEWORK]
    return FRAMEWORKS.get(name.lower(), FRAMEWORKS[DEFAULT_FRAMEWORK])


def _package_dependencies(root: Path) -> set[str]:
    path = root / "package.json"
    if not path.is_file():
        return set()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return set()
    if not isinstance(data, dict):
        return set()
    deps: set[str] = set()
    for key in ("dependencies", "devDependencies"):
        section = data.get(key)
        if isinstance(section, dict):
            deps.update(section)
    return deps


def detect_framework(root: str | Path) -> str:
    """Detect the framework a project uses.

    Checks framework config files first, then package.json dependencies,
    then Python packaging files. Falls back to node.

    Args:
        root: Project directory

    Returns:
        Framework name
    """
    root = Path(root)

    for profile in FRAMEWORKS.values():
        for config_file in profile.config_files:
            if (root / config_file).exists():
                logger.debug("Detected %s via %s", profile.display_name, config_file)
                return profile.name

    deps = _package_dependencies(root)
    for dependency, framework in _PACKAGE_MARKERS:
        if dependency in deps:
            logger.debug("Detected %s via package.json", FRAMEWORKS[framework].display_name)
            return framework

    if not (root / "package.json").exists():
        for marker in _PYTHON_MARKERS:
            if (root / marker).exists():
                logger.debug("Detected Python via %s", marker)
                return "python"

    logger.debug("No specific framework detected, defaulting to %s", DEFAULT_FRAMEWORK)
    return DEFAULT_FRAMEWORK


def is_client_accessible(name: str, profile: FrameworkProfile) -> bool:
    """Whether a variable name is exposed to client bundles."""
    if profile.server_only:
        return False
    return any(name.startswith(prefix) for prefix in profile.client_prefixes)


def get_env_file_patterns(name: str | None) -> list[str]:
    """Definition files a framework loads, lowest priority first."""
    return list(get_framework_profile(name).env_file_patterns)


def validate_framework_convention(
    name: str,
    profile: FrameworkProfile,
    is_client_side: bool,
) -> tuple[bool, str | None]:
    """Check that a client-side read uses the framework's public prefix.

    Returns:
        Tuple of (valid, message); message is None when valid
    """
    if profile.server_only or not is_client_side:
        return True, None
    if is_client_accessible(name, profile):
        return True, None
    return False, (
        f'Variable "{name}" is used on client-side but doesn\'t have required prefix '
        f"({' or '.join(profile.client_prefixes)})"
    )
