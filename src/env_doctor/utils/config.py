"""Configuration file support for env-doctor."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, field_validator

from env_doctor.utils.errors import ConfigurationError

if TYPE_CHECKING:
    from env_doctor.models.rules import RuleSet

CONFIG_FILENAMES = (
    ".env-doctor.yaml",
    ".env-doctor.yml",
    "env-doctor.yaml",
    "env-doctor.yml",
    ".env-doctorrc",
    ".env-doctorrc.json",
    "env-doctor.config.json",
)

FRAMEWORK_CHOICES = ("auto", "nextjs", "vite", "cra", "node", "python")

DEFAULT_EXCLUDE = [
    "node_modules",
    "dist",
    "build",
    ".next",
    ".git",
    ".venv",
    "venv",
    "__pycache__",
    "**/*.test.*",
    "**/*.spec.*",
    "**/__tests__/**",
]


class EnvDoctorConfig(BaseModel):
    """Main configuration for env-doctor.

    Keys may be written in snake_case or in the camelCase used by the
    JavaScript tool's config files (``envFiles``, ``templateFile`` ...).
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    root: str | None = Field(default=None, description="Project root (default: cwd)")
    env_files: list[str] = Field(
        default_factory=lambda: [".env"],
        alias="envFiles",
        description="Definition files in priority order; later files win",
    )
    template_file: str | None = Field(
        default=None, alias="templateFile", description="Template to check for drift"
    )
    include: list[str] | None = Field(
        default=None, description="Source globs; None uses the framework's defaults"
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE), description="Globs to skip"
    )
    framework: str = Field(default="auto", description="Framework or 'auto'")
    variables: dict[str, Any] = Field(
        default_factory=dict, description="Per-variable rules (raw, validated leniently)"
    )
    ignore: list[str] = Field(default_factory=list, description="Ignore patterns")
    secret_patterns: list[str] = Field(
        default_factory=list, alias="secretPatterns", description="Extra secret regexes"
    )
    strict: bool = Field(default=False, description="Treat warnings as failures")
    allow_missing_env_files: bool = Field(
        default=False,
        alias="allowMissingEnvFiles",
        description="Do not abort when no definition file exists",
    )
    max_workers: int = Field(default=8, ge=1, alias="maxWorkers", description="Scan workers")
    reveal_chars: int = Field(
        default=4, ge=0, alias="revealChars", description="Characters revealed in secret previews"
    )
    verbose: bool = Field(default=False, description="Enable debug logging")

    @field_validator("framework", mode="before")
    @classmethod
    def _check_framework(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in FRAMEWORK_CHOICES:
                raise ValueError(
                    f"unknown framework {v!r}, expected one of: {', '.join(FRAMEWORK_CHOICES)}"
                )
        return v

    @field_validator("env_files", "exclude", "ignore", "secret_patterns", mode="before")
    @classmethod
    def _listify(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    def root_path(self) -> Path:
        """Resolved project root."""
        return Path(self.root).expanduser().resolve() if self.root else Path.cwd()

    def to_rule_set(self) -> "RuleSet":
        """Build the rule set, dropping invalid rule fields with a warning."""
        from env_doctor.core.rules import build_rule_set

        return build_rule_set(
            variables=self.variables,
            ignore=self.ignore,
            secret_patterns=self.secret_patterns,
        )


def get_config_paths(root: Path | str | None = None) -> list[Path]:
    """Get possible configuration file paths.

    Args:
        root: Project directory searched first (default: cwd)

    Returns:
        List of paths to check for configuration files
    """
    base = Path(root) if root is not None else Path.cwd()
    paths = [base / name for name in CONFIG_FILENAMES]

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "env-doctor" / "config.yaml")
    paths.append(Path.home() / ".config" / "env-doctor" / "config.yaml")

    return paths


def load_config(
    config_path: Path | str | None = None,
    root: Path | str | None = None,
) -> EnvDoctorConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.
        root: Project directory; becomes the config's root unless the file sets one

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If an explicit file is missing or a file is invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            return _load_config_file(path, root)
        raise ConfigurationError(f"Config file not found: {config_path}", path=str(config_path))

    for path in get_config_paths(root):
        if path.exists():
            return _load_config_file(path, root)

    return EnvDoctorConfig(root=str(root) if root is not None else None)


def _load_config_file(path: Path, root: Path | str | None = None) -> EnvDoctorConfig:
    """Load configuration from a specific file.

    JSON files are read through the YAML parser, which accepts them.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}", path=str(path)) from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}", path=str(path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping", path=str(path))
    if root is not None and not data.get("root"):
        data["root"] = str(root)

    try:
        return EnvDoctorConfig.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}", path=str(path)) from e


def save_config(config: EnvDoctorConfig, config_path: Path | str) -> Path:
    """Save configuration to a YAML file.

    Args:
        config: Configuration to save
        config_path: Path to save to

    Returns:
        Path where config was saved
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    config_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    return config_path
