"""Shared test fixtures for env-doctor tests."""

import logging
from pathlib import Path
from typing import Callable

import pytest

from env_doctor.models.common import SourceLocation
from env_doctor.models.env import AccessIdiom, DefinedVariable, InferredType, UsedVariable
from env_doctor.models.rules import RuleSet, VariableRule
from env_doctor.utils.logging import ROOT_LOGGER


@pytest.fixture
def make_defined() -> Callable[..., DefinedVariable]:
    """Factory for definitions."""

    def _make(
        name: str,
        value: str = "value",
        file: str = ".env",
        line: int = 1,
        is_secret: bool = False,
    ) -> DefinedVariable:
        return DefinedVariable(
            name=name,
            value=value,
            location=SourceLocation(file=file, line=line),
            is_secret=is_secret,
            raw=f"{name}={value}",
        )

    return _make


@pytest.fixture
def make_usage() -> Callable[..., UsedVariable]:
    """Factory for usages."""

    def _make(
        name: str,
        idiom: AccessIdiom = AccessIdiom.DIRECT,
        inferred_type: InferredType = InferredType.UNKNOWN,
        file: str = "src/app.ts",
        line: int = 1,
        column: int = 0,
        client: bool = False,
    ) -> UsedVariable:
        return UsedVariable(
            name=name,
            location=SourceLocation(file=file, line=line, column=column),
            access_idiom=idiom,
            inferred_type=inferred_type,
            is_client_side=client,
        )

    return _make


@pytest.fixture
def sample_env_content() -> str:
    """A .env file exercising most of the syntax."""
    return "\n".join(
        [
            "# Database",
            "DATABASE_URL=postgres://localhost:5432/app",
            "export PORT=3000",
            "",
            "API_KEY='your_api_key_here'",
            'GREETING="hello\\nworld"',
            "DEBUG=true # enable debug output",
            "EMPTY=",
        ]
    )


@pytest.fixture
def sample_rules() -> RuleSet:
    """Rule set with required, typed and constrained variables."""
    return RuleSet(
        variables={
            "DATABASE_URL": VariableRule(required=True, type="url"),
            "PORT": VariableRule(type="number", default=3000),
            "LOG_FORMAT": VariableRule(enum=["json", "text"]),
        },
        ignore=["unused:LEGACY_*"],
    )


@pytest.fixture
def write_files(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write a mapping of relative path to content under tmp_path."""

    def _write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo logging configuration made during a test."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
