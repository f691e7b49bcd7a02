"""Analysis orchestration: facts in, issues out."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable

from env_doctor.core.analyzers import (
    analyze_dynamic_access,
    analyze_missing,
    analyze_secrets,
    analyze_sync_drift,
    analyze_type_mismatch,
    analyze_unused,
)
from env_doctor.core.definitions import apply_rules, parse_definition_file, parse_definitions
from env_doctor.core.discovery import discover_source_files
from env_doctor.core.frameworks import FrameworkProfile, detect_framework, get_framework_profile
from env_doctor.core.scanner import scan_file
from env_doctor.core.secrets import DEFAULT_REVEAL_CHARS
from env_doctor.models.env import DefinedVariable, Issue, IssueKind, Severity, UsedVariable
from env_doctor.models.result import AnalysisResult, ParseError, ScanFailure, ScanStats
from env_doctor.models.rules import RuleSet
from env_doctor.utils.config import EnvDoctorConfig, load_config
from env_doctor.utils.errors import DefinitionSourceError, EnvDoctorError, RootNotFoundError
from env_doctor.utils.logging import get_logger, get_logger_with_context, set_verbose

logger = get_logger("engine")

# Analyzer order; also the tie-breaker when issues share a location.
KIND_ORDER = {
    kind: index
    for index, kind in enumerate(
        (
            IssueKind.MISSING,
            IssueKind.DYNAMIC_ACCESS,
            IssueKind.UNUSED,
            IssueKind.TYPE_MISMATCH,
            IssueKind.INVALID_VALUE,
            IssueKind.SYNC_DRIFT,
            IssueKind.SECRET_EXPOSED,
        )
    )
}


def _issue_key(issue: Issue) -> tuple:
    location = issue.location
    if location is None:
        return (1, "", 0, 0, KIND_ORDER[issue.kind], issue.variable)
    return (
        0,
        location.file,
        location.line,
        location.column or 0,
        KIND_ORDER[issue.kind],
        issue.variable,
    )


def _usage_key(usage: UsedVariable) -> tuple:
    return (usage.location.file, usage.location.line, usage.location.column or 0)


def analyze(
    defined_variables: Iterable[DefinedVariable],
    used_variables: Iterable[UsedVariable],
    rules: RuleSet | None = None,
    framework: str | FrameworkProfile = "node",
    template_variables: Iterable[DefinedVariable] | None = None,
    template_file: str = ".env.example",
    reveal_chars: int = DEFAULT_REVEAL_CHARS,
    parse_errors: Iterable[ParseError] = (),
    scan_failures: Iterable[ScanFailure] = (),
    files_scanned: int = 0,
    env_files_parsed: int = 0,
    fallback_count: int = 0,
    started: float | None = None,
) -> AnalysisResult:
    """Run every analyzer over already extracted facts.

    Pure apart from timing: the same facts always give the same issues, in
    the same order (by location, then analyzer).

    Args:
        defined_variables: Merged definitions
        used_variables: Usages from source code
        rules: Variable rules, ignore and secret patterns
        framework: Framework name or profile
        template_variables: Template definitions; None skips the drift check
        template_file: Template name used in drift messages
        reveal_chars: Characters shown at each end of secret previews
        parse_errors: Definition parse errors to carry into the result
        scan_failures: Source scan failures to carry into the result
        files_scanned: Number of scanned source files
        env_files_parsed: Number of parsed definition files
        fallback_count: Number of files scanned by the regex fallback
        started: ``time.perf_counter()`` value the run started at

    Returns:
        AnalysisResult
    """
    started = time.perf_counter() if started is None else started
    rules = rules or RuleSet()
    profile = framework if isinstance(framework, FrameworkProfile) else get_framework_profile(framework)

    defined = apply_rules(defined_variables, rules)
    used = sorted(used_variables, key=_usage_key)
    template = list(template_variables) if template_variables is not None else None

    issues: list[Issue] = []
    issues.extend(analyze_missing(defined, used, rules))
    issues.extend(analyze_dynamic_access(used))
    issues.extend(analyze_unused(defined, used, rules, profile))
    issues.extend(analyze_type_mismatch(defined, used, rules))
    if template is not None:
        issues.extend(analyze_sync_drift(defined, template, template_file, rules.ignore).issues)
    issues.extend(analyze_secrets(defined, rules, reveal_chars))
    issues.sort(key=_issue_key)

    parse_errors = list(parse_errors)
    scan_failures = list(scan_failures)
    stats = ScanStats(
        files_scanned=files_scanned,
        env_files_parsed=env_files_parsed,
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
        error_count=sum(1 for i in issues if i.severity == Severity.ERROR),
        warning_count=sum(1 for i in issues if i.severity == Severity.WARNING),
        info_count=sum(1 for i in issues if i.severity == Severity.INFO),
        parse_error_count=len(parse_errors),
        scan_failure_count=len(scan_failures),
        fallback_count=fallback_count,
    )
    logger.debug(
        "Analysis found %d issues (%d errors, %d warnings)",
        len(issues),
        stats.error_count,
        stats.warning_count,
    )

    return AnalysisResult(
        issues=issues,
        defined_variables=defined,
        used_variables=used,
        template_variables=template,
        framework=profile.name,
        stats=stats,
        parse_errors=parse_errors,
        scan_failures=scan_failures,
    )


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def scan_sources(
    files: list[Path],
    root: Path,
    profile: FrameworkProfile,
    max_workers: int = 8,
) -> tuple[list[UsedVariable], list[ScanFailure], int]:
    """Scan files on a bounded thread pool.

    Returns:
        Tuple of (usages sorted by file/line/column, failures, fallback count)
    """
    usages: list[UsedVariable] = []
    failures: list[ScanFailure] = []
    fallback_count = 0
    if not files:
        return usages, failures, fallback_count

    workers = max(1, min(max_workers, len(files)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(scan_file, path, root, profile): path for path in files}
        for future in as_completed(futures):
            path = futures[future]
            try:
                file_usages, used_fallback = future.result()
            except (OSError, EnvDoctorError) as e:
                message = e.message if isinstance(e, EnvDoctorError) else str(e)
                failures.append(ScanFailure(file=_relative(path, root), message=message))
                logger.debug("Error scanning %s: %s", path, message)
                continue
            usages.extend(file_usages)
            fallback_count += int(used_fallback)

    usages.sort(key=_usage_key)
    failures.sort(key=lambda f: f.file)
    return usages, failures, fallback_count


def run_analysis(config: EnvDoctorConfig | None = None) -> AnalysisResult:
    """Run the full pipeline for a project.

    Args:
        config: Configuration; defaults to the built-in defaults in the cwd

    Returns:
        AnalysisResult

    Raises:
        RootNotFoundError: If the project root does not exist
        DefinitionSourceError: If no definition file exists and
            ``allow_missing_env_files`` is not set
    """
    started = time.perf_counter()
    config = config or EnvDoctorConfig()
    if config.verbose:
        set_verbose(True)

    root = config.root_path()
    if not root.is_dir():
        raise RootNotFoundError(str(root))
    log = get_logger_with_context("engine", root=root)

    framework = config.framework
    if framework == "auto":
        framework = detect_framework(root)
    profile = get_framework_profile(framework)
    log = log.bind(framework=profile.name)
    log.debug("Using framework %s", profile.display_name)

    rules = config.to_rule_set()

    env_files = [f for f in config.env_files if (root / f).is_file()]
    for missing in sorted(set(config.env_files) - set(env_files)):
        log.debug("Env file not found: %s", missing)
    if not env_files and not config.allow_missing_env_files:
        raise DefinitionSourceError(config.env_files)
    parsed = parse_definitions(env_files, root, rules)
    parse_errors = list(parsed.errors)

    template_variables = None
    template_file = config.template_file or ".env.example"
    if config.template_file:
        if (root / config.template_file).is_file():
            template = parse_definition_file(config.template_file, root)
            template_variables = template.variables
            parse_errors.extend(template.errors)
        else:
            log.debug("Template file not found: %s", config.template_file)

    include = config.include or list(profile.source_globs)
    files = discover_source_files(root, include, config.exclude)
    usages, failures, fallback_count = scan_sources(files, root, profile, config.max_workers)
    log.debug("Scanned %d files, %d usages, %d via fallback", len(files), len(usages), fallback_count)

    return analyze(
        parsed.variables,
        usages,
        rules=rules,
        framework=profile,
        template_variables=template_variables,
        template_file=template_file,
        reveal_chars=config.reveal_chars,
        parse_errors=parse_errors,
        scan_failures=failures,
        files_scanned=len(files),
        env_files_parsed=len(env_files),
        fallback_count=fallback_count,
        started=started,
    )


class EnvDoctor:
    """Environment variable analyzer for a project.

    Example:
        doctor = EnvDoctor.from_config_file(root="my-app")
        result = doctor.run()

        if not result.passed:
            for issue in result.issues:
                print(issue)
    """

    def __init__(self, config: EnvDoctorConfig | None = None) -> None:
        self.config = config or EnvDoctorConfig()

    @classmethod
    def from_config_file(
        cls,
        config_path: str | Path | None = None,
        root: str | Path | None = None,
    ) -> "EnvDoctor":
        """Build from a configuration file, searching the default locations if no path is given."""
        return cls(load_config(config_path, root))

    @property
    def rules(self) -> RuleSet:
        return self.config.to_rule_set()

    def run(self) -> AnalysisResult:
        """Scan the configured project and analyze it."""
        return run_analysis(self.config)

    def analyze(
        self,
        defined_variables: Iterable[DefinedVariable],
        used_variables: Iterable[UsedVariable],
        template_variables: Iterable[DefinedVariable] | None = None,
    ) -> AnalysisResult:
        """Analyze facts extracted elsewhere using this configuration's rules."""
        framework = self.config.framework
        if framework == "auto":
            framework = "node"
        return analyze(
            defined_variables,
            used_variables,
            rules=self.rules,
            framework=framework,
            template_variables=template_variables,
            template_file=self.config.template_file or ".env.example",
            reveal_chars=self.config.reveal_chars,
        )
