"""env-doctor: static analysis of environment variable usage.

This package reconciles the environment variables a codebase reads with
the ones its .env files declare, including:

- **Missing**: variables read in code but defined nowhere
- **Unused**: definitions nothing reads
- **Type mismatch**: values that do not fit how the code uses them
- **Sync drift**: differences between .env and a template like .env.example
- **Secrets**: real credentials committed to definition files

JavaScript and TypeScript are parsed with tree-sitter, Python with the ast
module, and anything else is scanned line by line.

Usage:
    from env_doctor import EnvDoctor, EnvDoctorConfig, run_analysis

    result = run_analysis(EnvDoctorConfig(root="my-app", template_file=".env.example"))
    for issue in result.issues:
        print(issue)

    # Or work from facts directly
    from env_doctor import analyze, parse_definitions, scan_usages

    defined = parse_definitions([".env"], root="my-app").variables
    used = scan_usages("src/db.ts", source, "node")
    result = analyze(defined, used)
"""

__version__ = "0.1.0"

# Core
from env_doctor.core.engine import EnvDoctor, analyze, run_analysis
from env_doctor.core.definitions import parse_definitions, parse_definition_file
from env_doctor.core.scanner import scan_usages, scan_file
from env_doctor.core.rules import load_rules
from env_doctor.core.frameworks import FrameworkProfile, detect_framework, get_framework_profile

# Models (commonly used)
from env_doctor.models.env import (
    DefinedVariable,
    UsedVariable,
    Issue,
    IssueKind,
    Severity,
    AccessIdiom,
    InferredType,
)
from env_doctor.models.rules import RuleSet, VariableRule
from env_doctor.models.result import AnalysisResult, ParseResult, SyncResult

# Config and errors
from env_doctor.utils.config import EnvDoctorConfig, load_config
from env_doctor.utils.errors import (
    EnvDoctorError,
    ConfigurationError,
    RootNotFoundError,
    DefinitionSourceError,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EnvDoctor",
    "analyze",
    "run_analysis",
    "parse_definitions",
    "parse_definition_file",
    "scan_usages",
    "scan_file",
    "load_rules",
    "FrameworkProfile",
    "detect_framework",
    "get_framework_profile",
    # Models
    "DefinedVariable",
    "UsedVariable",
    "Issue",
    "IssueKind",
    "Severity",
    "AccessIdiom",
    "InferredType",
    "RuleSet",
    "VariableRule",
    "AnalysisResult",
    "ParseResult",
    "SyncResult",
    # Config and errors
    "EnvDoctorConfig",
    "load_config",
    "EnvDoctorError",
    "ConfigurationError",
    "RootNotFoundError",
    "DefinitionSourceError",
]
