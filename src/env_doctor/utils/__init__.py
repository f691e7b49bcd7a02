"""Utility functions for env-doctor."""

from env_doctor.utils.logging import (
    configure_logging,
    get_logger,
    get_logger_with_context,
    set_verbose,
)
from env_doctor.utils.errors import (
    EnvDoctorError,
    ConfigurationError,
    RootNotFoundError,
    DefinitionSourceError,
    ScanError,
    is_valid_env_var_name,
)
from env_doctor.utils.config import (
    EnvDoctorConfig,
    load_config,
    save_config,
    get_config_paths,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    "set_verbose",
    # Errors
    "EnvDoctorError",
    "ConfigurationError",
    "RootNotFoundError",
    "DefinitionSourceError",
    "ScanError",
    "is_valid_env_var_name",
    # Config
    "EnvDoctorConfig",
    "load_config",
    "save_config",
    "get_config_paths",
]
