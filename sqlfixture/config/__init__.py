"""Configuration management for SQLFixture."""

from sqlfixture.config.models import (
    DEFAULT_DATABASE,
    DatabaseDescriptor,
    FixtureConfig,
    EnvironmentSettings,
)
from sqlfixture.config.parser import (
    ConfigParser,
    get_config,
    validate_config_file,
    create_sample_config,
)

__all__ = [
    # Models
    "DEFAULT_DATABASE",
    "DatabaseDescriptor",
    "FixtureConfig",
    "EnvironmentSettings",
    # Parser
    "ConfigParser",
    "get_config",
    "validate_config_file",
    "create_sample_config",
]
