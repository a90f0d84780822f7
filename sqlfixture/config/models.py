"""Pydantic models for SQLFixture configuration."""

from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE = "default"


class DatabaseDescriptor(BaseModel):
    """Connection parameters and fixture flags for one database.

    Unknown keys are kept on the model so they can be used as variables in a
    ``populator`` command template.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    dsn: str = Field(description="Data source name, e.g. 'mysql:host=localhost;dbname=app'")
    user: str = Field(default="", description="Username to access the database")
    password: str = Field(description="Password, may be an empty string")

    dump: Optional[str] = Field(default=None, description="Dump path relative to the project root")
    populate: bool = Field(default=False, description="Load the dump before the suite starts")
    cleanup: bool = Field(default=False, description="Reload the dump before each test")
    reconnect: bool = Field(default=False, description="Reconnect before each test")
    populator: Optional[str] = Field(default=None, description="External command used to load the dump")

    ssl_key: Optional[str] = None
    ssl_cert: Optional[str] = None
    ssl_ca: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('dsn')
    def validate_dsn(cls, v):
        """Require a driver prefix such as 'sqlite:' or 'pgsql:'."""
        if ':' not in v or not v.split(':', 1)[0].strip():
            raise ValueError(f"DSN '{v}' must start with a driver prefix like 'mysql:'")
        return v.strip()

    @field_validator('user', 'password', mode='before')
    def coerce_empty_credentials(cls, v):
        """YAML renders ``password:`` with no value as null."""
        if v is None:
            return ""
        return str(v)

    @property
    def scheme(self) -> str:
        """Driver prefix of the DSN."""
        return self.dsn.split(':', 1)[0].strip().lower()

    def tls_options(self) -> Dict[str, str]:
        """TLS material configured for this database, skipping empty entries."""
        return {
            name: value
            for name, value in (
                ('ssl_key', self.ssl_key),
                ('ssl_cert', self.ssl_cert),
                ('ssl_ca', self.ssl_ca),
            )
            if value
        }

    def populator_variables(self) -> Dict[str, Any]:
        """Scalar configuration values usable in a populator template."""
        return {
            key: value
            for key, value in self.model_dump().items()
            if value is not None and not isinstance(value, (dict, list, tuple))
        }


class FixtureConfig(DatabaseDescriptor):
    """Main configuration model: the default database plus named extras."""

    databases: Dict[str, DatabaseDescriptor] = Field(default_factory=dict)
    project_dir: Optional[str] = Field(default=None, description="Root used to resolve dump paths")

    @model_validator(mode='after')
    def validate_database_keys(self):
        """The default key is reserved for the root descriptor."""
        if DEFAULT_DATABASE in self.databases:
            raise ValueError(
                f"'{DEFAULT_DATABASE}' is reserved and cannot be used as a key in 'databases'"
            )
        return self

    def root_descriptor(self) -> DatabaseDescriptor:
        """The default database's descriptor without the nested databases."""
        data = self.model_dump(exclude={'databases', 'project_dir'})
        return DatabaseDescriptor.model_validate(data)

    def descriptors(self) -> "OrderedDict[str, DatabaseDescriptor]":
        """All configured databases keyed by identifier, default first."""
        result: "OrderedDict[str, DatabaseDescriptor]" = OrderedDict()
        result[DEFAULT_DATABASE] = self.root_descriptor()
        for key, descriptor in self.databases.items():
            result[key] = descriptor
        return result

    def resolve_project_dir(self) -> Path:
        """Directory that dump paths are relative to."""
        if self.project_dir:
            return Path(self.project_dir)
        return Path.cwd()


class EnvironmentSettings(BaseSettings):
    """Environment-specific settings."""

    model_config = SettingsConfigDict(env_prefix="SQLFIXTURE_", case_sensitive=False)

    log_level: str = Field(default="WARNING")
    debug: bool = Field(default=False)
    config_file: Optional[str] = Field(default=None)
