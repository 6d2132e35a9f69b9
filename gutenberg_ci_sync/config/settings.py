"""
Configuration system using Pydantic for type-safe settings management.

Defaults describe the production setup: the upstream Gutenberg repository and
the control repository that runs the mobile CI workflow. Every field can be
overridden from a YAML file or from ``GUTENBERG_CI_SYNC_*`` environment
variables (``__`` separates nested fields, e.g.
``GUTENBERG_CI_SYNC_CONTROL__DEFAULT_BRANCH``).

The API token is not part of the settings. It is read from the environment
variable named by ``token_env_var`` and handed to the HTTP client explicitly.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from gutenberg_ci_sync.credentials.environment_backend import EnvironmentBackend
from gutenberg_ci_sync.exceptions import ConfigurationError, CredentialNotFoundError

DEFAULT_TOKEN_ENV_VAR = "UPDATE_GUTENBERG_PR_GITHUB_TOKEN"


class UpstreamRepositoryConfig(BaseModel):
    """Repository whose pull requests are mirrored."""

    owner: str = Field(default="wordpress", description="Upstream repository owner")
    name: str = Field(default="gutenberg", description="Upstream repository name")
    label: str = Field(
        default="Mobile App - i.e. Android or iOS",
        description="Only open pull requests carrying this label are considered",
    )
    canonical_owner: str = Field(
        default="WordPress",
        description="Head repository owner login whose pull requests may trigger CI",
    )
    page_size: int = Field(default=100, ge=1, le=100, description="Pull requests requested per query")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class ControlRepositoryConfig(BaseModel):
    """Repository holding the mirror branches and the CI workflow."""

    owner: str = Field(default="oguzkocer", description="Control repository owner")
    name: str = Field(default="version-test-bin", description="Control repository name")
    default_branch: str = Field(default="trunk", description="Branch the dispatched workflow runs on")
    workflow_file: str = Field(default="update-gutenberg.yml", description="Workflow file to dispatch")
    mirror_path: str = Field(
        default="gutenberg",
        description="Path whose recorded sha identifies the mirrored upstream commit",
    )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class SyncSettings(BaseSettings):
    """Main settings for a reconciliation pass."""

    model_config = SettingsConfigDict(
        env_prefix="GUTENBERG_CI_SYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    upstream: UpstreamRepositoryConfig = Field(default_factory=UpstreamRepositoryConfig)
    control: ControlRepositoryConfig = Field(default_factory=ControlRepositoryConfig)
    api_base_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    mirror_source: str = Field(default="gutenberg", description="Source name used in mirror branch names")
    request_timeout: float = Field(default=30.0, gt=0.0, le=300.0, description="Per-request timeout in seconds")
    max_concurrency: int = Field(default=4, ge=1, le=16, description="Pull requests reconciled concurrently")
    token_env_var: str = Field(default=DEFAULT_TOKEN_ENV_VAR, description="Environment variable holding the token")

    @classmethod
    def load(cls, config_path: str | None = None) -> SyncSettings:
        """Load settings from a YAML file if given, otherwise from defaults and environment.

        Raises:
            ConfigurationError: If the settings are invalid
        """
        if config_path:
            return cls.from_yaml(config_path)

        try:
            return cls()
        except (ValidationError, SettingsError) as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str) -> SyncSettings:
        """Load settings from a YAML file with environment variable interpolation.

        Supports ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` placeholders.

        Raises:
            ConfigurationError: If the file is missing, unreadable, or invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        # An empty file means "all defaults"
        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except (ValidationError, SettingsError) as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Replace ``${VAR}`` placeholders, leaving YAML comment lines untouched.

        Raises:
            ValueError: If a variable without a default is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))


def load_token(settings: SyncSettings, backend: EnvironmentBackend | None = None) -> str:
    """Read the GitHub token named by ``settings.token_env_var``.

    Raises:
        CredentialNotFoundError: If the variable is unset or blank
    """
    backend = backend or EnvironmentBackend()
    token = backend.get(settings.token_env_var)

    if token is None or not token.strip():
        raise CredentialNotFoundError(
            settings.token_env_var,
            suggestion=f"export {settings.token_env_var}='your-github-token'",
        )

    return token.strip()
