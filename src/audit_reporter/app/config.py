from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import Field, ValidationError, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from ..core.domain.exceptions import ConfigurationError
from ..core.domain.severity import DEFAULT_DISPLAY_SEVERITY, SEVERITY_SCALE, DisplaySeverity
from ..infra.bitbucket import RELAY_TARGETS


APP_NAME = "audit_reporter"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


class BitbucketConfig(BaseSettings):
    """Build identity provided by Bitbucket Pipelines."""

    model_config = SettingsConfigDict(env_prefix="BITBUCKET_", env_ignore_empty=True, frozen=True)

    branch: str | None = Field(default=None, description="Branch being built")
    commit: str | None = Field(default=None, description="Commit hash the report is attached to")
    repo_owner: str | None = Field(default=None, description="Workspace owning the repository")
    repo_slug: str | None = Field(default=None, description="Repository slug")
    build_number: str | None = Field(default=None, description="Pipeline build number (informational)")

    def missing_identity(self) -> list[str]:
        """Names of the required identity variables that are unset or empty."""
        required = {
            "BITBUCKET_BRANCH": self.branch,
            "BITBUCKET_COMMIT": self.commit,
            "BITBUCKET_REPO_OWNER": self.repo_owner,
            "BITBUCKET_REPO_SLUG": self.repo_slug,
        }
        return [name for name, value in required.items() if not value]


class ReportConfig(BaseSettings):
    """Report publishing settings (BPR_* variables)."""

    model_config = SettingsConfigDict(env_prefix="BPR_", env_ignore_empty=True, frozen=True)

    name: str = Field(default="Security: npm audit", description="Report title")
    id: str = Field(default="npmaudit", description="Report identifier used in API paths")
    level: str = Field(
        default="high",
        description="Lowest severity that fails the report (info, low, moderate, high, critical)",
    )
    annotation_level: str | None = Field(
        default=None,
        description="Lowest severity that gets an annotation (unset: annotate everything)",
    )
    proxy: str = Field(default="local", description="Relay proxy mode (local, pipe)")
    max_buffer_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum bytes accepted from the npm audit output streams",
    )
    timeout: float = Field(default=30.0, description="Timeout in seconds for each HTTP call")
    scan_timeout: float | None = Field(default=None, description="Timeout in seconds for npm audit")
    display_severity: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_DISPLAY_SEVERITY),
        description="JSON table mapping npm severity to annotation severity",
    )

    @computed_field
    @property
    def relay_url(self) -> str | None:
        """Proxy URL for the selected relay mode, None if the mode is unknown."""
        return RELAY_TARGETS.get(self.proxy)


class LoggingConfig(BaseSettings):
    """Logging settings (BPR_LOG_* variables)."""

    model_config = SettingsConfigDict(env_prefix="BPR_LOG_", env_ignore_empty=True, frozen=True)

    level: str = Field(default="INFO", description="Logging level")
    logger_name: str = Field(default=APP_NAME, description="Logger name")
    console_output: bool = Field(default=True, description="Log human-readable lines to stderr")
    json_file: bool = Field(default=False, description="Also append JSON lines to <home>/logs/")
    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for audit_reporter data",
    )

    @computed_field
    @property
    def logs_dir(self) -> Path:
        return self.home / "logs"


class AppConfig(BaseSettings):
    """Root application configuration.

    Each section reads its own environment prefix, so the standard
    pipeline variables work unchanged:

        BITBUCKET_BRANCH, BITBUCKET_COMMIT, BITBUCKET_REPO_OWNER, BITBUCKET_REPO_SLUG
        BPR_NAME, BPR_ID, BPR_LEVEL, BPR_ANNOTATION_LEVEL, BPR_PROXY, BPR_MAX_BUFFER_SIZE
        BPR_TIMEOUT, BPR_SCAN_TIMEOUT, BPR_DISPLAY_SEVERITY='{"critical": "HIGH", ...}'
        BPR_LOG_LEVEL, BPR_LOG_CONSOLE_OUTPUT, BPR_LOG_JSON_FILE, BPR_LOG_HOME

    Whole sections can also be given as AUDIT_REPORTER_<SECTION>__<FIELD>.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_REPORTER_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    bitbucket: BitbucketConfig = Field(default_factory=BitbucketConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @computed_field
    @property
    def log_file(self) -> Path | None:
        """JSONL log path for this report id, when file logging is enabled."""
        if not self.logging.json_file:
            return None
        return self.logging.logs_dir / f"{self.report.id}.jsonl"


def load_config() -> AppConfig:
    """Build AppConfig from the environment.

    Raises:
        ConfigurationError: If a value cannot be parsed or fails validation
    """
    try:
        return AppConfig()
    except (ValidationError, SettingsError) as e:
        raise ConfigurationError(f"invalid configuration\n{e}") from e


def check_preflight(config: AppConfig, *, require_identity: bool = True) -> None:
    """Validate the configuration before any subprocess or network work.

    Raises:
        ConfigurationError: On missing identity values, an unsupported
            threshold or annotation level, an unsupported relay mode,
            an incomplete display severity table or an unknown log level
    """
    if require_identity:
        missing = config.bitbucket.missing_identity()
        if missing:
            raise ConfigurationError(
                f"Not all Bitbucket environment variables were set: {', '.join(missing)}"
            )

    levels = [level.value for level in SEVERITY_SCALE]
    if config.report.level.lower() not in levels:
        raise ConfigurationError(f"Unsupported audit level: {config.report.level}")
    if config.report.annotation_level is not None and config.report.annotation_level.lower() not in levels:
        raise ConfigurationError(f"Unsupported annotation level: {config.report.annotation_level}")
    if config.report.relay_url is None:
        raise ConfigurationError(f"Unsupported proxy configuration: {config.report.proxy}")

    table = {str(k).lower(): str(v).upper() for k, v in config.report.display_severity.items()}
    unknown = sorted(set(table) - set(levels))
    if unknown:
        raise ConfigurationError(f"Display severity table has unknown levels: {', '.join(unknown)}")
    missing = [level for level in levels if level not in table]
    if missing:
        raise ConfigurationError(f"Display severity table has no entry for: {', '.join(missing)}")
    invalid = sorted(v for v in set(table.values()) if v not in DisplaySeverity.__members__)
    if invalid:
        raise ConfigurationError(f"Unsupported display severity: {', '.join(invalid)}")

    if config.logging.level.upper() not in LOG_LEVELS:
        raise ConfigurationError(f"Unsupported log level: {config.logging.level}")
