from __future__ import annotations

import time

from .config import AppConfig, check_preflight, load_config
from .container import Container
from ..core.domain.models import RunResult


def _create_container(config: AppConfig) -> Container:
    """Create and initialize a container.

    Args:
        config: Validated application config

    Returns:
        Initialized container instance
    """
    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    return container


def publish_report(config: AppConfig | None = None) -> RunResult:
    """Run npm audit and publish the Code Insights report.

    Args:
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        Run result

    Raises:
        ConfigurationError: If identity values or settings are invalid or cannot be parsed
        SubprocessError: If npm audit fails or its output is unusable
        PublishError: If Bitbucket rejects a publish call
    """
    started_at = time.time()
    if config is None:
        config = load_config()
    check_preflight(config)

    container = _create_container(config)
    try:
        return container.publish_uc().execute(started_at=started_at)
    finally:
        container.shutdown_resources()


def preview_report(limit: int | None = None, config: AppConfig | None = None) -> RunResult:
    """Run npm audit and return what would be published, without publishing.

    Args:
        limit: Maximum number of annotations to keep in the result
        config: Optional config for testing. If None, loads from env vars.
    """
    started_at = time.time()
    if config is None:
        config = load_config()
    check_preflight(config, require_identity=False)

    container = _create_container(config)
    try:
        return container.preview_uc().execute(started_at=started_at, limit=limit)
    finally:
        container.shutdown_resources()
