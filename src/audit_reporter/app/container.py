from __future__ import annotations

from dependency_injector import containers, providers

from ..core.services import (
    AnnotationEmitter,
    ReportAssembler,
    ReportOrchestrator,
    ScanNormalizer,
    SeverityPolicy,
)
from ..core.usecases.preview import PreviewReportUseCase
from ..core.usecases.publish import PublishReportUseCase
from ..infra.bitbucket import BitbucketReportsClient
from ..infra.logging import RunLogger
from ..infra.npm_audit import NpmAuditScanner


class Container(containers.DeclarativeContainer):
    """DI container fed from AppConfig via ``config.from_pydantic``."""

    config = providers.Configuration()

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        RunLogger,
        log_file=config.log_file,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Adapters
    scanner = providers.Singleton(
        NpmAuditScanner,
        logger=logger,
        max_buffer=config.report.max_buffer_size,
        timeout=config.report.scan_timeout,
    )

    publisher = providers.Singleton(
        BitbucketReportsClient,
        owner=config.bitbucket.repo_owner,
        slug=config.bitbucket.repo_slug,
        commit=config.bitbucket.commit,
        proxy_url=config.report.relay_url,
        timeout=config.report.timeout,
        logger=logger,
    )

    # Domain services
    severity_policy = providers.Singleton(
        SeverityPolicy,
        threshold=config.report.level,
        min_annotation=config.report.annotation_level,
        display_map=config.report.display_severity,
    )

    normalizer = providers.Singleton(ScanNormalizer)

    report_assembler = providers.Factory(
        ReportAssembler,
        reporter=config.bitbucket.repo_owner,
        title=config.report.name,
    )

    annotation_emitter = providers.Factory(
        AnnotationEmitter,
        policy=severity_policy,
        report_id=config.report.id,
    )

    orchestrator = providers.Factory(
        ReportOrchestrator,
        scanner=scanner,
        publisher=publisher,
        normalizer=normalizer,
        policy=severity_policy,
        assembler=report_assembler,
        emitter=annotation_emitter,
        logger=logger,
        report_id=config.report.id,
    )

    # Use cases
    publish_uc = providers.Factory(
        PublishReportUseCase,
        orchestrator=orchestrator,
    )

    preview_uc = providers.Factory(
        PreviewReportUseCase,
        orchestrator=orchestrator,
    )
