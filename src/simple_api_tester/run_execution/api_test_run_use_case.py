"""Run execution use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime
from pathlib import Path

import requests
from sqlalchemy.engine import Engine

from simple_api_tester.case_registry import (
    CaseRegistry,
    CaseRegistryLoadError,
    load_case_registry,
)
from simple_api_tester.configuration import (
    ConfigKey,
    RunContext,
    build_run_context,
    load_config_registry,
)
from simple_api_tester.data_sources import (
    RUNNER_LIST_GROUP,
    SQL_QUERY_FILENAME,
    QueryCatalog,
    SqlDataSource,
    TestDataCache,
    connect_data_source,
)
from simple_api_tester.email_summary import (
    EmailSendResult,
    ReportSummaryMailer,
    SendStatus,
    SMTPClient,
    SynchronousSMTPClient,
    email_settings_from_registry,
)
from simple_api_tester.harness_errors import HarnessError
from simple_api_tester.reporting import (
    CaseStatus,
    ReportMetadata,
    ReportPaths,
    ReporterSink,
    write_html_reports,
)
from simple_api_tester.request_dispatch import BearerTokenStore, RequestDispatcher
from simple_api_tester.runner_list import (
    RunnerEntry,
    build_runner_document_from_excel,
    build_runner_document_from_sql,
    load_runner_list,
    runner_list_path,
    write_runner_list_json,
)

from .case_runner import CaseRunner
from .data_binder import bind_iterations
from .run_contracts import RunOutcome, RunRequest
from .scheduler import ScheduledCase, select_cases

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DIRNAME = "reports"


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


def execute_api_test_run(
    request: RunRequest,
    *,
    case_registry: CaseRegistry | None = None,
    session_factory: Callable[[], requests.Session] | None = None,
    engine: Engine | None = None,
    smtp_client_factory: Callable[[], SMTPClient] | None = None,
    now: datetime | None = None,
) -> RunOutcome:
    """Execute one suite run and return the run outcome."""
    resolved_session_factory = session_factory or requests.Session
    resolved_smtp_client_factory = smtp_client_factory or SynchronousSMTPClient

    context = _load_run_context(request, now)
    registry = case_registry or _load_cases(request.cases_ref, request.cases_dir)
    source = _connect_source(context, engine)
    catalog = _load_catalog(context)
    entries = _load_runner_entries(request, context, source, catalog)
    scheduled = select_cases(registry.cases(), entries)
    cache = TestDataCache(context.environment, context.testdata_dir, source=source, catalog=catalog)
    cache.groups()

    sink = ReporterSink()
    token_store = BearerTokenStore()
    try:
        sink.start_suite(f"{context.service_name}_{context.run_manager}")
        fatal = _run_scheduled_cases(
            scheduled,
            workers=request.workers,
            job=lambda item: _run_case_job(
                item, context, sink, cache, source, resolved_session_factory(), token_store
            ),
        )
        sink.end_suite()
        metadata = ReportMetadata(
            service=context.service_name,
            run_manager=context.run_manager,
            environment=context.environment,
            started=context.run_timestamp,
            override_reports=context.override_reports,
        )
        report_paths = write_html_reports(sink.case_nodes(), metadata, context.report_dir)
    except HarnessError as exc:
        raise RunExecutionError(str(exc)) from exc
    if fatal is not None:
        raise RunExecutionError(str(fatal)) from fatal

    counts = sink.counts()
    email_result = _send_summary(
        context, metadata, counts, report_paths, resolved_smtp_client_factory
    )
    return RunOutcome(
        main_report=report_paths.main_report,
        failed_report=report_paths.failed_report,
        scheduled=len(scheduled),
        passed=counts[CaseStatus.PASS],
        failed=counts[CaseStatus.FAIL],
        skipped=counts[CaseStatus.SKIP],
        email_status=email_result.status,
    )


def _load_run_context(request: RunRequest, now: datetime | None) -> RunContext:
    try:
        registry = load_config_registry(request.config_path)
        return build_run_context(
            registry,
            resources_dir=request.resources_dir,
            report_dir=request.output_dir or Path(DEFAULT_REPORT_DIRNAME),
            run_manager=request.run_manager,
            service_name=request.service_name,
            now=now,
        )
    except HarnessError as exc:
        raise RunExecutionError(str(exc)) from exc


def _load_cases(reference: str | None, cases_dir: str | None) -> CaseRegistry:
    if not reference:
        raise RunExecutionError("A case registry reference (module:attribute) is required.")
    try:
        return load_case_registry(reference, search_path=cases_dir)
    except CaseRegistryLoadError as exc:
        raise RunExecutionError(str(exc)) from exc


def _connect_source(context: RunContext, engine: Engine | None) -> SqlDataSource | None:
    result = connect_data_source(context.registry, engine=engine)
    if result.ok:
        return result.unwrap()
    if context.is_local:
        raise RunExecutionError(f"run_mode=local requires a database: {result.error}")
    logger.warning("Database unavailable, using existing JSON test data: %s", result.error)
    return None


def _load_catalog(context: RunContext) -> QueryCatalog | None:
    result = QueryCatalog.load(context.testdata_dir / SQL_QUERY_FILENAME)
    if result.ok:
        return result.unwrap()
    logger.warning("SQL queries unavailable: %s", result.error)
    return None


def _load_runner_entries(
    request: RunRequest,
    context: RunContext,
    source: SqlDataSource | None,
    catalog: QueryCatalog | None,
) -> list[RunnerEntry]:
    path = runner_list_path(context.testdata_dir, context.run_manager)
    try:
        if request.runner_excel:
            document = build_runner_document_from_excel(
                request.runner_excel, request.runner_sheet or context.run_manager, context.run_manager
            )
            write_runner_list_json(document, path)
        elif source is not None and catalog is not None and catalog.has_group(RUNNER_LIST_GROUP):
            write_runner_list_json(
                build_runner_document_from_sql(source, catalog, context.run_manager), path
            )
    except HarnessError as exc:
        logger.warning("Runner list not refreshed, using %s: %s", path, exc.message)

    result = load_runner_list(path, context.run_manager)
    if not result.ok:
        logger.warning("Runner list unavailable: %s", result.error)
        return []
    return result.unwrap().entries(context.run_manager)


def _run_scheduled_cases(
    scheduled: list[ScheduledCase],
    *,
    workers: int,
    job: Callable[[ScheduledCase], None],
) -> HarnessError | None:
    """Submit one job per case; returns the first fatal error raised by a job."""
    executor = ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="case")
    futures: list[Future[None]] = []
    try:
        futures = [executor.submit(job, item) for item in scheduled]
        wait(futures)
    except KeyboardInterrupt:
        logger.warning("Run interrupted; cancelling pending test cases.")
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    executor.shutdown(wait=True)

    for future in futures:
        error = future.exception()
        if error is None:
            continue
        if isinstance(error, HarnessError):
            return error
        raise RunExecutionError(f"Unexpected engine failure: {error}") from error
    return None


def _run_case_job(
    scheduled: ScheduledCase,
    context: RunContext,
    sink: ReporterSink,
    cache: TestDataCache,
    source: SqlDataSource | None,
    session: requests.Session,
    token_store: BearerTokenStore,
) -> None:
    handle = sink.open_handle()
    dispatcher = RequestDispatcher(context, session=session, token_store=token_store)
    runner = CaseRunner(context, dispatcher, handle, data_source=source)
    try:
        runner.run_case(scheduled, bind_iterations(scheduled, cache.rows()))
    finally:
        session.close()


def _send_summary(
    context: RunContext,
    metadata: ReportMetadata,
    counts: dict[CaseStatus, int],
    report_paths: ReportPaths,
    smtp_client_factory: Callable[[], SMTPClient],
) -> EmailSendResult:
    if not context.registry.optional_flag(ConfigKey.SEND_EMAIL):
        logger.info("Summary email disabled (send_email is not 'yes').")
        return EmailSendResult.skipped("send_email disabled")
    try:
        smtp_settings, mail_settings = email_settings_from_registry(context.registry)
    except HarnessError as exc:
        logger.error("Summary email not sent: %s", exc)
        return EmailSendResult.failed(exc)
    mailer = ReportSummaryMailer(smtp_client_factory())
    result = mailer.send(smtp_settings, mail_settings, metadata, counts, report_paths)
    if result.status is SendStatus.FAILED:
        logger.error("Summary email failed: %s", result.error_message)
    return result
