"""Reporting domain exports."""

from .html_report_writer import (
    REPORT_TIMESTAMP_FORMAT,
    ReportMetadata,
    ReportPaths,
    failed_report_filename,
    main_report_filename,
    render_report,
    write_html_reports,
)
from .report_events import (
    STEP_STYLES,
    CaseNode,
    CaseStatus,
    EventKind,
    ReportEvent,
    StepLevel,
    StepStyle,
)
from .reporter_sink import REDACTED, ReporterHandle, ReporterSink, redact_headers

__all__ = [
    "EventKind",
    "StepLevel",
    "StepStyle",
    "STEP_STYLES",
    "CaseStatus",
    "ReportEvent",
    "CaseNode",
    "ReporterSink",
    "ReporterHandle",
    "REDACTED",
    "redact_headers",
    "ReportMetadata",
    "ReportPaths",
    "REPORT_TIMESTAMP_FORMAT",
    "main_report_filename",
    "failed_report_filename",
    "render_report",
    "write_html_reports",
]
