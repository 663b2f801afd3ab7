"""HTML run report writer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from jinja2 import BaseLoader, Environment, select_autoescape

from simple_api_tester.harness_errors import ErrorKind, HarnessError

from .report_events import CaseNode, CaseStatus

logger = logging.getLogger(__name__)

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
  body { font-family: -apple-system, Segoe UI, Roboto, sans-serif; margin: 24px; color: #1f2933; }
  h1 { font-size: 22px; margin-bottom: 4px; }
  .meta { color: #52606d; font-size: 13px; margin-bottom: 16px; }
  .summary span { display: inline-block; margin-right: 16px; font-weight: 600; }
  .case { border: 1px solid #d9e2ec; border-radius: 6px; margin: 12px 0; }
  .case > summary { padding: 8px 12px; cursor: pointer; }
  .badge { border-radius: 4px; padding: 1px 6px; font-size: 12px; color: #fff; }
  .badge.pass { background: #2f9e44; } .badge.fail { background: #e03131; }
  .badge.skip { background: #f08c00; } .badge.retry { background: #868e96; }
  .tags { color: #52606d; font-size: 12px; }
  table { width: 100%; border-collapse: collapse; font-size: 13px; }
  td { border-top: 1px solid #edf2f7; padding: 4px 12px; vertical-align: top; }
  td.level { width: 80px; font-weight: 600; }
  tr.pass td.level { color: #2f9e44; } tr.fail td.level { color: #e03131; }
  tr.skip td.level { color: #f08c00; } tr.warn td.level { color: #f59f00; }
  tr.debug td.level, tr.request td.level, tr.response td.level { color: #5c7cfa; }
  pre { white-space: pre-wrap; margin: 4px 0; font-size: 12px; background: #f8f9fa; padding: 6px; }
</style>
</head>
<body>
<h1>{{ title }}</h1>
<div class="meta">Service: {{ service }} &middot; Run-manager: {{ run_manager }}
  &middot; Environment: {{ environment }} &middot; Started: {{ started }}</div>
<div class="summary">
  <span>Total: {{ counts.total }}</span>
  <span>Passed: {{ counts.pass }}</span>
  <span>Failed: {{ counts.fail }}</span>
  <span>Skipped: {{ counts.skip }}</span>
</div>
{% for node in nodes %}
<details class="case"{% if node.status and node.status.value == "fail" %} open{% endif %}>
  <summary>
    {% if node.will_retry %}<span class="badge retry">retried</span>
    {% elif node.status %}<span class="badge {{ node.status.value }}">{{ node.status.value }}</span>{% endif %}
    <strong>{{ node.descriptor.method_name }}</strong>
    {% if node.attempt > 1 %}(attempt {{ node.attempt }}){% endif %}
    <span class="tags">{{ node.descriptor.authors | join(", ") }}
      &middot; {{ node.descriptor.sorted_categories | map(attribute="value") | join(", ") }}
      &middot; {{ node.duration_ms }} ms</span>
  </summary>
  <table>
  {% for step in node.steps %}
    <tr class="{{ step.style.css_class }}">
      <td class="level">{{ step.style.label }}</td>
      <td>{{ step.message }}{% if step.detail %}<pre>{{ step.detail }}</pre>{% endif %}</td>
    </tr>
  {% endfor %}
  {% if node.error %}
    <tr class="fail"><td class="level">Error</td><td><pre>{{ node.error }}</pre></td></tr>
  {% endif %}
  </table>
</details>
{% endfor %}
</body>
</html>
"""

_env = Environment(
    loader=BaseLoader(),
    autoescape=select_autoescape(enabled_extensions=("html", "xml"), default_for_string=True),
)


@dataclass(frozen=True)
class ReportPaths:
    """Locations of the HTML reports written for one run."""

    main_report: Path
    failed_report: Path


@dataclass(frozen=True)
class ReportMetadata:
    service: str
    run_manager: str
    environment: str
    started: datetime
    override_reports: bool = False


def main_report_filename(metadata: ReportMetadata) -> str:
    if metadata.override_reports:
        return f"{metadata.service}_{metadata.run_manager}.html"
    timestamp = metadata.started.strftime(REPORT_TIMESTAMP_FORMAT)
    return f"{metadata.service}_{metadata.run_manager}_{timestamp}.html"


def failed_report_filename(metadata: ReportMetadata) -> str:
    return f"{metadata.service}_failed_testcase.html"


def render_report(title: str, nodes: Sequence[CaseNode], metadata: ReportMetadata) -> str:
    final_nodes = [node for node in nodes if node.is_final]
    counts = {
        "total": len(final_nodes),
        "pass": sum(1 for node in final_nodes if node.status is CaseStatus.PASS),
        "fail": sum(1 for node in final_nodes if node.status is CaseStatus.FAIL),
        "skip": sum(1 for node in final_nodes if node.status is CaseStatus.SKIP),
    }
    return _env.from_string(_REPORT_TEMPLATE).render(
        title=title,
        nodes=nodes,
        counts=counts,
        service=metadata.service,
        run_manager=metadata.run_manager,
        environment=metadata.environment,
        started=metadata.started.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
    )


def write_html_reports(
    nodes: Sequence[CaseNode], metadata: ReportMetadata, report_dir: Path
) -> ReportPaths:
    """Write the full report and the failed-cases-only report."""
    main_path = report_dir / main_report_filename(metadata)
    failed_path = report_dir / failed_report_filename(metadata)
    failed_nodes = [
        node for node in nodes if node.is_final and node.status is CaseStatus.FAIL
    ]
    try:
        report_dir.mkdir(parents=True, exist_ok=True)
        main_path.write_text(
            render_report(f"{metadata.service} API Test Report", nodes, metadata),
            encoding="utf-8",
        )
        failed_path.write_text(
            render_report(f"{metadata.service} Failed Test Cases", failed_nodes, metadata),
            encoding="utf-8",
        )
    except OSError as exc:
        raise HarnessError(ErrorKind.REPORTER, f"Failed to write HTML report: {exc}") from exc
    logger.info("HTML report written to %s", main_path)
    return ReportPaths(main_report=main_path.resolve(), failed_report=failed_path.resolve())
