"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from simple_api_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigKey,
    load_config_registry,
    write_placeholder_configuration,
)
from simple_api_tester.data_sources import (
    SQL_QUERY_FILENAME,
    QueryCatalog,
    TestDataCache,
    connect_data_source,
)
from simple_api_tester.harness_errors import HarnessError
from simple_api_tester.run_execution import RunExecutionError, RunRequest, execute_api_test_run
from simple_api_tester.runner_list import (
    build_runner_document_from_excel,
    runner_list_path,
    write_runner_list_json,
)

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="simple-api-tester")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging level for console output",
)
def cli(log_level: str) -> None:
    """Runner-list driven API test harness."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the properties file to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder run configuration listing every known key."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="import-runner-list")
@click.option(
    "--excel",
    "excel_path",
    required=True,
    type=click.Path(path_type=str),
    help="Workbook holding the runner sheet",
)
@click.option("--sheet", "sheet_name", required=False, help="Sheet name (defaults to run-manager)")
@click.option("--run-manager", "run_manager", required=True, help="Run-manager label")
@click.option(
    "--resources-dir",
    "resources_dir",
    default="resources",
    show_default=True,
    type=click.Path(path_type=str),
    help="Resources directory containing testdata/",
)
def import_runner_list(
    excel_path: str, sheet_name: str | None, run_manager: str, resources_dir: str
) -> None:
    """Convert an Excel runner sheet into the runner-list JSON document."""
    destination = runner_list_path(Path(resources_dir) / "testdata", run_manager)
    try:
        document = build_runner_document_from_excel(excel_path, sheet_name or run_manager, run_manager)
        write_runner_list_json(document, destination)
    except HarnessError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(destination.resolve()))


@cli.command(name="generate-test-data")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the run configuration (.properties, .yaml or .json)",
)
@click.option(
    "--resources-dir",
    "resources_dir",
    default="resources",
    show_default=True,
    type=click.Path(path_type=str),
    help="Resources directory containing testdata/",
)
def generate_test_data(config_path: str, resources_dir: str) -> None:
    """Run the configured select queries and write the per-environment test data JSON."""
    testdata_dir = Path(resources_dir) / "testdata"
    try:
        registry = load_config_registry(config_path)
        environment = registry.get(ConfigKey.ENV)
        source = connect_data_source(registry).unwrap()
        catalog = QueryCatalog.load(testdata_dir / SQL_QUERY_FILENAME).unwrap()
    except HarnessError as exc:
        raise CliError(str(exc)) from exc
    cache = TestDataCache(environment, testdata_dir, source=source, catalog=catalog)
    groups = cache.groups()
    click.echo(f"{cache.path.resolve()} ({sum(len(rows) for rows in groups.values())} rows)")


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the run configuration (.properties, .yaml or .json)",
)
@click.option(
    "--cases",
    "cases_ref",
    required=True,
    help="Case registry as 'package.module:attribute'",
)
@click.option(
    "--cases-dir",
    "cases_dir",
    default=".",
    show_default=True,
    type=click.Path(path_type=str, file_okay=False),
    help="Directory prepended to the import path before loading --cases",
)
@click.option(
    "--resources-dir",
    "resources_dir",
    default="resources",
    show_default=True,
    type=click.Path(path_type=str),
    help="Resources directory containing testdata/",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Directory for HTML reports (defaults to ./reports)",
)
@click.option(
    "--workers",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of test cases executed in parallel",
)
@click.option("--runner-excel", "runner_excel", required=False, help="Refresh runner list from Excel")
@click.option("--runner-sheet", "runner_sheet", required=False, help="Sheet of --runner-excel")
@click.option("--run-manager", "run_manager", required=False, help="Override runmanager")
@click.option("--service-name", "service_name", required=False, help="Override service_name")
def run_tests(  # pylint: disable=too-many-arguments
    config_path: str,
    cases_ref: str,
    cases_dir: str,
    resources_dir: str,
    output_dir: str | None,
    workers: int,
    runner_excel: str | None,
    runner_sheet: str | None,
    run_manager: str | None,
    service_name: str | None,
) -> None:
    """Execute the selected test cases and write the HTML reports."""
    try:
        outcome = execute_api_test_run(
            RunRequest(
                config_path=config_path,
                cases_ref=cases_ref,
                resources_dir=resources_dir,
                output_dir=output_dir,
                workers=workers,
                runner_excel=runner_excel,
                runner_sheet=runner_sheet,
                run_manager=run_manager,
                service_name=service_name,
                cases_dir=cases_dir,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(
        f"passed={outcome.passed} failed={outcome.failed} skipped={outcome.skipped} "
        f"report={outcome.main_report}"
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
