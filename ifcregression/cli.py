"""
ifcregression.cli

Typer-based command line entry point.

Examples
--------
Run over a folder of IFC files, comparing against the last report there:

    ifcregression ./testfiles

Keep the converted models and write OBJ scenes as well:

    ifcregression ./testfiles --caching --scene
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from ifcregression.batch.processor import BatchProcessor
from ifcregression.config import RegressionSettings, load_settings
from ifcregression.conversion.base import ModelConverter

app = typer.Typer(
    name="ifcregression",
    help="Convert every IFC file under a folder and compare against the last run.",
    no_args_is_help=True,
    add_completion=False,
)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s - %(message)s"


def _make_converter(settings: RegressionSettings) -> ModelConverter:
    """Build the IfcOpenShell converter; imported lazily since it loads the kernel."""
    from ifcregression.conversion.ifc import IfcOpenShellConverter

    return IfcOpenShellConverter(keep_meshes=settings.generate_scene)


def _console_handler(level: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


@app.command()
def run(
    root: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Folder holding the IFC test files; the report is written here.",
    ),
    caching: bool | None = typer.Option(
        None, "--caching/--no-caching", help="Keep the converted model next to each source."
    ),
    top_only: bool = typer.Option(
        False, "--top-only", help="Only process files directly inside ROOT."
    ),
    scene: bool | None = typer.Option(
        None, "--scene/--no-scene", help="Write an OBJ scene for each converted model."
    ),
    extensions: list[str] | None = typer.Option(
        None, "--extension", "-e", help="Source extension to process (repeatable)."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Console log level (DEBUG, INFO, WARNING, ...)."
    ),
) -> None:
    """Run one regression pass over ROOT."""
    settings = load_settings(
        root,
        caching=caching,
        recursive=False if top_only else None,
        generate_scene=scene,
        extensions=extensions or None,
        log_level=log_level,
    )

    root_logger = logging.getLogger()
    handler = _console_handler(settings.log_level)
    previous_level = root_logger.level
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)
    try:
        processor = BatchProcessor(_make_converter(settings), settings)
        try:
            report = processor.run(root)
        except OSError as exc:
            typer.echo(f"Failed to write report: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    finally:
        root_logger.removeHandler(handler)
        root_logger.setLevel(previous_level)

    summary = report.summary()
    typer.echo(f"Report: {report.report_path}")
    typer.echo(
        f"{summary['total']} files: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['new_failures']} new failures, {summary['new_passes']} new passes"
    )
    for transition in report.transitions:
        typer.echo(f"  {transition.file_name}: {transition.previous.value} -> {transition.current.value}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
