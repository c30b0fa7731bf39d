import typer
from pathlib import Path
from typing import Optional

from dpd.config_loader import DEFAULT_CONFIG_PATH, load_config
from dpd.core.errors import DetectorError
from dpd.orchestrator import run_detection
from dpd.utils.logger import ConsoleReporter, setup_logging

app = typer.Typer(help="Design pattern detection in UML class models")


@app.callback()
def main():
    """Detect design patterns in ArgoUML XMI models."""


@app.command()
def detect(
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Pattern template file"),
    system: Optional[str] = typer.Option(None, "--system", "-x", help="ArgoUML XMI model of the system"),
    tolerance: Optional[int] = typer.Option(None, "--tolerance", "-n", min=0,
                                            help="Number of pattern relations allowed to be missing"),
    config: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="YAML configuration file"),
    json_file: Optional[str] = typer.Option(None, "--json", help="Write the report as JSON to this file"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Patterns matched in parallel"),
    verbose: Optional[bool] = typer.Option(None, "--verbose/--quiet", help="Log progress"),
    debug: bool = typer.Option(False, "--debug", help="Log every search step"),
):
    """Match every pattern of the template file against the system model."""
    try:
        cfg = load_config(config)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config")

    detection = cfg.detection
    verbose = cfg.logging.verbose if verbose is None else verbose
    setup_logging(verbose=verbose, debug=debug or cfg.logging.debug)

    try:
        report = run_detection(
            template_path=template or detection.template_file,
            system_path=system or detection.system_file,
            tolerance=detection.tolerance if tolerance is None else tolerance,
            max_workers=workers or detection.max_workers,
        )
    except DetectorError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    reporter = ConsoleReporter(
        verbose=verbose,
        show_superfluous=cfg.output.show_superfluous,
        show_missing=cfg.output.show_missing,
    )
    reporter.report(report)

    output = json_file or cfg.output.json_file
    if output:
        Path(output).write_text(report.model_dump_json(indent=2), encoding="utf-8")
        typer.echo(f"Report written to {output}")


if __name__ == "__main__":
    app()
