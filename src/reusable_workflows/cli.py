"""Command-line interface for the reusable workflows generator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from reusable_workflows.answers import parse_assignments
from reusable_workflows.catalog import TemplateCatalog
from reusable_workflows.config import GeneratorConfig, load_config
from reusable_workflows.errors import (
    ConfigurationError,
    ErrorCode,
    GeneratorError,
    error_boundary,
    handle_cli_error,
)
from reusable_workflows.generator import GenerateOptions, WorkflowGenerator
from reusable_workflows.logging_config import LOG_FORMATS, configure_logging
from reusable_workflows.ui import ConsolePrompter, presets_table, templates_table

app = typer.Typer(
    name="reusable-workflows",
    help="Generate GitHub Actions manifests from shared reusable workflow templates",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@dataclass
class AppState:
    """Settings from the global options, shared with every command."""

    catalog_root: Path = Path(".")
    config: GeneratorConfig | None = None

    def catalog(self) -> TemplateCatalog:
        return TemplateCatalog(self.catalog_root, self.config)


@app.callback()
def main_callback(
    ctx: typer.Context,
    catalog: Annotated[
        Path,
        typer.Option("--catalog", "-C", help="Directory holding the workflow templates"),
    ] = Path("."),
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="YAML file overriding generator settings"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    log_format: Annotated[
        str,
        typer.Option("--log-format", help="Log format (console, json)"),
    ] = "console",
) -> None:
    """Generate and update GitHub Actions manifests based on shared templates."""
    try:
        if log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Invalid log format '{log_format}'",
                hint=f"Available: {', '.join(LOG_FORMATS)}",
            )
        configure_logging(level="DEBUG" if verbose else "WARNING", format=log_format)
        config = load_config(config_file)
    except GeneratorError as e:
        handle_cli_error(e)
        return
    ctx.obj = AppState(catalog_root=catalog, config=config)


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj if isinstance(ctx.obj, AppState) else AppState()


@app.command(name="list")
@error_boundary
def list_cmd(ctx: typer.Context) -> None:
    """List the templates in the catalog."""
    templates = _state(ctx).catalog().load()
    console.print(templates_table(templates))


@app.command(name="presets")
@error_boundary
def presets_cmd(
    ctx: typer.Context,
    template_id: Annotated[str, typer.Argument(help="Template id")],
) -> None:
    """List the presets mined from a template's example."""
    template = _state(ctx).catalog().get(template_id)
    if not template.presets:
        typer.echo(f"No presets found for {template_id}")
        return
    console.print(presets_table(template))


@app.command(name="detect")
@error_boundary
def detect_cmd(
    ctx: typer.Context,
    template_id: Annotated[str, typer.Argument(help="Template id")],
    target: Annotated[
        Path,
        typer.Option("--target", "-t", help="Repository to scan"),
    ] = Path("."),
) -> None:
    """Show values detected from a repository's existing workflows."""
    state = _state(ctx)
    catalog = state.catalog()
    template = catalog.get(template_id)
    generator = WorkflowGenerator(catalog)
    detected = generator.detect(template, GenerateOptions(template_id=template_id, target_dir=target))

    if not detected:
        typer.echo(f"No existing configuration found for {template_id}")
        return
    for key, value in detected.items():
        typer.echo(f"{key}: {value}")


@app.command(name="generate")
@error_boundary
def generate_cmd(
    ctx: typer.Context,
    template_id: Annotated[
        Optional[str],
        typer.Argument(help="Template id (asked for when omitted)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Custom output file or directory"),
    ] = None,
    ref: Annotated[
        Optional[str],
        typer.Option("--ref", "-r", help="Pin to a branch or tag (default: master)"),
    ] = None,
    preset: Annotated[
        Optional[str],
        typer.Option("--preset", "-p", help="Preset id or name"),
    ] = None,
    non_interactive: Annotated[
        bool,
        typer.Option("--non-interactive", "-n", help="Run without prompts (uses detected values and defaults)"),
    ] = False,
    assignments: Annotated[
        Optional[list[str]],
        typer.Option("--set", "-s", help="Answer a field directly (KEY=VALUE, repeatable)"),
    ] = None,
    setup_doc: Annotated[
        Optional[bool],
        typer.Option("--setup-doc/--no-setup-doc", help="Also write SETUP-<id>.md"),
    ] = None,
    target: Annotated[
        Path,
        typer.Option("--target", "-t", help="Repository receiving the manifest"),
    ] = Path("."),
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the manifest without writing it"),
    ] = False,
) -> None:
    """Generate a workflow manifest for a template.

    Examples:
        reusable-workflows generate docker-ops
        reusable-workflows generate docker-ops -n --preset aws
        reusable-workflows generate docker-ops -n -s image_name=my-app -r v2
    """
    state = _state(ctx)
    catalog = state.catalog()
    catalog.load()

    interactive = not non_interactive
    prompter = ConsolePrompter(console, box_width=catalog.config.box_width) if interactive else None
    if prompter is not None:
        prompter.header()

    generator = WorkflowGenerator(catalog, prompter=prompter)
    result = generator.run(
        GenerateOptions(
            template_id=template_id,
            target_dir=target,
            output=output,
            ref=ref,
            preset=preset,
            answers=parse_assignments(assignments),
            interactive=interactive,
            setup_doc=setup_doc,
            dry_run=dry_run,
        )
    )

    if result.cancelled:
        typer.echo(typer.style("✗ Generation cancelled", fg="red"))
        raise typer.Exit(ErrorCode.CANCELLED.value)

    if dry_run:
        typer.echo(result.manifest, nl=False)
        return

    typer.echo(typer.style("✓ Generated: ", fg="green") + str(result.workflow_file))
    if result.setup_file:
        typer.echo(typer.style("✓ Generated: ", fg="green") + str(result.setup_file))

    if interactive:
        typer.echo("\nNext steps:")
        typer.echo(f"  1. Review {result.workflow_file}")
        if result.setup_file:
            typer.echo(f"  2. Follow {result.setup_file} to configure GitHub secrets")
            typer.echo("  3. Commit and push to trigger the workflow")
        else:
            typer.echo("  2. Commit and push to trigger the workflow")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
