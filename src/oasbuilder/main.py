"""Main CLI entry point for the OpenAPI route builder."""

import importlib
from pathlib import Path

import typer
from rich.console import Console

from oasbuilder.config import OutputType, Representation, load_config
from oasbuilder.core.assembler import build_document
from oasbuilder.exceptions import OasBuilderError
from oasbuilder.models import DocumentParams, OutputConfig

app = typer.Typer(
    name="oasbuilder",
    help="Build OpenAPI 3.0 documents from Python route and schema definitions",
)
console = Console(stderr=True)


def load_params(target: str) -> DocumentParams:
    """
    Import the document parameters named by *target*.

    Args:
        target: ``package.module:attribute``. The attribute is either a
            DocumentParams instance or a zero-argument callable returning one.

    Returns:
        The document parameters

    Raises:
        ValueError: If *target* is malformed or does not name DocumentParams
        ImportError: If the module cannot be imported
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected MODULE:ATTRIBUTE, got '{target}'")

    module = importlib.import_module(module_name)
    try:
        value = getattr(module, attribute)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'") from None

    if callable(value) and not isinstance(value, DocumentParams):
        value = value()
    if not isinstance(value, DocumentParams):
        raise ValueError(f"'{target}' is not a DocumentParams instance")
    return value


@app.command()
def build(
    target: str = typer.Argument(
        ...,
        help="Document parameters to build, as MODULE:ATTRIBUTE",
    ),
    representation: Representation = typer.Option(
        None,
        "--representation",
        "-r",
        help="flat inlines every schema; referenced keeps labeled schemas in components",
    ),
    output: str = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the document to this file instead of the configured output",
    ),
    config_dir: str = typer.Option(
        ".",
        "--config-dir",
        help="Directory containing .oasbuilder.yaml",
    ),
) -> None:
    """Build an OpenAPI document and print or write it.

    Defaults for the representation and output file come from
    .oasbuilder.yaml; command-line options take precedence.
    """
    config = load_config(Path(config_dir).resolve())

    try:
        params = load_params(target)
    except (ImportError, ValueError) as e:
        console.print(f"[bold red]✗[/bold red] Failed to load {target}: {e}")
        raise typer.Exit(1)

    output_file = output or config.output_file
    if output_file:
        params = params.model_copy(
            update={"output": OutputConfig(type=OutputType.FILE, file=output_file)}
        )
    representation = representation or config.representation

    with console.status(f"[bold yellow]Building {representation.value} document..."):
        try:
            build_document(params, representation, console=console)
        except OasBuilderError as e:
            console.print(f"[bold red]✗[/bold red] Build failed: {e}")
            raise typer.Exit(1)

    if params.output.type is OutputType.FILE:
        console.print(f"[bold green]✓[/bold green] Document written to: {params.output.file}")


if __name__ == "__main__":
    app()
