"""CLI entrypoints for ScriptLoom."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.tree import Tree

from scriptloom.codec import CanonicalCodec
from scriptloom.config import Settings, load_settings
from scriptloom.errors import InvalidScriptError
from scriptloom.logging import configure_logging, get_logger
from scriptloom.models.action import ActionNode
from scriptloom.schema import CatalogSchemaGate, load_gate
from scriptloom.utils.ids import IdentityKeyGenerator

app = typer.Typer(add_completion=False, help="ScriptLoom site script tools")
logger = get_logger(__name__)
console = Console()


def _setup(catalog: Path | None) -> tuple[Settings, CatalogSchemaGate]:
    settings = load_settings()
    if catalog is not None:
        settings.catalog_path = catalog
    configure_logging(settings.log_level)
    return settings, load_gate(settings.catalog_path)


def _read(path: Path) -> str:
    if not path.exists():
        raise typer.BadParameter(f"{path} does not exist")
    return path.read_text(encoding="utf-8")


_CATALOG_OPTION = typer.Option(
    None,
    "--catalog",
    help="Schema catalog JSON file (overrides SCRIPTLOOM_CATALOG_PATH)",
)


@app.command()
def validate(
    path: Path = typer.Argument(..., help="Site script content JSON file"),
    catalog: Path | None = _CATALOG_OPTION,
) -> None:
    """Check a site script against the schema catalog."""

    _, gate = _setup(catalog)
    problems = gate.explain(_read(path))
    if problems:
        for problem in problems:
            console.print(f"[red]✗[/red] {problem}", soft_wrap=True)
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {path} is a valid site script", soft_wrap=True)


@app.command("format")
def format_(
    path: Path = typer.Argument(..., help="Site script content JSON file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of stdout"),
    catalog: Path | None = _CATALOG_OPTION,
) -> None:
    """Rewrite a site script in canonical form."""

    settings, gate = _setup(catalog)
    codec = CanonicalCodec(gate, IdentityKeyGenerator(settings.identity_prefix), settings.text_indent)
    try:
        document = codec.decode(_read(path))
    except InvalidScriptError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e

    text = codec.encode_text(document)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    typer.echo(str(output))


@app.command()
def tree(
    path: Path = typer.Argument(..., help="Site script content JSON file"),
    full: bool = typer.Option(False, "--full", help="List every property and show verb descriptions"),
    catalog: Path | None = _CATALOG_OPTION,
) -> None:
    """Show the action tree with identities and property summaries."""

    settings, gate = _setup(catalog)
    codec = CanonicalCodec(gate, IdentityKeyGenerator(settings.identity_prefix), settings.text_indent)
    try:
        document = codec.decode(_read(path))
    except InvalidScriptError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e

    root = Tree(f"[bold]{path.name}[/bold] ({len(document)} actions)")

    def add(branch: Tree, node: ActionNode, parent_verb: str | None) -> None:
        label = gate.catalog.label_for(node.verb, parent_verb)
        sub = branch.add(f"[bold]{label}[/bold] [dim]{node.identity}[/dim]")
        description = gate.catalog.description_for(node.verb, parent_verb)
        if full and description:
            sub.add(f"[italic]{description}[/italic]")
        for title, value in gate.catalog.summarize(node, parent_verb=parent_verb, count=None if full else 2):
            sub.add(f"{title}: [cyan]{value}[/cyan]")
        for child in node.children or ():
            add(sub, child, node.verb)

    for action in document.actions:
        add(root, action, None)
    console.print(root)


if __name__ == "__main__":
    app()
