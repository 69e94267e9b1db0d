"""CLI entry point for inspecting site hierarchies."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from polis.config import PolisConfig, load_config
from polis.config.loader import DEFAULT_CONFIG_TEMPLATE
from polis.index import BrokenLink, UnknownNode, format_id_path
from polis.logging_setup import configure_logging
from polis.sites import IndexedManifest, index_manifest, load_manifest

app = typer.Typer(
    name="polis-index",
    help="Assemble and inspect observing-site hierarchies from sub-site hints.",
)

config_app = typer.Typer(help="Manage polis-index configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: PolisConfig | None = None


def _get_config() -> PolisConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to polis.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)
    configure_logging(_config)


def _load(manifest: str) -> IndexedManifest:
    try:
        declared = load_manifest(Path(manifest))
    except ValueError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)
    return index_manifest(declared, _get_config().index)


def _report_rejected(built: IndexedManifest) -> None:
    if not built.rejected:
        return
    table = Table(title=f"Rejected sites ({len(built.rejected)})")
    table.add_column("Site", style="cyan")
    table.add_column("Reason", style="red")
    for site_id, err in built.rejected.items():
        table.add_row(escape(site_id), escape(str(err)))
    rprint(table)


def _render_forest(built: IndexedManifest) -> Tree:
    forest = Tree(f"[bold]Sites[/bold] ({len(built.index)})")
    stack = [(forest, root_id) for root_id in reversed(built.index.roots())]
    while stack:
        branch, site_id = stack.pop()
        kind = built.kinds[site_id].value
        label = built.labels.get(site_id, site_id)
        text = f"[cyan]{escape(label)}[/cyan] [dim]{kind}[/dim]"
        if label != site_id:
            text += f" [dim]({escape(site_id)})[/dim]"
        node = branch.add(text)
        stack.extend((node, child_id) for child_id in reversed(built.index.children(site_id)))
    return forest


@app.command()
def show(
    manifest: Annotated[str, typer.Argument(help="Path to a site manifest (YAML or JSON)")],
    as_json: Annotated[bool, typer.Option("--json", help="Dump (id, parent, children) rows")] = False,
) -> None:
    """Build the site forest from a manifest and display it."""
    built = _load(manifest)
    if as_json:
        rows = [link.model_dump(mode="json") for link in built.index.links()]
        typer.echo(json.dumps(rows, indent=2))
        return
    rprint(_render_forest(built))
    _report_rejected(built)


@app.command()
def path(
    manifest: Annotated[str, typer.Argument(help="Path to a site manifest (YAML or JSON)")],
    site_id: Annotated[str, typer.Argument(help="Site to resolve")],
) -> None:
    """Print the root-to-site id path of one site."""
    built = _load(manifest)
    try:
        ids = built.index.id_path(site_id)
    except UnknownNode:
        rprint(f"[red]Unknown site:[/red] {site_id}")
        raise typer.Exit(1)
    except BrokenLink as e:
        rprint(f"[red]Broken path at {e.missing_id}:[/red] {format_id_path(e.partial_path)}")
        raise typer.Exit(1)
    typer.echo(format_id_path(ids))


@app.command()
def check(
    manifest: Annotated[str, typer.Argument(help="Path to a site manifest (YAML or JSON)")],
    strict: Annotated[bool, typer.Option("--strict", help="Exit 1 if any site was rejected")] = False,
) -> None:
    """Verify the assembled forest is consistent with the site registry."""
    built = _load(manifest)
    problems = built.index.verify_forest_matches_registry()
    for problem in problems:
        typer.echo(f"PROBLEM {problem}")
    for site_id, err in built.rejected.items():
        typer.echo(f"REJECTED {site_id}: {err}")
    if not problems:
        typer.echo(
            f"OK - {len(built.index)} site(s), {len(built.index.roots())} root(s)"
        )
    if problems or (strict and built.rejected):
        raise typer.Exit(code=1)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default polis.yaml in current directory."""
    target = Path("polis.yaml")
    if target.exists() and not force:
        rprint("[yellow]polis.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
