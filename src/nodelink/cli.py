"""CLI interface for nodelink."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nodelink.config import NodelinkConfig, load_config, merge_cli_overrides
from nodelink.errors import NodelinkError
from nodelink.helper import NodeUriHelper, RenderingContext
from nodelink.models import DimensionSpacePoint, Node, NodeAggregateIdentifier
from nodelink.references import parse_reference
from nodelink.resolver import NodeReferenceResolver
from nodelink.routing import RouteUriBuilder
from nodelink.shortcuts import StoreShortcutResolver
from nodelink.store import NodeStore

app = typer.Typer(
    name="nodelink",
    help="Resolve content node references and render node URIs.",
)
nodes_app = typer.Typer(help="Manage the local node store.")
app.add_typer(nodes_app, name="nodes")

console = Console()

# Prefix selecting a node from the store as a resolved node handle.
NODE_HANDLE_PREFIX = "id:"

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a .nodelink.toml file."),
]
StoreOption = Annotated[
    Path | None,
    typer.Option("--store", help="Directory holding the node store JSON file."),
]
SiteOption = Annotated[
    str | None,
    typer.Option("--site", help="Site node aggregate identifier."),
]
WorkspaceOption = Annotated[
    str | None,
    typer.Option("--workspace", "-w", help="Workspace name."),
]
DimensionOption = Annotated[
    str | None,
    typer.Option("--dimension", "-d", help="Dimension override, e.g. language=de,region=at."),
]
NoShortcutsOption = Annotated[
    bool,
    typer.Option("--no-shortcuts", help="Link to shortcut nodes themselves, not their targets."),
]
StrictOption = Annotated[
    bool,
    typer.Option("--strict", help="Fail on node path references instead of printing nothing."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Enable debug logging."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from nodelink import __version__

        console.print(f"nodelink {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """nodelink - node reference resolution and node URIs."""


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(
    config_path: Path | None,
    store_dir: Path | None = None,
    site: str | None = None,
    workspace: str | None = None,
    strict: bool = False,
) -> NodelinkConfig:
    try:
        config = load_config(config_path)
    except NodelinkError as exc:
        raise _fail(str(exc)) from exc
    return merge_cli_overrides(
        config,
        site_identifier=site,
        workspace=workspace,
        strict_paths=True if strict else None,
        store_directory=str(store_dir) if store_dir is not None else None,
    )


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _reference_arg(reference: str, store: NodeStore) -> object:
    """Turn ``id:<identifier>`` into a node handle from the store."""
    if reference.startswith(NODE_HANDLE_PREFIX):
        return store.require(reference[len(NODE_HANDLE_PREFIX):])
    return reference


def _parse_pairs(pairs: list[str] | None, option: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise _fail(f"Expected key=value for {option}, got {pair!r}")
        result[key] = value
    return result


@app.command()
def parse(
    reference: Annotated[str, typer.Argument(help="Node reference to classify.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the parsed model as JSON.")] = False,
) -> None:
    """Classify a node reference without resolving it."""
    try:
        parsed = parse_reference(reference)
    except NodelinkError as exc:
        raise _fail(str(exc)) from exc

    if as_json:
        typer.echo(parsed.model_dump_json())
        return
    console.print(f"[bold]{parsed.kind}[/bold]")
    for field, value in parsed.model_dump(exclude={"kind"}).items():
        console.print(f"  {field}: {escape(str(value))}")


@app.command()
def resolve(
    reference: Annotated[
        str,
        typer.Argument(help="~, node://<id>, id:<id> (node from store) or a node path."),
    ],
    dimension: DimensionOption = None,
    no_shortcuts: NoShortcutsOption = False,
    strict: StrictOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the query as JSON.")] = False,
    config_path: ConfigOption = None,
    store_dir: StoreOption = None,
    site: SiteOption = None,
    workspace: WorkspaceOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Resolve a node reference into a content query."""
    _setup_logging(verbose)
    config = _load(config_path, store_dir, site, workspace, strict)
    store = NodeStore(config.store_path)
    resolver = NodeReferenceResolver(
        StoreShortcutResolver(store), strict=config.resolver.strict_paths
    )

    try:
        base_query = config.to_content_query()
        query = resolver.resolve(
            _reference_arg(reference, store),
            base_query,
            resolve_shortcuts=config.resolver.resolve_shortcuts and not no_shortcuts,
            dimension_space_point=(
                DimensionSpacePoint.from_string(dimension) if dimension else None
            ),
        )
    except NodelinkError as exc:
        raise _fail(str(exc)) from exc

    if query is None:
        console.print(
            f"[yellow]No node could be resolved for {escape(repr(reference))}[/yellow]"
        )
        raise typer.Exit(1)

    if as_json:
        typer.echo(query.model_dump_json())
    else:
        typer.echo(query.to_route_value())


@app.command()
def uri(
    reference: Annotated[
        str,
        typer.Argument(help="~, node://<id>, id:<id> (node from store) or a node path."),
    ],
    output_format: Annotated[
        str | None,
        typer.Option("--format", "-f", help="URI format, e.g. html or json."),
    ] = None,
    absolute: Annotated[bool, typer.Option("--absolute", help="Render an absolute URI.")] = False,
    section: Annotated[str, typer.Option("--section", help="Anchor to append.")] = "",
    arg: Annotated[
        list[str] | None,
        typer.Option("--arg", "-a", help="Extra argument key=value (repeatable)."),
    ] = None,
    add_query_string: Annotated[
        bool,
        typer.Option("--add-query-string", help="Keep the request's query arguments."),
    ] = False,
    request_arg: Annotated[
        list[str] | None,
        typer.Option("--request-arg", help="Current request argument key=value (repeatable)."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Request argument to drop (repeatable)."),
    ] = None,
    dimension: DimensionOption = None,
    no_shortcuts: NoShortcutsOption = False,
    strict: StrictOption = False,
    config_path: ConfigOption = None,
    store_dir: StoreOption = None,
    site: SiteOption = None,
    workspace: WorkspaceOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Render the URI of a node reference."""
    _setup_logging(verbose)
    config = _load(config_path, store_dir, site, workspace, strict)
    store = NodeStore(config.store_path)
    resolver = NodeReferenceResolver(
        StoreShortcutResolver(store), strict=config.resolver.strict_paths
    )
    helper = NodeUriHelper(resolver, RouteUriBuilder(config.to_routes()))

    request = config.to_request_context().model_copy(
        update={"arguments": _parse_pairs(request_arg, "--request-arg")}
    )
    try:
        context = RenderingContext(content_query=config.to_content_query(), request=request)
        result = helper.render(
            _reference_arg(reference, store),
            context=context,
            format=output_format,
            absolute=absolute,
            arguments=_parse_pairs(arg, "--arg"),
            section=section,
            add_query_string=add_query_string,
            arguments_to_be_excluded_from_query_string=exclude or [],
            resolve_shortcuts=config.resolver.resolve_shortcuts and not no_shortcuts,
            dimension_space_point=(
                DimensionSpacePoint.from_string(dimension) if dimension else None
            ),
        )
    except NodelinkError as exc:
        raise _fail(str(exc)) from exc

    if not result:
        console.print(f"[yellow]No URI available for {escape(repr(reference))}[/yellow]")
        raise typer.Exit(1)
    typer.echo(result)


@nodes_app.command("add")
def nodes_add(
    identifier: Annotated[str, typer.Argument(help="Node aggregate identifier.")],
    node_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Node type name."),
    ] = "Neos.Neos:Document",
    name: Annotated[str, typer.Option("--name", "-n", help="Node name.")] = "",
    parent: Annotated[
        str | None,
        typer.Option("--parent", "-p", help="Parent node aggregate identifier."),
    ] = None,
    prop: Annotated[
        list[str] | None,
        typer.Option("--prop", help="Property key=value (repeatable)."),
    ] = None,
    config_path: ConfigOption = None,
    store_dir: StoreOption = None,
) -> None:
    """Add or replace a node in the store."""
    config = _load(config_path, store_dir)
    store = NodeStore(config.store_path)
    try:
        node = Node(
            node_aggregate_identifier=NodeAggregateIdentifier.from_string(identifier),
            node_type=node_type,
            name=name or identifier,
            parent_identifier=(
                NodeAggregateIdentifier.from_string(parent) if parent else None
            ),
            properties=_parse_pairs(prop, "--prop"),
        )
    except NodelinkError as exc:
        raise _fail(str(exc)) from exc

    store.upsert(node)
    store.save()
    console.print(f"[green]Saved node {node.identifier}[/green] ({store.count()} total)")


@nodes_app.command("list")
def nodes_list(
    node_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Only list nodes of this type."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print nodes as JSON.")] = False,
    config_path: ConfigOption = None,
    store_dir: StoreOption = None,
) -> None:
    """List nodes in the store."""
    config = _load(config_path, store_dir)
    nodes = NodeStore(config.store_path).list(node_type=node_type)

    if as_json:
        typer.echo(json.dumps([n.model_dump(mode="json") for n in nodes], indent=2))
        return
    if not nodes:
        console.print("[yellow]No nodes in store.[/yellow]")
        return

    table = Table(title="Nodes")
    table.add_column("Identifier")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Parent")
    for node in nodes:
        table.add_row(
            node.identifier,
            node.node_type,
            node.name,
            str(node.parent_identifier or ""),
        )
    console.print(table)
