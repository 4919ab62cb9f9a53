from __future__ import annotations

from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .browser import CatalogBrowser
from .catalog.entity import EntityKind, EntityWithSource
from .catalog.refs import parse_ref
from .config import Settings
from .graph.relations import RelationshipGraph, build_graph
from .logging import configure_logging
from .tree.build import filter_by_search


app = typer.Typer(add_completion=False, help="Browse a software catalog: entity tree, relationships and docs.")
console = Console()


def _root_option():
    return typer.Option(None, "--root", "-r", help="Catalog directory or catalog-info.yaml (default: $CATALOGVIEW_ROOT or .)")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log loading details to stderr"),
):
    settings = Settings()
    configure_logging(level="INFO" if verbose else settings.log_level)


def _load(root: Path | None, *, validate: bool | None = None) -> CatalogBrowser:
    settings = Settings()
    path = root or Path(settings.root)
    if not path.exists():
        console.print(f"Catalog root not found: {path}", style="red")
        raise typer.Exit(code=2)
    return CatalogBrowser.load(
        path,
        validate=settings.validate if validate is None else validate,
        follow_links=settings.follow_links,
    )


def _require_entity(browser: CatalogBrowser, reference: str, default_kind: str) -> EntityWithSource:
    ews = browser.find_entity(reference, default_kind)
    if ews is None:
        console.print(f"No entity matches {parse_ref(reference, default_kind)}", style="yellow", markup=False)
        raise typer.Exit(code=2)
    return ews


@app.command()
def tree(
    root: Path | None = _root_option(),
    expand: bool = typer.Option(True, "--expand/--collapsed", help="Expand every node, or only the top-level categories"),
    search: str | None = typer.Option(None, "--search", "-s", help="Only show nodes whose label contains this"),
):
    """Print the Domain / System / entity tree."""
    browser = _load(root)
    if expand:
        browser.expand_all()

    nodes = browser.visible_nodes()
    if search:
        nodes = filter_by_search(nodes, search)

    if not nodes:
        console.print("No entities found.", style="yellow")
        return

    for node in nodes:
        line = Text("  " * node.depth)
        if node.is_category:
            line.append(f"{node.label} ({len(node.children)})", style="bold")
        else:
            line.append(node.label)
            if node.entity is not None and node.entity.validation_errors:
                line.append(f"  [{len(node.entity.validation_errors)} issue(s)]", style="red")
        console.print(line)


@app.command()
def show(
    reference: str = typer.Argument(..., help="Entity reference, e.g. component:default/svc or just svc"),
    root: Path | None = _root_option(),
    kind: str = typer.Option("component", "--kind", "-k", help="Kind assumed when the reference has none"),
):
    """Show one entity's metadata, references and validation issues."""
    browser = _load(root)
    ews = _require_entity(browser, reference, kind)
    e = ews.entity

    table = Table(title=ews.ref_key(), show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    # Catalog text may contain [brackets]; Text keeps rich from reading them as markup.
    table.add_row("Kind", Text(str(e.kind)))
    table.add_row("Name", Text(e.name))
    if e.metadata.title:
        table.add_row("Title", Text(e.metadata.title))
    table.add_row("Namespace", Text(e.namespace))
    if e.metadata.description:
        table.add_row("Description", Text(e.metadata.description))

    for label, raw, default_kind in (
        ("Owner", e.owner(), "group"),
        ("System", e.system(), "system"),
        ("Domain", e.domain(), "domain"),
    ):
        if raw is None:
            continue
        ref = parse_ref(raw, default_kind)
        cell = Text(raw)
        if not browser.index.contains(ref):
            cell.append(" (not found)", style="red")
        table.add_row(label, cell)

    for label, value in (("Lifecycle", e.lifecycle()), ("Type", e.entity_type())):
        if value is not None:
            table.add_row(label, Text(value))
    if e.metadata.tags:
        table.add_row("Tags", Text(", ".join(e.metadata.tags)))
    for link in e.metadata.links:
        table.add_row("Link", Text(f"{link.title}: {link.url}" if link.title else (link.url or "")))
    table.add_row("Source", Text(str(ews.source_file)))
    console.print(table)

    if ews.validation_errors:
        console.print("Validation issues:", style="red")
        for err in ews.validation_errors:
            console.print(f"- {err.path}: {err.message}", markup=False)


@app.command()
def graph(
    reference: str = typer.Argument(..., help="Entity reference"),
    root: Path | None = _root_option(),
    kind: str = typer.Option("component", "--kind", "-k", help="Kind assumed when the reference has none"),
):
    """Show outgoing and incoming relationships of one entity."""
    browser = _load(root)
    ews = _require_entity(browser, reference, kind)
    _print_graph(build_graph(ews, browser.entities, index=browser.index))


def _print_graph(g: RelationshipGraph) -> None:
    console.print(Text(f"[{g.center.kind}] {g.center.display_name}", style="bold"))

    if not g.outgoing and not g.incoming:
        console.print("No relationships.", style="yellow")
        return

    table = Table()
    table.add_column("direction")
    table.add_column("relation")
    table.add_column("kind")
    table.add_column("entity")

    for rel, node in g.outgoing:
        name = Text(node.display_name)
        if not node.exists:
            name.append(" (not found)", style="red")
        table.add_row("->", rel.label, Text(node.kind), name)
    for rel, node in g.incoming:
        table.add_row("<-", rel.label, Text(node.kind), Text(node.display_name))

    console.print(table)


@app.command()
def validate(
    root: Path | None = _root_option(),
):
    """Validate every entity against the catalog schema. Exits 1 on issues."""
    browser = _load(root, validate=True)

    bad = [e for e in browser.entities if e.validation_errors]
    if not bad:
        console.print(f"{browser.entity_count} entities, no issues.", style="green")
        return

    table = Table(title="Validation Issues")
    table.add_column("entity")
    table.add_column("file")
    table.add_column("path")
    table.add_column("message")
    for ews in bad:
        for err in ews.validation_errors:
            table.add_row(Text(ews.ref_key()), Text(str(ews.source_file)), Text(err.path), Text(err.message))
    console.print(table)
    console.print(f"{len(bad)} of {browser.entity_count} entities have issues.", style="red")
    raise typer.Exit(code=1)


@app.command()
def stats(
    root: Path | None = _root_option(),
):
    """Show catalog stats."""
    browser = _load(root)
    by_kind = Counter(str(e.entity.kind) for e in browser.entities)
    files = {e.source_file for e in browser.entities}

    table = Table(title="Catalog Stats")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Entities", str(browser.entity_count))
    table.add_row("Unique refs", str(len(browser.index)))
    table.add_row("Catalog files", str(len(files)))
    table.add_row("Entities with issues", str(sum(1 for e in browser.entities if e.validation_errors)))
    console.print(table)

    if by_kind:
        t2 = Table(title="Entities by Kind")
        t2.add_column("kind")
        t2.add_column("count")
        for k in EntityKind:
            if by_kind.get(str(k)):
                t2.add_row(str(k), str(by_kind[str(k)]))
        console.print(t2)


@app.command()
def docs(
    reference: str = typer.Argument(..., help="Entity reference"),
    root: Path | None = _root_option(),
    kind: str = typer.Option("component", "--kind", "-k", help="Kind assumed when the reference has none"),
    open_: int | None = typer.Option(None, "--open", help="Print the Nth doc file (1-based)"),
):
    """List (or print) the documentation an entity points at."""
    browser = _load(root)
    ews = _require_entity(browser, reference, kind)

    refs = browser.docs_refs(ews)
    if not refs:
        console.print("No documentation annotations found.", style="yellow")
        raise typer.Exit(code=2)

    for ref in refs:
        console.print(f"{ref.ref_type.label}: {ref.path}", markup=False, style="bold")

    docs_browser = browser.open_docs(ews)
    if docs_browser is None or not docs_browser.files:
        console.print("No markdown files found.", style="yellow")
        return

    if open_ is None:
        for i, f in enumerate(docs_browser.files, start=1):
            console.print(f"{i:>3}  {f.relative_path}", markup=False)
        return

    if not 1 <= open_ <= len(docs_browser.files):
        raise typer.BadParameter(f"--open must be between 1 and {len(docs_browser.files)}")

    docs_browser.selected_index = open_ - 1
    docs_browser.open_selected()
    content = docs_browser.viewing_content
    if content is None:
        console.print("Could not read the file.", style="red")
        raise typer.Exit(code=2)

    console.print("=" * 80, markup=False)
    console.print(content.file.relative_path, markup=False, style="bold")
    for section in content.outline():
        console.print(f"  L{section.start_line}: {section.heading_path}", markup=False, style="dim")
    console.print("")
    console.print("\n".join(content.lines), markup=False)


@app.command()
def serve(
    root: Path | None = _root_option(),
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes (dev only)"),
):
    """Run the read-only JSON API (FastAPI)."""
    try:
        import uvicorn
    except ImportError:
        console.print("Missing web dependencies. Install: `pip install -e '.[web]'`", style="red")
        raise typer.Exit(code=2)

    from .web.server import create_app

    app_ = create_app(root=str(root or Settings().root))
    uvicorn.run(app_, host=host, port=int(port), reload=bool(reload))


if __name__ == "__main__":
    app()
