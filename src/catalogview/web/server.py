from __future__ import annotations

from pathlib import Path
from typing import Any

from ..browser import CatalogBrowser
from ..catalog.entity import EntityWithSource
from ..graph.relations import EntityNode, RelationType, build_graph
from ..tree.build import TreeNode, filter_by_search


def create_app(*, root: str | None = None, browser: CatalogBrowser | None = None):
    # Lazy import so core CLI works without web deps.
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse

    from ..config import Settings

    settings = Settings()
    if browser is None:
        browser = CatalogBrowser.load(
            Path(root or settings.root),
            validate=settings.validate,
            follow_links=settings.follow_links,
        )

    app = FastAPI(title="catalogview", version="0.1.0")
    # The session is replaced wholesale on reload; handlers read it from here.
    app.state.browser = browser

    def _browser() -> CatalogBrowser:
        return app.state.browser

    def _not_found(ref: str, kind: str) -> JSONResponse:
        return JSONResponse({"ok": False, "error": f"No entity matches {ref!r} (default kind {kind!r})"}, status_code=404)

    @app.get("/api/health")
    def health():
        b = _browser()
        return {"ok": True, "root": str(b.root), "entities": b.entity_count}

    @app.get("/api/entities")
    def entities(kind: str | None = None):
        out = []
        for ews in _browser().entities:
            if kind and str(ews.entity.kind).lower() != kind.lower():
                continue
            out.append(_entity_summary(ews))
        return {"ok": True, "entities": out}

    @app.get("/api/tree")
    def tree(q: str | None = None):
        t = _browser().tree
        nodes = filter_by_search(t.nodes, q) if q else t.nodes
        return {"ok": True, "root_children": list(t.root_children), "nodes": [_tree_node(n) for n in nodes]}

    @app.get("/api/entities/{ref:path}")
    def entity(ref: str, kind: str = "component"):
        b = _browser()
        ews = b.find_entity(ref, kind)
        if ews is None:
            return _not_found(ref, kind)
        e = ews.entity
        return {
            "ok": True,
            "entity": {
                **_entity_summary(ews),
                "document": e.to_dict(),
                "docs": [{"type": d.ref_type.label, "path": str(d.path)} for d in b.docs_refs(ews)],
            },
        }

    @app.get("/api/graph/{ref:path}")
    def graph(ref: str, kind: str = "component"):
        b = _browser()
        ews = b.find_entity(ref, kind)
        if ews is None:
            return _not_found(ref, kind)
        g = build_graph(ews, b.entities, index=b.index)
        return {
            "ok": True,
            "center": _graph_node(g.center),
            "outgoing": [_edge(rel, node) for rel, node in g.outgoing],
            "incoming": [_edge(rel, node) for rel, node in g.incoming],
        }

    @app.post("/api/reload")
    def reload():
        b = _browser()
        ok = b.reload()
        if not ok:
            return JSONResponse({"ok": False, "error": "Reload failed; previous catalog kept."}, status_code=500)
        return {"ok": True, "entities": b.entity_count}

    return app


def _entity_summary(ews: EntityWithSource) -> dict[str, Any]:
    e = ews.entity
    return {
        "ref": ews.ref_key(),
        "kind": str(e.kind),
        "name": e.name,
        "namespace": e.namespace,
        "title": e.metadata.title,
        "display_name": e.display_name(),
        "source_file": str(ews.source_file),
        "validation_errors": [{"path": v.path, "message": v.message} for v in ews.validation_errors],
    }


def _tree_node(n: TreeNode) -> dict[str, Any]:
    return {
        "id": n.id,
        "label": n.label,
        "depth": n.depth,
        "children": list(n.children),
        "is_category": n.is_category,
        "ref": n.entity.ref_key() if n.entity is not None else None,
    }


def _graph_node(node: EntityNode) -> dict[str, Any]:
    return {"display_name": node.display_name, "kind": node.kind, "exists": node.exists}


def _edge(rel: RelationType, node: EntityNode) -> dict[str, Any]:
    return {"relation": rel.name.lower(), "label": rel.label, **_graph_node(node)}
