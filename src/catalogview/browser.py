from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .catalog.entity import EntityWithSource
from .catalog.index import EntityIndex
from .catalog.refs import parse_ref
from .graph.relations import RelationshipGraph, build_graph
from .ingest.docs import DocsBrowser, DocsRef, parse_docs_refs
from .ingest.loader import CatalogLoadError, load_all_entities
from .tree.build import EntityTree, TreeNode, build_tree, filter_by_search
from .tree.state import TreeState


logger = logging.getLogger(__name__)


class InputMode(Enum):
    NORMAL = "normal"
    SEARCH = "search"
    DOCS = "docs"


@dataclass
class Snapshot:
    """One load of the catalog: entities plus everything derived from them."""

    entities: list[EntityWithSource]
    index: EntityIndex
    tree: EntityTree

    @classmethod
    def build(cls, entities: list[EntityWithSource]) -> Snapshot:
        return cls(entities=entities, index=EntityIndex.build(entities), tree=build_tree(entities))


@dataclass
class CatalogBrowser:
    """Navigation session over a loaded catalog.

    Holds the current snapshot and the UI-independent state (selection,
    expansion, search query, open docs). Reloading rebuilds the snapshot
    wholesale and resets the state.
    """

    root: Path
    snapshot: Snapshot
    state: TreeState = field(default_factory=TreeState)
    search_query: str = ""
    search_active: bool = False
    docs_browser: DocsBrowser | None = None
    validate: bool = True
    follow_links: bool = True

    @classmethod
    def load(cls, root: str | Path, *, validate: bool = True, follow_links: bool = True) -> CatalogBrowser:
        root = Path(root)
        entities = load_all_entities(root, validate=validate, follow_links=follow_links)
        browser = cls(
            root=root,
            snapshot=Snapshot.build(entities),
            validate=validate,
            follow_links=follow_links,
        )
        browser.state.expand_roots(browser.tree)
        return browser

    @classmethod
    def from_entities(cls, entities: list[EntityWithSource], *, root: str | Path = ".") -> CatalogBrowser:
        browser = cls(root=Path(root), snapshot=Snapshot.build(list(entities)))
        browser.state.expand_roots(browser.tree)
        return browser

    @property
    def entities(self) -> list[EntityWithSource]:
        return self.snapshot.entities

    @property
    def index(self) -> EntityIndex:
        return self.snapshot.index

    @property
    def tree(self) -> EntityTree:
        return self.snapshot.tree

    @property
    def entity_count(self) -> int:
        return len(self.snapshot.entities)

    def reload(self) -> bool:
        """Re-read the catalog from disk. Keeps the old snapshot if that fails."""
        try:
            entities = load_all_entities(self.root, validate=self.validate, follow_links=self.follow_links)
        except CatalogLoadError as e:
            logger.warning("Reload failed, keeping previous catalog: %s", e)
            return False

        self.snapshot = Snapshot.build(entities)
        self.state = TreeState()
        self.state.expand_roots(self.tree)
        self.search_query = ""
        self.search_active = False
        self.docs_browser = None
        logger.info("Reloaded %d entities from %s", len(entities), self.root)
        return True

    # Tree navigation

    def visible_nodes(self) -> list[TreeNode]:
        nodes = self.tree.visible_nodes(self.state)
        if not self.search_query:
            return nodes
        return filter_by_search(nodes, self.search_query)

    def move_up(self) -> None:
        self.state.move_up(self.visible_nodes())

    def move_down(self) -> None:
        self.state.move_down(self.visible_nodes())

    def toggle_expand(self) -> None:
        self.state.toggle_expand(self.tree)

    def collapse(self) -> None:
        self.state.collapse()

    def expand_all(self) -> None:
        self.state.expand_all(self.tree)

    def selected_node(self) -> TreeNode | None:
        return self.tree.get_node(self.state.selected)

    def selected_entity(self) -> EntityWithSource | None:
        node = self.selected_node()
        return node.entity if node is not None else None

    def select(self, node_id: int) -> bool:
        if self.tree.get_node(node_id) is None:
            return False
        self.state.selected = node_id
        return True

    # Search

    def start_search(self) -> None:
        self.search_active = True

    def search_input(self, ch: str) -> None:
        self.search_query += ch
        self.state.ensure_visible(self.visible_nodes())

    def search_backspace(self) -> None:
        self.search_query = self.search_query[:-1]

    def confirm_search(self) -> None:
        # The query stays applied; only input mode ends.
        self.search_active = False
        self.state.ensure_visible(self.visible_nodes())

    def cancel_search(self) -> None:
        self.search_active = False
        self.search_query = ""

    def clear_search(self) -> None:
        self.search_query = ""

    # Lookups

    def find_entity(self, reference: str, default_kind: str = "component") -> EntityWithSource | None:
        key = parse_ref(reference, default_kind).canonical()
        for ews in self.entities:
            if ews.ref_key() == key:
                return ews
        return None

    def relationship_graph(self, entity: EntityWithSource | None = None) -> RelationshipGraph | None:
        entity = entity or self.selected_entity()
        if entity is None:
            return None
        return build_graph(entity, self.entities, index=self.index)

    # Docs

    def docs_refs(self, entity: EntityWithSource | None = None) -> list[DocsRef]:
        entity = entity or self.selected_entity()
        if entity is None:
            return []
        return parse_docs_refs(entity.entity.metadata.annotations, entity.source_file)

    def open_docs(self, entity: EntityWithSource | None = None) -> DocsBrowser | None:
        refs = self.docs_refs(entity)
        if refs:
            self.docs_browser = DocsBrowser.open(refs[0])
        return self.docs_browser

    def close_docs(self) -> None:
        if self.docs_browser is None:
            return
        if self.docs_browser.is_viewing_content():
            self.docs_browser.close_content()
        else:
            self.docs_browser = None

    def input_mode(self) -> InputMode:
        if self.search_active:
            return InputMode.SEARCH
        if self.docs_browser is not None:
            return InputMode.DOCS
        return InputMode.NORMAL
