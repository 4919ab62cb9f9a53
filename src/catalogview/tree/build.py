from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..catalog.entity import EntityKind, EntityWithSource
from ..catalog.refs import parse_ref

if TYPE_CHECKING:
    from .state import TreeState


DOMAINS_LABEL = "Domains"
SYSTEMS_LABEL = "Systems"
OTHER_LABEL = "Other Entities"

# Kinds that hang below a system when they declare one.
_SYSTEM_MEMBER_KINDS = {EntityKind.COMPONENT, EntityKind.API, EntityKind.RESOURCE}


@dataclass
class TreeNode:
    id: int
    label: str
    depth: int
    entity: EntityWithSource | None = None
    children: list[int] = field(default_factory=list)
    is_category: bool = False


@dataclass
class EntityTree:
    nodes: list[TreeNode] = field(default_factory=list)
    root_children: list[int] = field(default_factory=list)

    def get_node(self, node_id: int) -> TreeNode | None:
        if 0 <= node_id < len(self.nodes):
            return self.nodes[node_id]
        return None

    def visible_nodes(self, state: TreeState) -> list[TreeNode]:
        """Pre-order walk from the roots, only descending into expanded nodes."""
        out: list[TreeNode] = []
        stack = [self.nodes[i] for i in reversed(self.root_children)]
        while stack:
            node = stack.pop()
            out.append(node)
            if state.is_expanded(node.id):
                stack.extend(self.nodes[c] for c in reversed(node.children))
        return out

    def _add(
        self,
        label: str,
        depth: int,
        *,
        parent: int | None = None,
        entity: EntityWithSource | None = None,
    ) -> int:
        node_id = len(self.nodes)
        self.nodes.append(
            TreeNode(
                id=node_id,
                label=label,
                depth=depth,
                # Nodes own their entity so the tree outlives the loaded list.
                entity=copy.deepcopy(entity) if entity is not None else None,
                is_category=entity is None,
            )
        )
        if parent is None:
            self.root_children.append(node_id)
        else:
            self.nodes[parent].children.append(node_id)
        return node_id

    def _add_entity(self, ews: EntityWithSource, depth: int, parent: int) -> int:
        return self._add(entity_label(ews), depth, parent=parent, entity=ews)


def entity_label(ews: EntityWithSource) -> str:
    return f"{ews.entity.kind}: {ews.entity.display_name()}"


def build_tree(entities: Iterable[EntityWithSource]) -> EntityTree:
    """Group a snapshot into Domains / Systems / Other Entities.

    Domains and systems are grouped by ``metadata.name`` and matched against
    the raw ``domain``/``system`` value. A value that is not a known name but
    is a qualified reference of the right kind (``domain:default/platform``)
    falls back to its name part. A system whose domain is missing from the
    snapshot is listed under "Systems"; a component/API/resource whose system
    is missing is listed under "Other Entities". Groups appear in snapshot
    order.
    """
    entities = list(entities)

    # Pass 1: domains and systems, keyed by name.
    domains: dict[str, list[EntityWithSource]] = defaultdict(list)
    systems: dict[str, list[EntityWithSource]] = defaultdict(list)
    declared_domain: dict[str, str] = {}

    for ews in entities:
        e = ews.entity
        if e.kind is EntityKind.DOMAIN:
            domains[e.name].append(ews)
        elif e.kind is EntityKind.SYSTEM:
            systems[e.name].append(ews)
            domain = e.domain()
            if domain is not None:
                declared_domain[e.name] = domain

    system_to_domain = {
        name: _group_key(raw, domains, "domain") for name, raw in declared_domain.items()
    }

    # Pass 2: bucket everything else.
    members_by_system: dict[str, list[EntityWithSource]] = defaultdict(list)
    ungrouped: list[EntityWithSource] = []

    for ews in entities:
        e = ews.entity
        if e.kind in (EntityKind.DOMAIN, EntityKind.SYSTEM):
            continue
        system = e.system() if e.kind in _SYSTEM_MEMBER_KINDS else None
        system_key = _group_key(system, systems, "system") if system is not None else None
        if system_key in systems:
            members_by_system[system_key].append(ews)
        else:
            ungrouped.append(ews)

    tree = EntityTree()

    if domains:
        cat_id = tree._add(DOMAINS_LABEL, 0)
        for domain_key, domain_entities in domains.items():
            for domain_ews in domain_entities:
                domain_id = tree._add_entity(domain_ews, 1, cat_id)
                for sys_key, sys_entities in systems.items():
                    if system_to_domain.get(sys_key) != domain_key:
                        continue
                    for sys_ews in sys_entities:
                        sys_id = tree._add_entity(sys_ews, 2, domain_id)
                        for member in members_by_system.get(sys_key, []):
                            tree._add_entity(member, 3, sys_id)

    orphan_systems = [
        (key, sys_entities)
        for key, sys_entities in systems.items()
        if system_to_domain.get(key) not in domains
    ]
    if orphan_systems:
        cat_id = tree._add(SYSTEMS_LABEL, 0)
        for sys_key, sys_entities in orphan_systems:
            for sys_ews in sys_entities:
                sys_id = tree._add_entity(sys_ews, 1, cat_id)
                for member in members_by_system.get(sys_key, []):
                    tree._add_entity(member, 2, sys_id)

    if ungrouped:
        cat_id = tree._add(OTHER_LABEL, 0)
        for ews in ungrouped:
            tree._add_entity(ews, 1, cat_id)

    return tree


def filter_by_search(nodes: Sequence[TreeNode], query: str) -> list[TreeNode]:
    q = query.lower()
    return [n for n in nodes if q in n.label.lower()]


def _group_key(raw: str, names: Mapping[str, object], kind: str) -> str:
    if raw in names:
        return raw
    ref = parse_ref(raw, kind)
    if ref.kind == kind and not (ref.kind_inferred and ref.namespace_inferred) and ref.name in names:
        return ref.name
    return raw
