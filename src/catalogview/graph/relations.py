from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..catalog.entity import Entity, EntityWithSource
from ..catalog.index import EntityIndex
from ..catalog.refs import parse_ref


class RelationType(Enum):
    OWNER = "owned by"
    SYSTEM = "part of"
    DOMAIN = "in domain"
    PARENT = "parent"
    CHILD = "child"
    DEPENDS_ON = "depends on"
    DEPENDENCY_OF = "dependency of"
    PROVIDES_API = "provides"
    CONSUMES_API = "consumes"
    PROVIDED_BY = "provided by"
    CONSUMED_BY = "consumed by"
    MEMBER_OF = "member of"
    HAS_MEMBER = "has member"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class EntityNode:
    display_name: str
    kind: str
    exists: bool


@dataclass(frozen=True)
class RelationshipGraph:
    center: EntityNode
    outgoing: list[tuple[RelationType, EntityNode]] = field(default_factory=list)
    incoming: list[tuple[RelationType, EntityNode]] = field(default_factory=list)


# (spec field, default kind, relation), in extraction order.
_OUTGOING_SINGLE = (
    ("owner", "group", RelationType.OWNER),
    ("system", "system", RelationType.SYSTEM),
    ("domain", "domain", RelationType.DOMAIN),
    ("parent", "group", RelationType.PARENT),
)
_OUTGOING_MULTI = (
    ("children", "group", RelationType.CHILD),
    ("dependsOn", "component", RelationType.DEPENDS_ON),
    ("providesApis", "api", RelationType.PROVIDES_API),
    ("consumesApis", "api", RelationType.CONSUMES_API),
    ("memberOf", "group", RelationType.MEMBER_OF),
)

# Same fields seen from the referenced side. A child's "parent" makes it a
# Child of the focal group; "children" has no incoming counterpart.
_INCOMING_SINGLE = (
    ("owner", "group", RelationType.OWNER),
    ("system", "system", RelationType.SYSTEM),
    ("domain", "domain", RelationType.DOMAIN),
    ("parent", "group", RelationType.CHILD),
)
_INCOMING_MULTI = (
    ("dependsOn", "component", RelationType.DEPENDENCY_OF),
    ("consumesApis", "api", RelationType.CONSUMED_BY),
    ("providesApis", "api", RelationType.PROVIDED_BY),
    ("memberOf", "group", RelationType.HAS_MEMBER),
)


def build_graph(
    entity: EntityWithSource,
    entities: Sequence[EntityWithSource],
    *,
    index: EntityIndex | None = None,
) -> RelationshipGraph:
    """Relationship graph for one focal entity against the whole snapshot.

    Outgoing edges come from the focal entity's own spec fields; incoming edges
    are found by scanning every other entity for references that resolve to the
    focal entity's canonical key. Nothing is cached between calls.
    """
    if index is None:
        index = EntityIndex.build(entities)

    center = EntityNode(
        display_name=entity.entity.display_name(),
        kind=str(entity.entity.kind),
        exists=True,
    )
    return RelationshipGraph(
        center=center,
        outgoing=outgoing_relations(entity.entity, index),
        incoming=incoming_relations(entity.entity.ref_key(), entities),
    )


def outgoing_relations(entity: Entity, index: EntityIndex) -> list[tuple[RelationType, EntityNode]]:
    out: list[tuple[RelationType, EntityNode]] = []

    for key, default_kind, rel in _OUTGOING_SINGLE:
        raw = entity.spec_str(key)
        if raw is not None:
            out.append((rel, _ref_node(raw, default_kind, index)))

    for key, default_kind, rel in _OUTGOING_MULTI:
        for raw in entity.spec_strings(key) or []:
            out.append((rel, _ref_node(raw, default_kind, index)))

    return out


def incoming_relations(
    center_key: str,
    entities: Sequence[EntityWithSource],
) -> list[tuple[RelationType, EntityNode]]:
    out: list[tuple[RelationType, EntityNode]] = []

    for other in entities:
        e = other.entity
        if e.ref_key() == center_key:
            continue

        node = None
        for key, default_kind, rel in _INCOMING_SINGLE:
            raw = e.spec_str(key)
            if raw is not None and parse_ref(raw, default_kind).canonical() == center_key:
                node = node or _entity_node(e)
                out.append((rel, node))

        for key, default_kind, rel in _INCOMING_MULTI:
            # One edge per field, however often the key repeats in it.
            if any(parse_ref(raw, default_kind).canonical() == center_key for raw in e.spec_strings(key) or []):
                node = node or _entity_node(e)
                out.append((rel, node))

    return out


def _ref_node(raw: str, default_kind: str, index: EntityIndex) -> EntityNode:
    ref = parse_ref(raw, default_kind)
    return EntityNode(display_name=ref.name, kind=ref.kind, exists=index.contains(ref))


def _entity_node(entity: Entity) -> EntityNode:
    return EntityNode(display_name=entity.display_name(), kind=str(entity.kind), exists=True)
