from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .entity import EntityWithSource
from .refs import EntityRef


@dataclass(frozen=True)
class EntityIndex:
    """Canonical keys of every entity in one snapshot.

    Built once per load. Entities sharing a canonical key collapse into a
    single entry without any report.
    """

    keys: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(cls, entities: Iterable[EntityWithSource]) -> EntityIndex:
        return cls(keys=frozenset(e.entity.ref_key() for e in entities))

    def contains(self, entity_ref: EntityRef) -> bool:
        return entity_ref.canonical() in self.keys

    def contains_key(self, key: str) -> bool:
        return key in self.keys

    def __len__(self) -> int:
        return len(self.keys)
