from __future__ import annotations

from dataclasses import dataclass


DEFAULT_NAMESPACE = "default"

KNOWN_KINDS = frozenset(
    {
        "component",
        "api",
        "resource",
        "system",
        "domain",
        "group",
        "user",
        "location",
    }
)


@dataclass(frozen=True)
class EntityRef:
    """A resolved ``[kind:][namespace/]name`` reference.

    Equality and hashing include the two ``*_inferred`` flags, so
    ``parse_ref("svc", "component")`` and ``parse_ref("component:default/svc", "x")``
    compare unequal even though their ``canonical()`` strings match. Use
    ``canonical()`` for identity lookups and ``==`` for exact comparisons.
    """

    kind: str
    namespace: str
    name: str
    kind_inferred: bool = False
    namespace_inferred: bool = False

    def canonical(self) -> str:
        return f"{self.kind}:{self.namespace}/{self.name}"

    def is_known_kind(self) -> bool:
        return self.kind in KNOWN_KINDS

    def __str__(self) -> str:
        return self.canonical()


def parse_ref(reference: str, default_kind: str) -> EntityRef:
    """Parse a reference, filling in ``default_kind`` and the default namespace.

    Never fails: empty input gives an empty name, and so does a trailing
    delimiter (``"api:"``, ``"prod/"``).
    """
    kind, sep, rest = reference.partition(":")
    if sep:
        kind = kind.lower()
        kind_inferred = False
    else:
        kind = default_kind.lower()
        rest = reference
        kind_inferred = True

    namespace, sep, name = rest.partition("/")
    if sep:
        namespace_inferred = False
    else:
        namespace = DEFAULT_NAMESPACE
        name = rest
        namespace_inferred = True

    return EntityRef(
        kind=kind,
        namespace=namespace,
        name=name,
        kind_inferred=kind_inferred,
        namespace_inferred=namespace_inferred,
    )


def canonical_key(reference: str, default_kind: str) -> str:
    return parse_ref(reference, default_kind).canonical()
