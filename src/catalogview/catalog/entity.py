from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Any

from .refs import DEFAULT_NAMESPACE


class EntityKind(StrEnum):
    COMPONENT = "Component"
    API = "API"
    RESOURCE = "Resource"
    SYSTEM = "System"
    DOMAIN = "Domain"
    GROUP = "Group"
    USER = "User"
    LOCATION = "Location"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: str) -> EntityKind:
        return _KINDS_BY_LOWER.get(raw.strip().lower(), cls.UNKNOWN)

    @property
    def ref_kind(self) -> str:
        # Kind as it appears in a canonical reference.
        return self.value.lower()


_KINDS_BY_LOWER = {k.value.lower(): k for k in EntityKind if k is not EntityKind.UNKNOWN}


@dataclass(frozen=True)
class Link:
    url: str | None = None
    title: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class Metadata:
    name: str
    title: str | None = None
    namespace: str | None = None
    description: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationError:
    path: str  # JSON pointer, "/" for the document root
    message: str


@dataclass(frozen=True)
class Entity:
    """One catalog entity as parsed from a YAML document.

    ``spec`` is kept as the raw semi-structured value (usually a mapping, but
    anything YAML can produce). The ``spec_*`` accessors return ``None`` on a
    shape mismatch instead of raising.
    """

    kind: EntityKind
    metadata: Metadata
    spec: Any = None
    api_version: str = "backstage.io/v1alpha1"

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or DEFAULT_NAMESPACE

    def display_name(self) -> str:
        return self.metadata.title or self.metadata.name

    def ref_key(self) -> str:
        return f"{self.kind.ref_kind}:{self.namespace}/{self.metadata.name}"

    def spec_value(self, key: str) -> Any:
        if not isinstance(self.spec, Mapping):
            return None
        return self.spec.get(key)

    def spec_str(self, key: str) -> str | None:
        v = self.spec_value(key)
        return v if isinstance(v, str) else None

    def spec_strings(self, key: str) -> list[str] | None:
        v = self.spec_value(key)
        # A bare string is a scalar here, not a sequence of characters.
        if not isinstance(v, Sequence) or isinstance(v, (str, bytes)):
            return None
        return [item for item in v if isinstance(item, str)]

    def owner(self) -> str | None:
        return self.spec_str("owner")

    def system(self) -> str | None:
        return self.spec_str("system")

    def domain(self) -> str | None:
        return self.spec_str("domain")

    def lifecycle(self) -> str | None:
        return self.spec_str("lifecycle")

    def entity_type(self) -> str | None:
        return self.spec_str("type")

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the catalog document shape (empty fields omitted)."""
        md = self.metadata
        meta: dict[str, Any] = {"name": md.name}
        for key in ("title", "namespace", "description"):
            value = getattr(md, key)
            if value is not None:
                meta[key] = value
        if md.labels:
            meta["labels"] = dict(md.labels)
        if md.annotations:
            meta["annotations"] = dict(md.annotations)
        if md.tags:
            meta["tags"] = list(md.tags)
        if md.links:
            meta["links"] = [
                {k: v for k, v in (("url", ln.url), ("title", ln.title), ("icon", ln.icon)) if v is not None}
                for ln in md.links
            ]

        out: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind.value,
            "metadata": meta,
        }
        if self.spec is not None:
            out["spec"] = self.spec
        return out


@dataclass(frozen=True)
class EntityWithSource:
    entity: Entity
    source_file: Path
    validation_errors: tuple[ValidationError, ...] = ()

    def with_validation_errors(self, errors: Sequence[ValidationError]) -> EntityWithSource:
        return replace(self, validation_errors=tuple(errors))

    def ref_key(self) -> str:
        return self.entity.ref_key()
