from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ..catalog.entity import Entity, EntityKind, EntityWithSource, Link, Metadata
from ..catalog.schema import validate_document
from .discover import discover_catalog_files


logger = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    pass


class EntityParseError(ValueError):
    pass


def entity_from_dict(doc: Any) -> Entity:
    """Build an ``Entity`` from one parsed YAML document.

    Only ``kind`` and ``metadata.name`` are mandatory. Optional metadata of the
    wrong shape is dropped; ``spec`` is kept as-is.
    """
    if not isinstance(doc, Mapping):
        raise EntityParseError(f"expected a mapping, got {type(doc).__name__}")

    kind = doc.get("kind")
    if not isinstance(kind, str) or not kind.strip():
        raise EntityParseError("missing or non-string 'kind'")

    meta = doc.get("metadata")
    if not isinstance(meta, Mapping):
        raise EntityParseError("missing or non-mapping 'metadata'")

    name = meta.get("name")
    if not isinstance(name, str):
        raise EntityParseError("missing or non-string 'metadata.name'")

    api_version = doc.get("apiVersion")

    return Entity(
        api_version=str(api_version) if api_version is not None else "",
        kind=EntityKind.parse(kind),
        metadata=Metadata(
            name=name,
            title=_opt_str(meta.get("title")),
            namespace=_opt_str(meta.get("namespace")),
            description=_opt_str(meta.get("description")),
            labels=_str_map(meta.get("labels")),
            annotations=_str_map(meta.get("annotations")),
            tags=[str(t) for t in _list(meta.get("tags")) if t is not None],
            links=[_link(ln) for ln in _list(meta.get("links")) if isinstance(ln, Mapping)],
        ),
        spec=doc.get("spec"),
    )


def parse_catalog_text(text: str, source_path: str | Path, *, validate: bool = True) -> list[EntityWithSource]:
    """Parse multi-document YAML; bad documents are logged and skipped."""
    source = Path(source_path)
    out: list[EntityWithSource] = []

    try:
        for i, doc in enumerate(yaml.safe_load_all(text), start=1):
            if doc is None:
                continue
            try:
                entity = entity_from_dict(doc)
            except EntityParseError as e:
                logger.warning("Skipping document %d in %s: %s", i, source, e)
                continue

            ews = EntityWithSource(entity=entity, source_file=source)
            if validate:
                ews = ews.with_validation_errors(validate_document(doc))
            out.append(ews)
    except yaml.YAMLError as e:
        # Documents before the syntax error are still usable.
        logger.warning("YAML error in %s after %d entities: %s", source, len(out), e)

    return out


def parse_catalog_file(path: str | Path, *, validate: bool = True) -> list[EntityWithSource]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise CatalogLoadError(f"Failed to read file: {p} ({e})") from e
    return parse_catalog_text(text, p, validate=validate)


def load_all_entities(
    root: str | Path,
    *,
    validate: bool = True,
    follow_links: bool = True,
) -> list[EntityWithSource]:
    """Load one catalog file, or every catalog file below a directory."""
    root = Path(root)
    if not root.exists():
        raise CatalogLoadError(f"Catalog root not found: {root}")
    if root.is_file():
        return parse_catalog_file(root, validate=validate)

    files = discover_catalog_files(root, follow_links=follow_links)
    entities: list[EntityWithSource] = []
    for path in files:
        try:
            entities.extend(parse_catalog_file(path, validate=validate))
        except CatalogLoadError as e:
            logger.warning("%s", e)

    logger.info("Loaded %d entities from %d catalog files under %s", len(entities), len(files), root)
    return entities


def _opt_str(v: Any) -> str | None:
    return v if isinstance(v, str) else None


def _list(v: Any) -> list[Any]:
    return list(v) if isinstance(v, list) else []


def _str_map(v: Any) -> dict[str, str]:
    if not isinstance(v, Mapping):
        return {}
    return {str(k): str(val) for k, val in v.items() if val is not None}


def _link(v: Mapping[str, Any]) -> Link:
    return Link(url=_opt_str(v.get("url")), title=_opt_str(v.get("title")), icon=_opt_str(v.get("icon")))
