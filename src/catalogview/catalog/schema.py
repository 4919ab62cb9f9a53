from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator

from .entity import Entity, ValidationError


SCHEMA_PATH = Path(__file__).parent / "catalog-info.schema.json"


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        schema = json.load(f)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def validate_document(doc: Any) -> list[ValidationError]:
    """Check one raw catalog document; returns [] when it is valid."""
    out: list[ValidationError] = []
    for error in _validator().iter_errors(doc):
        path = "/" + "/".join(str(p) for p in error.absolute_path)
        out.append(ValidationError(path=path, message=error.message))
    out.sort(key=lambda e: (e.path, e.message))
    return out


def validate_entity(entity: Entity) -> list[ValidationError]:
    return validate_document(entity.to_dict())
