"""
Persisted form of a Schema: a JSON object whose key order is the column order,
e.g. {"id": "integer", "age": "integer", "active": "boolean"}.
"""
import json
from typing import Any, List, Mapping, Tuple, Union

from pydantic import ValidationError

from schema_guard.models import Schema, TypeTag
from schema_guard.utils.exceptions import MalformedStoredSchemaError

_VALID_TAGS = {tag.value for tag in TypeTag}


def dump_schema(schema: Schema) -> str:
    return json.dumps(schema.as_dict())


def _reject_duplicate_keys(pairs: List[Tuple[str, Any]]) -> List[Tuple[str, Any]]:
    keys = [key for key, _ in pairs]
    if len(keys) != len(set(keys)):
        raise MalformedStoredSchemaError("Stored schema has duplicate column names.")
    return pairs


def _pairs_from_json(raw: Union[str, bytes]) -> List[Tuple[str, Any]]:
    try:
        document = json.loads(raw, object_pairs_hook=_reject_duplicate_keys)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedStoredSchemaError(f"Stored schema is not valid JSON: {e}")
    # object_pairs_hook turns every object into a list of pairs, so a
    # top-level object is a list of 2-tuples while a JSON array is not
    if not isinstance(document, list) or not all(isinstance(p, tuple) for p in document):
        raise MalformedStoredSchemaError("Stored schema must be a JSON object of column -> type.")
    return document


def load_schema(raw: Union[Schema, str, bytes, Mapping[str, Any]]) -> Schema:
    """
    Parses a stored schema back into a Schema.

    Accepts an already parsed Schema (returned as is), the JSON text written by
    dump_schema, or a plain mapping of column name to type tag.

    Raises:
        MalformedStoredSchemaError: If the input cannot be read as a Schema.
    """
    if isinstance(raw, Schema):
        return raw
    if isinstance(raw, (str, bytes)):
        pairs = _pairs_from_json(raw)
    elif isinstance(raw, Mapping):
        pairs = list(raw.items())
    else:
        raise MalformedStoredSchemaError(f"Cannot read a schema from {type(raw).__name__}.")

    if not pairs:
        raise MalformedStoredSchemaError("Stored schema has no columns.")
    for name, tag in pairs:
        if not isinstance(name, str):
            raise MalformedStoredSchemaError(f"Column name {name!r} is not a string.")
        if not isinstance(tag, str) or tag not in _VALID_TAGS:
            raise MalformedStoredSchemaError(f"Column {name!r} has unknown type tag {tag!r}.")

    try:
        return Schema.from_pairs(pairs)
    except ValidationError as e:
        raise MalformedStoredSchemaError(f"Stored schema is invalid: {e.errors()[0]['msg']}")
