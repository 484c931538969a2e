"""Canonical JSON serializer for parsed function statements.

The serializer produces deterministic output so that generated bindings, cache
keys and golden files remain stable across runs.  Each statement, parameter and
kind node receives a content-addressed identifier derived from its structural
JSON encoding; the deserializer recomputes the hash to guarantee integrity.
"""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from typing import Any, Mapping, Sequence

from . import ast
from .ident import Ident
from .kind import Array, Either, Geometry, Kind, Option, Primitive, Record, Set
from .table import Table


def to_json(statements: Sequence[ast.FunctionStatement], *, ensure_ascii: bool = True) -> str:
    """Serialize ``statements`` into canonical JSON."""

    payload = [_serialize_statement(statement) for statement in statements]
    return json.dumps(payload, indent=2, separators=(",", ": "), ensure_ascii=ensure_ascii)


def from_json(payload: str) -> list[ast.FunctionStatement]:
    """Deserialize JSON back into statements, validating all hashes."""

    raw = json.loads(payload)
    if not isinstance(raw, list):
        raise ValueError("Serialized payload must be a list of statements")
    return [_deserialize_statement(item) for item in raw]


# ---------------------------------------------------------------------------
# Serialization helpers


def _serialize_statement(statement: ast.FunctionStatement) -> OrderedDict[str, Any]:
    data: OrderedDict[str, Any] = OrderedDict()
    data["type"] = "FunctionStatement"
    data["path"] = list(statement.path)
    data["comments"] = list(statement.comments)
    data["parameters"] = [_serialize_parameter(name, kind) for name, kind in statement.parameters]
    data["id"] = _hash_payload(data)
    return data


def _serialize_parameter(name: Ident, kind: Kind) -> OrderedDict[str, Any]:
    payload: OrderedDict[str, Any] = OrderedDict(
        [("name", name.name), ("kind", _serialize_kind(kind))]
    )
    payload["id"] = _hash_payload(payload)
    return payload


def _serialize_kind(kind: Kind) -> OrderedDict[str, Any]:
    data: OrderedDict[str, Any] = OrderedDict()
    data["type"] = type(kind).__name__
    if isinstance(kind, Primitive):
        data["value"] = kind.value
    elif isinstance(kind, Geometry):
        data["subtypes"] = list(kind.subtypes)
    elif isinstance(kind, Record):
        data["tables"] = [table.name for table in kind.tables]
    elif isinstance(kind, Option):
        data["inner"] = _serialize_kind(kind.inner)
    elif isinstance(kind, (Array, Set)):
        data["inner"] = _serialize_kind(kind.inner)
        data["limit"] = kind.limit
    elif isinstance(kind, Either):
        data["kinds"] = [_serialize_kind(item) for item in kind.kinds]
    else:
        raise TypeError(f"Unsupported kind {kind!r}")
    data["id"] = _hash_payload(data)
    return data


def _hash_payload(data: Mapping[str, Any]) -> str:
    normalized = json.dumps(
        _strip_ids(data), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]


def _strip_ids(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {key: _strip_ids(value) for key, value in data.items() if key != "id"}
    if isinstance(data, list):
        return [_strip_ids(item) for item in data]
    return data


# ---------------------------------------------------------------------------
# Deserialization helpers


def _deserialize_statement(data: Any) -> ast.FunctionStatement:
    if not isinstance(data, Mapping):
        raise ValueError("Serialized statement must be an object")
    _verify_hash(data)
    if data.get("type") != "FunctionStatement":
        raise ValueError(f"Unknown node type '{data.get('type')}'")
    parameters: list[ast.Parameter] = []
    for entry in data.get("parameters", []):
        _verify_hash(entry)
        parameters.append((Ident(entry["name"]), _deserialize_kind(entry["kind"])))
    return ast.FunctionStatement(
        path=list(data["path"]),
        parameters=parameters,
        comments=list(data.get("comments", [])),
    )


def _deserialize_kind(data: Mapping[str, Any]) -> Kind:
    _verify_hash(data)
    kind_type = data.get("type")
    if kind_type == "Primitive":
        return Primitive(data["value"])
    if kind_type == "Geometry":
        return Geometry(tuple(data["subtypes"]))
    if kind_type == "Record":
        return Record(tuple(Table(name) for name in data["tables"]))
    if kind_type == "Option":
        return Option(_deserialize_kind(data["inner"]))
    if kind_type == "Array":
        return Array(_deserialize_kind(data["inner"]), data.get("limit"))
    if kind_type == "Set":
        return Set(_deserialize_kind(data["inner"]), data.get("limit"))
    if kind_type == "Either":
        return Either(tuple(_deserialize_kind(item) for item in data["kinds"]))
    raise ValueError(f"Unknown kind type '{kind_type}'")


def _verify_hash(data: Mapping[str, Any]) -> None:
    stored = data.get("id")
    if stored is None:
        raise ValueError("Serialized node is missing 'id'")
    computed = _hash_payload(data)
    if stored != computed:
        raise ValueError("Serialized node failed integrity check")


__all__ = ["to_json", "from_json"]
