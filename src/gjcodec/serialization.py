"""
Serialization helpers for decoded records (Level, Profile, comments, ...).

Provides lossless JSON/YAML round-trip via an intermediate dict
representation, for fixtures and debugging. This has nothing to do with
the indexed wire format; it only exports what the decoder produced.

Bytes fields are written as URL-safe base64 text. Relations are nested
dicts (or None).
"""
from __future__ import annotations

import base64
import json
from typing import Any, Dict, List, Type, TypeVar

import yaml

from gjcodec.schema import FieldType, Kind, relation_fields, wire_fields


R = TypeVar("R")


def _value_to_plain(value: Any, field_type: FieldType) -> Any:
    if value is None:
        return None
    if field_type.kind is Kind.OPTIONAL:
        return _value_to_plain(value, field_type.inner)
    if field_type.kind is Kind.RECORD:
        return record_to_dict(value)
    if field_type.kind is Kind.BYTES:
        return base64.urlsafe_b64encode(value).decode("ascii")
    return value


def _value_from_plain(value: Any, field_type: FieldType) -> Any:
    if value is None:
        return None
    if field_type.kind is Kind.OPTIONAL:
        return _value_from_plain(value, field_type.inner)
    if field_type.kind is Kind.RECORD:
        return record_from_dict(field_type.record, value)
    if field_type.kind is Kind.BYTES:
        return base64.urlsafe_b64decode(value)
    return value


def record_to_dict(record: Any) -> Dict[str, Any]:
    d = {}
    for wf in wire_fields(record):
        d[wf.name] = _value_to_plain(getattr(record, wf.name), wf.type)
    for name, _ in relation_fields(record):
        related = getattr(record, name)
        d[name] = None if related is None else record_to_dict(related)
    return d


def record_from_dict(cls: Type[R], d: Dict[str, Any]) -> R:
    values = {}
    for wf in wire_fields(cls):
        if wf.name in d:
            values[wf.name] = _value_from_plain(d[wf.name], wf.type)
    for name, related_cls in relation_fields(cls):
        related = d.get(name)
        values[name] = None if related is None else record_from_dict(related_cls, related)
    return cls(**values)


def records_to_json(records: List[Any]) -> str:
    return json.dumps([record_to_dict(r) for r in records], sort_keys=True)


def records_from_json(cls: Type[R], s: str) -> List[R]:
    return [record_from_dict(cls, d) for d in json.loads(s)]


def records_to_yaml(records: List[Any]) -> str:
    return yaml.safe_dump([record_to_dict(r) for r in records])


def records_from_yaml(cls: Type[R], s: str) -> List[R]:
    return [record_from_dict(cls, d) for d in yaml.safe_load(s) or []]
