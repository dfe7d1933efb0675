"""
Bind payloads to typed records once their variant is resolved.

Record classes are Pydantic models registered per schema name.
"""

from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import BaseModel

from .models import Schema, UnionSpec
from .resolver import resolve

T = TypeVar("T", bound=BaseModel)


def required_fields_missing(schema: Schema, payload: Mapping[str, Any]) -> List[str]:
    """Required fields of `schema` absent (or null) in `payload`."""
    return [
        f.name
        for f in schema.fields
        if f.required and payload.get(f.name) is None
    ]


def check_registry(union_spec: UnionSpec, models: Mapping[str, Type[BaseModel]]) -> None:
    """
    Ensure every schema of the union has a registered record class.

    Raises:
        KeyError: Listing the schema names without a model
    """
    missing = [name for name in union_spec.schema_names if name not in models]
    if missing:
        raise KeyError(f"No record model registered for schemas: {missing}")


def bind(
    union_spec: UnionSpec,
    payload: Mapping[str, Any],
    models: Mapping[str, Type[T]],
) -> T:
    """
    Resolve `payload` and validate it into the matching record class.

    Args:
        union_spec: Union to resolve against
        payload: Untyped mapping
        models: Schema name -> Pydantic model class

    Returns:
        Validated model instance

    Raises:
        KeyError: If the resolved schema has no registered model
        pydantic.ValidationError: If the payload fails model validation
    """
    name = resolve(union_spec, payload)
    if name not in models:
        raise KeyError(f"No record model registered for schema: {name}")
    return models[name].model_validate(dict(payload))


def bind_many(
    union_spec: UnionSpec,
    payloads: List[Mapping[str, Any]],
    models: Mapping[str, Type[T]],
) -> Dict[str, List[T]]:
    """Bind payloads and group the records by schema name."""
    check_registry(union_spec, models)
    grouped: Dict[str, List[T]] = {name: [] for name in union_spec.schema_names}
    for payload in payloads:
        name = resolve(union_spec, payload)
        grouped[name].append(models[name].model_validate(dict(payload)))
    return grouped
