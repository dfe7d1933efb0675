# -*- coding: utf-8 -*-
"""
Resolve a payload to one schema of a UnionSpec.

Resolution order:
1. Missing or null discriminator value: default schema (first declared)
2. Schemas in declared order; per schema only the first applicable strategy
   is evaluated: allow-list, then static label, then naming convention
3. No match: default schema

Resolution is a pure function of (UnionSpec, payload). It never raises for
any payload; absence of a match is a fallback, not an error.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import NamingConvention, Schema, UnionSpec, literal_equals

logger = logging.getLogger(__name__)


ALLOW_LIST = "allow_list"
STATIC_LABEL = "static_label"
NAMING_CONVENTION = "naming_convention"
MISSING_DISCRIMINATOR = "missing_discriminator"
NO_MATCH = "no_match"

FALLBACK_OUTCOMES = (MISSING_DISCRIMINATOR, NO_MATCH)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one payload."""
    schema_name: str
    outcome: str
    discriminator_value: Any = None

    @property
    def matched(self) -> bool:
        return self.outcome not in FALLBACK_OUTCOMES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_name": self.schema_name,
            "outcome": self.outcome,
            "discriminator_value": self.discriminator_value,
            "matched": self.matched,
        }


def applicable_strategy(schema: Schema, union_spec: UnionSpec) -> str:
    """Name the single strategy evaluated for `schema`."""
    if schema.allow_list_for(union_spec.discriminator_field) is not None:
        return ALLOW_LIST
    if schema.static_label is not None:
        return STATIC_LABEL
    return NAMING_CONVENTION


def _convention(schema: Schema, union_spec: UnionSpec) -> NamingConvention:
    return schema.naming_convention or NamingConvention(suffix=union_spec.default_suffix)


def candidate_labels(schema: Schema, union_spec: UnionSpec) -> Tuple[Any, ...]:
    """
    Labels `schema` answers to under its applicable strategy.

    Static label functions are called once per invocation.
    """
    strategy = applicable_strategy(schema, union_spec)
    if strategy == ALLOW_LIST:
        return schema.allow_list_for(union_spec.discriminator_field).values
    if strategy == STATIC_LABEL:
        return (schema.static_label.label(),)
    return (_convention(schema, union_spec).derive(schema.name),)


def _schema_matches(schema: Schema, union_spec: UnionSpec, value: Any) -> Optional[str]:
    """Return the matching strategy name, or None."""
    strategy = applicable_strategy(schema, union_spec)

    if strategy == ALLOW_LIST:
        matched = schema.allow_list_for(union_spec.discriminator_field).matches(value)
    elif strategy == STATIC_LABEL:
        matched = literal_equals(schema.static_label.label(), value)
    else:
        matched = literal_equals(_convention(schema, union_spec).derive(schema.name), value)

    return strategy if matched else None


def explain(union_spec: UnionSpec, payload: Mapping[str, Any]) -> Resolution:
    """
    Resolve a payload and report which strategy decided it.

    Args:
        union_spec: Candidate schemas and discriminator field
        payload: Untyped mapping; never modified

    Returns:
        Resolution naming a member of union_spec.schemas
    """
    default_name = union_spec.default.name
    value = payload.get(union_spec.discriminator_field) if payload else None

    if value is None:
        logger.debug(
            f"No '{union_spec.discriminator_field}' in payload, defaulting to {default_name}"
        )
        return Resolution(schema_name=default_name, outcome=MISSING_DISCRIMINATOR)

    for schema in union_spec.schemas:
        strategy = _schema_matches(schema, union_spec, value)
        if strategy is not None:
            logger.debug(f"Resolved {value!r} to {schema.name} via {strategy}")
            return Resolution(
                schema_name=schema.name,
                outcome=strategy,
                discriminator_value=value,
            )

    logger.debug(f"No schema matched {value!r}, defaulting to {default_name}")
    return Resolution(
        schema_name=default_name,
        outcome=NO_MATCH,
        discriminator_value=value,
    )


def resolve(union_spec: UnionSpec, payload: Mapping[str, Any]) -> str:
    """Return the name of the schema `payload` belongs to."""
    return explain(union_spec, payload).schema_name


def resolve_schema(union_spec: UnionSpec, payload: Mapping[str, Any]) -> Schema:
    """Return the Schema `payload` belongs to."""
    return union_spec.get(resolve(union_spec, payload))


def find_ambiguities(union_spec: UnionSpec) -> Dict[Any, List[str]]:
    """
    Find labels that more than one schema answers to.

    Resolution stays deterministic (earliest declared schema wins); this only
    surfaces the overlap so it can be reviewed.

    Returns:
        label -> schema names in declared order, for colliding labels only
    """
    # Keyed by (is_bool, label) so True and 1 stay distinct
    owners: Dict[Tuple[bool, Any], List[str]] = defaultdict(list)
    for schema in union_spec.schemas:
        for label in candidate_labels(schema, union_spec):
            key = (isinstance(label, bool), label)
            if schema.name not in owners[key]:
                owners[key].append(schema.name)

    ambiguities = {
        label: names
        for (_, label), names in owners.items()
        if len(names) > 1
    }
    for label, names in ambiguities.items():
        logger.warning(
            f"Label {label!r} matches {len(names)} schemas {names}; {names[0]} wins"
        )
    return ambiguities
