# -*- coding: utf-8 -*-
"""
Variant resolution for tagged unions of typed records.

Usage:
    from src.variants import Schema, AllowList, UnionSpec, resolve

    union = UnionSpec(schemas=(
        Schema("Performer", discriminators=(AllowList("objectType", ("Performer",)),)),
        Schema("Band", discriminators=(AllowList("objectType", ("Band",)),)),
    ))
    resolve(union, {"objectType": "Band"})  # "Band"
    resolve(union, {})                      # "Performer"
"""

from .models import (
    AllowList,
    FieldDefinition,
    NamingConvention,
    Schema,
    StaticLabel,
    UnionSpec,
)
from .resolver import (
    Resolution,
    candidate_labels,
    explain,
    find_ambiguities,
    resolve,
    resolve_schema,
)
from .loader import load_union_spec, load_union_specs, union_spec_from_dict

__all__ = [
    # Models
    "AllowList",
    "FieldDefinition",
    "NamingConvention",
    "Schema",
    "StaticLabel",
    "UnionSpec",
    # Resolution
    "Resolution",
    "candidate_labels",
    "explain",
    "find_ambiguities",
    "resolve",
    "resolve_schema",
    # Loading
    "load_union_spec",
    "load_union_specs",
    "union_spec_from_dict",
]
