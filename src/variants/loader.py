# -*- coding: utf-8 -*-
"""
Load UnionSpecs from YAML or JSON documents.

Document shape:

    discriminator_field: objectType
    default_suffix: Data
    schemas:
      - name: Performer
        allow: [Performer, Soloist]
      - name: Band
        static_label: Band
      - name: OrchestraData        # naming convention: "Orchestra"
      - name: VenueData
        label_function: "my_app.labels:venue_label"

Label functions are imported once, at load time.
"""

from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from .config import SchemaDocument, UnionSpecCollection, UnionSpecDocument
from .models import (
    AllowList,
    Discriminator,
    FieldDefinition,
    NamingConvention,
    Schema,
    StaticLabel,
    UnionSpec,
)

logger = logging.getLogger(__name__)

DISCRIMINATOR_ENV_VAR = "VARIANTS_DISCRIMINATOR_FIELD"


def _read_document(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON file (JSON is a YAML subset)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Union spec file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Union spec file must contain a mapping at top level: {path}")
    return data


def import_label_function(import_path: str) -> Callable[[], Any]:
    """Resolve 'package.module:function' to a callable."""
    module_name, _, attr = import_path.partition(":")
    module = importlib.import_module(module_name)
    try:
        fn = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from None
    if not callable(fn):
        raise ValueError(f"Label function '{import_path}' is not callable")
    return fn


def _build_schema(doc: SchemaDocument, discriminator_field: str) -> Schema:
    discriminators: List[Discriminator] = []

    if isinstance(doc.allow, dict):
        for field_name, values in doc.allow.items():
            discriminators.append(AllowList(field=field_name, values=tuple(values)))
    elif doc.allow is not None:
        discriminators.append(AllowList(field=discriminator_field, values=tuple(doc.allow)))

    if doc.static_label is not None:
        discriminators.append(StaticLabel.constant(doc.static_label))
    elif doc.label_function is not None:
        discriminators.append(StaticLabel(label_fn=import_label_function(doc.label_function)))

    if doc.suffix is not None:
        discriminators.append(NamingConvention(suffix=doc.suffix))

    return Schema(
        name=doc.name,
        fields=tuple(
            FieldDefinition(name=f.name, type_name=f.type_name, required=f.required)
            for f in doc.field_defs
        ),
        discriminators=tuple(discriminators),
    )


def build_union_spec(
    doc: UnionSpecDocument,
    name: Optional[str] = None,
    discriminator_field: Optional[str] = None,
) -> UnionSpec:
    """
    Turn a validated document into a frozen UnionSpec.

    Args:
        doc: Validated union spec document
        name: Union name (defaults to doc.name)
        discriminator_field: Override for the document's discriminator field
    """
    field_name = discriminator_field or doc.discriminator_field
    return UnionSpec(
        schemas=tuple(_build_schema(s, field_name) for s in doc.schemas),
        discriminator_field=field_name,
        default_suffix=doc.default_suffix,
        name=name or doc.name,
    )


def union_spec_from_dict(data: Dict[str, Any]) -> UnionSpec:
    """Validate a parsed document and build its UnionSpec."""
    return build_union_spec(UnionSpecDocument.model_validate(data))


def _env_discriminator_field() -> Optional[str]:
    value = os.getenv(DISCRIMINATOR_ENV_VAR)
    return value.strip() if value and value.strip() else None


def load_union_spec(path: Path, discriminator_field: Optional[str] = None) -> UnionSpec:
    """
    Load a single UnionSpec.

    Args:
        path: YAML or JSON file
        discriminator_field: Overrides the document and
            VARIANTS_DISCRIMINATOR_FIELD when given

    Raises:
        FileNotFoundError: If path doesn't exist
        pydantic.ValidationError: If the document is malformed
    """
    data = _read_document(path)
    doc = UnionSpecDocument.model_validate(data)
    union_spec = build_union_spec(
        doc,
        discriminator_field=discriminator_field or _env_discriminator_field(),
    )
    logger.info(
        f"Loaded union {union_spec.name or Path(path).stem} with "
        f"{len(union_spec.schemas)} schemas (discriminator: {union_spec.discriminator_field})"
    )
    return union_spec


def load_union_specs(path: Path) -> Dict[str, UnionSpec]:
    """Load every union declared under a top-level `unions:` key."""
    data = _read_document(path)
    collection = UnionSpecCollection.model_validate(data)
    override = _env_discriminator_field()

    specs = {
        union_name: build_union_spec(doc, name=union_name, discriminator_field=override)
        for union_name, doc in collection.unions.items()
    }
    logger.info(f"Loaded {len(specs)} unions from {Path(path).name}")
    return specs
