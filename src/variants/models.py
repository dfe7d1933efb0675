# -*- coding: utf-8 -*-
"""
Data models for variant resolution.

A UnionSpec is an ordered set of Schemas sharing one discriminator field.
Each Schema declares how payloads belonging to it are recognized:

1. AllowList: explicit literal values for a payload field
2. StaticLabel: a function producing the schema's label
3. NamingConvention: a label derived from the schema's own name

All models are frozen once built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union


DEFAULT_DISCRIMINATOR_FIELD = "objectType"
DEFAULT_SUFFIX = "Data"


def literal_equals(expected: Any, actual: Any) -> bool:
    """
    Compare two discriminator literals.

    Booleans only equal booleans (`true` is not `1`). Other numbers compare
    by value, so 1 and 1.0 are the same literal.
    """
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual
    return expected == actual


@dataclass(frozen=True)
class FieldDefinition:
    """A single field of a record schema."""
    name: str
    type_name: str = "any"
    required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type_name, "required": self.required}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldDefinition":
        return cls(
            name=data["name"],
            type_name=data.get("type", "any"),
            required=data.get("required", False),
        )


@dataclass(frozen=True)
class AllowList:
    """Literal values of `field` that identify a schema."""
    field: str
    values: Tuple[Any, ...]

    def matches(self, value: Any) -> bool:
        return any(literal_equals(v, value) for v in self.values)


@dataclass(frozen=True)
class StaticLabel:
    """Label produced by a zero-argument function."""
    label_fn: Callable[[], Any]

    @classmethod
    def constant(cls, label: str) -> "StaticLabel":
        """Build a StaticLabel that always returns `label`."""
        return cls(label_fn=lambda: label)

    def label(self) -> Any:
        return self.label_fn()


@dataclass(frozen=True)
class NamingConvention:
    """Label derived by stripping `suffix` from the schema name."""
    suffix: str = DEFAULT_SUFFIX

    def derive(self, schema_name: str) -> str:
        if self.suffix and schema_name.endswith(self.suffix) and schema_name != self.suffix:
            return schema_name[: -len(self.suffix)]
        return schema_name


Discriminator = Union[AllowList, StaticLabel, NamingConvention]


@dataclass(frozen=True)
class Schema:
    """A named record variant with its fields and discriminator declarations."""
    name: str
    fields: Tuple[FieldDefinition, ...] = ()
    discriminators: Tuple[Discriminator, ...] = ()

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Schema name must be a non-empty string")
        # Accept lists from callers, store tuples
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "discriminators", tuple(self.discriminators))

    def allow_list_for(self, field_name: str) -> Optional[AllowList]:
        """First allow-list declared for `field_name`, if any."""
        for declaration in self.discriminators:
            if isinstance(declaration, AllowList) and declaration.field == field_name:
                return declaration
        return None

    @property
    def static_label(self) -> Optional[StaticLabel]:
        for declaration in self.discriminators:
            if isinstance(declaration, StaticLabel):
                return declaration
        return None

    @property
    def naming_convention(self) -> Optional[NamingConvention]:
        for declaration in self.discriminators:
            if isinstance(declaration, NamingConvention):
                return declaration
        return None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape used by union spec documents."""
        data: Dict[str, Any] = {"name": self.name}
        if self.fields:
            data["fields"] = [f.to_dict() for f in self.fields]

        allow = {
            d.field: list(d.values)
            for d in self.discriminators
            if isinstance(d, AllowList)
        }
        if allow:
            data["allow"] = allow

        # Static label functions are serialized by value
        if self.static_label is not None:
            data["static_label"] = self.static_label.label()

        if self.naming_convention is not None:
            data["suffix"] = self.naming_convention.suffix

        return data

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        discriminator_field: str = DEFAULT_DISCRIMINATOR_FIELD,
    ) -> "Schema":
        """
        Create from dictionary.

        A bare `allow` list applies to `discriminator_field`; a mapping names
        the field of each allow-list. `static_label` is taken as a constant.
        """
        discriminators: List[Discriminator] = []

        allow = data.get("allow")
        if isinstance(allow, dict):
            for field_name, values in allow.items():
                discriminators.append(AllowList(field=field_name, values=tuple(values)))
        elif allow is not None:
            discriminators.append(AllowList(field=discriminator_field, values=tuple(allow)))

        if data.get("static_label") is not None:
            discriminators.append(StaticLabel.constant(data["static_label"]))

        if data.get("suffix") is not None:
            discriminators.append(NamingConvention(suffix=data["suffix"]))

        return cls(
            name=data["name"],
            fields=tuple(FieldDefinition.from_dict(f) for f in data.get("fields", [])),
            discriminators=tuple(discriminators),
        )


@dataclass(frozen=True)
class UnionSpec:
    """Ordered schemas sharing one discriminator field.

    The first schema is the default fallback.
    """
    schemas: Tuple[Schema, ...]
    discriminator_field: str = DEFAULT_DISCRIMINATOR_FIELD
    default_suffix: str = DEFAULT_SUFFIX
    name: Optional[str] = None

    def __post_init__(self):
        schemas = tuple(self.schemas)
        if not schemas:
            raise ValueError("UnionSpec requires at least one schema")
        if not self.discriminator_field or not self.discriminator_field.strip():
            raise ValueError("UnionSpec discriminator_field must be a non-empty string")

        seen = set()
        for schema in schemas:
            if not isinstance(schema, Schema):
                raise ValueError(f"UnionSpec members must be Schema instances, got {type(schema).__name__}")
            if schema.name in seen:
                raise ValueError(f"Duplicate schema name in UnionSpec: {schema.name}")
            seen.add(schema.name)

        object.__setattr__(self, "schemas", schemas)

    @property
    def default(self) -> Schema:
        return self.schemas[0]

    @property
    def schema_names(self) -> List[str]:
        return [s.name for s in self.schemas]

    def get(self, name: str) -> Schema:
        """Get a member schema by name."""
        for schema in self.schemas:
            if schema.name == name:
                return schema
        raise KeyError(f"Unknown schema: {name}. Available: {', '.join(self.schema_names)}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "discriminator_field": self.discriminator_field,
            "default_suffix": self.default_suffix,
            "schemas": [s.to_dict() for s in self.schemas],
        }
        if self.name:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnionSpec":
        """Create from dictionary (the shape produced by `to_dict`)."""
        discriminator_field = data.get("discriminator_field", DEFAULT_DISCRIMINATOR_FIELD)
        return cls(
            schemas=tuple(
                Schema.from_dict(s, discriminator_field=discriminator_field)
                for s in data.get("schemas", [])
            ),
            discriminator_field=discriminator_field,
            default_suffix=data.get("default_suffix", DEFAULT_SUFFIX),
            name=data.get("name"),
        )
