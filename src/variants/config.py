"""
Pydantic models for union spec documents.

Raw YAML/JSON documents are validated here before being turned into the
frozen models in `models.py`.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import DEFAULT_DISCRIMINATOR_FIELD, DEFAULT_SUFFIX

Scalar = Union[str, int, float, bool]


class FieldDocument(BaseModel):
    """A field entry of a schema document."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(..., min_length=1)
    type_name: str = Field("any", alias="type")
    required: bool = False


class SchemaDocument(BaseModel):
    """A schema entry of a union spec document."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(..., min_length=1)
    field_defs: List[FieldDocument] = Field(default_factory=list, alias="fields")
    allow: Optional[Union[List[Scalar], Dict[str, List[Scalar]]]] = None
    static_label: Optional[Scalar] = None
    label_function: Optional[str] = Field(
        None,
        description="Import path 'module:function' returning the schema label",
    )
    suffix: Optional[str] = None

    @field_validator("label_function")
    @classmethod
    def validate_label_function(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and (":" not in v or v.startswith(":") or v.endswith(":")):
            raise ValueError(f"label_function must look like 'module:function', got '{v}'")
        return v

    @model_validator(mode="after")
    def single_static_label(self) -> "SchemaDocument":
        if self.static_label is not None and self.label_function is not None:
            raise ValueError(
                f"Schema '{self.name}' declares both static_label and label_function"
            )
        return self


class UnionSpecDocument(BaseModel):
    """A complete union spec document."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    discriminator_field: str = Field(DEFAULT_DISCRIMINATOR_FIELD, min_length=1)
    default_suffix: str = DEFAULT_SUFFIX
    schemas: List[SchemaDocument] = Field(..., min_length=1)

    @field_validator("schemas")
    @classmethod
    def unique_schema_names(cls, v: List[SchemaDocument]) -> List[SchemaDocument]:
        names = [s.name for s in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate schema names: {duplicates}")
        return v


class UnionSpecCollection(BaseModel):
    """A document holding several named unions under `unions:`."""
    model_config = ConfigDict(extra="forbid")

    unions: Dict[str, UnionSpecDocument] = Field(..., min_length=1)
