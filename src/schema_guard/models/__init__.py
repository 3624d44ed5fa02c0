from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TypeTag(str, Enum):
    """Closed set of column types the inferrer can assign."""
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"


class ColumnSchema(BaseModel):
    """Represents metadata for a single column."""
    model_config = ConfigDict(frozen=True)

    name: str
    dtype: TypeTag


class Schema(BaseModel):
    """
    Ordered column-name -> type-tag mapping for one dataset.
    Column order is the header order of the file it was inferred from.
    """
    model_config = ConfigDict(frozen=True)

    # tuple: no in-place edits once validated
    columns: Tuple[ColumnSchema, ...]

    @field_validator("columns")
    @classmethod
    def validate_unique_names(cls, v: Tuple[ColumnSchema, ...]) -> Tuple[ColumnSchema, ...]:
        seen = set()
        for column in v:
            if not column.name.strip():
                raise ValueError("column names must not be blank")
            if column.name in seen:
                raise ValueError(f"duplicate column name: {column.name!r}")
            seen.add(column.name)
        return v

    @classmethod
    def from_pairs(cls, pairs) -> "Schema":
        return cls(columns=tuple(ColumnSchema(name=name, dtype=dtype) for name, dtype in pairs))

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def as_dict(self) -> Dict[str, str]:
        """Plain ordered dict of name -> tag value, the persisted shape."""
        return {c.name: c.dtype.value for c in self.columns}


class Dataset(BaseModel):
    """A registered upload. The file bytes themselves are never kept here."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    filename: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TypeMismatch(BaseModel):
    expected: TypeTag
    actual: TypeTag


class SchemaDiff(BaseModel):
    """Everything needed to reconstruct how a candidate differs from its baseline."""
    missing_columns: List[str] = Field(default_factory=list)
    extra_columns: List[str] = Field(default_factory=list)
    type_mismatches: Dict[str, TypeMismatch] = Field(default_factory=dict)
    order_changed: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.missing_columns
            or self.extra_columns
            or self.type_mismatches
            or self.order_changed
        )


class VerdictStatus(str, Enum):
    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"


class Verdict(BaseModel):
    status: VerdictStatus
    reason: str
    diff: SchemaDiff = Field(default_factory=SchemaDiff)

    @property
    def is_compatible(self) -> bool:
        return self.status is VerdictStatus.COMPATIBLE
