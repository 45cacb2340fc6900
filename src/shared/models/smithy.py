"""API model Pydantic v2 data models (Smithy JSON AST subset)."""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

REQUIRED_TRAIT = "smithy.api#required"
ERROR_TRAIT = "smithy.api#error"
SPARSE_TRAIT = "smithy.api#sparse"


class ShapeType(str, Enum):
    """Shape types understood by the generator."""
    STRUCTURE = "structure"
    UNION = "union"
    LIST = "list"
    SET = "set"
    MAP = "map"
    STRING = "string"
    ENUM = "enum"
    INT_ENUM = "intEnum"
    BLOB = "blob"
    BOOLEAN = "boolean"
    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BIG_INTEGER = "bigInteger"
    BIG_DECIMAL = "bigDecimal"
    TIMESTAMP = "timestamp"
    DOCUMENT = "document"
    OPERATION = "operation"
    SERVICE = "service"
    RESOURCE = "resource"


INTEGRAL_TYPES = frozenset({
    ShapeType.BYTE,
    ShapeType.SHORT,
    ShapeType.INTEGER,
    ShapeType.LONG,
    ShapeType.BIG_INTEGER,
    ShapeType.INT_ENUM,
})
FLOATING_TYPES = frozenset({ShapeType.FLOAT, ShapeType.DOUBLE})
AGGREGATE_TYPES = frozenset({ShapeType.STRUCTURE, ShapeType.UNION})


class ShapeRef(BaseModel):
    """A reference to another shape by id."""
    target: str

    model_config = {"frozen": True}


class MemberShape(BaseModel):
    """A named member of an aggregate or collection shape."""
    name: str
    target: str
    traits: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def required(self) -> bool:
        return REQUIRED_TRAIT in self.traits


class Shape(BaseModel):
    """A named shape in the model."""
    shape_id: str
    type: ShapeType
    traits: dict[str, Any] = Field(default_factory=dict)
    members: dict[str, MemberShape] = Field(default_factory=dict)
    # list / set / map
    member: MemberShape | None = None
    key: MemberShape | None = None
    value: MemberShape | None = None
    # operation
    input: ShapeRef | None = None
    output: ShapeRef | None = None
    errors: list[ShapeRef] = Field(default_factory=list)
    # service / resource
    operations: list[ShapeRef] = Field(default_factory=list)
    collection_operations: list[ShapeRef] = Field(
        default_factory=list, alias="collectionOperations"
    )
    resources: list[ShapeRef] = Field(default_factory=list)
    create: ShapeRef | None = None
    put: ShapeRef | None = None
    read: ShapeRef | None = None
    update: ShapeRef | None = None
    delete: ShapeRef | None = None
    list_operation: ShapeRef | None = Field(default=None, alias="list")

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}

    @property
    def name(self) -> str:
        """The shape name without its namespace."""
        return self.shape_id.rpartition("#")[2]

    @property
    def is_error(self) -> bool:
        return ERROR_TRAIT in self.traits

    @property
    def is_sparse(self) -> bool:
        return SPARSE_TRAIT in self.traits

    def lifecycle_operations(self) -> list[ShapeRef]:
        """Resource lifecycle bindings in canonical order."""
        bound = [self.create, self.put, self.read, self.update, self.delete,
                 self.list_operation]
        return [ref for ref in bound if ref is not None]
