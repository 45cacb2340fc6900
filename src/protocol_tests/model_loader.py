"""Model front end: loads a Smithy JSON AST document and indexes its shapes.

The document may be JSON or the same structure written as YAML.  Only the
parts of the AST the test generator reads are kept: shape types, members,
traits, operation input/output/errors and service/resource bindings.
Prelude shapes (``smithy.api#String`` and friends) resolve without being
declared.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import yaml
from pydantic import ValidationError

from src.shared.errors import ModelLoadError, UnknownShapeError
from src.shared.models.smithy import MemberShape, Shape, ShapeType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_PRELUDE_TYPES: dict[str, ShapeType] = {
    "String": ShapeType.STRING,
    "Blob": ShapeType.BLOB,
    "Boolean": ShapeType.BOOLEAN,
    "PrimitiveBoolean": ShapeType.BOOLEAN,
    "Byte": ShapeType.BYTE,
    "PrimitiveByte": ShapeType.BYTE,
    "Short": ShapeType.SHORT,
    "PrimitiveShort": ShapeType.SHORT,
    "Integer": ShapeType.INTEGER,
    "PrimitiveInteger": ShapeType.INTEGER,
    "Long": ShapeType.LONG,
    "PrimitiveLong": ShapeType.LONG,
    "Float": ShapeType.FLOAT,
    "PrimitiveFloat": ShapeType.FLOAT,
    "Double": ShapeType.DOUBLE,
    "PrimitiveDouble": ShapeType.DOUBLE,
    "BigInteger": ShapeType.BIG_INTEGER,
    "BigDecimal": ShapeType.BIG_DECIMAL,
    "Timestamp": ShapeType.TIMESTAMP,
    "Document": ShapeType.DOCUMENT,
    "Unit": ShapeType.STRUCTURE,
}

PRELUDE: dict[str, Shape] = {
    f"smithy.api#{name}": Shape(shape_id=f"smithy.api#{name}", type=shape_type)
    for name, shape_type in _PRELUDE_TYPES.items()
}

UNIT_SHAPE_ID = "smithy.api#Unit"


class ModelIndex:
    """Read-only lookup over the shapes of one loaded model."""

    def __init__(self, shapes: dict[str, Shape]) -> None:
        self._shapes = dict(shapes)

    def __contains__(self, shape_id: str) -> bool:
        return shape_id in self._shapes or shape_id in PRELUDE

    def __len__(self) -> int:
        return len(self._shapes)

    def get(self, shape_id: str) -> Shape:
        """Return the shape for *shape_id*.

        Raises
        ------
        UnknownShapeError
            When the id is neither declared nor part of the prelude.
        """
        shape = self._shapes.get(shape_id) or PRELUDE.get(shape_id)
        if shape is None:
            raise UnknownShapeError(shape_id)
        return shape

    def services(self) -> list[Shape]:
        return [s for s in self._shapes.values() if s.type is ShapeType.SERVICE]

    def service(self, service_id: str | None = None) -> Shape:
        """Return *service_id*, or the only service in the model."""
        if service_id is not None:
            shape = self.get(service_id)
            if shape.type is not ShapeType.SERVICE:
                raise ModelLoadError(detail=f"{service_id} is not a service shape")
            return shape

        services = self.services()
        if len(services) != 1:
            raise ModelLoadError(
                detail=(
                    f"Model defines {len(services)} services; "
                    "select one explicitly"
                )
            )
        return services[0]

    def operations_of(self, service: Shape) -> list[Shape]:
        """Operations contained in *service*, in declaration order.

        Service operations come first, then operations bound through
        resources (depth-first).  Each operation appears once, at its first
        binding.
        """
        seen: set[str] = set()
        ordered: list[Shape] = []
        for shape_id in self._walk_operations(service, set()):
            if shape_id not in seen:
                seen.add(shape_id)
                ordered.append(self.get(shape_id))
        return ordered

    def _walk_operations(self, container: Shape, visiting: set[str]) -> Iterator[str]:
        if container.shape_id in visiting:
            return
        visiting.add(container.shape_id)

        refs = container.lifecycle_operations() + list(container.operations)
        refs += list(container.collection_operations)
        for ref in refs:
            yield ref.target
        for ref in container.resources:
            yield from self._walk_operations(self.get(ref.target), visiting)

    def errors_of(self, operation: Shape) -> list[Shape]:
        """Error shapes declared on *operation*, in declaration order.

        Raises
        ------
        ModelLoadError
            When a declared error lacks the error trait.
        """
        errors = [self.get(ref.target) for ref in operation.errors]
        for error in errors:
            if not error.is_error:
                raise ModelLoadError(
                    detail=f"{operation.shape_id} lists {error.shape_id} as an error, "
                    "but it has no smithy.api#error trait"
                )
        return errors

    def input_of(self, operation: Shape) -> Shape | None:
        return self._io_shape(operation.input)

    def output_of(self, operation: Shape) -> Shape | None:
        return self._io_shape(operation.output)

    def _io_shape(self, ref: Any) -> Shape | None:
        if ref is None or ref.target == UNIT_SHAPE_ID:
            return None
        return self.get(ref.target)

    def validate_references(self) -> None:
        """Ensure every member target and binding resolves to a shape."""
        for shape in self._shapes.values():
            for target in _references(shape):
                if target not in self:
                    raise UnknownShapeError(target)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_model(path: Path | str) -> ModelIndex:
    """Load a model document from *path*.

    ``.yaml`` / ``.yml`` files are read with PyYAML, everything else as JSON.

    Raises
    ------
    ModelLoadError
        When the file is missing, unparsable or structurally invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise ModelLoadError(detail=f"Model file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ModelLoadError(detail=f"Cannot parse model {path}: {exc}") from exc

    index = parse_model(document)
    logger.info("Loaded model %s with %d shapes", path, len(index))
    return index


def parse_model(document: Any) -> ModelIndex:
    """Build a :class:`ModelIndex` from an already decoded AST document."""
    if not isinstance(document, dict) or not isinstance(document.get("shapes"), dict):
        raise ModelLoadError(detail="Model document must contain a 'shapes' mapping")

    shapes: dict[str, Shape] = {}
    for shape_id, raw in document["shapes"].items():
        if not isinstance(raw, dict):
            raise ModelLoadError(detail=f"Shape {shape_id} must be a mapping")
        try:
            shapes[shape_id] = _parse_shape(shape_id, raw)
        except ValidationError as exc:
            raise ModelLoadError(detail=f"Invalid shape {shape_id}: {exc}") from exc

    index = ModelIndex(shapes)
    index.validate_references()
    return index


def _parse_shape(shape_id: str, raw: dict[str, Any]) -> Shape:
    data = dict(raw)
    data["shape_id"] = shape_id
    data["members"] = {
        name: {"name": name, **member}
        for name, member in (raw.get("members") or {}).items()
    }
    for slot in ("member", "key", "value"):
        if isinstance(raw.get(slot), dict):
            data[slot] = {"name": slot, **raw[slot]}
    return Shape.model_validate(data)


def _references(shape: Shape) -> Iterator[str]:
    members: list[MemberShape] = list(shape.members.values())
    members += [m for m in (shape.member, shape.key, shape.value) if m is not None]
    for member in members:
        yield member.target
    for ref in (shape.input, shape.output):
        if ref is not None:
            yield ref.target
    refs = shape.errors + shape.operations + shape.collection_operations
    refs = refs + shape.resources + shape.lifecycle_operations()
    for ref in refs:
        yield ref.target
