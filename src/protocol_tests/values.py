"""Renders fixture params as Python expressions for the generated client.

Params are plain JSON-like values; the target shape decides what each one
becomes.  Structures render as keyword constructor calls holding only the
members present in the params, so optional members the fixture leaves out
stay unset.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from src.protocol_tests.model_loader import ModelIndex
from src.protocol_tests.symbols import SymbolProvider
from src.shared.errors import FixtureParameterError
from src.shared.models.smithy import (
    AGGREGATE_TYPES,
    FLOATING_TYPES,
    INTEGRAL_TYPES,
    Shape,
    ShapeType,
)

_SPECIAL_FLOATS = {
    "NaN": 'float("nan")',
    "Infinity": 'float("inf")',
    "-Infinity": 'float("-inf")',
}

# Placeholders used to satisfy required input members in response tests
_PLACEHOLDERS: dict[ShapeType, str] = {
    ShapeType.STRING: repr("placeholder"),
    ShapeType.BLOB: repr(b""),
    ShapeType.BOOLEAN: "False",
    ShapeType.BIG_DECIMAL: 'decimal.Decimal("0")',
    ShapeType.TIMESTAMP: "datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)",
    ShapeType.DOCUMENT: "None",
}


class ValueRenderer:
    """Turns params into constructor expressions, one shape at a time."""

    def __init__(self, index: ModelIndex, symbols: SymbolProvider) -> None:
        self._index = index
        self._symbols = symbols

    def render(self, shape: Shape, value: Any, path: str = "params") -> str:
        """Render *value* as an expression of *shape*.

        Raises
        ------
        FixtureParameterError
            When the value does not fit the shape or names an unknown member.
        """
        shape_type = shape.type

        if shape_type in AGGREGATE_TYPES:
            return self._render_aggregate(shape, value, path)
        if shape_type in (ShapeType.LIST, ShapeType.SET):
            if not isinstance(value, list):
                raise _mismatch(path, "a list", value)
            member = self._index.get(shape.member.target)
            items = [
                self._render_entry(shape, member, item, f"{path}[{i}]")
                for i, item in enumerate(value)
            ]
            return "[" + ", ".join(items) + "]"
        if shape_type is ShapeType.MAP:
            if not isinstance(value, dict):
                raise _mismatch(path, "a mapping", value)
            key_shape = self._index.get(shape.key.target)
            value_shape = self._index.get(shape.value.target)
            entries = [
                f"{self.render(key_shape, k, path)}: "
                f"{self._render_entry(shape, value_shape, v, f'{path}[{k!r}]')}"
                for k, v in value.items()
            ]
            return "{" + ", ".join(entries) + "}"
        if shape_type in (ShapeType.STRING, ShapeType.ENUM):
            if not isinstance(value, str):
                raise _mismatch(path, "a string", value)
            return repr(value)
        if shape_type is ShapeType.BOOLEAN:
            if not isinstance(value, bool):
                raise _mismatch(path, "a boolean", value)
            return repr(value)
        if shape_type in INTEGRAL_TYPES:
            if isinstance(value, bool) or not isinstance(value, int):
                raise _mismatch(path, "an integer", value)
            return repr(value)
        if shape_type in FLOATING_TYPES:
            return _render_float(value, path)
        if shape_type is ShapeType.BIG_DECIMAL:
            return _render_decimal(value, path)
        if shape_type is ShapeType.BLOB:
            if not isinstance(value, str):
                raise _mismatch(path, "a string", value)
            return repr(value.encode("utf-8"))
        if shape_type is ShapeType.TIMESTAMP:
            return _render_timestamp(value, path)
        if shape_type is ShapeType.DOCUMENT:
            return repr(value)

        raise FixtureParameterError(
            detail=f"{path}: cannot render a value for {shape_type.value} shape {shape.shape_id}"
        )

    def render_placeholder(self, shape: Shape) -> str:
        """Build a value with only the required members of *shape* filled in."""
        args = []
        for name, member in shape.members.items():
            if member.required:
                target = self._index.get(member.target)
                args.append(f"{self._symbols.member_name(name)}={self._placeholder(target)}")
        return f"{self._symbols.shape_type(shape)}({', '.join(args)})"

    def _placeholder(self, shape: Shape) -> str:
        if shape.type in AGGREGATE_TYPES:
            if shape.type is ShapeType.UNION and shape.members:
                name, member = next(iter(shape.members.items()))
                target = self._index.get(member.target)
                return (
                    f"{self._symbols.shape_type(shape)}"
                    f"({self._symbols.member_name(name)}={self._placeholder(target)})"
                )
            return self.render_placeholder(shape)
        if shape.type in (ShapeType.LIST, ShapeType.SET):
            return "[]"
        if shape.type is ShapeType.MAP:
            return "{}"
        if shape.type is ShapeType.ENUM and shape.members:
            first = next(iter(shape.members.values()))
            return repr(first.traits.get("smithy.api#enumValue", first.name))
        if shape.type in INTEGRAL_TYPES:
            return "0"
        if shape.type in FLOATING_TYPES:
            return "0.0"
        return _PLACEHOLDERS.get(shape.type, "None")

    def _render_entry(self, collection: Shape, shape: Shape, value: Any, path: str) -> str:
        # Only sparse collections may hold nulls
        if value is None and collection.is_sparse:
            return "None"
        return self.render(shape, value, path)

    def _render_aggregate(self, shape: Shape, value: Any, path: str) -> str:
        if not isinstance(value, dict):
            raise _mismatch(path, "a mapping", value)
        if shape.type is ShapeType.UNION and len(value) != 1:
            raise FixtureParameterError(
                detail=f"{path}: union {shape.shape_id} must set exactly one member"
            )

        args = []
        for name, member_value in value.items():
            member = shape.members.get(name)
            if member is None:
                raise FixtureParameterError(
                    detail=f"{path}: {shape.shape_id} has no member '{name}'"
                )
            target = self._index.get(member.target)
            rendered = self.render(target, member_value, f"{path}.{name}")
            args.append(f"{self._symbols.member_name(name)}={rendered}")
        return f"{self._symbols.shape_type(shape)}({', '.join(args)})"


def _mismatch(path: str, expected: str, value: Any) -> FixtureParameterError:
    return FixtureParameterError(
        detail=f"{path}: expected {expected}, found {type(value).__name__} {value!r}"
    )


def _render_float(value: Any, path: str) -> str:
    if isinstance(value, str) and value in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[value]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _mismatch(path, "a number", value)
    number = float(value)
    if math.isnan(number):
        return _SPECIAL_FLOATS["NaN"]
    if math.isinf(number):
        return _SPECIAL_FLOATS["Infinity" if number > 0 else "-Infinity"]
    return repr(number)


def _render_decimal(value: Any, path: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise _mismatch(path, "a number", value)
    try:
        Decimal(str(value))
    except InvalidOperation as exc:
        raise _mismatch(path, "a decimal number", value) from exc
    return f"decimal.Decimal({str(value)!r})"


def _render_timestamp(value: Any, path: str) -> str:
    if isinstance(value, bool):
        raise _mismatch(path, "a timestamp", value)
    if isinstance(value, (int, float)):
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise _mismatch(path, "an ISO-8601 timestamp", value) from exc
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        moment = moment.astimezone(timezone.utc)
    else:
        raise _mismatch(path, "a timestamp", value)
    # repr() is fully qualified, matching the stub's ``import datetime``
    return repr(moment)
