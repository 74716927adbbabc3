"""Data types, symbolic batch sizes, value types and literal values."""

from __future__ import annotations

import enum
import itertools
import math
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Optional, Sequence, Union


class DataType(enum.Enum):
    """Element type of a value."""

    INT = "int"
    FLOAT = "float"
    BATCH_SIZES = "batch_sizes"

    def __str__(self) -> str:
        return self.value

    def to_json(self) -> str:
        return self.value

    @classmethod
    def from_json(cls, data: Any) -> "DataType":
        if isinstance(data, str):
            for member in cls:
                if member.value == data:
                    return member
        raise ValueError("invalid data type")


@dataclass(frozen=True)
class _Unnamed:
    id: int


class _One(enum.Enum):
    ONE = 1


_Atom = Union[str, _Unnamed, _One]


def _atom_str(atom: _Atom) -> str:
    if isinstance(atom, str):
        return atom
    if isinstance(atom, _Unnamed):
        return f"${atom.id}"
    return "1"


def _atom_json(atom: _Atom) -> Any:
    if isinstance(atom, str):
        return atom
    if isinstance(atom, _Unnamed):
        return None
    return 1


class BatchSize:
    """A symbolic batch size: named, unnamed, one, or a linear combination."""

    __slots__ = ("_value",)

    _ids = itertools.count()
    ZERO: ClassVar["BatchSize"]
    ONE: ClassVar["BatchSize"]

    def __init__(self, name: str) -> None:
        if not isinstance(name, str):
            raise TypeError("batch size name must be a string")
        self._value: Union[_Atom, dict] = name

    @classmethod
    def _wrap(cls, value: Union[_Atom, dict]) -> "BatchSize":
        obj = cls.__new__(cls)
        obj._value = dict(value) if isinstance(value, dict) else value
        return obj

    @classmethod
    def unnamed(cls) -> "BatchSize":
        """Create a fresh batch size distinct from every other one."""
        return cls._wrap(_Unnamed(next(cls._ids)))

    def _combine(self, other: "BatchSize", factor: int) -> "BatchSize":
        if isinstance(self._value, dict):
            compound = dict(self._value)
        else:
            compound = {self._value: 1}
        if isinstance(other._value, dict):
            for key, count in other._value.items():
                compound[key] = compound.get(key, 0) + factor * count
        else:
            compound[other._value] = compound.get(other._value, 0) + factor
        compound = {key: count for key, count in compound.items() if count != 0}
        if len(compound) == 1:
            ((key, count),) = compound.items()
            if count == 1:
                return BatchSize._wrap(key)
        return BatchSize._wrap(compound)

    def __add__(self, other: object) -> "BatchSize":
        if not isinstance(other, BatchSize):
            return NotImplemented
        return self._combine(other, 1)

    def __sub__(self, other: object) -> "BatchSize":
        if not isinstance(other, BatchSize):
            return NotImplemented
        return self._combine(other, -1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BatchSize):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        if isinstance(self._value, dict):
            return hash(frozenset(self._value.items()))
        return hash(self._value)

    def __str__(self) -> str:
        value = self._value
        if not isinstance(value, dict):
            return _atom_str(value)
        if not value:
            return "0"
        parts = []
        first = True
        for key, count in value.items():
            if count == 1:
                if not first:
                    parts.append("+")
            elif count == -1:
                parts.append("-")
            else:
                if count > 1 and not first:
                    parts.append("+")
                parts.append(f"{count}*")
            parts.append(_atom_str(key))
            first = False
        return "".join(parts)

    def __repr__(self) -> str:
        return f"BatchSize({str(self)!r})"

    def to_json(self) -> Any:
        value = self._value
        if isinstance(value, dict):
            return [
                {"batch_size": _atom_json(key), "factor": count}
                for key, count in value.items()
            ]
        return _atom_json(value)

    @classmethod
    def from_json(cls, data: Any) -> "BatchSize":
        if isinstance(data, str):
            return cls(data)
        if isinstance(data, int) and not isinstance(data, bool) and data == 1:
            return cls.ONE
        if isinstance(data, list):
            compound = {}
            for item in data:
                try:
                    sub = cls.from_json(item["batch_size"])
                    factor = item["factor"]
                except (KeyError, TypeError) as exc:
                    raise ValueError("invalid batch size") from exc
                if (
                    isinstance(sub._value, dict)
                    or not isinstance(factor, int)
                    or isinstance(factor, bool)
                ):
                    raise ValueError("invalid batch size")
                compound[sub._value] = factor
            return cls._wrap(compound)
        raise ValueError("invalid batch size")


BatchSize.ZERO = BatchSize._wrap({})
BatchSize.ONE = BatchSize._wrap(_One.ONE)


@dataclass(frozen=True, eq=False)
class Type:
    """Type of a value: data type, batch size and shape, or a batch size list."""

    dtype: DataType
    batch_size: BatchSize
    shape: tuple = ()
    batch_size_list: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", tuple(self.shape))
        object.__setattr__(self, "batch_size_list", tuple(self.batch_size_list))

    @classmethod
    def batch_sizes(cls, batch_size_list: Iterable[BatchSize]) -> "Type":
        return cls(DataType.BATCH_SIZES, BatchSize.ONE, (), tuple(batch_size_list))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return (
            self.dtype == other.dtype
            and self.batch_size == other.batch_size
            and self.shape == other.shape
        )

    def __hash__(self) -> int:
        return hash((self.dtype, self.batch_size, self.shape))

    def __str__(self) -> str:
        if self.dtype is DataType.BATCH_SIZES:
            return "{" + ", ".join(str(size) for size in self.batch_size_list) + "}"
        dims = "".join(f", {size}" for size in self.shape)
        return f"{self.dtype}[{self.batch_size}{dims}]"


SINGLE_FLOAT = Type(DataType.FLOAT, BatchSize.ONE, ())
SINGLE_INT = Type(DataType.INT, BatchSize.ONE, ())
BATCH_SIZE = BatchSize("batch_size")
BATCH_FLOAT = Type(DataType.FLOAT, BATCH_SIZE, ())
BATCH_INT = Type(DataType.INT, BATCH_SIZE, ())
BATCH_FOUR_VEC = Type(DataType.FLOAT, BATCH_SIZE, (4,))


def single_float_array(count: int) -> Type:
    return Type(DataType.FLOAT, BatchSize.ONE, (count,))


def single_int_array(count: int) -> Type:
    return Type(DataType.INT, BatchSize.ONE, (count,))


def single_float_array_2d(count1: int, count2: int) -> Type:
    return Type(DataType.FLOAT, BatchSize.ONE, (count1, count2))


def single_int_array_2d(count1: int, count2: int) -> Type:
    return Type(DataType.INT, BatchSize.ONE, (count1, count2))


def batch_float_array(count: int) -> Type:
    return Type(DataType.FLOAT, BATCH_SIZE, (count,))


def batch_four_vec_array(count: int) -> Type:
    return Type(DataType.FLOAT, BATCH_SIZE, (count, 4))


def multichannel_batch_size(count: int) -> Type:
    """Split the main batch size into ``count`` channel batch sizes."""
    if count < 1:
        raise ValueError("channel count must be at least one")
    sizes = []
    remaining = BATCH_SIZE
    for i in range(count - 1):
        size = BatchSize(f"channel_size_{i}")
        sizes.append(size)
        remaining = remaining - size
    sizes.append(remaining)
    return Type.batch_sizes(sizes)


@dataclass(frozen=True)
class TensorValue:
    """A constant tensor: its shape and flat data."""

    shape: tuple
    data: tuple


LiteralValue = Union[int, float, TensorValue, None]


def _infer_dtype(items: Sequence[Any]) -> DataType:
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise TypeError(f"unsupported literal element {item!r}")
    if items and all(isinstance(item, int) for item in items):
        return DataType.INT
    return DataType.FLOAT


@dataclass(frozen=True)
class Value:
    """A value in a function: a literal constant or a local variable."""

    type: Type = SINGLE_FLOAT
    literal: LiteralValue = None
    local_index: int = -1

    @classmethod
    def scalar(cls, value: Union[int, float]) -> "Value":
        if isinstance(value, bool):
            raise TypeError("booleans are not valid literals")
        if isinstance(value, int):
            return cls(SINGLE_INT, value)
        if isinstance(value, float):
            return cls(SINGLE_FLOAT, value)
        raise TypeError(f"unsupported literal {value!r}")

    @classmethod
    def _tensor(
        cls, dtype: DataType, items: tuple, shape: Optional[Sequence[int]]
    ) -> "Value":
        if dtype is DataType.FLOAT:
            items = tuple(float(item) for item in items)
        dims = tuple(shape) if shape else (len(items),)
        if math.prod(dims) != len(items):
            raise ValueError("size of value vector not compatible with given shape")
        return cls(Type(dtype, BatchSize.ONE, dims), TensorValue(dims, items))

    @classmethod
    def from_list(
        cls, values: Iterable[Union[int, float]], shape: Optional[Sequence[int]] = None
    ) -> "Value":
        items = tuple(values)
        return cls._tensor(_infer_dtype(items), items, shape)

    @classmethod
    def from_nested(cls, values: Sequence[Sequence[Union[int, float]]]) -> "Value":
        """Build a 2d constant, stored with the first index running fastest."""
        rows = [tuple(row) for row in values]
        if not rows:
            raise ValueError("at least one inner vector is required")
        inner = len(rows[0])
        if any(len(row) != inner for row in rows):
            raise ValueError("All inner vectors must have the same size")
        flat = tuple(row[j] for j in range(inner) for row in rows)
        return cls._tensor(_infer_dtype(flat), flat, (len(rows), inner))

    def is_literal(self) -> bool:
        return self.literal is not None

    def __str__(self) -> str:
        literal = self.literal
        if literal is None:
            return f"%{self.local_index}"
        if isinstance(literal, TensorValue):
            parts = []
            last = len(literal.data) - 1
            for i, item in enumerate(literal.data):
                if i == last:
                    parts.append(_number_str(item))
                elif i == 20:
                    parts.append("...")
                    break
                else:
                    parts.append(_number_str(item) + ", ")
            return "{" + "".join(parts) + "}"
        return _number_str(literal)

    def to_json(self) -> Any:
        literal = self.literal
        if literal is None:
            return self.local_index
        if isinstance(literal, TensorValue):
            return {
                "dtype": self.type.dtype.to_json(),
                "shape": list(literal.shape),
                "data": list(literal.data),
            }
        return {"dtype": self.type.dtype.to_json(), "shape": [], "data": literal}

    @classmethod
    def from_json(cls, data: Any) -> "Value":
        try:
            dtype = DataType.from_json(data["dtype"])
            shape = list(data["shape"])
            payload = data["data"]
        except (KeyError, TypeError) as exc:
            raise ValueError("invalid value") from exc
        if dtype is DataType.BATCH_SIZES:
            raise ValueError("invalid data type")
        convert = int if dtype is DataType.INT else float
        if not shape:
            return cls.scalar(convert(payload))
        return cls._tensor(dtype, tuple(convert(item) for item in payload), shape)


def _number_str(number: Union[int, float]) -> str:
    if isinstance(number, float):
        return format(number, "g")
    return str(number)