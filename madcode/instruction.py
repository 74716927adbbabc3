"""Instructions and the type checking of their arguments."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from madcode.shape_expr import ShapeExpr
from madcode.types import BatchSize, DataType, Type, Value

ShapeItem = Union[int, ShapeExpr, None]


class Instruction(abc.ABC):
    """An operation with a name, an opcode and a type signature."""

    def __init__(self, name: str, opcode: int, differentiable: bool) -> None:
        self.name = name
        self.opcode = opcode
        self.differentiable = differentiable

    @abc.abstractmethod
    def signature(self, args: Sequence[Value]) -> List[Type]:
        """Check the argument types and return the output types."""

    def check_arg_count(self, args: Sequence[Value], count: int) -> None:
        if len(args) != count:
            raise ValueError(
                f"{self.name}: expected {count} arguments, got {len(args)}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, opcode={self.opcode})"


def _shape_item(item: Union[int, str, ShapeExpr, None]) -> ShapeItem:
    if isinstance(item, str):
        return ShapeExpr(item)
    return item


@dataclass(frozen=True)
class SigType:
    """One entry of a signature.

    ``shape`` items are fixed sizes, size expressions (given as strings or
    ShapeExpr) or None for a wildcard standing for any number of dimensions.
    """

    dtype: DataType
    single: bool = False
    shape: Tuple[ShapeItem, ...] = field(default_factory=tuple)
    is_size: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", tuple(_shape_item(i) for i in self.shape))


def _is_int_constant(arg: Value) -> bool:
    return (
        arg.type.dtype is DataType.INT
        and arg.type.batch_size == BatchSize.ONE
        and len(arg.type.shape) == 0
        and isinstance(arg.literal, int)
        and not isinstance(arg.literal, bool)
    )


class SimpleInstruction(Instruction):
    """An instruction whose signature is described by SigType entries."""

    def __init__(
        self,
        name: str,
        opcode: int,
        differentiable: bool,
        inputs: Sequence[SigType],
        outputs: Sequence[SigType],
    ) -> None:
        super().__init__(name, opcode, differentiable)
        self.inputs: Tuple[SigType, ...] = tuple(inputs)
        self.outputs: Tuple[SigType, ...] = tuple(outputs)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, len(self.inputs))
        variables: Dict[str, int] = {}
        wildcard_shape: List[int] = []
        found_wildcard = False
        batch_size = BatchSize.ONE

        for number, (arg, sig) in enumerate(zip(args, self.inputs), start=1):
            arg_type = arg.type
            prefix = f"{self.name}, argument {number}"

            if sig.is_size:
                if not _is_int_constant(arg):
                    raise ValueError(f"{prefix}: expected integer constant")
                var_name = sig.shape[0].first_var_name()
                if var_name in variables:
                    raise ValueError(f"{prefix}: size already defined")
                variables[var_name] = arg.literal
                continue

            if arg_type.dtype is DataType.BATCH_SIZES:
                raise ValueError(f"{prefix}: batch size list not accepted as argument")
            if sig.dtype is not arg_type.dtype:
                raise ValueError(f"{prefix}: dtypes not matching")

            if sig.single:
                if arg_type.batch_size != BatchSize.ONE:
                    raise ValueError(f"{prefix}: cannot have batch dimension")
            elif batch_size == BatchSize.ONE:
                batch_size = arg_type.batch_size
            elif (
                arg_type.batch_size != BatchSize.ONE
                and batch_size != arg_type.batch_size
            ):
                raise ValueError(f"{prefix}: incompatible batch size")

            arg_shape = list(arg_type.shape)
            input_shape = list(sig.shape)
            mod_shape: List[ShapeItem] = list(input_shape)
            wildcard_index = next(
                (i for i, item in enumerate(input_shape) if item is None), None
            )
            if wildcard_index is not None:
                if not found_wildcard:
                    if len(arg_shape) < len(input_shape) - 1:
                        raise ValueError(
                            f"{prefix}: expected dimension of at least "
                            f"{len(input_shape) - 1}, got {len(arg_shape)}"
                        )
                    end = len(arg_shape) - (len(input_shape) - wildcard_index) + 1
                    wildcard_shape = arg_shape[wildcard_index:end]
                    found_wildcard = True
                mod_shape = (
                    input_shape[:wildcard_index]
                    + list(wildcard_shape)
                    + input_shape[wildcard_index + 1:]
                )

            if len(arg_shape) != len(mod_shape):
                raise ValueError(
                    f"{prefix}: expected dimension {len(mod_shape)}, "
                    f"got {len(arg_shape)}"
                )
            for dim, (expected, actual) in enumerate(zip(mod_shape, arg_shape)):
                if isinstance(expected, int):
                    if actual != expected:
                        raise ValueError(
                            f"{prefix}, dimension {dim}: expected size {expected}, "
                            f"got {actual}"
                        )
                elif not expected.check_and_update(variables, actual):
                    raise ValueError(f"{prefix}, dimension {dim}: incompatible size")

        output_types = []
        for sig in self.outputs:
            out_shape: List[int] = []
            for item in sig.shape:
                if isinstance(item, int):
                    out_shape.append(item)
                elif item is None:
                    if not found_wildcard:
                        raise ValueError(
                            "Wildcard found in output signature, but not in input"
                        )
                    out_shape.extend(wildcard_shape)
                else:
                    value: Optional[int] = item.evaluate(variables)
                    if value is None:
                        raise ValueError("Output size could not be determined")
                    out_shape.append(value)
            output_types.append(
                Type(
                    sig.dtype,
                    BatchSize.ONE if sig.single else batch_size,
                    tuple(out_shape),
                )
            )
        return output_types