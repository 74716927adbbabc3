"""Instructions whose signatures cannot be written as a fixed list of types."""

from __future__ import annotations

from typing import List, Optional, Sequence

from madcode.instruction import Instruction
from madcode.types import BatchSize, DataType, Type, Value


def _merge_batch_size(current: BatchSize, other: BatchSize) -> Optional[BatchSize]:
    """Combine batch sizes of broadcast arguments, or None if they conflict."""
    if current == BatchSize.ONE:
        return other
    if other != BatchSize.ONE and current != other:
        return None
    return current


def _is_int_constant(arg: Value) -> bool:
    return (
        arg.type.dtype is DataType.INT
        and arg.type.batch_size == BatchSize.ONE
        and len(arg.type.shape) == 0
        and isinstance(arg.literal, int)
        and not isinstance(arg.literal, bool)
    )


class StackInstruction(Instruction):
    """Stack values of equal type along a new leading dimension."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("stack", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if not args:
            raise ValueError("stack has to be called with at least one argument")
        first = args[0].type
        batch_size = BatchSize.ONE
        for number, arg in enumerate(args, start=1):
            if arg.type.dtype is DataType.BATCH_SIZES:
                raise ValueError(
                    f"stack, argument {number}: "
                    "Batch size list not accepted as argument"
                )
            merged = _merge_batch_size(batch_size, arg.type.batch_size)
            if merged is None:
                raise ValueError(f"stack, argument {number}: incompatible batch size")
            batch_size = merged
            if arg.type.dtype is not first.dtype or arg.type.shape != first.shape:
                raise ValueError(
                    "stack: all arguments must have the same shape and dtype"
                )
        return [Type(first.dtype, batch_size, (len(args),) + first.shape)]


class UnstackInstruction(Instruction):
    """Split a value along its leading dimension."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("unstack", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if len(args) != 1:
            raise ValueError(f"unstack expects one argument, got {len(args)}")
        arg_type = args[0].type
        if arg_type.dtype is DataType.BATCH_SIZES:
            raise ValueError("Batch size list not accepted as argument")
        if arg_type.batch_size == BatchSize.ONE:
            raise ValueError("Argument must have batch dimension")
        if not arg_type.shape:
            raise ValueError("Argument of unstack must be at least one-dimensional")
        out = Type(arg_type.dtype, arg_type.batch_size, arg_type.shape[1:])
        return [out] * arg_type.shape[0]


class UnstackSizesInstruction(Instruction):
    """Split a batch size list into single batch sizes."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("unstack_sizes", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if len(args) != 1:
            raise ValueError(f"unstack_sizes expects one argument, got {len(args)}")
        arg_type = args[0].type
        if arg_type.dtype is not DataType.BATCH_SIZES:
            raise ValueError("Only batch size list accepted as argument")
        return [Type.batch_sizes([size]) for size in arg_type.batch_size_list]


class BatchCatInstruction(Instruction):
    """Concatenate values along the batch dimension."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("batch_cat", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if not args:
            raise ValueError("batch_cat has to be called with at least one argument")
        first = args[0].type
        batch_size = BatchSize.ZERO
        arg_batch_sizes = []
        for arg in args:
            if arg.type.dtype is DataType.BATCH_SIZES:
                raise ValueError("Batch size list not accepted as argument")
            if arg.type.batch_size == BatchSize.ONE:
                raise ValueError("Argument must have batch dimension")
            if arg.type.dtype is not first.dtype or arg.type.shape != first.shape:
                raise ValueError("All arguments must have the same shape and dtype")
            arg_batch_sizes.append(arg.type.batch_size)
            batch_size = batch_size + arg.type.batch_size
        return [
            Type(first.dtype, batch_size, first.shape),
            Type.batch_sizes(arg_batch_sizes),
        ]


class BatchSplitInstruction(Instruction):
    """Split a value along the batch dimension according to a batch size list."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("batch_split", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if len(args) != 2:
            raise ValueError(f"batch_split expects two arguments, got {len(args)}")
        split_type = args[0].type
        if split_type.batch_size == BatchSize.ONE:
            raise ValueError(
                "First argument of batch_split must have batch dimension"
            )
        count_type = args[1].type
        if count_type.dtype is not DataType.BATCH_SIZES:
            raise ValueError("Second argument of batch_split must be batch size list")
        sizes = count_type.batch_size_list
        out_types = []
        remaining = split_type.batch_size
        for position, size in enumerate(sizes):
            if position == len(sizes) - 1:
                out_types.append(Type(split_type.dtype, remaining, split_type.shape))
            else:
                out_types.append(Type(split_type.dtype, size, split_type.shape))
                remaining = remaining - size
        return out_types


class CatInstruction(Instruction):
    """Concatenate values along their first non-batch dimension."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("cat", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if not args:
            raise ValueError("cat has to be called with at least one argument")
        first = args[0].type
        batch_size = BatchSize.ONE
        cat_dim = 0
        for number, arg in enumerate(args, start=1):
            if arg.type.dtype is DataType.BATCH_SIZES:
                raise ValueError(
                    f"cat, argument {number}: batch size list not accepted as argument"
                )
            if not arg.type.shape:
                raise ValueError(
                    f"cat, argument {number}: arguments must be at least 1-dimensional"
                )
            cat_dim += arg.type.shape[0]
            merged = _merge_batch_size(batch_size, arg.type.batch_size)
            if merged is None:
                raise ValueError(f"cat, argument {number}: incompatible batch size")
            batch_size = merged
            if (
                arg.type.dtype is not first.dtype
                or arg.type.shape[1:] != first.shape[1:]
            ):
                raise ValueError("cat: all arguments must have the same shape and dtype")
        return [Type(first.dtype, batch_size, (cat_dim,) + first.shape[1:])]


class BatchSizeInstruction(Instruction):
    """Return the common batch size of the arguments."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("batch_size", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if not args:
            raise ValueError("batch_size has to be called with at least one argument")
        batch_size = BatchSize.ONE
        for number, arg in enumerate(args, start=1):
            if arg.type.dtype is DataType.BATCH_SIZES:
                raise ValueError(
                    f"batch_size, argument {number}: "
                    "batch size list not accepted as argument"
                )
            merged = _merge_batch_size(batch_size, arg.type.batch_size)
            if merged is None:
                raise ValueError(
                    f"batch_size, argument {number}: incompatible batch size"
                )
            batch_size = merged
        return [Type.batch_sizes([batch_size])]


class FullInstruction(Instruction):
    """A batch of values filled with one constant."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("full", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        if len(args) < 2:
            raise ValueError("full expects at least two arguments")
        value_arg = args[0]
        if (
            value_arg.type.batch_size != BatchSize.ONE
            or value_arg.type.shape
            or value_arg.literal is None
        ):
            raise ValueError("full, argument 1: expected constant")
        batch_size_type = args[1].type
        if (
            batch_size_type.dtype is not DataType.BATCH_SIZES
            or len(batch_size_type.batch_size_list) != 1
        ):
            raise ValueError("full, argument 2: must be single batch size")
        shape = []
        for number, arg in enumerate(args[2:], start=3):
            if not _is_int_constant(arg):
                raise ValueError(f"full, argument {number}: expected integer constant")
            shape.append(arg.literal)
        return [
            Type(value_arg.type.dtype, batch_size_type.batch_size_list[0], tuple(shape))
        ]


class SqueezeInstruction(Instruction):
    """Drop the first non-batch dimension."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("squeeze", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 1)
        arg_type = args[0].type
        if arg_type.dtype is DataType.BATCH_SIZES:
            raise ValueError("Batch size list not accepted as argument")
        if not arg_type.shape:
            raise ValueError("Argument of squeeze must be at least one-dimensional")
        return [Type(arg_type.dtype, arg_type.batch_size, arg_type.shape[1:])]


class UnsqueezeInstruction(Instruction):
    """Replace the first non-batch dimension by one of size one."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("unsqueeze", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 1)
        arg_type = args[0].type
        if arg_type.dtype is DataType.BATCH_SIZES:
            raise ValueError("Batch size list not accepted as argument")
        return [Type(arg_type.dtype, arg_type.batch_size, (1,) + arg_type.shape[1:])]


class RqsReshapeInstruction(Instruction):
    """Split flat spline parameters into bin widths, heights and derivatives."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("rqs_reshape", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 2)
        bin_count_arg = args[1]
        if not _is_int_constant(bin_count_arg):
            raise ValueError(f"{self.name}, argument 2: expected integer constant")
        bin_count = bin_count_arg.literal
        input_type = args[0].type
        block = 3 * bin_count + 1
        if (
            input_type.dtype is not DataType.FLOAT
            or len(input_type.shape) != 1
            or input_type.shape[0] % block != 0
        ):
            raise ValueError(
                f"{self.name}, argument 1: "
                "expected batch of n_dims * (3 * n_bins + 1) floats"
            )
        dim = input_type.shape[0] // block
        batch_size = input_type.batch_size
        return [
            Type(DataType.FLOAT, batch_size, (dim, bin_count)),
            Type(DataType.FLOAT, batch_size, (dim, bin_count)),
            Type(DataType.FLOAT, batch_size, (dim, bin_count + 1)),
        ]


class NonzeroInstruction(Instruction):
    """Indices of the non-zero entries of a batch of floats."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("nonzero", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 1)
        input_type = args[0].type
        if input_type.dtype is not DataType.FLOAT or input_type.shape:
            raise ValueError(f"{self.name}, argument 1: expected batch of floats")
        return [Type(DataType.INT, BatchSize.unnamed(), ())]


class BatchGatherInstruction(Instruction):
    """Select batch entries by index."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("batch_gather", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 2)
        indices_type = args[0].type
        values_type = args[1].type
        if indices_type.dtype is not DataType.INT or indices_type.shape:
            raise ValueError(f"{self.name}, argument 1: expected batch of integers")
        if values_type.dtype is DataType.BATCH_SIZES:
            raise ValueError(
                f"{self.name}, argument 2: data type cannot be batch_sizes"
            )
        return [Type(values_type.dtype, indices_type.batch_size, values_type.shape)]


class BatchScatterInstruction(Instruction):
    """Write source batch entries into a target at the given indices."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("batch_scatter", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 3)
        indices_type, target_type, source_type = (arg.type for arg in args)
        if indices_type.dtype is not DataType.INT or indices_type.shape:
            raise ValueError(f"{self.name}, argument 1: expected batch of integers")
        if target_type.dtype not in (DataType.FLOAT, DataType.INT):
            raise ValueError(
                f"{self.name}, argument 2: expected data type float or int"
            )
        if (
            source_type.dtype is not target_type.dtype
            or source_type.batch_size != indices_type.batch_size
            or source_type.shape != target_type.shape
        ):
            raise ValueError(f"{self.name}, argument 3: incompatible source type")
        return [target_type]


class RandomInstruction(Instruction):
    """A batch of uniform random numbers."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("random", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 2)
        batch_size_type = args[0].type
        count_arg = args[1]
        if (
            batch_size_type.dtype is not DataType.BATCH_SIZES
            or len(batch_size_type.batch_size_list) != 1
        ):
            raise ValueError(f"{self.name}, argument 1: expected single batch size")
        if not _is_int_constant(count_arg):
            raise ValueError(f"{self.name}, argument 2: expected integer constant")
        return [
            Type(
                DataType.FLOAT,
                batch_size_type.batch_size_list[0],
                (count_arg.literal,),
            )
        ]


class UnweightInstruction(Instruction):
    """Accept events with probability proportional to their weight."""

    def __init__(self, opcode: int, differentiable: bool) -> None:
        super().__init__("unweight", opcode, differentiable)

    def signature(self, args: Sequence[Value]) -> List[Type]:
        self.check_arg_count(args, 2)
        weights_type = args[0].type
        max_weight_type = args[1].type
        if weights_type.dtype is not DataType.FLOAT or weights_type.shape:
            raise ValueError(f"{self.name}, argument 1: expected batch of floats")
        if (
            max_weight_type.dtype is not DataType.FLOAT
            or max_weight_type.batch_size != BatchSize.ONE
            or max_weight_type.shape
        ):
            raise ValueError(f"{self.name}, argument 2: expected single float")
        out_batch_size = BatchSize.unnamed()
        return [
            Type(DataType.INT, out_batch_size, ()),
            Type(DataType.FLOAT, out_batch_size, ()),
        ]