# madcode

`madcode` describes the instructions of a batched numerical language used for
phase-space sampling and event generation, and checks their argument types.
Every instruction has a signature that takes the types of its arguments,
validates them and returns the types of its outputs, including batch sizes
and symbolic shapes.

## Modules

- `madcode.types`: `DataType` (`INT`, `FLOAT`, `BATCH_SIZES`), symbolic
  `BatchSize` values that can be added and subtracted, `Type` (data type,
  batch size, shape, or a list of batch sizes) and `Value` (a literal constant
  or a numbered local). `BatchSize` and `Value` convert to and from
  JSON-compatible data with `to_json` / `from_json`. Helpers such as
  `batch_float_array`, `batch_four_vec_array` and `multichannel_batch_size`
  build common types.
- `madcode.shape_expr`: `ShapeExpr`, linear size expressions such as `"n"`,
  `"n-1"` or `"3n+2"`, which can be evaluated or solved for one unknown.
- `madcode.instruction`: the `Instruction` base class, `SigType` and
  `SimpleInstruction`, whose signature is a fixed list of input and output
  entries with size expressions and wildcard dimensions.
- `madcode.special_instructions`: instructions whose signatures depend on
  their arguments (`stack`, `unstack`, `batch_cat`, `batch_split`, `cat`,
  `full`, `rqs_reshape`, `random`, `unweight` and others).
- `madcode.instruction_set`: the `Opcode` enumeration, `build_instruction_set()`
  and `get_instruction(name)`.
- `madcode.stats`: `RunningIntegral`, a running mean and variance estimate.
- `madcode.constants`: mathematical constants and spline settings.

## Installation

```
pip install .
```

The `test` extra installs pytest for the test suite.

## Examples

Checking an instruction call:

```python
from madcode.instruction_set import get_instruction
from madcode.types import BATCH_FLOAT, Value

x = Value(BATCH_FLOAT, None, 0)
y = Value(BATCH_FLOAT, None, 1)
(out,) = get_instruction("add").signature([x, y])
print(out)  # float[batch_size]
```

An unknown name raises `ValueError`, as does a call whose argument types do
not fit the signature.

Symbolic batch sizes and shapes:

```python
from madcode.types import BatchSize, multichannel_batch_size
from madcode.shape_expr import ShapeExpr

a, b = BatchSize("a"), BatchSize("b")
assert (a + b) - b == a
print(multichannel_batch_size(3))
# {channel_size_0, channel_size_1, batch_size-channel_size_0-channel_size_1}

variables = {}
assert ShapeExpr("3n-4").check_and_update(variables, 8)
print(variables)  # {'n': 4}
```

Literal values and JSON:

```python
from madcode.types import Value

v = Value.from_list([1.0, 2.0, 3.0])
assert Value.from_json(v.to_json()) == v
```

Running integrals:

```python
from madcode.stats import RunningIntegral

integral = RunningIntegral()
for w in (1.0, 2.0, 3.0):
    integral.push(w)
print(integral.mean(), integral.variance(), integral.error())
```

## What it does not do

The package checks types only. It does not record instruction calls into
functions, fold constants, store or load whole functions, analyse
dependencies between instructions, or evaluate any instruction on data:
there are no numerical kernels and no runtime.