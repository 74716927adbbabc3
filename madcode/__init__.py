"""Types, symbolic batch sizes, shape expressions and type-checked instructions for batched phase-space computations."""

__version__ = "0.1.0"

__all__ = [
    "constants",
    "types",
    "stats",
    "shape_expr",
    "instruction",
    "special_instructions",
    "instruction_set",
]