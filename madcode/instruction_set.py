"""The opcodes and the table of all instructions known to function builders."""

from __future__ import annotations

import enum
from typing import Dict, Tuple, Union

from madcode.instruction import Instruction, SigType, SimpleInstruction
from madcode.shape_expr import ShapeExpr
from madcode.special_instructions import (
    BatchCatInstruction,
    BatchGatherInstruction,
    BatchScatterInstruction,
    BatchSizeInstruction,
    BatchSplitInstruction,
    CatInstruction,
    FullInstruction,
    NonzeroInstruction,
    RandomInstruction,
    RqsReshapeInstruction,
    SqueezeInstruction,
    StackInstruction,
    UnsqueezeInstruction,
    UnstackInstruction,
    UnstackSizesInstruction,
    UnweightInstruction,
)
from madcode.types import DataType


class Opcode(enum.IntEnum):
    """Numeric code of every instruction; the lower-case name is its name."""

    STACK = 0
    UNSTACK = 1
    UNSTACK_SIZES = 2
    POP = 3
    BATCH_CAT = 4
    BATCH_SPLIT = 5
    CAT = 6
    BATCH_SIZE = 7
    FULL = 8
    SQUEEZE = 9
    UNSQUEEZE = 10
    ADD = 11
    SUB = 12
    MUL = 13
    REDUCE_PRODUCT = 14
    SQRT = 15
    SQUARE = 16
    BOOST_BEAM = 17
    BOOST_BEAM_INVERSE = 18
    COM_P_IN = 19
    R_TO_X1X2 = 20
    X1X2_TO_R = 21
    DIFF_CROSS_SECTION = 22
    TWO_PARTICLE_DECAY_COM = 23
    TWO_PARTICLE_DECAY = 24
    TWO_PARTICLE_SCATTERING_COM = 25
    TWO_PARTICLE_SCATTERING = 26
    T_INV_MIN_MAX = 27
    INVARIANTS_FROM_MOMENTA = 28
    SDE2_CHANNEL_WEIGHTS = 29
    PT_ETA_PHI_X = 30
    MIRROR_MOMENTA = 31
    UNIFORM_INVARIANT = 32
    UNIFORM_INVARIANT_INVERSE = 33
    BREIT_WIGNER_INVARIANT = 34
    BREIT_WIGNER_INVARIANT_INVERSE = 35
    STABLE_INVARIANT = 36
    STABLE_INVARIANT_INVERSE = 37
    STABLE_INVARIANT_NU = 38
    STABLE_INVARIANT_NU_INVERSE = 39
    FAST_RAMBO_MASSLESS = 40
    FAST_RAMBO_MASSLESS_COM = 41
    FAST_RAMBO_MASSIVE = 42
    FAST_RAMBO_MASSIVE_COM = 43
    CUT_UNPHYSICAL = 44
    CUT_PT = 45
    CUT_ETA = 46
    CUT_DR = 47
    CUT_M_INV = 48
    CUT_SQRT_S = 49
    SCALE_TRANSVERSE_ENERGY = 50
    SCALE_TRANSVERSE_MASS = 51
    SCALE_HALF_TRANSVERSE_MASS = 52
    SCALE_PARTONIC_ENERGY = 53
    CHILI_FORWARD = 54
    MATRIX_ELEMENT = 55
    MATRIX_ELEMENT_MULTICHANNEL = 56
    COLLECT_CHANNEL_WEIGHTS = 57
    INTERPOLATE_PDF = 58
    INTERPOLATE_ALPHA_S = 59
    MATMUL = 60
    RELU = 61
    LEAKY_RELU = 62
    ELU = 63
    GELU = 64
    SIGMOID = 65
    SOFTPLUS = 66
    RQS_RESHAPE = 67
    RQS_FIND_BIN = 68
    RQS_FORWARD = 69
    RQS_INVERSE = 70
    SOFTMAX = 71
    SOFTMAX_PRIOR = 72
    SAMPLE_DISCRETE = 73
    SAMPLE_DISCRETE_INVERSE = 74
    SAMPLE_DISCRETE_PROBS = 75
    SAMPLE_DISCRETE_PROBS_INVERSE = 76
    DISCRETE_HISTOGRAM = 77
    PERMUTE_MOMENTA = 78
    GATHER = 79
    GATHER_INT = 80
    SELECT = 81
    ONE_HOT = 82
    NONZERO = 83
    BATCH_GATHER = 84
    BATCH_SCATTER = 85
    RANDOM = 86
    UNWEIGHT = 87
    VEGAS_FORWARD = 88
    VEGAS_INVERSE = 89
    VEGAS_HISTOGRAM = 90

    @property
    def instruction_name(self) -> str:
        return self.name.lower()


_Dim = Union[int, str, ShapeExpr, None]

# Wildcard standing for any number of trailing dimensions.
_W = None


def _f(*shape: _Dim) -> SigType:
    return SigType(DataType.FLOAT, False, shape)


def _fs(*shape: _Dim) -> SigType:
    return SigType(DataType.FLOAT, True, shape)


def _i(*shape: _Dim) -> SigType:
    return SigType(DataType.INT, False, shape)


def _is(*shape: _Dim) -> SigType:
    return SigType(DataType.INT, True, shape)


def _size(name: str) -> SigType:
    return SigType(DataType.INT, True, (name,), True)


_SIGNATURES: Dict[Opcode, Tuple[Tuple[SigType, ...], Tuple[SigType, ...]]] = {
    Opcode.POP: ((_f("n", _W),), (_f("n-1", _W), _f(_W))),
    Opcode.ADD: ((_f(_W), _f(_W)), (_f(_W),)),
    Opcode.SUB: ((_f(_W), _f(_W)), (_f(_W),)),
    Opcode.MUL: ((_f(_W), _f(_W)), (_f(_W),)),
    Opcode.REDUCE_PRODUCT: ((_f("n"),), (_f(),)),
    Opcode.SQRT: ((_f(),), (_f(),)),
    Opcode.SQUARE: ((_f(),), (_f(),)),
    Opcode.BOOST_BEAM: ((_f("n", 4), _f(), _f()), (_f("n", 4),)),
    Opcode.BOOST_BEAM_INVERSE: ((_f("n", 4), _f(), _f()), (_f("n", 4),)),
    Opcode.COM_P_IN: ((_f(),), (_f(4), _f(4))),
    Opcode.R_TO_X1X2: ((_f(), _f(), _f()), (_f(), _f(), _f())),
    Opcode.X1X2_TO_R: ((_f(), _f(), _f()), (_f(), _f())),
    Opcode.DIFF_CROSS_SECTION: ((_f(),) * 6, (_f(),)),
    Opcode.TWO_PARTICLE_DECAY_COM: ((_f(),) * 5, (_f(4), _f(4), _f())),
    Opcode.TWO_PARTICLE_DECAY: ((_f(),) * 5 + (_f(4),), (_f(4), _f(4), _f())),
    Opcode.TWO_PARTICLE_SCATTERING_COM: (
        (_f(), _f(4), _f(4), _f(), _f(), _f()),
        (_f(4), _f(4), _f()),
    ),
    Opcode.TWO_PARTICLE_SCATTERING: (
        (_f(), _f(4), _f(4), _f(), _f(), _f()),
        (_f(4), _f(4), _f()),
    ),
    Opcode.T_INV_MIN_MAX: ((_f(4), _f(4), _f(), _f()), (_f(), _f())),
    Opcode.INVARIANTS_FROM_MOMENTA: ((_f("n", 4), _f("m", "n")), (_f("m"),)),
    Opcode.SDE2_CHANNEL_WEIGHTS: (
        (_f("m"), _f("c", "n"), _f("c", "n"), _i("c", "n")),
        (_f("c"),),
    ),
    Opcode.PT_ETA_PHI_X: ((_f("n+2", 4), _f(), _f()), (_f("3n+2"),)),
    Opcode.MIRROR_MOMENTA: ((_f("n", 4), _i()), (_f("n", 4),)),
    Opcode.UNIFORM_INVARIANT: ((_f(),) * 3, (_f(), _f())),
    Opcode.UNIFORM_INVARIANT_INVERSE: ((_f(),) * 3, (_f(), _f())),
    Opcode.BREIT_WIGNER_INVARIANT: ((_f(),) * 5, (_f(), _f())),
    Opcode.BREIT_WIGNER_INVARIANT_INVERSE: ((_f(),) * 5, (_f(), _f())),
    Opcode.STABLE_INVARIANT: ((_f(),) * 4, (_f(), _f())),
    Opcode.STABLE_INVARIANT_INVERSE: ((_f(),) * 4, (_f(), _f())),
    Opcode.STABLE_INVARIANT_NU: ((_f(),) * 5, (_f(), _f())),
    Opcode.STABLE_INVARIANT_NU_INVERSE: ((_f(),) * 5, (_f(), _f())),
    Opcode.FAST_RAMBO_MASSLESS: (
        (_f("3n-4"), _f(), _f(4)),
        (_f("n", 4), _f()),
    ),
    Opcode.FAST_RAMBO_MASSLESS_COM: ((_f("3n-4"), _f()), (_f("n", 4), _f())),
    Opcode.FAST_RAMBO_MASSIVE: (
        (_f("3n-4"), _f(), _f("n"), _f(4)),
        (_f("n", 4), _f()),
    ),
    Opcode.FAST_RAMBO_MASSIVE_COM: (
        (_f("3n-4"), _f(), _f("n")),
        (_f("n", 4), _f()),
    ),
    Opcode.CUT_UNPHYSICAL: ((_f(), _f("n", 4), _f(), _f()), (_f(),)),
    Opcode.CUT_PT: ((_f("n", 4), _fs("n-2", 2)), (_f(),)),
    Opcode.CUT_ETA: ((_f("n", 4), _fs("n-2", 2)), (_f(),)),
    Opcode.CUT_DR: ((_f("n", 4), _is("m", 2), _fs("m", 2)), (_f(),)),
    Opcode.CUT_M_INV: ((_f("n", 4), _is("m", "k"), _fs("m", 2)), (_f(),)),
    Opcode.CUT_SQRT_S: ((_f("n", 4), _fs(2)), (_f(),)),
    Opcode.SCALE_TRANSVERSE_ENERGY: ((_f("n", 4),), (_f(),)),
    Opcode.SCALE_TRANSVERSE_MASS: ((_f("n", 4),), (_f(),)),
    Opcode.SCALE_HALF_TRANSVERSE_MASS: ((_f("n", 4),), (_f(),)),
    Opcode.SCALE_PARTONIC_ENERGY: ((_f("n", 4),), (_f(),)),
    Opcode.CHILI_FORWARD: (
        (_f("3n-2"), _f(), _f("n"), _f("n"), _f("n")),
        (_f("n+2", 4), _f(), _f(), _f()),
    ),
    Opcode.MATRIX_ELEMENT: ((_f("n", 4), _i(), _is()), (_f(),)),
    Opcode.MATRIX_ELEMENT_MULTICHANNEL: (
        (_f("n", 4), _f(), _f(3), _i(), _is(), _size("c")),
        (_f(), _f("c"), _i(), _i(), _i()),
    ),
    Opcode.COLLECT_CHANNEL_WEIGHTS: (
        (_f("n"), _is("n"), _size("c")),
        (_f("c"),),
    ),
    Opcode.INTERPOLATE_PDF: (
        (_f(), _f(), _i("n"), _fs("a"), _fs("b"), _fs(16, "c", "d")),
        (_f("n"),),
    ),
    Opcode.INTERPOLATE_ALPHA_S: ((_f(), _fs("b+1"), _fs(4, "b")), (_f(),)),
    Opcode.MATMUL: ((_f("n"), _fs("m", "n"), _fs("m")), (_f("m"),)),
    Opcode.RELU: ((_f(_W),), (_f(_W),)),
    Opcode.LEAKY_RELU: ((_f(_W),), (_f(_W),)),
    Opcode.ELU: ((_f(_W),), (_f(_W),)),
    Opcode.GELU: ((_f(_W),), (_f(_W),)),
    Opcode.SIGMOID: ((_f(_W),), (_f(_W),)),
    Opcode.SOFTPLUS: ((_f(_W),), (_f(_W),)),
    Opcode.RQS_FIND_BIN: (
        (_f("n"), _f("n", "b"), _f("n", "b"), _f("n", "b+1")),
        (_f("n", 6),),
    ),
    Opcode.RQS_FORWARD: ((_f("n"), _f("n", 6)), (_f("n"), _f("n"))),
    Opcode.RQS_INVERSE: ((_f("n"), _f("n", 6)), (_f("n"), _f("n"))),
    Opcode.SOFTMAX: ((_f(_W),), (_f(_W),)),
    Opcode.SOFTMAX_PRIOR: ((_f("n"), _f("n")), (_f("n"),)),
    Opcode.SAMPLE_DISCRETE: ((_f(), _is()), (_i(), _f())),
    Opcode.SAMPLE_DISCRETE_INVERSE: ((_i(), _is()), (_f(), _f())),
    Opcode.SAMPLE_DISCRETE_PROBS: ((_f(), _f("n")), (_i(), _f())),
    Opcode.SAMPLE_DISCRETE_PROBS_INVERSE: ((_i(), _f("n")), (_f(), _f())),
    Opcode.DISCRETE_HISTOGRAM: (
        (_i(), _f(), _size("n")),
        (_fs("n"), _is("n")),
    ),
    Opcode.PERMUTE_MOMENTA: ((_f("n", 4), _is("m", "n"), _i()), (_f("n", 4),)),
    Opcode.GATHER: ((_i(), _f("n")), (_f(),)),
    Opcode.GATHER_INT: ((_i(), _i("n")), (_i(),)),
    Opcode.SELECT: ((_f("n"), _is("m")), (_f("m"),)),
    Opcode.ONE_HOT: ((_i(), _size("n")), (_f("n"),)),
    Opcode.VEGAS_FORWARD: ((_f("n"), _fs("n", "b")), (_f("n"), _f("n"))),
    Opcode.VEGAS_INVERSE: ((_f("n"), _fs("n", "b")), (_f("n"), _f("n"))),
    Opcode.VEGAS_HISTOGRAM: (
        (_f("n"), _f(), _size("b")),
        (_fs("n", "b"), _is("n", "b")),
    ),
}

_SPECIAL = {
    Opcode.STACK: StackInstruction,
    Opcode.UNSTACK: UnstackInstruction,
    Opcode.UNSTACK_SIZES: UnstackSizesInstruction,
    Opcode.BATCH_CAT: BatchCatInstruction,
    Opcode.BATCH_SPLIT: BatchSplitInstruction,
    Opcode.CAT: CatInstruction,
    Opcode.BATCH_SIZE: BatchSizeInstruction,
    Opcode.FULL: FullInstruction,
    Opcode.SQUEEZE: SqueezeInstruction,
    Opcode.UNSQUEEZE: UnsqueezeInstruction,
    Opcode.RQS_RESHAPE: RqsReshapeInstruction,
    Opcode.NONZERO: NonzeroInstruction,
    Opcode.BATCH_GATHER: BatchGatherInstruction,
    Opcode.BATCH_SCATTER: BatchScatterInstruction,
    Opcode.RANDOM: RandomInstruction,
    Opcode.UNWEIGHT: UnweightInstruction,
}


def build_instruction_set() -> Dict[str, Instruction]:
    """Create every instruction, keyed by name, in opcode order."""
    instructions: Dict[str, Instruction] = {}
    for opcode in Opcode:
        special = _SPECIAL.get(opcode)
        if special is not None:
            instruction: Instruction = special(int(opcode), True)
        else:
            inputs, outputs = _SIGNATURES[opcode]
            instruction = SimpleInstruction(
                opcode.instruction_name, int(opcode), True, inputs, outputs
            )
        instructions[instruction.name] = instruction
    return instructions


_INSTRUCTION_SET = build_instruction_set()


def get_instruction(name: str) -> Instruction:
    """Look up an instruction by name."""
    try:
        return _INSTRUCTION_SET[name]
    except KeyError:
        raise ValueError(f"Unknown instruction '{name}'") from None