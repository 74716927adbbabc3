import pytest

from madcode.instruction import SimpleInstruction
from madcode.instruction_set import Opcode, build_instruction_set, get_instruction
from madcode.special_instructions import RqsReshapeInstruction, StackInstruction
from madcode.types import (
    BATCH_FLOAT,
    BATCH_INT,
    BATCH_SIZE,
    BatchSize,
    DataType,
    Type,
    Value,
)


def var(type_, index=0):
    return Value(type_, None, index)


def batch_floats(*shape):
    return var(Type(DataType.FLOAT, BATCH_SIZE, shape))


def single_floats(*shape, index=0):
    return var(Type(DataType.FLOAT, BatchSize.ONE, shape), index)


def test_every_opcode_has_matching_instruction():
    instructions = build_instruction_set()
    assert len(instructions) == len(Opcode)
    for opcode in Opcode:
        instruction = instructions[opcode.name.lower()]
        assert instruction.opcode == opcode
        assert instruction.differentiable


def test_opcodes_are_contiguous():
    instructions = build_instruction_set()
    opcodes = sorted(int(instr.opcode) for instr in instructions.values())
    assert opcodes == list(range(len(instructions)))
    assert get_instruction("add").opcode == 11
    assert get_instruction("vegas_histogram").opcode == 90


def test_special_instruction_classes():
    stack = get_instruction("stack")
    assert isinstance(stack, StackInstruction)
    (stacked,) = stack.signature([var(BATCH_FLOAT), var(BATCH_FLOAT, 1)])
    assert stacked == Type(DataType.FLOAT, BATCH_SIZE, (2,))

    rqs = get_instruction("rqs_reshape")
    assert isinstance(rqs, RqsReshapeInstruction)
    widths, heights, derivatives = rqs.signature([batch_floats(26), Value.scalar(4)])
    assert widths == Type(DataType.FLOAT, BATCH_SIZE, (2, 4))
    assert heights == Type(DataType.FLOAT, BATCH_SIZE, (2, 4))
    assert derivatives == Type(DataType.FLOAT, BATCH_SIZE, (2, 5))

    matmul = get_instruction("matmul")
    assert isinstance(matmul, SimpleInstruction)
    (out,) = matmul.signature(
        [batch_floats(3), single_floats(5, 3, index=1), single_floats(5, index=2)]
    )
    assert out == Type(DataType.FLOAT, BATCH_SIZE, (5,))


def test_unknown_instruction():
    with pytest.raises(ValueError, match="Unknown instruction 'nope'"):
        get_instruction("nope")


def test_add_keeps_type():
    out = get_instruction("add").signature([var(BATCH_FLOAT), var(BATCH_FLOAT, 1)])
    assert out == [BATCH_FLOAT]


def test_add_rejects_int():
    with pytest.raises(ValueError, match="dtypes not matching"):
        get_instruction("add").signature([var(BATCH_FLOAT), var(BATCH_INT, 1)])


def test_pop_shapes():
    arg = batch_floats(5, 2)
    rest, last = get_instruction("pop").signature([arg])
    assert rest.shape[0] == arg.type.shape[0] - 1
    assert rest.shape[1:] == arg.type.shape[1:]
    assert last.shape == arg.type.shape[1:]
    assert rest.batch_size == BATCH_SIZE


def test_pt_eta_phi_x_shape():
    (out,) = get_instruction("pt_eta_phi_x").signature(
        [batch_floats(5, 4), var(BATCH_FLOAT, 1), var(BATCH_FLOAT, 2)]
    )
    assert out.shape == (11,)


def test_one_hot_size_from_constant():
    (out,) = get_instruction("one_hot").signature(
        [var(BATCH_INT), Value.scalar(7)]
    )
    assert out == Type(DataType.FLOAT, BATCH_SIZE, (7,))


def test_one_hot_requires_constant():
    with pytest.raises(ValueError, match="expected integer constant"):
        get_instruction("one_hot").signature([var(BATCH_INT), var(BATCH_INT, 1)])


def test_cut_pt_limits_cannot_be_batched():
    with pytest.raises(ValueError, match="cannot have batch dimension"):
        get_instruction("cut_pt").signature([batch_floats(4, 4), batch_floats(2, 2)])


def test_vegas_histogram_outputs_are_single():
    hist, counts = get_instruction("vegas_histogram").signature(
        [batch_floats(3), var(BATCH_FLOAT, 1), Value.scalar(8)]
    )
    assert hist == Type(DataType.FLOAT, BatchSize.ONE, (3, 8))
    assert counts == Type(DataType.INT, BatchSize.ONE, (3, 8))


def test_build_returns_fresh_mapping():
    first = build_instruction_set()
    second = build_instruction_set()
    assert first is not second
    assert list(first) == list(second)