import pytest

from madcode.instruction import Instruction, SigType, SimpleInstruction
from madcode.shape_expr import ShapeExpr
from madcode.types import (
    BATCH_FLOAT,
    BATCH_INT,
    BatchSize,
    DataType,
    Type,
    Value,
    batch_float_array,
    batch_four_vec_array,
    multichannel_batch_size,
    single_float_array,
)

F = DataType.FLOAT
I = DataType.INT


def local(type_, index=0):
    return Value(type_, None, index)


@pytest.fixture
def add():
    return SimpleInstruction(
        "add", 11, True,
        [SigType(F, False, [None]), SigType(F, False, [None])],
        [SigType(F, False, [None])],
    )


@pytest.fixture
def pop():
    return SimpleInstruction(
        "pop", 3, True,
        [SigType(F, False, ["n", None])],
        [SigType(F, False, ["n-1", None]), SigType(F, False, [None])],
    )


@pytest.fixture
def one_hot():
    return SimpleInstruction(
        "one_hot", 82, True,
        [SigType(I, False, []), SigType(I, True, ["n"], True)],
        [SigType(F, False, ["n"])],
    )


@pytest.fixture
def cut_pt():
    return SimpleInstruction(
        "cut_pt", 45, True,
        [SigType(F, False, ["n", 4]), SigType(F, True, ["n-2", 2])],
        [SigType(F, False, [])],
    )


def test_attributes(add):
    assert add.name == "add"
    assert add.opcode == 11
    assert add.differentiable is True


def test_sig_type_converts_strings():
    sig = SigType(F, False, ["n", 4, None])
    assert sig.shape == (ShapeExpr("n"), 4, None)


def test_wildcard_passes_shape_through(add):
    t = batch_float_array(3)
    assert add.signature([local(t, 0), local(t, 1)]) == [t]


def test_scalar_and_batch_broadcast(add):
    assert add.signature([Value.scalar(2.0), local(BATCH_FLOAT)]) == [BATCH_FLOAT]


def test_all_single_gives_single(add):
    out = add.signature([Value.scalar(1.0), Value.scalar(2.0)])
    assert out[0].batch_size == BatchSize.ONE


def test_pop_shapes(pop):
    out = pop.signature([local(batch_four_vec_array(5))])
    assert out == [batch_four_vec_array(4), Type(F, BatchSize("batch_size"), (4,))]


def test_size_argument(one_hot):
    out = one_hot.signature([local(BATCH_INT), Value.scalar(5)])
    assert out == [batch_float_array(5)]


def test_size_argument_must_be_constant(one_hot):
    with pytest.raises(ValueError, match="expected integer constant"):
        one_hot.signature([local(BATCH_INT), local(BATCH_INT, 1)])


def test_single_input_with_shape_expression(cut_pt):
    out = cut_pt.signature(
        [local(batch_four_vec_array(6)), Value.from_nested([[1.0, 2.0]] * 4)]
    )
    assert out == [BATCH_FLOAT]


def test_incompatible_expression_size(cut_pt):
    with pytest.raises(ValueError, match="incompatible size"):
        cut_pt.signature(
            [local(batch_four_vec_array(6)), Value.from_nested([[1.0, 2.0]] * 3)]
        )


def test_single_input_rejects_batch(cut_pt):
    with pytest.raises(ValueError, match="cannot have batch dimension"):
        cut_pt.signature(
            [local(batch_four_vec_array(6)), local(Type(F, BatchSize("batch_size"), (4, 2)))]
        )


def test_fixed_size_mismatch(cut_pt):
    with pytest.raises(ValueError, match="expected size 4"):
        cut_pt.signature(
            [local(Type(F, BatchSize("batch_size"), (6, 3))), Value.from_nested([[1.0, 2.0]] * 4)]
        )


def test_dimension_mismatch(cut_pt):
    with pytest.raises(ValueError, match="expected dimension"):
        cut_pt.signature([local(batch_float_array(6)), Value.from_nested([[1.0, 2.0]] * 4)])


def test_wrong_argument_count(add):
    with pytest.raises(ValueError, match="add: expected 2 arguments, got 1"):
        add.signature([local(BATCH_FLOAT)])


def test_dtype_mismatch(add):
    with pytest.raises(ValueError, match="dtypes not matching"):
        add.signature([local(BATCH_FLOAT), local(BATCH_INT, 1)])


def test_incompatible_batch_sizes(add):
    a = Type(F, BatchSize("a"), ())
    b = Type(F, BatchSize("b"), ())
    with pytest.raises(ValueError, match="incompatible batch size"):
        add.signature([local(a), local(b, 1)])


def test_batch_size_list_rejected(add):
    with pytest.raises(ValueError, match="batch size list not accepted"):
        add.signature([local(multichannel_batch_size(2)), local(BATCH_FLOAT, 1)])


def test_wildcard_needs_enough_dimensions(pop):
    with pytest.raises(ValueError, match="expected dimension of at least"):
        pop.signature([local(BATCH_FLOAT)])


def test_undeterminable_output_size():
    instr = SimpleInstruction(
        "broken", 99, False, [SigType(F, False, [])], [SigType(F, False, ["n"])]
    )
    with pytest.raises(ValueError, match="Output size could not be determined"):
        instr.signature([local(BATCH_FLOAT)])


def test_output_wildcard_without_input_wildcard():
    instr = SimpleInstruction(
        "broken", 99, False, [SigType(F, False, [])], [SigType(F, False, [None])]
    )
    with pytest.raises(ValueError, match="Wildcard found in output signature"):
        instr.signature([local(BATCH_FLOAT)])


def test_single_output_has_no_batch():
    instr = SimpleInstruction(
        "hist", 90, True,
        [SigType(F, False, ["n"])],
        [SigType(F, True, ["n"])],
    )
    assert instr.signature([local(batch_float_array(3))]) == [single_float_array(3)]


def test_instruction_is_abstract():
    with pytest.raises(TypeError):
        Instruction("x", 0, False)