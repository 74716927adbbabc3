import pytest

from madcode.shape_expr import ShapeExpr


@pytest.mark.parametrize("expr", ["n", "n-1", "3n+2", "n+2", "3n-4", "b+1"])
@pytest.mark.parametrize("value", [2, 5, 11, 20])
def test_check_and_update_round_trips_with_evaluate(expr, value):
    shape = ShapeExpr(expr)
    variables = {}
    if shape.check_and_update(variables, value):
        assert shape.evaluate(variables) == value
        assert set(variables) == {shape.first_var_name()}
    else:
        assert variables == {}


def test_constant_expression():
    shape = ShapeExpr("4")
    assert shape.evaluate({}) == 4
    assert shape.check_and_update({}, 4) is True
    assert shape.check_and_update({}, 3) is False


def test_plain_variable_is_solved():
    variables = {}
    assert ShapeExpr("n").check_and_update(variables, 7) is True
    assert variables == {"n": 7}


def test_known_variable_is_checked():
    shape = ShapeExpr("n-1")
    assert shape.check_and_update({"n": 8}, 7) is True
    assert shape.check_and_update({"n": 8}, 8) is False


def test_non_divisible_value_is_rejected():
    variables = {}
    assert ShapeExpr("3n+2").check_and_update(variables, 6) is False
    assert variables == {}


def test_two_unknowns_are_rejected():
    shape = ShapeExpr("m") if False else ShapeExpr("n+m")
    assert shape.check_and_update({}, 5) is False


def test_evaluate_with_missing_variable():
    assert ShapeExpr("n+2").evaluate({}) is None
    assert ShapeExpr("n+2").evaluate({"m": 1}) is None


def test_first_var_name():
    assert ShapeExpr("c").first_var_name() == "c"
    assert ShapeExpr("n-2").first_var_name() == "n"


def test_spaces_are_ignored():
    assert ShapeExpr("3n + 2") == ShapeExpr("3n+2")


def test_invalid_character_raises():
    with pytest.raises(ValueError, match="Invalid character"):
        ShapeExpr("n*2")


def test_constant_before_variable_is_invalid():
    with pytest.raises(ValueError, match="Invalid size expression"):
        ShapeExpr("2+n")


def test_two_adjacent_variables_are_invalid():
    with pytest.raises(ValueError, match="Invalid size expression"):
        ShapeExpr("nm")