"""Linear size expressions such as ``n``, ``n-1`` or ``3n+2`` used in signatures."""

from __future__ import annotations

from typing import Dict, List, MutableMapping, Optional, Tuple

# A term is (variable name, factor); the variable name is None for the constant.
_Term = Tuple[Optional[str], int]


class ShapeExpr:
    """A sum of integer multiples of single-letter variables plus a constant."""

    __slots__ = ("terms",)

    def __init__(self, expr: str) -> None:
        terms: List[_Term] = []
        state = 0
        sign = 1
        factor = 0
        no_digits = True
        for char in expr:
            if char == " ":
                continue
            digit = -1
            sign_value = 0
            is_var = False
            if char == "-":
                sign_value = -1
            elif char == "+":
                sign_value = 1
            elif "0" <= char <= "9":
                digit = ord(char) - ord("0")
            elif "a" <= char <= "z":
                is_var = True
            else:
                raise ValueError(f"Invalid character {char} in size expression")

            if state == 0:
                if sign_value:
                    sign = sign_value
                    state = 1
                elif digit != -1:
                    factor = digit
                    no_digits = False
                    state = 1
                else:
                    terms.append((char, 1))
                    state = 2
            elif state == 1:
                if sign_value:
                    if no_digits:
                        sign *= sign_value
                    else:
                        terms.append((None, sign * factor))
                        sign, factor, no_digits = 1, 0, True
                        state = 2
                elif digit != -1:
                    factor = 10 * factor + digit
                    no_digits = False
                else:
                    terms.append((char, sign if no_digits else sign * factor))
                    sign, factor, no_digits = 1, 0, True
                    state = 2
            else:
                if not sign_value:
                    raise ValueError("Invalid size expression")
                sign *= sign_value
                state = 1
        if not no_digits:
            terms.append((None, sign * factor))
        self.terms: Tuple[_Term, ...] = tuple(terms)

    def check_and_update(self, variables: MutableMapping[str, int], value: int) -> bool:
        """Check ``value`` against the expression, solving for at most one unknown.

        A solved variable is written into ``variables``.
        """
        unknown_var: Optional[str] = None
        unknown_factor = 0
        offset = 0
        for var_name, factor in self.terms:
            if var_name is None:
                offset += factor
            elif var_name in variables:
                offset += factor * variables[var_name]
            elif unknown_var is None:
                unknown_var = var_name
                unknown_factor = factor
            else:
                return False
        if unknown_var is None:
            return value == offset
        if (value - offset) % unknown_factor != 0:
            return False
        variables[unknown_var] = (value - offset) // unknown_factor
        return True

    def evaluate(self, variables: Dict[str, int]) -> Optional[int]:
        """Return the value of the expression, or None if a variable is unknown."""
        total = 0
        for var_name, factor in self.terms:
            if var_name is None:
                total += factor
            elif var_name in variables:
                total += factor * variables[var_name]
            else:
                return None
        return total

    def first_var_name(self) -> Optional[str]:
        if not self.terms:
            raise IndexError("empty size expression")
        return self.terms[0][0]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShapeExpr):
            return NotImplemented
        return self.terms == other.terms

    def __hash__(self) -> int:
        return hash(self.terms)

    def __repr__(self) -> str:
        return f"ShapeExpr({self.terms!r})"