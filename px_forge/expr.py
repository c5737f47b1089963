"""Color expression trees.

An expression is one of four frozen node types, matched structurally by the
evaluator in :mod:`px_forge.color_engine`:

* :class:`HexColor` - a literal.
* :class:`ColorRef` - ``$name`` (or a bare ``name``) pointing at another entry.
* :class:`Number` - a numeric argument (``20%``, ``30deg``, ``0.5``).
* :class:`Call` - ``func(arg, ...)``; arguments split on top-level commas.
"""

from dataclasses import dataclass
import re
from typing import List, Tuple, Union

from px_forge.color import parse_hex
from px_forge.errors import ColorExpressionError
from px_forge.types import Rgba


@dataclass(frozen=True)
class HexColor:
    color: Rgba


@dataclass(frozen=True)
class ColorRef:
    name: str


@dataclass(frozen=True)
class Number:
    """Numeric parameter normalised so percentages are fractions."""

    value: float
    unit: str = ""  # "", "%" or "deg"

    @property
    def fraction(self) -> float:
        return self.value / 100.0 if self.unit == "%" else self.value


@dataclass(frozen=True)
class Call:
    function: str
    args: Tuple["ColorExpr", ...]


ColorExpr = Union[HexColor, ColorRef, Number, Call]

_NUMBER = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(%|deg)?$")
_NAME = re.compile(r"^\$?([A-Za-z_][\w-]*)$")


def split_args(text: str) -> List[str]:
    """Split on commas that are not nested inside parentheses."""
    args: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ColorExpressionError(f"unbalanced ')' in '{text}'")
        if char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise ColorExpressionError(f"unbalanced '(' in '{text}'")
    tail = "".join(current).strip()
    if tail or args:
        args.append(tail)
    return args


def parse_expr(text: str) -> ColorExpr:
    """Parse one expression string into a tree."""
    source = text.strip()
    if not source:
        raise ColorExpressionError("empty color expression")
    if source.startswith("#"):
        return HexColor(parse_hex(source))
    number = _NUMBER.match(source)
    if number:
        return Number(float(number.group(1)), number.group(2) or "")
    paren = source.find("(")
    if paren > 0:
        if not source.endswith(")"):
            raise ColorExpressionError(f"missing ')' in '{text}'")
        function = source[:paren].strip().lower()
        args = tuple(parse_expr(arg) for arg in split_args(source[paren + 1 : -1]))
        return Call(function, args)
    name = _NAME.match(source)
    if name:
        return ColorRef(name.group(1))
    raise ColorExpressionError(f"cannot parse color expression '{text}'")


def references(expr: ColorExpr) -> List[str]:
    """Names referenced by ``expr``, in left-to-right order."""
    if isinstance(expr, ColorRef):
        return [expr.name]
    if isinstance(expr, Call):
        names: List[str] = []
        for arg in expr.args:
            names.extend(references(arg))
        return names
    return []
