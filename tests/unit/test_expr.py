import pytest

from px_forge.errors import ColorExpressionError
from px_forge.expr import Call, ColorRef, HexColor, Number, parse_expr, references, split_args


def test_parse_literal_and_reference() -> None:
    assert parse_expr("#fff") == HexColor((255, 255, 255, 255))
    assert parse_expr("$edge") == ColorRef("edge")
    assert parse_expr("edge-dark") == ColorRef("edge-dark")


@pytest.mark.parametrize(
    "text, expected",
    [("20%", Number(20.0, "%")), ("30deg", Number(30.0, "deg")), ("0.5", Number(0.5))],
)
def test_parse_numbers(text: str, expected: Number) -> None:
    assert parse_expr(text) == expected


def test_number_fraction() -> None:
    assert Number(20.0, "%").fraction == pytest.approx(0.2)
    assert Number(0.5).fraction == 0.5


def test_parse_nested_call() -> None:
    expr = parse_expr("mix(darken($edge, 10%), #000, 50%)")
    assert expr == Call(
        "mix",
        (
            Call("darken", (ColorRef("edge"), Number(10.0, "%"))),
            HexColor((0, 0, 0, 255)),
            Number(50.0, "%"),
        ),
    )
    assert references(expr) == ["edge"]


def test_split_args_respects_parentheses() -> None:
    assert split_args("a(b, c), d") == ["a(b, c)", "d"]
    assert split_args("") == []


@pytest.mark.parametrize("text", ["", "darken($a, 10%", "mix(a, b))", "!!", "#xyz"])
def test_parse_rejects_malformed(text: str) -> None:
    with pytest.raises(ColorExpressionError):
        parse_expr(text)
