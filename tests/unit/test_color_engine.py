import pytest

from px_forge.color_engine import ColorEngine
from px_forge.errors import ColorCycleError, ColorExpressionError, UndefinedColorError
from px_forge.expr import parse_expr

from tests.test_utils import make_palette


def make_engine(body: str, name: str = "p") -> ColorEngine:
    return ColorEngine({name: make_palette(name, body)})


def test_resolve_literal_and_reference() -> None:
    engine = make_engine("$edge: #1a1a2e\n$outline: $edge\n")
    assert engine.resolve("edge", "p") == (26, 26, 46, 255)
    assert engine.resolve("outline", "p") == (26, 26, 46, 255)


def test_resolve_functions() -> None:
    engine = make_engine(
        "$white: #ffffff\n"
        "$grey: darken($white, 50%)\n"
        "$half: alpha($white, 50%)\n"
        "$blend: mix(#000000, $white, 50%)\n"
        "$green: hue-shift(#ff0000, 120deg)\n"
    )
    assert engine.resolve("grey", "p") == (128, 128, 128, 255)
    assert engine.resolve("half", "p") == (255, 255, 255, 128)
    assert engine.resolve("blend", "p") == (128, 128, 128, 255)
    assert engine.resolve("green", "p") == (0, 255, 0, 255)


def test_zero_parameters_are_identity() -> None:
    engine = make_engine("$base: #2d2d44\n$d: darken($base, 0%)\n$l: lighten($base, 0%)\n")
    base = engine.resolve("base", "p")
    assert engine.resolve("d", "p") == base
    assert engine.resolve("l", "p") == base
    assert engine.evaluate(parse_expr("mix($base, $base, 37%)"), "p") == base


def test_two_color_cycle_reports_path() -> None:
    engine = make_engine("$a: $b\n$b: $a\n")
    with pytest.raises(ColorCycleError) as excinfo:
        engine.resolve("a", "p")
    assert excinfo.value.path == ("a", "b", "a")
    assert "a -> b -> a" in str(excinfo.value)


def test_longer_cycle_in_discovery_order() -> None:
    engine = make_engine("$a: $b\n$b: $c\n$c: lighten($a, 10%)\n")
    with pytest.raises(ColorCycleError) as excinfo:
        engine.resolve("b", "p")
    assert excinfo.value.path == ("b", "c", "a", "b")


def test_undefined_color() -> None:
    engine = make_engine("$a: $nope\n")
    with pytest.raises(UndefinedColorError) as excinfo:
        engine.resolve("a", "p")
    assert excinfo.value.name == "nope"


def test_variant_overrides_base() -> None:
    engine = make_engine(
        "$fill: #808080\n$edge: $fill\n@dark:\n    $fill: darken($fill, 50%)\n"
    )
    assert engine.resolve("fill", "p") == (128, 128, 128, 255)
    assert engine.resolve("fill", "p", "dark") == (64, 64, 64, 255)
    # references inside the base follow the active variant
    assert engine.resolve("edge", "p", "dark") == (64, 64, 64, 255)
    # unknown variants fall back to the base mapping
    assert engine.resolve("fill", "p", "missing") == (128, 128, 128, 255)


def test_inheritance_child_overrides_parent() -> None:
    engine = ColorEngine(
        {
            "base": make_palette("base", "$edge: #000000\n$fill: #ffffff\n@night:\n  $fill: #000080\n"),
            "child": make_palette("child", "$fill: #ff0000\n", inherits="base"),
            "grandchild": make_palette("grandchild", "$accent: $fill\n", inherits="child"),
        }
    )
    assert engine.resolve("edge", "child") == (0, 0, 0, 255)
    assert engine.resolve("fill", "child") == (255, 0, 0, 255)
    assert engine.resolve("accent", "grandchild") == (255, 0, 0, 255)
    assert engine.resolve("fill", "grandchild", "night") == (0, 0, 128, 255)


def test_inheritance_cycle() -> None:
    with pytest.raises(ColorCycleError) as excinfo:
        ColorEngine(
            {
                "a": make_palette("a", "$x: #000\n", inherits="b"),
                "b": make_palette("b", "$y: #fff\n", inherits="a"),
            }
        )
    assert excinfo.value.path == ("a", "b", "a")


def test_missing_parent_is_a_warning() -> None:
    engine = ColorEngine({"a": make_palette("a", "$x: #000\n", inherits="ghost")})
    assert [d.code for d in engine.diagnostics] == ["missing-palette"]
    assert engine.resolve("x", "a") == (0, 0, 0, 255)


def test_builtin_default_palette() -> None:
    engine = ColorEngine({})
    assert engine.resolve("edge", "default") == (0, 0, 0, 255)
    assert engine.resolve("fill", "default") == (255, 255, 255, 255)


@pytest.mark.parametrize("body", ["$a: frobnicate(#fff, 10%)\n", "$a: darken(#fff)\n", "$a: 10%\n"])
def test_bad_expressions(body: str) -> None:
    with pytest.raises(ColorExpressionError):
        make_engine(body).resolve("a", "p")


def test_color_graph() -> None:
    engine = make_engine("$a: $b\n$b: $a\n$c: #fff\n")
    assert engine.color_graph("p").dependencies(("a", False)) == [("b", False)]
    assert engine.color_cycle("p") == ["a", "b", "a"]


def test_cycle_between_variant_colors() -> None:
    engine = make_engine("$a: #ffffff\n$b: #000000\n@loop:\n    $a: $b\n    $b: $a\n")
    assert engine.resolve("a", "p") == (255, 255, 255, 255)
    with pytest.raises(ColorCycleError) as excinfo:
        engine.resolve("a", "p", "loop")
    assert excinfo.value.path == ("a", "b", "a")
    assert engine.color_cycle("p") is None
    assert engine.color_cycle("p", "loop") == ["a", "b", "a"]


def test_variant_self_reference_is_not_a_cycle() -> None:
    engine = make_engine("$fill: #808080\n$edge: $fill\n@dark:\n    $fill: darken($fill, 50%)\n")
    assert engine.color_graph("p", "dark").dependencies(("fill", True)) == [("fill", False)]
    assert engine.color_graph("p", "dark").dependencies(("edge", False)) == [("fill", True)]
    assert engine.color_cycle("p", "dark") is None
