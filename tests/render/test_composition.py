from px_forge.assets import Map
from px_forge.color import MAGENTA, TRANSPARENT
from px_forge.render.composition import cell_size, render_composition
from px_forge.render.result import RenderedResult, new_canvas
from px_forge.types import AssetKind

from tests.test_utils import EDGE, FILL, codes, make_map, make_prefab, make_result


def test_tower_scenario() -> None:
    children = {
        "cap": make_result("cap", 4, 4, (255, 0, 0, 255)),
        "wall": make_result("wall", 4, 4, EDGE),
        "base": make_result("base", 4, 4, FILL),
    }
    tower = make_prefab("tower", ["c", "w", "w", "w", "b"], {"c": "cap", "w": "wall", "b": "base"})
    result, problems = render_composition(tower, children)
    assert problems == []
    assert cell_size(tower, children) == (4, 4)
    assert result.size == (4, 20)
    assert result.kind == AssetKind.PREFAB
    assert result.instances() == {
        "base": [(0, 16)],
        "cap": [(0, 0)],
        "wall": [(0, 4), (0, 8), (0, 12)],
    }
    assert [p.name for p in result.placements] == ["cap", "wall", "wall", "wall", "base"]
    assert result.pixel(3, 3) == (255, 0, 0, 255)
    assert result.pixel(0, 10) == EDGE
    assert result.pixel(2, 19) == FILL


def test_cell_is_uniform_max_of_children() -> None:
    children = {"big": make_result("big", 3, 2), "tall": make_result("tall", 1, 5)}
    prefab = make_prefab("p", ["bt"], {"b": "big", "t": "tall"})
    result, _ = render_composition(prefab, children)
    assert cell_size(prefab, children) == (3, 5)
    assert result.size == (6, 5)
    assert result.instances() == {"big": [(0, 0)], "tall": [(3, 0)]}
    # smaller children sit at the top-left of their cell
    assert result.pixel(3, 4) == EDGE
    assert result.pixel(4, 0) == TRANSPARENT


def test_empty_is_reserved_in_maps() -> None:
    children = {"wall": make_result("wall", 2, 2), "empty": make_result("empty", 2, 2, MAGENTA)}
    level = make_map("level", ["W ", " W"], {"W": "wall", " ": "empty"})
    result, problems = render_composition(level, children)
    assert problems == []
    assert result.instances() == {"wall": [(0, 0), (2, 2)]}
    assert result.pixel(2, 0) == TRANSPARENT
    assert result.pixel(0, 2) == TRANSPARENT


def test_transparent_pixels_do_not_overwrite() -> None:
    hollow = new_canvas(2, 2)
    hollow[0, 0] = EDGE
    children = {
        "hollow": RenderedResult("hollow", AssetKind.SHAPE, hollow),
        "solid": make_result("solid", 2, 2, FILL),
    }
    prefab = make_prefab("p", ["hs"], {"h": "hollow", "s": "solid"})
    result, _ = render_composition(prefab, children)
    assert result.pixel(0, 0) == EDGE
    assert result.pixel(1, 1) == TRANSPARENT
    assert result.pixel(3, 1) == FILL


def test_missing_child_and_unmapped_glyph_are_magenta() -> None:
    prefab = make_prefab("p", ["wg?", "   "], {"w": "wall", "g": "ghost"})
    result, problems = render_composition(prefab, {"wall": make_result("wall", 2, 2)})
    assert codes(problems) == ["missing-ref", "unmapped-glyph"]
    assert problems[0].names == ("ghost",)
    assert problems[1].symbol == "?"
    assert result.pixel(2, 0) == MAGENTA
    assert result.pixel(5, 1) == MAGENTA
    assert result.pixel(0, 3) == TRANSPARENT
    assert result.instances() == {"wall": [(0, 0)]}


def test_nested_prefab_uses_rendered_size() -> None:
    inner, _ = render_composition(
        make_prefab("inner", ["aa"], {"a": "dot"}), {"dot": make_result("dot", 1, 1)}
    )
    outer = make_prefab("outer", ["ii"], {"i": "inner"})
    result, _ = render_composition(outer, {"inner": inner})
    assert result.size == (4, 1)
    assert result.instances() == {"inner": [(0, 0), (2, 0)]}


def test_no_children_gives_one_pixel_cells() -> None:
    level = Map(name="blank", grid=("  ",))
    result, problems = render_composition(level, {})
    assert result.size == (2, 1)
    assert problems == []
