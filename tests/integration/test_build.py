import numpy as np
import pytest

from px_forge import BuildSettings, RenderCache, build, content_hashes
from px_forge.assets import Brightness, Shader, SheetMode
from px_forge.color import MAGENTA, TRANSPARENT
from px_forge.types import AssetId, AssetKind

from tests.test_utils import (
    BRICK_ROWS,
    EDGE,
    FILL,
    codes,
    fill_ref,
    make_map,
    make_palette,
    make_prefab,
    make_registry,
    make_shape,
    make_stamp,
    scenario_palette,
    stamp_ref,
)


def shape_id(name: str) -> AssetId:
    return AssetId(AssetKind.SHAPE, name)


def prefab_id(name: str) -> AssetId:
    return AssetId(AssetKind.PREFAB, name)


def tower_registry(*extra):
    return make_registry(
        scenario_palette(),
        make_stamp("brick", BRICK_ROWS),
        make_shape("cap", ["~"], {"~": fill_ref("solid", A="$edge")}),
        make_shape("wall", ["B"], {"B": stamp_ref("brick")}),
        make_shape("base", ["~~", "~~"], {"~": fill_ref("solid", A="$fill")}),
        make_prefab("tower", ["c", "w", "w", "w", "b"], {"c": "cap", "w": "wall", "b": "base"}),
        *extra,
    )


def test_build_renders_in_dependency_order() -> None:
    result = build(tower_registry())
    assert result.ok
    assert list(result.diagnostics) == []
    assert [r.name for r in result.outputs] == ["base", "cap", "wall", "tower"]
    wall = result.output("wall")
    assert wall is not None and wall.size == (4, 4)
    assert wall.pixel(0, 0) == EDGE
    assert wall.pixel(1, 1) == FILL
    tower = result.output("tower")
    assert tower is not None
    assert tower.size == (4, 20)
    assert tower.instances()["wall"] == [(0, 4), (0, 8), (0, 12)]
    assert tower.pixel(0, 0) == EDGE
    assert result.output("missing") is None


def test_failure_forfeits_dependents_only() -> None:
    registry = make_registry(
        make_palette("default", "$a: $b\n$b: $a\n$edge: #1a1a2e\n"),
        make_shape("bad", ["~"], {"~": fill_ref("checker", A="$a", B="$edge")}),
        make_shape("good", ["~"], {"~": fill_ref("solid", A="$edge")}),
        make_prefab("tower", ["bg"], {"b": "bad", "g": "good"}),
        make_prefab("fine", ["g"], {"g": "good"}),
    )
    result = build(registry)
    assert not result.ok
    assert set(result.failed) == {shape_id("bad"), prefab_id("tower")}
    assert [r.name for r in result.outputs] == ["good", "fine"]
    by_asset = {d.asset: d.code for d in result.diagnostics if d.asset is not None}
    assert by_asset[shape_id("bad")] == "color-cycle"
    assert by_asset[prefab_id("tower")] == "dependency-failed"
    assert by_asset[AssetId(AssetKind.PALETTE, "default")] == "color-cycle"


def test_cache_reuses_unchanged_renders() -> None:
    cache = RenderCache()
    first = build(tower_registry(), cache=cache)
    assert (cache.hits, cache.misses) == (0, 4)
    second = build(tower_registry(), cache=cache)
    assert (cache.hits, cache.misses) == (4, 4)
    assert second.output("tower").pixels.tobytes() == first.output("tower").pixels.tobytes()


def test_upstream_change_invalidates_dependents() -> None:
    cache = RenderCache()
    build(tower_registry(), cache=cache)
    edited = make_registry(
        scenario_palette(),
        make_stamp("brick", ["$$$$", "$$$$", "$..$", "$$$$"]),
        make_shape("cap", ["~"], {"~": fill_ref("solid", A="$edge")}),
        make_shape("wall", ["B"], {"B": stamp_ref("brick")}),
        make_shape("base", ["~~", "~~"], {"~": fill_ref("solid", A="$fill")}),
        make_prefab("tower", ["c", "w", "w", "w", "b"], {"c": "cap", "w": "wall", "b": "base"}),
    )
    result = build(edited, cache=cache)
    # cap and base are served from the cache, wall and tower are rendered again
    assert cache.hits == 2
    assert result.output("wall").pixel(1, 1) == EDGE
    assert result.output("tower").pixel(1, 5) == EDGE
    assert cache.prune(content_hashes(edited)) == 2


def test_palette_change_misses_through_shader_key() -> None:
    cache = RenderCache()
    build(tower_registry(), cache=cache)
    recolored = make_registry(
        make_palette("default", "$edge: #ffffff\n$fill: #2d2d44\n"),
        make_stamp("brick", BRICK_ROWS),
        make_shape("wall", ["B"], {"B": stamp_ref("brick")}),
    )
    result = build(recolored, cache=cache)
    assert cache.hits == 0
    assert result.output("wall").pixel(0, 0) == (255, 255, 255, 255)


def test_effects_then_scale_on_outputs_only() -> None:
    dim = Shader(name="dim", palette="default", effects=(Brightness(-1.0),))
    result = build(tower_registry(dim), BuildSettings(scale=2, shader="dim"))
    tower = result.output("tower")
    assert tower.size == (8, 40)
    assert tower.instances()["base"] == [(0, 32)]
    assert tower.pixel(0, 0) == (0, 0, 0, 255)
    raw = result.results[prefab_id("tower")]
    assert raw.size == (4, 20)
    assert raw.pixel(0, 0) == EDGE


def test_unknown_shader_falls_back_to_default() -> None:
    result = build(tower_registry(), BuildSettings(shader="nope"))
    assert codes(result.diagnostics) == ["missing-shader"]
    assert result.output("wall").pixel(0, 0) == EDGE


def test_auto_sheet_packs_outputs() -> None:
    result = build(tower_registry(), BuildSettings(sheet=SheetMode.AUTO, padding=1))
    sheet = result.sheet
    assert sheet is not None
    assert [f.name for f in sheet.frames] == ["tower", "wall", "base", "cap"]
    assert build(tower_registry()).sheet is None


def test_fixed_sheet_overflow_is_reported() -> None:
    settings = BuildSettings(sheet=SheetMode.FIXED, sheet_size=(4, 4))
    result = build(tower_registry(), settings)
    assert result.sheet.width == 4
    assert "sheet-overflow" in codes(result.diagnostics)


def test_fixed_sheet_narrower_than_a_sprite_is_reported() -> None:
    registry = make_registry(
        scenario_palette(), make_shape("bar", ["~" * 8], {"~": fill_ref("solid", A="$edge")})
    )
    result = build(registry, BuildSettings(sheet=SheetMode.FIXED, sheet_size=(4, 16)))
    assert (result.sheet.width, result.sheet.height) == (8, 16)
    assert codes(result.diagnostics) == ["sheet-overflow"]


def test_map_empty_is_reserved_even_with_shape_named_empty() -> None:
    registry = make_registry(
        scenario_palette(),
        make_shape("wall", ["#"]),
        make_shape("empty", ["~"], {"~": fill_ref("solid", A="#ff00ff")}),
        make_map("level", ["W.", ".W"], {"W": "wall", ".": "empty"}),
    )
    result = build(registry)
    level = result.output("level")
    assert level.instances() == {"wall": [(0, 0), (1, 1)]}
    assert level.pixel(1, 0) == TRANSPARENT
    assert level.pixel(0, 0) != MAGENTA


@pytest.mark.parametrize("workers", [1, 2, 8])
def test_output_does_not_depend_on_worker_count(workers: int) -> None:
    baseline = build(tower_registry(), BuildSettings(workers=1))
    result = build(tower_registry(), BuildSettings(workers=workers))
    assert [r.name for r in result.outputs] == [r.name for r in baseline.outputs]
    for a, b in zip(result.outputs, baseline.outputs):
        assert np.array_equal(a.pixels, b.pixels)
    assert list(result.diagnostics) == list(baseline.diagnostics)
