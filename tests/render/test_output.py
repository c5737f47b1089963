from pathlib import Path

import pytest
from PIL import Image

from px_forge.render.output import scale_pixels, sheet_metadata, to_image, write_png
from px_forge.render.result import new_canvas
from px_forge.render.sheet import pack

from tests.test_utils import EDGE, make_result


def test_scale_pixels_nearest_neighbour() -> None:
    pixels = new_canvas(2, 1)
    pixels[0, 0] = EDGE
    scaled = scale_pixels(pixels, 3)
    assert scaled.shape == (3, 6, 4)
    assert tuple(scaled[2, 2]) == EDGE
    assert tuple(scaled[0, 3]) == (0, 0, 0, 0)
    assert scale_pixels(pixels, 1) is pixels
    with pytest.raises(ValueError):
        scale_pixels(pixels, 0)


def test_to_image() -> None:
    image = to_image(make_result("a", 3, 2).pixels)
    assert image.mode == "RGBA"
    assert image.size == (3, 2)
    assert image.getpixel((2, 1)) == EDGE


def test_write_png_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "wall.png"
    write_png(make_result("wall", 4, 4).pixels, path)
    with Image.open(path) as image:
        assert image.size == (4, 4)
        assert image.convert("RGBA").getpixel((0, 0)) == EDGE


def test_sheet_metadata() -> None:
    sheet = pack([make_result("a", 8, 8), make_result("b", 4, 4)], padding=1)
    meta = sheet_metadata(sheet, "atlas.png", scale=2)
    assert meta["frames"]["b"]["frame"] == {"x": 9, "y": 0, "w": 4, "h": 4}
    assert meta["frames"]["a"]["sourceSize"] == {"w": 8, "h": 8}
    assert meta["frames"]["a"]["rotated"] is False
    assert meta["meta"]["image"] == "atlas.png"
    assert meta["meta"]["size"] == {"w": sheet.width, "h": sheet.height}
    assert meta["meta"]["scale"] == "2"
