"""Palette definitions and the palette body text format.

Body lines look like::

    $edge: #1a1a2e
    $fill: lighten($edge, 20%)
    @night:
        $fill: darken($fill, 30%)
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.errors import DocumentError
from px_forge.expr import ColorExpr, parse_expr
from px_forge.types import AssetId, AssetKind, SourceLocation


@dataclass(frozen=True)
class Palette:
    """Named colors, variant overlays and an optional parent.

    Attributes:
        name: Palette name.
        colors: Base mapping of color name to expression.
        variants: Variant name to a partial override mapping.
        inherits: Parent palette name; child entries win.
        location: Where the palette was declared.
    """

    name: str
    colors: PMap[str, ColorExpr] = field(default_factory=pmap)
    variants: PMap[str, PMap[str, ColorExpr]] = field(default_factory=pmap)
    inherits: Optional[str] = None
    location: Optional[SourceLocation] = None

    kind = AssetKind.PALETTE

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)


def parse_palette_body(body: str, location: Optional[SourceLocation] = None):
    """Parse body text into ``(colors, variants)`` persistent maps."""
    colors: Dict[str, ColorExpr] = {}
    variants: Dict[str, Dict[str, ColorExpr]] = {}
    current: Optional[str] = None
    for offset, line in enumerate(body.splitlines()):
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            continue
        indented = line[:1] in (" ", "\t")
        if stripped.startswith("@"):
            current = stripped[1:].rstrip(":").strip()
            if not current:
                raise DocumentError(f"{_where(location, offset)}: empty variant name")
            variants.setdefault(current, {})
            continue
        if not stripped.startswith("$") or ":" not in stripped:
            raise DocumentError(f"{_where(location, offset)}: expected '$name: value'")
        name, value = stripped[1:].split(":", 1)
        expr = parse_expr(value)
        if current is not None and indented:
            variants[current][name.strip()] = expr
        else:
            current = None
            colors[name.strip()] = expr
    return pmap(colors), pmap({k: pmap(v) for k, v in variants.items()})


def _where(location: Optional[SourceLocation], offset: int) -> str:
    if location is None:
        return f"line {offset + 1}"
    return str(location.at(offset, 0))


DEFAULT_PALETTE = Palette(
    name="default",
    colors=pmap(
        {
            "black": parse_expr("#000000"),
            "white": parse_expr("#FFFFFF"),
            "edge": parse_expr("$black"),
            "fill": parse_expr("$white"),
        }
    ),
)
