"""Color resolution.

:class:`ColorEngine` owns every palette of one registry, already flattened
through inheritance, and turns color names or expression trees into RGBA.

Resolution threads an explicit ``path`` of ``(name, in_variant)`` keys
through the recursion instead of relying on call depth; seeing a key twice
means a cycle, reported with the names in discovery order. Inside a variant
override a reference to the very name being overridden falls through to the
base entry, so ``$fill: darken($fill, 20%)`` is a darker base fill rather
than a cycle.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge import color as ops
from px_forge.assets.palette import DEFAULT_PALETTE, Palette
from px_forge.diagnostics import Diagnostic, warning
from px_forge.errors import ColorCycleError, ColorExpressionError, UndefinedColorError
from px_forge.expr import Call, ColorExpr, ColorRef, HexColor, Number, references
from px_forge.graph import DependencyGraph
from px_forge.types import Rgba


logger = logging.getLogger(__name__)

ResolvePath = Tuple[Tuple[str, bool], ...]

_AMOUNT_FUNCTIONS: Dict[str, Callable[[Rgba, float], Rgba]] = {
    "darken": ops.darken,
    "lighten": ops.lighten,
    "saturate": ops.saturate,
    "desaturate": ops.desaturate,
    "alpha": ops.with_alpha,
    "set-alpha": ops.with_alpha,
}
_HUE_FUNCTIONS = ("hue-shift", "shift-hue", "hue")


def _amount(expr: ColorExpr, function: str) -> float:
    """Fraction for percentage-style parameters.

    Unitless values above 1 are read as percentages (``darken($a, 20)``).
    """
    if not isinstance(expr, Number):
        raise ColorExpressionError(f"{function}() expects a number, got {expr!r}")
    if expr.unit == "" and abs(expr.value) > 1:
        return expr.value / 100.0
    return expr.fraction


def _degrees(expr: ColorExpr, function: str) -> float:
    if not isinstance(expr, Number):
        raise ColorExpressionError(f"{function}() expects degrees, got {expr!r}")
    if expr.unit == "%":
        return expr.value * 3.6
    return expr.value


class ColorEngine:
    """Resolves colors against a fixed set of palettes.

    The engine is built once per registry and only read afterwards, so render
    workers may share it.
    """

    def __init__(self, palettes: Mapping[str, Palette]) -> None:
        self._raw: Dict[str, Palette] = {"default": DEFAULT_PALETTE}
        self._raw.update(palettes)
        self.diagnostics: List[Diagnostic] = []
        self._flat: Dict[str, Palette] = {}
        for name in sorted(self._raw):
            self._flat[name] = self._flatten(name, ())

    def _flatten(self, name: str, path: Tuple[str, ...]) -> Palette:
        if name in path:
            raise ColorCycleError(path[path.index(name) :] + (name,))
        if name in self._flat:
            return self._flat[name]
        palette = self._raw[name]
        if palette.inherits is None:
            return palette
        if palette.inherits not in self._raw:
            self.diagnostics.append(
                warning(
                    "missing-palette",
                    f"palette '{name}' inherits unknown palette '{palette.inherits}'",
                    names=(palette.inherits,),
                    location=palette.location,
                )
            )
            return palette
        parent = self._flatten(palette.inherits, path + (name,))
        variants = dict(parent.variants)
        for variant, overrides in palette.variants.items():
            variants[variant] = variants.get(variant, pmap()).update(overrides)
        return Palette(
            name=palette.name,
            colors=parent.colors.update(palette.colors),
            variants=pmap(variants),
            inherits=None,
            location=palette.location,
        )

    def has_palette(self, name: str) -> bool:
        return name in self._flat

    def palette(self, name: Union[str, Palette]) -> Palette:
        """Effective (inheritance-flattened) palette."""
        if isinstance(name, Palette):
            return self._flat.get(name.name, name)
        if name not in self._flat:
            raise KeyError(f"unknown palette '{name}'")
        return self._flat[name]

    def has_variant(self, palette: Union[str, Palette], variant: str) -> bool:
        return variant in self.palette(palette).variants

    def resolve(
        self,
        name: str,
        palette: Union[str, Palette],
        variant: Optional[str] = None,
        path: ResolvePath = (),
    ) -> Rgba:
        """Resolve a color name, honouring an active variant overlay.

        Raises:
            UndefinedColorError: ``name`` is not defined.
            ColorCycleError: The reference chain loops.
        """
        flat = self.palette(palette)
        overrides: PMap[str, ColorExpr] = flat.variants.get(variant, pmap()) if variant else pmap()
        # only a variant color naming itself reaches through to the base color
        in_variant = name in overrides and path[-1:] != ((name, True),)
        key = (name, in_variant)
        if key in path:
            cycle = [n for n, _ in path[path.index(key) :]] + [name]
            raise ColorCycleError(cycle)
        if in_variant:
            expr = overrides[name]
        elif name in flat.colors:
            expr = flat.colors[name]
        else:
            raise UndefinedColorError(name, flat.name)
        return self._evaluate(expr, flat, variant, path + (key,))

    def evaluate(
        self, expr: ColorExpr, palette: Union[str, Palette], variant: Optional[str] = None
    ) -> Rgba:
        """Evaluate an expression tree in the context of ``palette``."""
        return self._evaluate(expr, self.palette(palette), variant, ())

    def _evaluate(
        self, expr: ColorExpr, palette: Palette, variant: Optional[str], path: ResolvePath
    ) -> Rgba:
        if isinstance(expr, HexColor):
            return expr.color
        if isinstance(expr, ColorRef):
            return self.resolve(expr.name, palette, variant, path)
        if isinstance(expr, Number):
            raise ColorExpressionError(f"a number is not a color: {expr.value}{expr.unit}")

        function, args = expr.function, expr.args

        def color_arg(index: int) -> Rgba:
            return self._evaluate(args[index], palette, variant, path)

        if function in _AMOUNT_FUNCTIONS:
            _expect_args(expr, 2)
            return _AMOUNT_FUNCTIONS[function](color_arg(0), _amount(args[1], function))
        if function in _HUE_FUNCTIONS:
            _expect_args(expr, 2)
            return ops.hue_shift(color_arg(0), _degrees(args[1], function))
        if function == "mix":
            if len(args) == 2:
                return ops.mix(color_arg(0), color_arg(1), 0.5)
            _expect_args(expr, 3)
            return ops.mix(color_arg(0), color_arg(1), _amount(args[2], function))
        raise ColorExpressionError(f"unknown color function '{function}'")

    def color_graph(
        self, palette: Union[str, Palette], variant: Optional[str] = None
    ) -> DependencyGraph:
        """Reference graph of one palette as seen through ``variant``.

        Nodes are ``(name, overridden)`` pairs, following :meth:`resolve`: a
        variant color that refers to itself points at its base color, every
        other reference at the variant's color when it overrides one.
        """
        flat = self.palette(palette)
        overrides: PMap[str, ColorExpr] = flat.variants.get(variant, pmap()) if variant else pmap()

        def exists(node: Tuple[str, bool]) -> bool:
            name, overridden = node
            return name in overrides if overridden else name in flat.colors

        edges: Dict[Tuple[str, bool], List[Tuple[str, bool]]] = {}
        for overridden, mapping in ((False, flat.colors), (True, overrides)):
            for name, expr in mapping.items():
                targets = [
                    (ref, False) if overridden and ref == name else (ref, ref in overrides)
                    for ref in references(expr)
                ]
                edges[(name, overridden)] = [t for t in targets if exists(t)]
        return DependencyGraph.from_edges(edges)

    def color_cycle(
        self, palette: Union[str, Palette], variant: Optional[str] = None
    ) -> Optional[List[str]]:
        """Names along the first color reference cycle, start repeated.

        For a variant only cycles through one of its overrides count; the
        ones among base colors alone belong to the base palette.
        """
        graph = self.color_graph(palette, variant)
        starts = [node for node in graph.nodes if variant is None or node[1]]
        for start in starts:
            cycle = graph.find_cycle(start)
            if cycle is not None and (variant is None or any(o for _, o in cycle)):
                return [name for name, _ in cycle]
        return None


def _expect_args(expr: Call, count: int) -> None:
    if len(expr.args) != count:
        raise ColorExpressionError(
            f"{expr.function}() takes {count} arguments, got {len(expr.args)}"
        )
