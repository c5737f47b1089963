"""Asset registry: a mutable builder that freezes into an immutable value.

:class:`RegistryBuilder` collects definitions; :meth:`RegistryBuilder.build`
wires every "X refers to Y by name" relationship into one
:class:`~px_forge.graph.DependencyGraph`, rejects cycles, and returns a
frozen :class:`Registry`. Missing references never fail the build; they add
no edge and are left to the renderer, which substitutes a placeholder.

One registry is one build generation. Nothing mutates it after ``build``;
render workers read it concurrently.
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from px_forge.assets import (
    BUILTIN_BRUSHES,
    BUILTIN_STAMPS,
    BUILTIN_TARGETS,
    DEFAULT_SHADER,
    Asset,
    Brush,
    BrushRef,
    Composition,
    FillRef,
    Palette,
    Shader,
    Shape,
    Stamp,
    StampRef,
    Target,
    merge_shader,
)
from px_forge.color_engine import ColorEngine
from px_forge.diagnostics import Diagnostic, error, warning
from px_forge.graph import DependencyGraph
from px_forge.types import AssetId, AssetKind, Glyph


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registry:
    """Immutable, validated collection of every asset of one build.

    Attributes:
        assets: All definitions keyed by ``AssetId``.
        graph: Dependency graph, one node per registered asset.
        order: Topological build order, dependencies first.
        glyphs: Glyph to stamp name for stamps declaring a default glyph.
        colors: Color engine over the registered palettes.
        diagnostics: Warnings and non-fatal errors found while building.
    """

    assets: PMap[AssetId, Asset] = field(default_factory=pmap)
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    order: Tuple[AssetId, ...] = ()
    glyphs: PMap[Glyph, str] = field(default_factory=pmap)
    colors: ColorEngine = field(default_factory=lambda: ColorEngine({}), compare=False)
    diagnostics: PVector[Diagnostic] = field(default_factory=pvector)

    def get(self, kind: AssetKind, name: str) -> Optional[Asset]:
        return self.assets.get(AssetId(kind, name))

    def of_kind(self, kind: AssetKind) -> List[Asset]:
        return [self.assets[asset_id] for asset_id in self.order if asset_id.kind == kind]

    def stamp(self, name: str) -> Optional[Stamp]:
        """Registered stamp, else a builtin stamp of that name."""
        found = self.get(AssetKind.STAMP, name)
        return found if found is not None else BUILTIN_STAMPS.get(name)  # type: ignore[return-value]

    def brush(self, name: str) -> Optional[Brush]:
        found = self.get(AssetKind.BRUSH, name)
        return found if found is not None else BUILTIN_BRUSHES.get(name)  # type: ignore[return-value]

    def stamp_for_glyph(self, glyph: Glyph) -> Optional[Stamp]:
        name = self.glyphs.get(glyph)
        return None if name is None else self.get(AssetKind.STAMP, name)  # type: ignore[return-value]

    def child(self, name: str) -> Optional[AssetId]:
        """What a prefab/map legend value points at: a shape, else a prefab."""
        for kind in (AssetKind.SHAPE, AssetKind.PREFAB):
            asset_id = AssetId(kind, name)
            if asset_id in self.assets:
                return asset_id
        return None

    def shader(self, name: Optional[str] = None) -> Shader:
        """Effective shader with inheritance applied.

        ``None`` or ``"default"`` without a registered override gives the
        builtin default shader. An unknown parent simply ends the chain.

        Raises:
            KeyError: Unknown shader name.
        """
        name = name or DEFAULT_SHADER.name
        found = self.get(AssetKind.SHADER, name)
        if found is None:
            if name == DEFAULT_SHADER.name:
                return DEFAULT_SHADER
            raise KeyError(f"unknown shader '{name}'")
        chain: List[Shader] = [found]  # type: ignore[list-item]
        while chain[-1].inherits is not None:
            parent = self.get(AssetKind.SHADER, chain[-1].inherits)
            if parent is None and chain[-1].inherits == DEFAULT_SHADER.name:
                parent = DEFAULT_SHADER
            if parent is None:
                break
            chain.append(parent)  # type: ignore[arg-type]
        effective = chain[-1]
        for child in reversed(chain[:-1]):
            effective = merge_shader(child, effective)
        return effective

    def target(self, name: str) -> Target:
        found = self.get(AssetKind.TARGET, name)
        if found is None:
            if name in BUILTIN_TARGETS:
                return BUILTIN_TARGETS[name]
            raise KeyError(f"unknown target '{name}'")
        return found  # type: ignore[return-value]


class RegistryBuilder:
    """Collects assets, then freezes them with :meth:`build`."""

    def __init__(self) -> None:
        self._assets: Dict[AssetId, Asset] = {}
        self._diagnostics: List[Diagnostic] = []

    def register(self, asset: Asset) -> "RegistryBuilder":
        """Add ``asset``; a later definition with the same id replaces the earlier one."""
        if asset.id in self._assets:
            self._diagnostics.append(
                warning(
                    "duplicate-asset",
                    f"{asset.id} is defined more than once; the last definition wins",
                    asset=asset.id,
                    location=asset.location,
                )
            )
        self._assets[asset.id] = asset
        return self

    def register_all(self, assets: Iterable[Asset]) -> "RegistryBuilder":
        for asset in assets:
            self.register(asset)
        return self

    def build(self) -> Registry:
        """Freeze into a :class:`Registry`.

        Raises:
            GraphError: The dependency graph contains a cycle; the error's
                ``path`` names each asset once plus the repeated start.
        """
        glyphs, glyph_diagnostics = self._glyph_index()
        edges = {asset_id: self._references(asset, glyphs) for asset_id, asset in self._assets.items()}
        graph = DependencyGraph.from_edges(edges)
        order = graph.topological_order()
        palettes = {
            asset_id.name: asset
            for asset_id, asset in self._assets.items()
            if asset_id.kind == AssetKind.PALETTE
        }
        colors = ColorEngine(palettes)  # type: ignore[arg-type]
        diagnostics = self._diagnostics + glyph_diagnostics + colors.diagnostics
        diagnostics += self._color_cycles(colors, sorted(palettes))
        logger.debug(f"registry built: {len(order)} assets, {len(diagnostics)} diagnostics")
        return Registry(
            assets=pmap(self._assets),
            graph=graph,
            order=order,  # type: ignore[arg-type]
            glyphs=pmap(glyphs),
            colors=colors,
            diagnostics=pvector(diagnostics),
        )

    def _glyph_index(self) -> Tuple[Dict[Glyph, str], List[Diagnostic]]:
        glyphs: Dict[Glyph, str] = {}
        diagnostics: List[Diagnostic] = []
        stamps = sorted(
            (a for a in self._assets.values() if isinstance(a, Stamp) and a.glyph),
            key=lambda s: s.name,
        )
        for stamp in stamps:
            glyph = stamp.glyph
            if glyph in glyphs:
                diagnostics.append(
                    warning(
                        "ambiguous-glyph",
                        f"glyph '{glyph}' is declared by stamps '{glyphs[glyph]}' and "
                        f"'{stamp.name}'; using '{glyphs[glyph]}'",
                        asset=stamp.id,
                        symbol=glyph,
                        names=(glyphs[glyph], stamp.name),
                        location=stamp.location,
                    )
                )
                continue
            glyphs[glyph] = stamp.name  # type: ignore[index]
        return glyphs, diagnostics

    def _exists(self, kind: AssetKind, name: Optional[str]) -> Optional[AssetId]:
        if name is None:
            return None
        asset_id = AssetId(kind, name)
        return asset_id if asset_id in self._assets else None

    def _references(self, asset: Asset, glyphs: Dict[Glyph, str]) -> List[AssetId]:
        found: List[Optional[AssetId]] = []
        if isinstance(asset, Palette):
            found.append(self._exists(AssetKind.PALETTE, asset.inherits))
        elif isinstance(asset, Shader):
            found.append(self._exists(AssetKind.PALETTE, asset.palette))
            found.append(self._exists(AssetKind.SHADER, asset.inherits))
        elif isinstance(asset, Shape):
            for glyph, entry in asset.legend.items():
                if isinstance(entry, StampRef):
                    found.append(self._exists(AssetKind.STAMP, entry.stamp))
                elif isinstance(entry, (BrushRef, FillRef)):
                    found.append(self._exists(AssetKind.BRUSH, entry.brush))
            for glyph in {g for row in asset.grid for g in row}:
                if glyph not in asset.legend and glyph in glyphs:
                    found.append(self._exists(AssetKind.STAMP, glyphs[glyph]))
        elif isinstance(asset, Composition):
            for value in asset.legend.values():
                if asset.is_empty(value):
                    continue
                found.append(
                    self._exists(AssetKind.SHAPE, value) or self._exists(AssetKind.PREFAB, value)
                )
        elif isinstance(asset, Target):
            found.append(self._exists(AssetKind.SHADER, asset.shader))
        return sorted({ref for ref in found if ref is not None}, key=AssetId.sort_key)

    @staticmethod
    def _color_cycles(colors: ColorEngine, palettes: List[str]) -> List[Diagnostic]:
        diagnostics = []
        for name in palettes:
            palette = colors.palette(name)
            for variant in [None, *sorted(palette.variants)]:
                cycle = colors.color_cycle(name, variant)
                if cycle is None:
                    continue
                where = f"palette '{name}'" + (f" variant '{variant}'" if variant else "")
                diagnostics.append(
                    error(
                        "color-cycle",
                        f"{where} has a color cycle: {' -> '.join(cycle)}",
                        asset=AssetId(AssetKind.PALETTE, name),
                        names=tuple(cycle),
                        location=palette.location,
                    )
                )
        return diagnostics


def build_registry(assets: Iterable[Asset]) -> Registry:
    return RegistryBuilder().register_all(assets).build()
