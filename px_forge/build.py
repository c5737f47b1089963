"""Build orchestration.

Rendering runs level by level over the dependency graph: every asset on a
level depends only on lower levels, so a level fans out to a fixed worker
pool and the coordinator waits for all of it before starting the next. Workers
get an immutable snapshot of the results so far and return their render plus
diagnostics; only the coordinator assembles state.

A failing asset forfeits itself and everything that depends on it; its
siblings on the same level carry on.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
import logging
from typing import Dict, List, Optional, Set, Tuple

from pyrsistent import pmap, pset, pvector
from pyrsistent.typing import PMap, PSet, PVector

from px_forge.assets import Composition, Shader, SheetMode, Shape, DEFAULT_SHADER
from px_forge.cache import RenderCache, content_hashes, shader_hash
from px_forge.config import BuildSettings
from px_forge.diagnostics import Diagnostic, error, warning
from px_forge.errors import CycleError, PxForgeError
from px_forge.registry import Registry
from px_forge.render import (
    Placement,
    RenderedResult,
    Sheet,
    apply_effects,
    pack,
    render_composition,
    render_shape,
    scale_pixels,
)
from px_forge.types import AssetId, AssetKind


logger = logging.getLogger(__name__)

RENDERABLE = (AssetKind.SHAPE, AssetKind.PREFAB, AssetKind.MAP)

Rendered = Tuple[RenderedResult, List[Diagnostic]]


@dataclass(frozen=True)
class BuildResult:
    """Everything one build produced.

    Attributes:
        results: Raw renders keyed by asset, as compositions consumed them.
        outputs: Finished results (effects, then scale) in build order.
        sheet: Packed atlas of ``outputs`` when a sheet mode is active.
        diagnostics: Registry diagnostics, then per-asset ones in build order.
        failed: Assets that could not be rendered.
    """

    results: PMap[AssetId, RenderedResult] = field(default_factory=pmap)
    outputs: Tuple[RenderedResult, ...] = ()
    sheet: Optional[Sheet] = None
    diagnostics: PVector[Diagnostic] = field(default_factory=pvector)
    failed: PSet[AssetId] = field(default_factory=pset)

    @property
    def ok(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)

    def output(self, name: str) -> Optional[RenderedResult]:
        for result in self.outputs:
            if result.name == name:
                return result
        return None


def render_asset(
    registry: Registry,
    shader: Shader,
    asset_id: AssetId,
    done: PMap[AssetId, RenderedResult],
) -> Rendered:
    """Render one shape or composition against already rendered children."""
    asset = registry.assets[asset_id]
    if isinstance(asset, Shape):
        return render_shape(asset, shader, registry)
    if isinstance(asset, Composition):
        children: Dict[str, RenderedResult] = {}
        for value in set(asset.legend.values()):
            child_id = None if asset.is_empty(value) else registry.child(value)
            if child_id is not None and child_id in done:
                children[value] = done[child_id]
        return render_composition(asset, children)
    raise PxForgeError(f"{asset_id} is not renderable")


def _active_shader(registry: Registry, name: Optional[str]) -> Tuple[Shader, List[Diagnostic]]:
    try:
        return registry.shader(name), []
    except KeyError:
        return DEFAULT_SHADER, [
            warning("missing-shader", f"unknown shader '{name}'; using 'default'", names=(name or "",))
        ]


def _failure(asset_id: AssetId, exc: PxForgeError) -> Diagnostic:
    if isinstance(exc, CycleError):
        return error("color-cycle", str(exc), asset=asset_id, names=exc.path)
    return error("render-failed", str(exc), asset=asset_id)


def finish(result: RenderedResult, shader: Shader, scale: int) -> RenderedResult:
    """Apply post effects, then integer scaling, to one result."""
    pixels = scale_pixels(apply_effects(result.pixels, shader.effects), scale)
    placements = tuple(
        Placement(p.name, (p.position[0] * scale, p.position[1] * scale)) for p in result.placements
    )
    return replace(result, pixels=pixels, placements=placements)


def build(
    registry: Registry,
    settings: BuildSettings = BuildSettings(),
    cache: Optional[RenderCache] = None,
) -> BuildResult:
    """Render every shape, prefab and map of ``registry``."""
    shader, diagnostics = _active_shader(registry, settings.shader)
    per_asset: Dict[AssetId, List[Diagnostic]] = {}
    results: PMap[AssetId, RenderedResult] = pmap()
    failed: Set[AssetId] = set()
    hashes = content_hashes(registry) if cache is not None else {}
    shader_key = shader_hash(shader, hashes) if cache is not None else ""

    with ThreadPoolExecutor(max_workers=settings.workers) as pool:
        for depth, level in enumerate(registry.graph.levels()):
            pending: Dict[AssetId, Future] = {}
            for asset_id in level:
                if asset_id.kind not in RENDERABLE:
                    continue
                blocked = [d for d in registry.graph.dependencies(asset_id) if d in failed]
                if blocked:
                    failed.add(asset_id)
                    per_asset[asset_id] = [
                        error(
                            "dependency-failed",
                            f"{asset_id} depends on {', '.join(map(str, blocked))}, which failed",
                            asset=asset_id,
                            names=tuple(str(b) for b in blocked),
                        )
                    ]
                    continue
                if cache is not None:
                    hit = cache.get(hashes[asset_id], shader_key)
                    if hit is not None:
                        results = results.set(asset_id, hit[0])
                        per_asset[asset_id] = list(hit[1])
                        continue
                pending[asset_id] = pool.submit(render_asset, registry, shader, asset_id, results)
            for asset_id, future in pending.items():
                try:
                    result, problems = future.result()
                except PxForgeError as exc:
                    logger.warning(f"failed to render {asset_id}: {exc}")
                    failed.add(asset_id)
                    per_asset[asset_id] = [_failure(asset_id, exc)]
                    continue
                results = results.set(asset_id, result)
                per_asset[asset_id] = problems
                if cache is not None:
                    cache.put(hashes[asset_id], shader_key, (result, tuple(problems)))
            logger.debug(f"level {depth}: rendered {len(pending)} assets")

    ordered = [asset_id for asset_id in registry.order if asset_id in results]
    outputs = tuple(finish(results[asset_id], shader, settings.scale) for asset_id in ordered)
    for asset_id in registry.order:
        diagnostics.extend(per_asset.get(asset_id, []))

    sheet = None
    if settings.sheet != SheetMode.NONE and outputs:
        width = height = None
        if settings.sheet == SheetMode.FIXED and settings.sheet_size is not None:
            width, height = settings.sheet_size
        sheet = pack(outputs, padding=settings.padding, width=width, height=height)
        overflow = width is not None and height is not None and (
            sheet.width > width or sheet.height > height
        )
        if overflow:
            diagnostics.append(
                warning(
                    "sheet-overflow",
                    f"sprites need {sheet.width}x{sheet.height}, more than the fixed "
                    f"{width}x{height} sheet",
                )
            )

    logger.info(
        f"built {len(outputs)} assets, {len(failed)} failed, {len(diagnostics)} diagnostics"
    )
    return BuildResult(
        results=results,
        outputs=outputs,
        sheet=sheet,
        diagnostics=pvector(registry.diagnostics) + pvector(diagnostics),
        failed=pset(failed),
    )
