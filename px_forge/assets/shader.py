"""Shaders: render profiles binding a palette, a variant and post effects.

Effects form a closed set of frozen records; anything unrecognised is kept
as :class:`CustomEffect` so it survives a round trip without being applied.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.errors import DocumentError
from px_forge.types import AssetId, AssetKind, SourceLocation


@dataclass(frozen=True)
class Vignette:
    strength: float = 0.5


@dataclass(frozen=True)
class Scanlines:
    opacity: float = 0.5
    gap: int = 2


@dataclass(frozen=True)
class Brightness:
    amount: float = 0.0


@dataclass(frozen=True)
class Contrast:
    amount: float = 0.0


@dataclass(frozen=True)
class CustomEffect:
    name: str
    params: PMap[str, Any] = field(default_factory=pmap)


Effect = Union[Vignette, Scanlines, Brightness, Contrast, CustomEffect]


@dataclass(frozen=True)
class Shader:
    name: str
    palette: Optional[str] = None
    variant: Optional[str] = None
    inherits: Optional[str] = None
    effects: Tuple[Effect, ...] = ()
    location: Optional[SourceLocation] = None

    kind = AssetKind.SHADER

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)


def merge_shader(child: Shader, parent: Shader) -> Shader:
    """Apply inheritance: unset fields come from ``parent``, effects stack."""
    return Shader(
        name=child.name,
        palette=child.palette or parent.palette,
        variant=child.variant or parent.variant,
        inherits=None,
        effects=parent.effects + child.effects,
        location=child.location,
    )


def _float(params: Mapping[str, Any], key: str, default: float) -> float:
    value = params.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise DocumentError(f"effect parameter '{key}' must be a number, got {value!r}") from exc


def parse_effect(spec: Mapping[str, Any]) -> Effect:
    """Build an effect from a mapping like ``{"type": "vignette", "strength": 0.3}``."""
    params = dict(spec)
    kind = str(params.pop("type", params.pop("name", ""))).strip().lower()
    if not kind:
        raise DocumentError(f"effect without a type: {dict(spec)!r}")
    if kind == "vignette":
        return Vignette(_float(params, "strength", 0.5))
    if kind == "scanlines":
        return Scanlines(_float(params, "opacity", 0.5), int(_float(params, "gap", 2)))
    if kind == "brightness":
        return Brightness(_float(params, "amount", 0.0))
    if kind == "contrast":
        return Contrast(_float(params, "amount", 0.0))
    return CustomEffect(kind, pmap(params))


DEFAULT_SHADER = Shader(name="default", palette="default")
