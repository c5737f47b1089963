"""Prefabs and maps: uniform-cell placements of shapes and prefabs.

Both share one structure. A map differs only in that its legend may use the
reserved value ``empty``, which always means a transparent cell.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.types import AssetId, AssetKind, Glyph, SourceLocation


EMPTY = "empty"


@dataclass(frozen=True)
class Composition:
    name: str
    grid: Tuple[str, ...]
    legend: PMap[Glyph, str] = field(default_factory=pmap)
    tags: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    kind = AssetKind.PREFAB

    @property
    def id(self) -> AssetId:
        return AssetId(self.kind, self.name)

    def is_empty(self, value: str) -> bool:
        """True when ``value`` is the reserved transparent cell marker."""
        return False


@dataclass(frozen=True)
class Prefab(Composition):
    kind = AssetKind.PREFAB


@dataclass(frozen=True)
class Map(Composition):
    kind = AssetKind.MAP

    def is_empty(self, value: str) -> bool:
        return value == EMPTY
