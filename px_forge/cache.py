"""Content-hash render cache.

An asset's content hash is the sha256 of its canonical definition followed by
the content hashes of everything it depends on. A change anywhere upstream
therefore changes every downstream hash, and a cache keyed on those hashes
can never serve a stale render.
"""

from dataclasses import fields, is_dataclass
from enum import Enum
import hashlib
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from px_forge.assets import DEFAULT_PALETTE, Shader
from px_forge.diagnostics import Diagnostic
from px_forge.registry import Registry
from px_forge.render.result import RenderedResult
from px_forge.types import AssetId, AssetKind


logger = logging.getLogger(__name__)

_IGNORED_FIELDS = frozenset({"location"})


def canonical(value: Any) -> Any:
    """JSON-ready form of a definition, independent of insertion order."""
    if is_dataclass(value) and not isinstance(value, type):
        body = {
            f.name: canonical(getattr(value, f.name))
            for f in fields(value)
            if f.name not in _IGNORED_FIELDS
        }
        return {"__type__": type(value).__name__, **body}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        items = [[canonical(k), canonical(v)] for k, v in value.items()]
        return sorted(items, key=lambda item: json.dumps(item[0], sort_keys=True))
    if isinstance(value, (set, frozenset)):
        return sorted((canonical(v) for v in value), key=lambda v: json.dumps(v, sort_keys=True))
    if isinstance(value, (list, tuple)):
        return [canonical(v) for v in value]
    return value


def definition_hash(value: Any) -> str:
    encoded = json.dumps(canonical(value), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def content_hashes(registry: Registry) -> Dict[AssetId, str]:
    """Transitive content hash of every registered asset."""
    hashes: Dict[AssetId, str] = {}
    for asset_id in registry.order:
        digest = hashlib.sha256(definition_hash(registry.assets[asset_id]).encode("utf-8"))
        for dep in registry.graph.dependencies(asset_id):
            digest.update(f"|{dep}={hashes[dep]}".encode("utf-8"))
        hashes[asset_id] = digest.hexdigest()
    return hashes


def shader_hash(shader: Shader, hashes: Mapping[AssetId, str]) -> str:
    """Hash of everything a shader contributes to a render."""
    palette_id = AssetId(AssetKind.PALETTE, shader.palette or "default")
    palette = hashes.get(palette_id) or definition_hash(DEFAULT_PALETTE)
    return hashlib.sha256(f"{definition_hash(shader)}|{palette}".encode("utf-8")).hexdigest()


def changed(old: Mapping[AssetId, str], new: Mapping[AssetId, str]) -> List[AssetId]:
    """Assets whose hash differs between two generations (new ones included)."""
    return sorted((i for i, h in new.items() if old.get(i) != h), key=AssetId.sort_key)


CacheEntry = Tuple[RenderedResult, Tuple[Diagnostic, ...]]


class RenderCache:
    """Maps ``(content hash, shader hash)`` to a finished render.

    Only the build coordinator touches the cache, between levels; workers
    never see it.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, content: str, shader: str) -> Optional[CacheEntry]:
        entry = self._entries.get((content, shader))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, content: str, shader: str, entry: CacheEntry) -> None:
        self._entries[(content, shader)] = entry

    def prune(self, live: Mapping[AssetId, str]) -> int:
        """Drop entries whose content hash is no longer live; returns the count."""
        keep = set(live.values())
        stale = [key for key in self._entries if key[0] not in keep]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"pruned {len(stale)} stale cache entries")
        return len(stale)
