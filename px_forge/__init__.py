"""px-forge: compile declarative pixel-art definitions into RGBA buffers.

Typical use::

    from px_forge import Document, build, load_registry

    registry = load_registry(documents)
    result = build(registry)

The pieces, leaves first: :mod:`~px_forge.documents` turns parsed records
into frozen assets, :mod:`~px_forge.registry` freezes them into an immutable
registry with a dependency graph, :mod:`~px_forge.color_engine` resolves
colors, :mod:`~px_forge.render` draws shapes and compositions and packs
sheets, and :mod:`~px_forge.build` runs it all level by level.
"""

from px_forge.build import BuildResult, build, render_asset
from px_forge.cache import RenderCache, content_hashes
from px_forge.color_engine import ColorEngine
from px_forge.config import BuildSettings, merge_settings
from px_forge.diagnostics import Diagnostic, Severity
from px_forge.documents import Document, load_document, load_documents, load_registry
from px_forge.errors import (
    ColorCycleError,
    ColorExpressionError,
    CycleError,
    DocumentError,
    GraphError,
    PxForgeError,
    UndefinedColorError,
)
from px_forge.registry import Registry, RegistryBuilder, build_registry
from px_forge.types import AssetId, AssetKind, SourceLocation
from px_forge.validation import validate

__all__ = [
    "AssetId",
    "AssetKind",
    "BuildResult",
    "BuildSettings",
    "ColorCycleError",
    "ColorEngine",
    "ColorExpressionError",
    "CycleError",
    "Diagnostic",
    "Document",
    "DocumentError",
    "GraphError",
    "PxForgeError",
    "Registry",
    "RegistryBuilder",
    "RenderCache",
    "Severity",
    "SourceLocation",
    "UndefinedColorError",
    "build",
    "build_registry",
    "content_hashes",
    "load_document",
    "load_documents",
    "load_registry",
    "merge_settings",
    "render_asset",
    "validate",
]
