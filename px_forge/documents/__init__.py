"""Document model consumed from the external parser, and its loader."""

from .document import Document
from .loader import (
    grid_rows,
    load_document,
    load_documents,
    load_registry,
    parse_legend_value,
    parse_tags,
)

__all__ = [
    "Document",
    "grid_rows",
    "load_document",
    "load_documents",
    "load_registry",
    "parse_legend_value",
    "parse_tags",
]
