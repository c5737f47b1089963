"""The input record produced by an external text parser.

The core never sees source syntax; it only consumes this shape.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from pyrsistent import pmap
from pyrsistent.typing import PMap

from px_forge.types import SourceLocation


@dataclass(frozen=True)
class Document:
    """One definition as parsed from source.

    Attributes:
        kind: Asset kind tag (``palette``, ``stamp``, ``shape`` ...).
        name: Asset name.
        header: String-keyed header values.
        body: Raw body text (a grid or settings).
        legend: Optional symbol to value table. Values are strings or,
            for inline brush legends, mappings.
        location: Location of the first body line.
    """

    kind: str
    name: str
    header: PMap[str, Any] = field(default_factory=pmap)
    body: str = ""
    legend: PMap[str, Any] = field(default_factory=pmap)
    location: Optional[SourceLocation] = None
