"""Structured diagnostics.

The core never prints; it returns ``Diagnostic`` records and leaves
formatting to whoever consumes them. Codes are short kebab-case strings
(``missing-stamp``, ``color-cycle`` ...) so callers can filter on them.
"""

from dataclasses import dataclass
from enum import StrEnum, auto
import logging
from typing import Iterable, Optional, Tuple

from pyrsistent import pvector
from pyrsistent.typing import PVector

from px_forge.types import AssetId, Glyph, SourceLocation


logger = logging.getLogger(__name__)


class Severity(StrEnum):
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True)
class Diagnostic:
    """One problem found while building.

    Attributes:
        severity: Warning (degraded but rendered) or error (not rendered).
        code: Stable machine-readable identifier.
        message: Short description, free of formatting.
        asset: The asset that owns the problem, when known.
        symbol: The offending glyph, for glyph resolution problems.
        names: Other names involved (missing reference, cycle path ...).
        location: Source location, where available.
    """

    severity: Severity
    code: str
    message: str
    asset: Optional[AssetId] = None
    symbol: Optional[Glyph] = None
    names: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


def warning(code: str, message: str, **context: object) -> Diagnostic:
    diagnostic = Diagnostic(Severity.WARNING, code, message, **context)  # type: ignore[arg-type]
    logger.debug(f"warning [{code}] {message}")
    return diagnostic


def error(code: str, message: str, **context: object) -> Diagnostic:
    diagnostic = Diagnostic(Severity.ERROR, code, message, **context)  # type: ignore[arg-type]
    logger.debug(f"error [{code}] {message}")
    return diagnostic


Diagnostics = PVector[Diagnostic]


def collect(*groups: Iterable[Diagnostic]) -> Diagnostics:
    """Concatenate diagnostic groups in order."""
    merged: list[Diagnostic] = []
    for group in groups:
        merged.extend(group)
    return pvector(merged)



