"""Exception hierarchy.

Only structural problems and malformed input raise. Reference misses are
recoverable and travel as :class:`px_forge.diagnostics.Diagnostic` records.
"""

from typing import Sequence, Tuple


class PxForgeError(ValueError):
    """Base class of every error raised by the package."""


class DocumentError(PxForgeError):
    """A document record could not be turned into an asset."""


class ColorExpressionError(PxForgeError):
    """A hex literal or color expression is malformed."""


class UndefinedColorError(PxForgeError):
    """A color name is absent from the active palette."""

    def __init__(self, name: str, palette: str) -> None:
        super().__init__(f"color '${name}' is not defined in palette '{palette}'")
        self.name = name
        self.palette = palette


class CycleError(PxForgeError):
    """A chain of references loops back on itself.

    ``path`` lists each node once in discovery order followed by the repeated
    start node, e.g. ``("a", "b", "a")``.
    """

    def __init__(self, path: Sequence[object], what: str = "reference") -> None:
        self.path: Tuple[str, ...] = tuple(str(node) for node in path)
        super().__init__(f"{what} cycle: {' -> '.join(self.path)}")


class GraphError(CycleError):
    """The asset dependency graph contains a cycle."""

    def __init__(self, path: Sequence[object]) -> None:
        super().__init__(path, what="dependency")


class ColorCycleError(CycleError):
    """Color references or palette inheritance loop back on themselves."""

    def __init__(self, path: Sequence[object]) -> None:
        super().__init__(path, what="color")
