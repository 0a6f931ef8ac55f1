from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class DependencyFindings:
    """Dependencies inferred from a script block.

    Findings are cached and shared between callers, so every field is stored
    as a tuple whatever iterable it was built from.
    """
    external: Tuple[str, ...] = ()  # canonical library ids, first-detection order
    local: Tuple[str, ...] = ()  # capitalized identifiers that look like app modules
    suggestions: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("external", "local", "suggestions"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    def is_empty(self) -> bool:
        return not self.external and not self.local


@dataclass(frozen=True)
class ComplexityReport:
    """Rough size metrics for a script block and what to do about them."""
    lines: int
    functions: int
    classes: int
    event_listeners: int
    suggestions: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "suggestions", _as_tuple(self.suggestions))


def _as_tuple(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(values)
