from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Pattern


@dataclass(frozen=True)
class FrameworkRegistration:
    """How to recognise a client framework's imports and which renderer handles it."""
    id: str
    factory: Callable[..., Any]  # (import_map, block, **options) -> renderer
    patterns: List[Pattern[str]] = field(default_factory=list)
    core_module: str = ""
    description: str = ""

    def matches(self, import_name: str) -> bool:
        return any(pattern.search(import_name) for pattern in self.patterns)

    def metadata(self) -> Dict[str, str]:
        return {"core_import": self.core_module, "description": self.description}
