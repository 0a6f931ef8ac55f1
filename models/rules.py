from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Pattern


@dataclass(frozen=True)
class LibraryRule:
    """Maps one usage pattern to the canonical id of an external library."""
    name: str  # canonical library id, e.g. 'jquery'
    pattern: Pattern[str]
    cdn_url: Optional[str] = None  # default location offered in the import suggestion


@dataclass(frozen=True)
class LocalModuleRules:
    """Structural patterns that capture capitalized identifiers, and the globals to ignore."""
    patterns: List[Pattern[str]] = field(default_factory=list)
    excluded_globals: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DependencyRules:
    external: List[LibraryRule] = field(default_factory=list)
    local: LocalModuleRules = field(default_factory=LocalModuleRules)

    def cdn_url_for(self, name: str) -> Optional[str]:
        for rule in self.external:
            if rule.name == name and rule.cdn_url:
                return rule.cdn_url
        return None
