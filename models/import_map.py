import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

CONTROLLER_NAME_PATTERN = re.compile(r"^[A-Z][a-zA-Z0-9_]*Controller$")

# (pattern, type, framework) checked in order by auto_categorize_imports
_CATEGORY_RULES = [
    (re.compile(r"@hotwired/stimulus|stimulus"), "framework", "stimulus"),
    (re.compile(r"alpinejs|alpine"), "framework", "alpine"),
    (re.compile(r"vue"), "framework", "vue"),
    (re.compile(r"react"), "framework", "react"),
    (re.compile(r"lodash|underscore|jquery|axios|fetch"), "library", None),
]


@dataclass
class ImportMapEntry:
    """A single importable module name and where it resolves to."""
    name: str
    location: str
    preload: bool = False
    type: Optional[str] = None  # e.g. 'controller', 'library', 'utility', 'framework'
    framework: Optional[str] = None  # e.g. 'stimulus', 'alpine', None for agnostic

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "location": self.location, "preload": self.preload}
        if self.type is not None:
            data["type"] = self.type
        if self.framework is not None:
            data["framework"] = self.framework
        return data


@dataclass
class ImportMap:
    """Ordered registry of importable names plus scope overrides.

    Renderers only read an import map. The two annotation helpers,
    ``categorize`` and ``auto_categorize_imports``, may backfill ``type`` and
    ``framework`` on existing entries but never add, drop or reorder them.
    """
    name: str = "application"
    entries: List[ImportMapEntry] = field(default_factory=list)
    scopes: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def add_import(self, name: str, location: str, preload: bool = False) -> ImportMapEntry:
        return self.add_import_with_metadata(name, location, preload=preload)

    def add_import_with_metadata(
        self,
        name: str,
        location: str,
        preload: bool = False,
        type: Optional[str] = None,
        framework: Optional[str] = None,
    ) -> ImportMapEntry:
        """Append an entry, keeping names unique within the map.

        Raises:
            ValueError: If ``name`` is empty or already present.
        """
        if not name:
            raise ValueError("Import name must not be empty")
        if name in self:
            raise ValueError(f"Import '{name}' is already present in import map '{self.name}'")
        entry = ImportMapEntry(name=name, location=location, preload=preload, type=type, framework=framework)
        self.entries.append(entry)
        return entry

    def add_scope(self, scope: str, name: str, location: str) -> None:
        if not scope.startswith(("/", "./", "../")):
            raise ValueError("Scope key must start with `/`, `./`, or `../`")
        self.scopes.setdefault(scope, {})[name] = location

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def get(self, name: str) -> Optional[ImportMapEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self.entries)

    def __iter__(self) -> Iterator[ImportMapEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def imports_by_type(self, type: str) -> List[ImportMapEntry]:
        return [entry for entry in self.entries if entry.type == type]

    def imports_by_framework(self, framework: str) -> List[ImportMapEntry]:
        return [entry for entry in self.entries if entry.framework == framework]

    def framework_agnostic_imports(self) -> List[ImportMapEntry]:
        return [entry for entry in self.entries if entry.framework is None]

    def controller_imports(self, framework: str = "stimulus") -> List[ImportMapEntry]:
        return [
            entry for entry in self.entries
            if entry.type == "controller" and entry.framework == framework
        ]

    def categorize(self, name: str, type: Optional[str] = None, framework: Optional[str] = None) -> ImportMapEntry:
        """Backfill type/framework tags on an existing entry.

        Raises:
            KeyError: If ``name`` is not in the map.
        """
        entry = self.get(name)
        if entry is None:
            raise KeyError(name)
        if type is not None:
            entry.type = type
        if framework is not None:
            entry.framework = framework
        return entry

    def auto_categorize_imports(self) -> None:
        """Tag uncategorized entries from their names.

        Entries that already carry a type or framework are left alone.
        """
        for entry in self.entries:
            if entry.type is not None or entry.framework is not None:
                continue

            if CONTROLLER_NAME_PATTERN.match(entry.name):
                entry.type, entry.framework = "controller", "stimulus"
                continue

            for pattern, type_, framework in _CATEGORY_RULES:
                if pattern.search(entry.name):
                    entry.type, entry.framework = type_, framework
                    break
            else:
                entry.type = "utility"
            logger.debug(f"Categorized import '{entry.name}' as {entry.type} ({entry.framework})")

    def import_summary(self) -> Dict[str, Dict[str, int]]:
        types: Dict[str, int] = {}
        frameworks: Dict[str, int] = {}
        for entry in self.entries:
            if entry.type:
                types[entry.type] = types.get(entry.type, 0) + 1
            if entry.framework:
                frameworks[entry.framework] = frameworks.get(entry.framework, 0) + 1
        return {"types": types, "frameworks": frameworks}

    def content_key(self) -> str:
        """Hash of the ordered entries; order matters because it drives emission order."""
        digest = hashlib.sha256()
        for entry in self.entries:
            digest.update(f"{entry.name}\x1f{entry.location}\x1e".encode("utf-8"))
        return digest.hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "imports": [entry.to_dict() for entry in self.entries],
            "scopes": {scope: dict(names) for scope, names in self.scopes.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportMap":
        """Build an import map from its plain dict form.

        ``imports`` may be a list of entry dicts or a ``{name: location}``
        mapping, the shape of a browser import map's ``imports`` object.
        """
        import_map = cls(name=data.get("name", "application"))
        imports = data.get("imports") or []
        if isinstance(imports, dict):
            imports = [{"name": name, "location": location} for name, location in imports.items()]
        for item in imports:
            if not isinstance(item, dict) or "name" not in item or "location" not in item:
                raise ValueError(f"Invalid import map entry: {item!r}")
            import_map.add_import_with_metadata(
                item["name"],
                item["location"],
                preload=bool(item.get("preload", False)),
                type=item.get("type"),
                framework=item.get("framework"),
            )
        for scope, names in (data.get("scopes") or {}).items():
            for name, location in names.items():
                import_map.add_scope(scope, name, location)
        return import_map
