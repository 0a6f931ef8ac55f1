"""Compose an import map and a script block into one module script tag."""
import logging
import re
from typing import Dict, List, Optional, Set, Tuple

from core.cache import content_key, get_cache
from core.dependency_analyzer import DependencyAnalyzer
from models.findings import ComplexityReport, DependencyFindings
from models.import_map import ImportMap

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*$")
INTERNAL_CAPITAL_PATTERN = re.compile(r"[a-z][A-Z]")

CACHE_PARTITIONS = ("script_content", "import_statements", "processed_js")

LARGE_BLOCK_CHARS = 5000
LARGE_IMPORT_COUNT = 20
LARGE_BLOCK_LINES = 100


def looks_like_identifier(name: str) -> bool:
    """True for names that read as a binding: ``Foo`` or ``fooBar``, not ``lodash`` or ``@scope/pkg``."""
    if not IDENTIFIER_PATTERN.match(name):
        return False
    return name[0].isupper() or INTERNAL_CAPITAL_PATTERN.search(name) is not None


def import_statement(name: str) -> str:
    if looks_like_identifier(name):
        return f'import {name} from "{name}";'
    return f'import "{name}";'


def wrap_in_script_tag(content: str) -> str:
    if not content.strip():
        return ""
    return f'<script type="module">\n{content}\n</script>'


class ScriptRenderer:
    """Framework-agnostic renderer.

    Subclasses customise output through ``process`` (the user block filter)
    and, when they emit extra code, ``generate_import_statements`` and
    ``generate_body``. Any renderer state those overrides depend on must be
    reflected in ``_state_key`` so cached results stay correct.
    """

    def __init__(
        self,
        import_map: ImportMap,
        block: str = "",
        enable_dependency_analysis: bool = True,
        analyzer: Optional[DependencyAnalyzer] = None,
    ):
        self.import_map = import_map
        self.block = block or ""
        self.enable_dependency_analysis = enable_dependency_analysis
        self.analyzer: Optional[DependencyAnalyzer] = None
        if enable_dependency_analysis:
            self.analyzer = analyzer or DependencyAnalyzer()

    # Cache keys

    def _state_key(self) -> str:
        return ""

    def _key(self, *parts: str) -> str:
        return content_key(type(self).__name__, self._state_key(), *parts)

    def _import_key(self) -> str:
        return self._key(self.import_map.content_key())

    def _process_key(self) -> str:
        return self._key(self.block)

    # Rendering

    def render(self) -> str:
        """Render the complete ``<script type="module">`` tag, or ``""`` when there is nothing to emit."""
        return wrap_in_script_tag(self.generate_script_content())

    def render_with_analysis(self) -> str:
        """Render like ``render`` with a warning comment per missing dependency after the imports."""
        warnings = "\n".join(f"// WARNING: {suggestion}" for suggestion in self.missing_dependency_suggestions())
        head = "\n".join(part for part in (self.generate_import_statements(), warnings) if part)
        return wrap_in_script_tag(self._join(head, self.generate_body()))

    def generate_script_content(self) -> str:
        key = self._key(self.import_map.content_key(), self.block)
        return get_cache("script_content").get_or_compute(
            key, lambda: self._join(self.generate_import_statements(), self.generate_body())
        )

    def generate_import_statements(self) -> str:
        return get_cache("import_statements").get_or_compute(self._import_key(), self._build_import_statements)

    def _build_import_statements(self) -> str:
        return "\n".join(import_statement(entry.name) for entry in self.import_map)

    def generate_body(self) -> str:
        return self.processed_block()

    def processed_block(self) -> str:
        return get_cache("processed_js").get_or_compute(self._process_key(), lambda: self.process(self.block))

    def process(self, block: str) -> str:
        """Transform the user block before emission; the base renderer only trims it."""
        return block.strip()

    @staticmethod
    def _join(*parts: str) -> str:
        return "\n\n".join(part for part in parts if part)

    # Analysis

    def analyze_dependencies(self) -> DependencyFindings:
        if self.analyzer is None:
            return DependencyFindings()
        return self.analyzer.analyze(self.block)

    def missing_dependencies(self) -> DependencyFindings:
        """Detected dependencies that neither the import map nor the block's own imports provide."""
        findings = self.analyze_dependencies()
        if findings.is_empty():
            return DependencyFindings()

        provided = self.provided_names()
        external = [name for name in findings.external if name not in provided]
        local = [name for name in findings.local if name not in provided]
        return DependencyFindings(
            external=external,
            local=local,
            suggestions=self.analyzer.generate_suggestions(external, local),
        )

    def provided_names(self) -> Set[str]:
        """Names already importable: the import map plus specifiers the block imports itself."""
        provided = set(self.import_map.names())
        if self.analyzer is not None:
            provided.update(self.analyzer.extract_existing_imports(self.block))
        return provided

    def missing_dependency_suggestions(self) -> Tuple[str, ...]:
        return self.missing_dependencies().suggestions

    def import_suggestions(self) -> Tuple[str, ...]:
        return self.analyze_dependencies().suggestions

    def analyze_complexity(self) -> Optional[ComplexityReport]:
        if self.analyzer is None:
            return None
        return self.analyzer.analyze_complexity(self.block)

    def uses_module_syntax(self) -> bool:
        if self.analyzer is None:
            return False
        return self.analyzer.uses_module_syntax(self.block)

    def validate_configuration(self) -> Dict[str, List[str]]:
        issues = []
        suggestions = []

        if len(self.block) > LARGE_BLOCK_CHARS:
            issues.append(f"Large JavaScript block detected ({len(self.block)} characters)")
            suggestions.append("Consider splitting large JavaScript blocks into separate modules")

        if len(self.import_map) > LARGE_IMPORT_COUNT:
            suggestions.append("Large number of imports detected - consider bundling for production")

        complexity = self.analyze_complexity()
        if complexity is not None and complexity.lines > LARGE_BLOCK_LINES:
            suggestions.append("Consider splitting complex JavaScript into multiple files")

        return {"issues": issues, "suggestions": suggestions}

    def generate_development_report(self) -> str:
        """Summarise what the analyzer found; meant for development logs, not for pages."""
        if self.analyzer is None:
            return "Dependency analysis disabled"

        findings = self.analyze_dependencies()
        complexity = self.analyze_complexity()

        report = [f"=== {type(self).__name__} Development Report ===", ""]
        report.append(f"External dependencies detected: {', '.join(findings.external)}")
        report.append(f"Local modules detected: {', '.join(findings.local)}")
        report.append("")

        report.append("Code complexity:")
        report.append(f"  - Lines: {complexity.lines}")
        report.append(f"  - Functions: {complexity.functions}")
        report.append(f"  - Classes: {complexity.classes}")
        report.append(f"  - Event listeners: {complexity.event_listeners}")
        report.append(f"  - Uses module syntax: {str(self.uses_module_syntax()).lower()}")
        report.append("")

        if findings.suggestions:
            report.append("Import suggestions:")
            report.extend(f"  - {s}" for s in findings.suggestions)
            report.append("")

        if complexity.suggestions:
            report.append("Code organization suggestions:")
            report.extend(f"  - {s}" for s in complexity.suggestions)
            report.append("")

        report.append("=== End Report ===")
        return "\n".join(report)

    # Cache maintenance

    @staticmethod
    def cache_stats() -> Dict[str, int]:
        return {f"{name}_cache_size": get_cache(name).size() for name in CACHE_PARTITIONS}

    @staticmethod
    def clear_caches() -> None:
        for name in CACHE_PARTITIONS:
            get_cache(name).clear()
