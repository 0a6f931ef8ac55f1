"""Heuristic dependency detection over raw JavaScript text.

Nothing here parses JavaScript. Every detection is a regular expression from
the pattern tables in ``rules/``, so any string is accepted and unusual code
simply produces fewer (or spurious) matches. The local-module heuristic in
particular is approximate: a capitalized identifier that is not a known
platform global is assumed to be an application module.
"""
import logging
import re
from typing import List, Optional, Tuple

from core.cache import content_key, get_cache
from models.findings import ComplexityReport, DependencyFindings
from models.rules import DependencyRules
from rules.rules_loader import get_default_rules

logger = logging.getLogger(__name__)

IMPORTABLE_CLASS_PATTERN = re.compile(r"^[A-Z][a-zA-Z0-9_]*$")

STATIC_IMPORT_PATTERN = re.compile(
    r"import\s+(?:(?:\{[^}]+\}|\*\s+as\s+\w+|\w+)(?:\s*,\s*(?:\{[^}]+\}|\*\s+as\s+\w+|\w+))*\s+from\s+)?[\"']([^\"']+)[\"']"
)
DYNAMIC_IMPORT_PATTERN = re.compile(r"import\s*\(\s*[\"']([^\"']+)[\"']\s*\)")

FUNCTION_DECLARATION_PATTERN = re.compile(r"function\s+\w+")
ASSIGNED_FUNCTION_PATTERN = re.compile(r"(?:const|let|var)\s+\w+\s*=\s*(?:function|\()")
METHOD_PATTERN = re.compile(r"^\s*(?:constructor|[a-zA-Z_][a-zA-Z0-9_]*)\s*\(", re.MULTILINE)
CLASS_PATTERN = re.compile(r"class\s+\w+")
EVENT_LISTENER_PATTERN = re.compile(r"addEventListener|on\w+\s*=")

# Policy thresholds for complexity suggestions
MAX_LINES = 50
MAX_FUNCTIONS = 5
MAX_EVENT_LISTENERS = 3


def _rules_fingerprint(rules: DependencyRules) -> str:
    parts = [f"{rule.name}={rule.pattern.pattern}={rule.cdn_url or ''}" for rule in rules.external]
    parts.extend(pattern.pattern for pattern in rules.local.patterns)
    parts.extend(sorted(rules.local.excluded_globals))
    return content_key(*parts)


class DependencyAnalyzer:
    """Classify the libraries and modules a script block refers to.

    Results are memoized per block content in the ``dependencies``,
    ``existing_imports`` and ``complexity`` cache partitions. An analyzer built
    with custom rules keys its entries by a fingerprint of those rules so it
    never reads results computed with the bundled tables.
    """

    def __init__(self, rules: Optional[DependencyRules] = None):
        self.rules = rules if rules is not None else get_default_rules()
        self._namespace = "default" if rules is None else _rules_fingerprint(rules)

    def _key(self, block: str) -> str:
        return content_key(self._namespace, block)

    def analyze(self, block: str) -> DependencyFindings:
        """Detect external and local dependencies and build remediation suggestions."""
        return get_cache("dependencies").get_or_compute(self._key(block), lambda: self._analyze(block))

    def _analyze(self, block: str) -> DependencyFindings:
        external = self.detect_external(block)
        local = self.detect_local(block)
        logger.debug(f"Detected {len(external)} external and {len(local)} local dependencies")
        return DependencyFindings(
            external=external,
            local=local,
            suggestions=self.generate_suggestions(external, local),
        )

    def detect_external(self, block: str) -> List[str]:
        detected: List[str] = []
        for rule in self.rules.external:
            if rule.name not in detected and rule.pattern.search(block):
                detected.append(rule.name)
        return detected

    def detect_local(self, block: str) -> List[str]:
        detected: List[str] = []
        for pattern in self.rules.local.patterns:
            for match in pattern.finditer(block):
                name = match.group(1)
                if name and name not in detected and self.looks_like_importable_class(name):
                    detected.append(name)
        return detected

    def looks_like_importable_class(self, name: str) -> bool:
        if not IMPORTABLE_CLASS_PATTERN.match(name):
            return False
        return name not in self.rules.local.excluded_globals

    def generate_suggestions(self, external: List[str], local: List[str]) -> List[str]:
        suggestions = []
        for name in external:
            cdn_url = self.rules.cdn_url_for(name)
            if cdn_url:
                suggestions.append(f'Add to import map: import_map.add_import("{name}", "{cdn_url}")')
            else:
                suggestions.append(f"Consider adding '{name}' to your import map")

        for name in local:
            suggestions.append(
                f'Consider adding local module: import_map.add_import("{name}", "path/to/{name.lower()}.js")'
            )
        return suggestions

    def extract_existing_imports(self, block: str) -> Tuple[str, ...]:
        """Module specifiers of the static and dynamic imports already in the block."""
        return get_cache("existing_imports").get_or_compute(
            self._key(block), lambda: self._extract_existing_imports(block)
        )

    def _extract_existing_imports(self, block: str) -> Tuple[str, ...]:
        specifiers: List[str] = []
        for pattern in (STATIC_IMPORT_PATTERN, DYNAMIC_IMPORT_PATTERN):
            for match in pattern.finditer(block):
                if match.group(1) not in specifiers:
                    specifiers.append(match.group(1))
        return tuple(specifiers)

    def uses_module_syntax(self, block: str) -> bool:
        return "import " in block or "export " in block or "import(" in block

    def analyze_complexity(self, block: str) -> ComplexityReport:
        return get_cache("complexity").get_or_compute(self._key(block), lambda: self._analyze_complexity(block))

    def _analyze_complexity(self, block: str) -> ComplexityReport:
        lines = [line for line in block.split("\n") if line.strip()]
        functions = (
            len(FUNCTION_DECLARATION_PATTERN.findall(block))
            + len(ASSIGNED_FUNCTION_PATTERN.findall(block))
            + len(METHOD_PATTERN.findall(block))
        )
        classes = len(CLASS_PATTERN.findall(block))
        event_listeners = len(EVENT_LISTENER_PATTERN.findall(block))

        suggestions = []
        if len(lines) > MAX_LINES:
            suggestions.append("Consider splitting large JavaScript blocks into separate modules")
        if functions > MAX_FUNCTIONS:
            suggestions.append("Consider organizing functions into classes or modules")
        if event_listeners > MAX_EVENT_LISTENERS:
            suggestions.append("Consider using a framework like Stimulus for event handling")

        return ComplexityReport(
            lines=len(lines),
            functions=functions,
            classes=classes,
            event_listeners=event_listeners,
            suggestions=suggestions,
        )
