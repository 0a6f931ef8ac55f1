import logging
import os
import re
from typing import Any, List, Optional

import yaml

from models.rules import DependencyRules, LibraryRule, LocalModuleRules

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
EXTERNAL_RULES_FILE = "external_libraries.yaml"
LOCAL_RULES_FILE = "local_modules.yaml"

_default_rules: Optional[DependencyRules] = None


def _read_yaml(path: str) -> Any:
    if not os.path.exists(path):
        logger.warning(f"Rules file not found: {path}")
        return None
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _compile(pattern: Any, source: str) -> Optional[re.Pattern]:
    if not isinstance(pattern, str) or not pattern:
        logger.warning(f"Skipping empty pattern in {source}")
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning(f"Skipping invalid pattern {pattern!r} in {source}: {e}")
        return None


def load_external_rules(path: str) -> List[LibraryRule]:
    """Load the ordered external-library table.

    Each library may declare several patterns; one ``LibraryRule`` is produced
    per pattern so the table stays a flat, ordered strategy list.
    """
    rules: List[LibraryRule] = []
    data = _read_yaml(path)
    if not data:
        return rules

    for item in data:
        if not isinstance(item, dict) or not all(k in item for k in ["name", "patterns"]):
            logger.warning(f"Skipping invalid library rule in {path}: {item}")
            continue

        for raw in item["patterns"] or []:
            compiled = _compile(raw, path)
            if compiled is not None:
                rules.append(LibraryRule(name=str(item["name"]), pattern=compiled, cdn_url=item.get("cdn_url")))
    return rules


def load_local_rules(path: str) -> LocalModuleRules:
    data = _read_yaml(path) or {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed local module rules in {path}")
        return LocalModuleRules()

    patterns = []
    for raw in data.get("patterns") or []:
        compiled = _compile(raw, path)
        if compiled is None:
            continue
        if compiled.groups < 1:
            logger.warning(f"Skipping local pattern without a capture group in {path}: {raw!r}")
            continue
        patterns.append(compiled)

    excluded = frozenset(str(name) for name in data.get("excluded_globals") or [])
    return LocalModuleRules(patterns=patterns, excluded_globals=excluded)


def load_rules(rules_dir: Optional[str] = None) -> DependencyRules:
    """
    Loads the dependency pattern tables from a rules directory.

    Args:
        rules_dir: Directory holding ``external_libraries.yaml`` and
            ``local_modules.yaml``; defaults to the bundled tables.

    Returns:
        The compiled rule set.
    """
    rules_dir = rules_dir or RULES_DIR
    external = load_external_rules(os.path.join(rules_dir, EXTERNAL_RULES_FILE))
    local = load_local_rules(os.path.join(rules_dir, LOCAL_RULES_FILE))
    logger.info(
        f"Loaded {len(external)} external library patterns and {len(local.patterns)} local module patterns"
    )
    return DependencyRules(external=external, local=local)


def get_default_rules() -> DependencyRules:
    """Return the bundled rule set, loading it on first use."""
    global _default_rules
    if _default_rules is None:
        _default_rules = load_rules()
    return _default_rules
