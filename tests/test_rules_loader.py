import textwrap

from core.dependency_analyzer import DependencyAnalyzer
from rules.rules_loader import get_default_rules, load_rules


def test_bundled_rules_load():
    rules = get_default_rules()
    names = [rule.name for rule in rules.external]
    assert names[0] == "jquery"
    assert "unfetch" in names
    assert len(rules.local.patterns) == 3
    assert "Date" in rules.local.excluded_globals
    assert rules.cdn_url_for("lodash") == "https://cdn.jsdelivr.net/npm/lodash@4.17.21/+esm"
    assert rules.cdn_url_for("react-dom") is None


def test_custom_rules_directory_skips_invalid_entries(tmp_path):
    (tmp_path / "external_libraries.yaml").write_text(
        textwrap.dedent(
            """
            - name: htmx
              cdn_url: https://unpkg.com/htmx.org
              patterns:
                - 'htmx\\.\\w+\\('
                - '(unclosed'
            - patterns:
                - 'nameless'
            """
        )
    )
    (tmp_path / "local_modules.yaml").write_text(
        textwrap.dedent(
            """
            patterns:
              - '\\bnew\\s+([A-Z]\\w*)'
              - 'NoGroup\\.'
            excluded_globals:
              - Date
            """
        )
    )

    rules = load_rules(str(tmp_path))

    assert [rule.name for rule in rules.external] == ["htmx"]
    assert len(rules.local.patterns) == 1

    findings = DependencyAnalyzer(rules).analyze("htmx.ajax('GET', '/x'); new Date(); new Panel();")
    assert findings.external == ("htmx",)
    assert findings.local == ("Panel",)
    assert findings.suggestions[0] == 'Add to import map: import_map.add_import("htmx", "https://unpkg.com/htmx.org")'


def test_missing_rules_directory_yields_empty_rules(tmp_path):
    rules = load_rules(str(tmp_path / "nowhere"))
    assert rules.external == []
    assert rules.local.patterns == []
