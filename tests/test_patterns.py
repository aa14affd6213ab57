from __future__ import annotations

import pytest

from beacon.patterns import DEFAULT_PATTERNS, PatternRule, build_registry, default_registry


def test_default_registry_keeps_category_order() -> None:
    registry = default_registry()

    assert len(registry) == len(DEFAULT_PATTERNS) == 12
    assert registry.categories[0] == "Movement Exploit"
    assert registry.categories[3] == "Money Exploit"
    assert registry.categories[-1] == "Network Manipulation"


def test_rule_matches_case_insensitively() -> None:
    rule = PatternRule(r"noclip", "Movement Exploit")

    match = rule.search("Player toggled NoClip")

    assert match is not None
    assert match.group() == "NoClip"


def test_money_rule_matches_amount_with_currency() -> None:
    money = next(rule for rule in default_registry() if rule.category == "Money Exploit")

    assert money.search("paid 5000 cash") is not None
    assert money.search("moved 1,250 bank") is not None
    assert money.search("paid the driver") is None


def test_build_registry_defaults_without_patterns() -> None:
    assert len(build_registry({})) == 12
    assert len(build_registry({"log_analysis": {"patterns": []}})) == 12


def test_build_registry_uses_configured_patterns_in_order() -> None:
    config = {
        "log_analysis": {
            "patterns": [
                {"pattern": "rcon", "category": "Remote Console"},
                {"pattern": "noclip", "category": "Movement Exploit"},
            ]
        }
    }

    registry = build_registry(config)

    assert registry.categories == ["Remote Console", "Movement Exploit"]


def test_build_registry_rejects_invalid_regex() -> None:
    config = {"log_analysis": {"patterns": [{"pattern": "(unclosed", "category": "Broken"}]}}

    with pytest.raises(ValueError, match="invalid regex"):
        build_registry(config)


def test_build_registry_rejects_incomplete_entry() -> None:
    config = {"log_analysis": {"patterns": [{"pattern": "noclip"}]}}

    with pytest.raises(ValueError, match="category"):
        build_registry(config)
