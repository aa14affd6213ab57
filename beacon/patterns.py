"""
Suspicious pattern registry for log scanning.

The registry is an ordered, read-only table of regular expressions mapped to
human-readable categories. Order matters: reports list categories in the
order their rules appear here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional


@dataclass(frozen=True)
class PatternRule:
    """A single regex -> category rule, compiled case-insensitively."""
    pattern: str
    category: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def search(self, text: str) -> Optional[re.Match]:
        """Return the first match of this rule in text, if any."""
        return self.regex.search(text)


# Common FiveM cheat and exploit signatures, in report order.
DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
    # Movement / position anomalies
    (r"(teleport|noclip|speedhack|fly\s*hack)", "Movement Exploit"),
    (r"(godmode|god\s*mode|invincib)", "Godmode/Invincibility"),
    (r"(aimbot|aim\s*bot|esp|wallhack)", "Aiming Exploit"),
    # Resource / money exploits
    (r"(money\s*hack|cash\s*exploit|duplication|dupe|\d[\d,]*\s*(?:cash|bank|money)\b)", "Money Exploit"),
    (r"(spawned\s*item|item\s*spawn|give\s*weapon)", "Item Spawn"),
    (r"(vehicle\s*spawn|car\s*spawn|spawn\s*vehicle)", "Vehicle Spawn"),
    # Injection / executors
    (r"(lua\s*executor|inject|cheat\s*engine|trainer)", "Cheat Injection"),
    (r"(menu\s*detected|mod\s*menu|eulen|stand|kiddion)", "Mod Menu"),
    (r"(resource\s*stop|resource\s*exploit)", "Resource Exploit"),
    # Anti-cheat triggers
    (r"(anti.?cheat|violation|banned|kicked\s*for)", "Anti-Cheat Trigger"),
    (r"(suspicious|abnormal|unusual|impossible)", "Suspicious Activity"),
    # Network manipulation
    (r"(packet|desync|lag\s*switch)", "Network Manipulation"),
)


class PatternRegistry:
    """Ordered, immutable collection of pattern rules."""

    def __init__(self, rules: Iterable[PatternRule]):
        self._rules: tuple[PatternRule, ...] = tuple(rules)

    def __iter__(self) -> Iterator[PatternRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def categories(self) -> list[str]:
        """Categories in registry order."""
        return [rule.category for rule in self._rules]

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> PatternRegistry:
        """Build a registry from (pattern, category) pairs."""
        return cls(PatternRule(pattern, category) for pattern, category in pairs)


def default_registry() -> PatternRegistry:
    """Return the built-in FiveM pattern registry."""
    return PatternRegistry.from_pairs(DEFAULT_PATTERNS)


def build_registry(config: dict[str, Any]) -> PatternRegistry:
    """
    Build the pattern registry from the ``log_analysis`` config section.

    Args:
        config: Full configuration dictionary.

    Returns:
        The configured registry, or the default one when no patterns are set.

    Raises:
        ValueError: If a configured entry is incomplete or its regex is invalid.
    """
    raw_patterns = (config.get("log_analysis") or {}).get("patterns")
    if not raw_patterns:
        return default_registry()

    rules: list[PatternRule] = []
    for index, entry in enumerate(raw_patterns):
        pattern = entry.get("pattern") if isinstance(entry, dict) else None
        category = entry.get("category") if isinstance(entry, dict) else None
        if not pattern or not category:
            raise ValueError(f"log_analysis.patterns[{index}] needs both 'pattern' and 'category'")
        try:
            rules.append(PatternRule(pattern, category))
        except re.error as e:
            raise ValueError(f"log_analysis.patterns[{index}] has an invalid regex: {e}") from e
    return PatternRegistry(rules)
