"""
Log scanning logic.

Everything here is pure: it takes already-fetched ``LogEntry`` snapshots and
a ``PatternRegistry`` and derives findings, matches and statistics. Nothing
is cached between calls.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from beacon.models import Finding, LogEntry, LogStats, PlayerActivity
from beacon.patterns import PatternRegistry

logger = logging.getLogger("beacon.scanner")

# Player identification in FiveM logs: labeled numeric id, bracketed id,
# or an external identifier (license:, steam:, discord:, fivem:).
PLAYER_ID_PATTERN = re.compile(
    r"(?:player|id|source|src)[:\s#]*([0-9]+)"
    r"|\[([0-9]+)\]"
    r"|(?:license|steam|discord|fivem)[:\s]*([a-zA-Z0-9:]+)",
    re.IGNORECASE,
)

# Activity categories counted by analyze_player, keyed by display label.
ACTIVITY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Kills/Deaths": ("kill", "death"),
    "Money Transactions": ("money", "cash", "bank"),
    "Item Activity": ("item", "inventory"),
    "Connection Events": ("join", "leave", "connect"),
    "Vehicle Activity": ("vehicle", "car"),
}

MIN_LIMIT = 1
MAX_LIMIT = 100
RECENT_PREVIEW_COUNT = 5

FINDING_CONTEXT_CHARS = 150
SEARCH_SNIPPET_CHARS = 200
PLAYER_SNIPPET_CHARS = 100

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def clamp_limit(limit: int | None, default: int) -> int:
    """Clamp a requested message limit into [1, 100]."""
    if limit is None:
        return default
    return min(max(limit, MIN_LIMIT), MAX_LIMIT)


def truncate(text: str | None, max_length: int) -> str:
    """Collapse newlines, trim, and cut to max_length with an ellipsis."""
    if text is None:
        return ""
    text = text.replace("\n", " ").strip()
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def format_timestamp(entry: LogEntry) -> str:
    return entry.timestamp.strftime(TIMESTAMP_FORMAT)


def flatten_content(entry: LogEntry) -> str:
    """
    Build the single searchable string for an entry.

    The raw message text comes first, followed by each embed's title,
    description and "name value" field pairs, space separated.
    """
    parts = [entry.raw_text]
    for embed in entry.embeds:
        if embed.title is not None:
            parts.append(" " + embed.title)
        if embed.description is not None:
            parts.append(" " + embed.description)
        for name, value in embed.fields:
            parts.append(f" {name} {value}")
    return "".join(parts)


def extract_player_id(content: str) -> str:
    """Return the first player identifier found in content, or ''."""
    match = PLAYER_ID_PATTERN.search(content)
    if not match:
        return ""
    for group in match.groups():
        if group is not None:
            return group
    return ""


def compile_query(query: str) -> re.Pattern:
    """
    Compile a user search query case-insensitively.

    Invalid regex syntax falls back to matching the query literally.
    """
    try:
        return re.compile(query, re.IGNORECASE)
    except re.error:
        logger.debug(f"Query {query!r} is not a valid regex, matching it literally")
        return re.compile(re.escape(query), re.IGNORECASE)


# ============================================================================
# Scans
# ============================================================================


def scan_entries(entries: Iterable[LogEntry], registry: PatternRegistry) -> dict[str, list[Finding]]:
    """
    Sweep entries against every rule in the registry.

    Each rule contributes at most one finding per entry (its first match).
    An entry matching several rules appears under each of their categories.

    Args:
        entries: Entries in fetch order.
        registry: Pattern rules in report order.

    Returns:
        Findings grouped by category, categories in registry order. Empty
        when nothing matched.
    """
    grouped: dict[str, list[Finding]] = {category: [] for category in registry.categories}

    for entry in entries:
        content = flatten_content(entry)
        for rule in registry:
            match = rule.search(content)
            if match is None:
                continue
            grouped[rule.category].append(
                Finding(
                    timestamp=entry.timestamp,
                    permalink=entry.permalink,
                    player_id=extract_player_id(content),
                    matched_text=match.group(),
                    context=truncate(content, FINDING_CONTEXT_CHARS),
                )
            )

    findings = {category: hits for category, hits in grouped.items() if hits}
    logger.debug(f"Scan produced {sum(len(h) for h in findings.values())} findings in {len(findings)} categories")
    return findings


def search_entries(entries: Iterable[LogEntry], query: str) -> list[LogEntry]:
    """Return entries whose flattened content matches the query, in fetch order."""
    pattern = compile_query(query)
    return [entry for entry in entries if pattern.search(flatten_content(entry))]


def analyze_player(
    entries: Iterable[LogEntry],
    player_search: str,
    registry: PatternRegistry,
) -> PlayerActivity:
    """
    Collect activity for entries mentioning a player.

    The search token is matched literally and case-insensitively. Matching
    entries feed the activity counters, a flat list of suspicious lines and
    a short preview of the first matches.
    """
    search = re.compile(re.escape(player_search), re.IGNORECASE)
    matched: list[tuple[LogEntry, str]] = []
    for entry in entries:
        content = flatten_content(entry)
        if search.search(content):
            matched.append((entry, content))

    activity_counts: dict[str, int] = {}
    suspicious: list[str] = []

    for entry, content in matched:
        lowered = content.lower()
        for label, keywords in ACTIVITY_KEYWORDS.items():
            if any(keyword in lowered for keyword in keywords):
                activity_counts[label] = activity_counts.get(label, 0) + 1

        for rule in registry:
            if rule.search(content):
                suspicious.append(
                    f"[{format_timestamp(entry)}] {rule.category}: {truncate(content, PLAYER_SNIPPET_CHARS)}"
                )

    return PlayerActivity(
        entries=[entry for entry, _ in matched],
        activity_counts=activity_counts,
        suspicious=suspicious,
        recent=[entry for entry, _ in matched[:RECENT_PREVIEW_COUNT]],
    )


def compute_stats(entries: Sequence[LogEntry]) -> LogStats:
    """Single pass over entries collecting author, hour, embed and webhook counts."""
    stats = LogStats(
        total=len(entries),
        author_counts={},
        hour_counts={},
        embed_count=0,
        webhook_count=0,
    )

    for entry in entries:
        stats.author_counts[entry.author] = stats.author_counts.get(entry.author, 0) + 1

        hour = f"{entry.timestamp.hour:02d}:00"
        stats.hour_counts[hour] = stats.hour_counts.get(hour, 0) + 1

        if entry.embeds:
            stats.embed_count += 1
        if entry.webhook:
            stats.webhook_count += 1

        if stats.oldest is None or entry.timestamp < stats.oldest:
            stats.oldest = entry.timestamp
        if stats.newest is None or entry.timestamp > stats.newest:
            stats.newest = entry.timestamp

    return stats
