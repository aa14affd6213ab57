"""
Text rendering for log analysis results.

All tool output is Discord-flavoured markdown, meant to be read by a human
or pattern-matched by an automated caller, so the fixed phrases here are
part of the tool contract.
"""

from __future__ import annotations

from beacon.models import Finding, LogEntry, LogStats, PlayerActivity
from beacon.scanner import (
    SEARCH_SNIPPET_CHARS,
    TIMESTAMP_FORMAT,
    PLAYER_SNIPPET_CHARS,
    flatten_content,
    format_timestamp,
    truncate,
)

NO_MESSAGES = "No messages found in channel"

STATS_RANGE_FORMAT = "%Y-%m-%d %H:%M"


def format_transcript(channel_name: str, entries: list[LogEntry]) -> str:
    """Render entries, embeds included, as a readable transcript."""
    lines = [f"Retrieved {len(entries)} messages from #{channel_name}:", ""]

    for entry in entries:
        line = f"**[{format_timestamp(entry)}]** {entry.author}"
        if entry.raw_text:
            line += f": {entry.raw_text}"
        for embed in entry.embeds:
            if embed.title is not None:
                line += f"\n  📋 **{embed.title}**"
            if embed.description is not None:
                line += "\n  " + embed.description.replace("\n", "\n  ")
            for name, value in embed.fields:
                line += f"\n  • {name}: {value}"
        lines.append(line)
        lines.append("---")

    return "\n".join(lines) + "\n"


def format_no_findings(channel_name: str, scanned: int) -> str:
    return f"✅ **No suspicious patterns detected** in {scanned} messages from #{channel_name}"


def format_findings(channel_name: str, scanned: int, findings: dict[str, list[Finding]]) -> str:
    """Render grouped findings; callers handle the empty case separately."""
    lines = [
        f"⚠️ **Suspicious Activity Report** - #{channel_name}",
        f"Scanned: {scanned} messages",
        "",
    ]

    total = 0
    for category, hits in findings.items():
        lines.append(f"### 🚨 {category} ({len(hits)} hits)")
        for finding in hits:
            total += 1
            header = f"- **{finding.timestamp.strftime(TIMESTAMP_FORMAT)}**"
            if finding.player_id:
                header += f" | Player: `{finding.player_id}`"
            lines.append(header)
            lines.append(f"  Match: `{finding.matched_text}`")
            lines.append(f"  Context: {finding.context}")
            lines.append(f"  [Jump to message]({finding.permalink})")
        lines.append("")

    lines.append("---")
    lines.append(f"**Total Findings: {total}**")
    return "\n".join(lines)


def format_player_activity(
    channel_name: str,
    player_search: str,
    scanned: int,
    activity: PlayerActivity,
) -> str:
    """Render the activity breakdown, suspicious list and recent preview."""
    lines = [
        f"📊 **Player Activity Report: {player_search}**",
        f"Channel: #{channel_name}",
        f"Entries Found: {len(activity.entries)} / {scanned} messages scanned",
        "",
    ]

    if activity.activity_counts:
        lines.append("### Activity Breakdown:")
        for label, count in activity.activity_counts.items():
            lines.append(f"- {label}: {count}")
        lines.append("")

    if activity.suspicious:
        lines.append(f"### ⚠️ Suspicious Activity ({len(activity.suspicious)}):")
        for entry in activity.suspicious:
            lines.append(f"- {entry}")
    else:
        lines.append("✅ **No suspicious patterns detected for this player**")

    lines.append("")
    lines.append("### Recent Log Entries:")
    for entry in activity.recent:
        lines.append(f"- [{format_timestamp(entry)}] {truncate(flatten_content(entry), PLAYER_SNIPPET_CHARS)}")

    return "\n".join(lines) + "\n"


def format_search_results(query: str, scanned: int, matches: list[LogEntry]) -> str:
    lines = [
        f"🔍 **Search Results for:** `{query}`",
        f"Found {len(matches)} matches in {scanned} messages",
        "",
    ]
    for entry in matches:
        lines.append(f"**[{format_timestamp(entry)}]**")
        lines.append(truncate(flatten_content(entry), SEARCH_SNIPPET_CHARS))
        lines.append(f"[Jump]({entry.permalink})")
        lines.append("---")
    return "\n".join(lines) + "\n"


def format_stats(channel_name: str, stats: LogStats) -> str:
    lines = [
        f"📈 **Log Channel Statistics: #{channel_name}**",
        "",
        f"**Messages Analyzed:** {stats.total}",
        f"**With Embeds:** {stats.embed_count}",
        f"**From Webhooks:** {stats.webhook_count}",
    ]

    if stats.oldest is not None and stats.newest is not None:
        lines.append(
            f"**Time Range:** {stats.oldest.strftime(STATS_RANGE_FORMAT)} to {stats.newest.strftime(STATS_RANGE_FORMAT)}"
        )

    lines.append("")
    lines.append("### Top Sources:")
    for author, count in stats.top_authors():
        lines.append(f"- {author}: {count} messages")

    lines.append("")
    lines.append("### Activity by Hour:")
    for hour, count in stats.hours_sorted():
        lines.append(f"- {hour}: {count}")

    return "\n".join(lines) + "\n"
