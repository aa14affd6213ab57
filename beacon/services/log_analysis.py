"""
FiveM log analysis tools.

Each tool resolves a log channel, fetches its most recent entries once and
runs one of the scanner passes over them. Nothing is kept between calls.
"""

from __future__ import annotations

import logging

from beacon import reports
from beacon.fetcher import LogSource
from beacon.models import LogChannel, LogEntry
from beacon.params import (
    AnalyzePlayerActivityParams,
    GetLogStatsParams,
    ReadLogChannelParams,
    ScanForCheatsParams,
    SearchLogsParams,
)
from beacon.patterns import PatternRegistry
from beacon.scanner import analyze_player, clamp_limit, compute_stats, scan_entries, search_entries
from beacon.services.base import require_param, require_text

logger = logging.getLogger("beacon.services.log_analysis")

READ_DEFAULT_LIMIT = 50
SCAN_DEFAULT_LIMIT = 100


class LogAnalysisService:
    """
    Log channel scanning for game-server logs.

    Args:
        source: Where log entries come from.
        registry: Cheat pattern rules, shared read-only across calls.
    """

    def __init__(self, source: LogSource, registry: PatternRegistry):
        self.source = source
        self.registry = registry

    async def _load(self, channel_id: str, limit: int) -> tuple[LogChannel, list[LogEntry]]:
        channel = await self.source.resolve_channel(channel_id)
        entries = await self.source.fetch_recent(channel, limit)
        logger.debug(f"Loaded {len(entries)} entries from #{channel.name}")
        return channel, entries

    async def read_log_channel(self, params: ReadLogChannelParams) -> str:
        """
        Read recent messages from a log channel, including embed content.

        Args:
            params: Channel and optional limit (default 50).

        Returns:
            A transcript of the messages, newest first.
        """
        channel_id = require_param(params.channel_id, "channelId")
        limit = clamp_limit(params.limit, READ_DEFAULT_LIMIT)

        channel, entries = await self._load(channel_id, limit)
        if not entries:
            return reports.NO_MESSAGES
        return reports.format_transcript(channel.name, entries)

    async def scan_for_cheats(self, params: ScanForCheatsParams) -> str:
        """
        Scan a log channel for cheat and exploit patterns.

        Args:
            params: Channel and optional limit (default 100).

        Returns:
            Findings grouped by category, or the no-findings line.
        """
        channel_id = require_param(params.channel_id, "channelId")
        limit = clamp_limit(params.limit, SCAN_DEFAULT_LIMIT)

        channel, entries = await self._load(channel_id, limit)
        if not entries:
            return reports.NO_MESSAGES

        findings = scan_entries(entries, self.registry)
        if not findings:
            return reports.format_no_findings(channel.name, len(entries))

        logger.info(
            f"Scan of #{channel.name} flagged {sum(len(h) for h in findings.values())} entries "
            f"across {len(findings)} categories"
        )
        return reports.format_findings(channel.name, len(entries), findings)

    async def analyze_player_activity(self, params: AnalyzePlayerActivityParams) -> str:
        """
        Summarize one player's activity in a log channel.

        Args:
            params: Channel, player search token and optional limit.

        Returns:
            Activity breakdown, suspicious entries and a short preview.
        """
        channel_id = require_param(params.channel_id, "channelId")
        player_search = require_text(params.player_search, "playerSearch")
        limit = clamp_limit(params.limit, SCAN_DEFAULT_LIMIT)

        channel, entries = await self._load(channel_id, limit)
        if not entries:
            return reports.NO_MESSAGES

        activity = analyze_player(entries, player_search, self.registry)
        if not activity.entries:
            return f"No activity found for player: {player_search}"
        return reports.format_player_activity(channel.name, player_search, len(entries), activity)

    async def search_logs(self, params: SearchLogsParams) -> str:
        """
        Search a log channel by regex, falling back to a literal match.

        Args:
            params: Channel, query and optional limit.

        Returns:
            Matching entries with snippets and links.
        """
        channel_id = require_param(params.channel_id, "channelId")
        require_text(params.query, "query")
        limit = clamp_limit(params.limit, SCAN_DEFAULT_LIMIT)

        _, entries = await self._load(channel_id, limit)
        if not entries:
            return reports.NO_MESSAGES

        matches = search_entries(entries, params.query)
        if not matches:
            return f"No matches found for: {params.query}"
        return reports.format_search_results(params.query, len(entries), matches)

    async def get_log_stats(self, params: GetLogStatsParams) -> str:
        """Author, hour, embed and webhook statistics for a log channel."""
        channel_id = require_param(params.channel_id, "channelId")
        limit = clamp_limit(params.limit, SCAN_DEFAULT_LIMIT)

        channel, entries = await self._load(channel_id, limit)
        if not entries:
            return reports.NO_MESSAGES
        return reports.format_stats(channel.name, compute_stats(entries))
