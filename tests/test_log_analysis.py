from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from beacon.errors import InvalidInputError, NotFoundError
from beacon.models import LogChannel, LogEntry
from beacon.params import (
    AnalyzePlayerActivityParams,
    GetLogStatsParams,
    ReadLogChannelParams,
    ScanForCheatsParams,
    SearchLogsParams,
)
from beacon.patterns import default_registry
from beacon.reports import NO_MESSAGES
from beacon.services.log_analysis import LogAnalysisService


class FakeLogSource:
    def __init__(self, entries: list[LogEntry], channel_name: str = "logs") -> None:
        self.entries = entries
        self.channel = LogChannel(id=100, name=channel_name)
        self.resolved: list[str] = []
        self.requested_limits: list[int] = []

    async def resolve_channel(self, channel_id: str) -> LogChannel:
        self.resolved.append(channel_id)
        if channel_id != "100":
            raise NotFoundError("Channel not found by channelId")
        return self.channel

    async def fetch_recent(self, channel: LogChannel, limit: int) -> list[LogEntry]:
        self.requested_limits.append(limit)
        return self.entries[:limit]


def _entry(text: str, *, minute: int = 0, author: str = "FiveM") -> LogEntry:
    return LogEntry(
        timestamp=datetime(2024, 3, 5, 18, minute, 30, tzinfo=timezone.utc),
        author=author,
        raw_text=text,
        permalink=f"https://discord.com/channels/1/100/{minute}",
    )


def _service(entries: list[LogEntry]) -> tuple[LogAnalysisService, FakeLogSource]:
    source = FakeLogSource(entries)
    return LogAnalysisService(source, default_registry()), source


def test_scan_end_to_end_report() -> None:
    service, _ = _service([
        _entry("noclip detected", minute=3),
        _entry("paid 5000 cash", minute=2),
        _entry("hello", minute=1),
    ])

    report = asyncio.run(service.scan_for_cheats(ScanForCheatsParams(channelId="100")))

    assert report.startswith("⚠️ **Suspicious Activity Report** - #logs")
    assert "Scanned: 3 messages" in report
    assert "### 🚨 Movement Exploit (1 hits)" in report
    assert "### 🚨 Money Exploit (1 hits)" in report
    assert report.index("Movement Exploit") < report.index("Money Exploit")
    assert "[Jump to message](https://discord.com/channels/1/100/3)" in report
    assert report.endswith("**Total Findings: 2**")


def test_scan_without_findings_uses_distinct_message() -> None:
    service, _ = _service([_entry("hello"), _entry("server restarted")])

    report = asyncio.run(service.scan_for_cheats(ScanForCheatsParams(channelId="100")))

    assert report == "✅ **No suspicious patterns detected** in 2 messages from #logs"


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(500, 100), (0, 1), (None, 100), (25, 25)],
)
def test_scan_tools_clamp_limit(requested, expected) -> None:
    calls = [
        lambda s: s.scan_for_cheats(ScanForCheatsParams(channelId="100", limit=requested)),
        lambda s: s.search_logs(SearchLogsParams(channelId="100", query="x", limit=requested)),
        lambda s: s.analyze_player_activity(
            AnalyzePlayerActivityParams(channelId="100", playerSearch="x", limit=requested)
        ),
        lambda s: s.get_log_stats(GetLogStatsParams(channelId="100", limit=requested)),
    ]
    for call in calls:
        service, source = _service([])
        asyncio.run(call(service))
        assert source.requested_limits == [expected]


def test_read_log_channel_defaults_to_fifty() -> None:
    service, source = _service([])

    asyncio.run(service.read_log_channel(ReadLogChannelParams(channelId="100")))

    assert source.requested_limits == [50]


def test_empty_channel_reports_no_messages() -> None:
    service, _ = _service([])

    results = [
        asyncio.run(service.read_log_channel(ReadLogChannelParams(channelId="100"))),
        asyncio.run(service.scan_for_cheats(ScanForCheatsParams(channelId="100"))),
        asyncio.run(service.search_logs(SearchLogsParams(channelId="100", query="x"))),
        asyncio.run(service.analyze_player_activity(
            AnalyzePlayerActivityParams(channelId="100", playerSearch="x")
        )),
        asyncio.run(service.get_log_stats(GetLogStatsParams(channelId="100"))),
    ]

    assert results == [NO_MESSAGES] * 5


def test_missing_parameters_fail_before_fetching() -> None:
    service, source = _service([_entry("noclip")])

    with pytest.raises(InvalidInputError, match="channelId cannot be null"):
        asyncio.run(service.scan_for_cheats(ScanForCheatsParams(channelId="  ")))
    with pytest.raises(InvalidInputError, match="query cannot be null"):
        asyncio.run(service.search_logs(SearchLogsParams(channelId="100", query="")))
    with pytest.raises(InvalidInputError, match="playerSearch cannot be null"):
        asyncio.run(service.analyze_player_activity(
            AnalyzePlayerActivityParams(channelId="100", playerSearch="")
        ))

    assert source.resolved == []
    assert source.requested_limits == []


def test_unknown_channel_is_not_found() -> None:
    service, source = _service([_entry("noclip")])

    with pytest.raises(NotFoundError):
        asyncio.run(service.get_log_stats(GetLogStatsParams(channelId="999")))
    assert source.requested_limits == []


def test_search_invalid_regex_falls_back_to_literal() -> None:
    service, _ = _service([_entry("weird ( token"), _entry("nothing")])

    result = asyncio.run(service.search_logs(SearchLogsParams(channelId="100", query="(")))

    assert result.startswith("🔍 **Search Results for:** `(`")
    assert "Found 1 matches in 2 messages" in result
    assert "weird ( token" in result


def test_search_reports_no_matches() -> None:
    service, _ = _service([_entry("nothing")])

    result = asyncio.run(service.search_logs(SearchLogsParams(channelId="100", query="noclip")))

    assert result == "No matches found for: noclip"


def test_search_is_idempotent() -> None:
    service, _ = _service([_entry("noclip", minute=1), _entry("godmode", minute=2)])
    params = SearchLogsParams(channelId="100", query="noclip|godmode")

    first = asyncio.run(service.search_logs(params))
    second = asyncio.run(service.search_logs(params))

    assert first == second


def test_analyze_player_report() -> None:
    service, _ = _service([
        _entry("[12] killed a ped", minute=2),
        _entry("[12] godmode toggled", minute=1),
        _entry("[30] joined", minute=0),
    ])

    report = asyncio.run(service.analyze_player_activity(
        AnalyzePlayerActivityParams(channelId="100", playerSearch="[12]")
    ))

    assert report.startswith("📊 **Player Activity Report: [12]**")
    assert "Entries Found: 2 / 3 messages scanned" in report
    assert "- Kills/Deaths: 1" in report
    assert "### ⚠️ Suspicious Activity (1):" in report
    assert "Godmode/Invincibility" in report


def test_analyze_player_without_matches() -> None:
    service, _ = _service([_entry("[30] joined")])

    report = asyncio.run(service.analyze_player_activity(
        AnalyzePlayerActivityParams(channelId="100", playerSearch="ghost")
    ))

    assert report == "No activity found for player: ghost"


def test_stats_report() -> None:
    service, _ = _service([
        _entry("a", author="txAdmin", minute=5),
        _entry("b", author="txAdmin", minute=4),
        _entry("c", author="Logs", minute=3),
    ])

    report = asyncio.run(service.get_log_stats(GetLogStatsParams(channelId="100")))

    assert "**Messages Analyzed:** 3" in report
    assert "**Time Range:** 2024-03-05 18:03 to 2024-03-05 18:05" in report
    assert report.index("- txAdmin: 2 messages") < report.index("- Logs: 1 messages")
    assert "- 18:00: 3" in report


def test_read_log_channel_transcript() -> None:
    service, _ = _service([_entry("first", minute=1), _entry("second", minute=0)])

    transcript = asyncio.run(service.read_log_channel(ReadLogChannelParams(channelId="100", limit=10)))

    assert transcript.startswith("Retrieved 2 messages from #logs:")
    assert "**[2024-03-05 18:01:30]** FiveM: first" in transcript
    assert transcript.count("---") == 2


def test_player_search_token_is_used_verbatim() -> None:
    service, _ = _service([_entry("id 12 joined", minute=1), _entry("id 123 joined", minute=0)])

    report = asyncio.run(service.analyze_player_activity(
        AnalyzePlayerActivityParams(channelId="100", playerSearch="12 ")
    ))

    assert report.startswith("📊 **Player Activity Report: 12 **")
    assert "Entries Found: 1 / 2 messages scanned" in report


def test_whitespace_query_is_a_valid_search() -> None:
    service, source = _service([_entry("a b", minute=1), _entry("ab", minute=0)])

    result = asyncio.run(service.search_logs(SearchLogsParams(channelId="100", query=" ")))

    assert source.requested_limits == [100]
    assert "Found 1 matches in 2 messages" in result
    assert "a b" in result


def test_whitespace_player_search_is_accepted() -> None:
    service, _ = _service([_entry("nospaces")])

    report = asyncio.run(service.analyze_player_activity(
        AnalyzePlayerActivityParams(channelId="100", playerSearch=" ")
    ))

    assert report == "No activity found for player:  "
