"""
Data classes shared by the log fetcher, scanner and report formatter.

These are plain snapshots: nothing here holds a reference back into
discord.py except the opaque ``LogChannel.handle``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class EmbedContent:
    """Searchable text of one embed attached to a message."""
    title: Optional[str] = None
    description: Optional[str] = None
    fields: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class LogEntry:
    """Immutable snapshot of one retrieved log message."""
    timestamp: datetime
    author: str
    raw_text: str
    permalink: str
    embeds: tuple[EmbedContent, ...] = ()
    webhook: bool = False


@dataclass(frozen=True)
class LogChannel:
    """A resolved log channel."""
    id: int
    name: str
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Finding:
    """One pattern hit recorded during a scan."""
    timestamp: datetime
    permalink: str
    player_id: str
    matched_text: str
    context: str


@dataclass
class PlayerActivity:
    """Result of analyzing one player's entries."""
    entries: list[LogEntry]
    activity_counts: dict[str, int]
    suspicious: list[str]
    recent: list[LogEntry]


@dataclass
class LogStats:
    """Aggregate statistics over a batch of log entries."""
    total: int
    author_counts: dict[str, int]
    hour_counts: dict[str, int]
    embed_count: int
    webhook_count: int
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None

    def top_authors(self, count: int = 10) -> list[tuple[str, int]]:
        """Authors by descending message count; ties keep first-seen order."""
        return sorted(self.author_counts.items(), key=lambda item: -item[1])[:count]

    def hours_sorted(self) -> list[tuple[str, int]]:
        """Hour buckets in ascending ``HH:00`` order."""
        return sorted(self.hour_counts.items())
