"""Agent-run trace scanning with recent/stale/malformed accounting."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..logging import get_logger

logger = get_logger("optimize.traces")

TRACE_SUFFIXES = (".jsonl", ".json")

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)

_OPTIONAL_TEXT_FIELDS = ("task_id", "revision", "outcome")
_OPTIONAL_COUNT_FIELDS = ("steps", "tool_calls", "token_est", "wall_ms")


class MalformedTraceError(ValueError):
    """Raised by :func:`parse_trace_line` for a line that is not a valid trace."""


@dataclass(frozen=True)
class TraceRecord:
    """One telemetry record from a trace file."""

    timestamp: datetime
    task_id: Optional[str] = None
    revision: Optional[str] = None
    outcome: Optional[str] = None
    steps: Optional[int] = None
    tool_calls: Optional[int] = None
    token_est: Optional[int] = None
    wall_ms: Optional[int] = None


@dataclass(frozen=True)
class RecentTraceRecord:
    """A recent record with enough identity to join revision aggregation."""

    timestamp: datetime
    task_id: str
    revision: str
    outcome: str
    steps: Optional[int] = None
    token_est: Optional[int] = None


@dataclass(frozen=True)
class TraceScanStats:
    recent: int = 0
    stale: int = 0
    malformed: int = 0


@dataclass
class TraceData:
    stats: TraceScanStats = field(default_factory=TraceScanStats)
    recent: List[RecentTraceRecord] = field(default_factory=list)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; a missing UTC offset is rejected.

    Fractions beyond microseconds are truncated.
    """
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise MalformedTraceError(f"invalid timestamp: {value!r}")
    date, clock, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    fraction = (fraction or "")[:7]
    try:
        return datetime.fromisoformat(f"{date}T{clock}{fraction}{offset}")
    except ValueError as exc:
        raise MalformedTraceError(f"invalid timestamp: {value!r}") from exc


def _optional_text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or isinstance(value, str):
        return value
    raise MalformedTraceError(f"{key} must be a string")


def _optional_count(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedTraceError(f"{key} must be a non-negative integer")
    return value


def parse_trace_line(line: str | bytes) -> TraceRecord:
    try:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        payload = json.loads(line)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise MalformedTraceError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise MalformedTraceError("trace line must be a JSON object")
    timestamp = payload.get("timestamp")
    if not isinstance(timestamp, str):
        raise MalformedTraceError("timestamp must be a string")

    text = {key: _optional_text(payload, key) for key in _OPTIONAL_TEXT_FIELDS}
    counts = {key: _optional_count(payload, key) for key in _OPTIONAL_COUNT_FIELDS}
    return TraceRecord(timestamp=parse_timestamp(timestamp), **text, **counts)


def _trace_files(trace_dir: Path) -> List[Path]:
    return sorted(
        path
        for path in trace_dir.iterdir()
        if path.is_file() and path.suffix in TRACE_SUFFIXES
    )


def scan_traces(trace_dir: Path, max_age_days: int, *, now: datetime) -> TraceData:
    """Read every trace file directly inside ``trace_dir``.

    A missing directory yields empty data. Malformed lines are counted and
    skipped; they never abort the scan.
    """
    if not trace_dir.exists():
        logger.debug("Trace directory %s does not exist", trace_dir)
        return TraceData()

    recent_count = stale = malformed = 0
    recent: List[RecentTraceRecord] = []
    for path in _trace_files(trace_dir):
        for raw in path.read_bytes().splitlines():
            line = raw.strip()
            if not line:
                continue
            try:
                record = parse_trace_line(line)
            except MalformedTraceError as exc:
                malformed += 1
                logger.debug("Malformed trace line in %s: %s", path.name, exc)
                continue

            if (now - record.timestamp).days > max_age_days:
                stale += 1
                continue
            recent_count += 1
            if record.task_id is not None and record.revision is not None and record.outcome is not None:
                recent.append(
                    RecentTraceRecord(
                        timestamp=record.timestamp,
                        task_id=record.task_id,
                        revision=record.revision,
                        outcome=record.outcome,
                        steps=record.steps,
                        token_est=record.token_est,
                    )
                )

    if malformed:
        logger.warning("Ignored %d malformed trace records in %s", malformed, trace_dir)
    stats = TraceScanStats(recent=recent_count, stale=stale, malformed=malformed)
    return TraceData(stats=stats, recent=recent)


def count_recent_traces(trace_dir: Path, max_age_days: int, *, now: datetime) -> TraceScanStats:
    return scan_traces(trace_dir, max_age_days, now=now).stats


__all__ = [
    "MalformedTraceError",
    "RecentTraceRecord",
    "TRACE_SUFFIXES",
    "TraceData",
    "TraceRecord",
    "TraceScanStats",
    "count_recent_traces",
    "parse_timestamp",
    "parse_trace_line",
    "scan_traces",
]
