"""Tests for trace directory scanning."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from harness.optimize.traces import (
    MalformedTraceError,
    TraceScanStats,
    count_recent_traces,
    parse_timestamp,
    parse_trace_line,
    scan_traces,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _line(**fields) -> str:  # type: ignore[no-untyped-def]
    return json.dumps(fields)


def _stamp(days_ago: int) -> str:
    return (NOW - timedelta(days=days_ago)).isoformat()


def test_missing_directory_is_empty(tmp_path: Path) -> None:
    data = scan_traces(tmp_path / "absent", 90, now=NOW)

    assert data.stats == TraceScanStats()
    assert data.recent == []


def test_counts_recent_stale_and_malformed(tmp_path: Path) -> None:
    trace_dir = tmp_path / "traces"
    trace_dir.mkdir()
    (trace_dir / "a.jsonl").write_text(
        "\n".join(
            [
                _line(timestamp=_stamp(1), task_id="t1", revision="r1", outcome="success", steps=4),
                _line(timestamp=_stamp(90)),
                _line(timestamp=_stamp(91), task_id="t2", revision="r1", outcome="success"),
                "not json",
                "",
                _line(timestamp="2026-02-01T00:00:00"),
                _line(timestamp=_stamp(2), steps="four"),
            ]
        ),
        encoding="utf-8",
    )
    (trace_dir / "b.json").write_text(_line(timestamp="2026-02-28T10:00:00Z") + "\n", encoding="utf-8")
    (trace_dir / "ignored.txt").write_text(_line(timestamp=_stamp(1)), encoding="utf-8")

    data = scan_traces(trace_dir, 90, now=NOW)

    assert data.stats == TraceScanStats(recent=3, stale=1, malformed=3)
    assert len(data.recent) == 1
    assert data.recent[0].task_id == "t1"
    assert data.recent[0].steps == 4
    assert count_recent_traces(trace_dir, 90, now=NOW) == data.stats


def test_subdirectories_are_not_scanned(tmp_path: Path) -> None:
    nested = tmp_path / "traces" / "nested"
    nested.mkdir(parents=True)
    (nested / "c.jsonl").write_text(_line(timestamp=_stamp(1)), encoding="utf-8")

    assert scan_traces(tmp_path / "traces", 90, now=NOW).stats == TraceScanStats()


def test_parse_trace_line_reads_optional_fields() -> None:
    record = parse_trace_line(
        _line(
            timestamp="2026-02-01T08:30:00+02:00",
            task_id="t",
            revision="abc",
            outcome="failure",
            steps=3,
            tool_calls=7,
            token_est=1200,
            wall_ms=5000,
        )
    )

    assert record.timestamp == datetime(2026, 2, 1, 6, 30, tzinfo=UTC)
    assert record.tool_calls == 7
    assert record.wall_ms == 5000


@pytest.mark.parametrize(
    "line",
    [
        "[]",
        '{"task_id": "t"}',
        '{"timestamp": 5}',
        '{"timestamp": "yesterday"}',
        '{"timestamp": "2026-02-01T00:00:00Z", "steps": -1}',
        '{"timestamp": "2026-02-01T00:00:00Z", "token_est": true}',
        '{"timestamp": "2026-02-01T00:00:00Z", "revision": 12}',
        '{"timestamp": "2026-01-31T00:00+00:00"}',
        '{"timestamp": "20260131T000000Z"}',
        '{"timestamp": "2026-01-31T00+00:00"}',
        '{"timestamp": "2026-01-31"}',
        "[" * 100_000,
        b"\xff\xfe not utf8",
    ],
)
def test_parse_trace_line_rejects_malformed(line: str | bytes) -> None:
    with pytest.raises(MalformedTraceError):
        parse_trace_line(line)


@pytest.mark.parametrize(
    ("stamp", "expected"),
    [
        ("2026-02-01t08:30:00z", datetime(2026, 2, 1, 8, 30, tzinfo=UTC)),
        ("2026-02-01 08:30:00-01:00", datetime(2026, 2, 1, 9, 30, tzinfo=UTC)),
        ("2026-02-01T08:30:00.123456789Z", datetime(2026, 2, 1, 8, 30, 0, 123456, tzinfo=UTC)),
    ],
)
def test_parse_timestamp_accepts_rfc3339_variants(stamp: str, expected: datetime) -> None:
    assert parse_timestamp(stamp) == expected


def test_undecodable_and_deeply_nested_lines_are_skipped(tmp_path: Path) -> None:
    trace_dir = tmp_path / "traces"
    trace_dir.mkdir()
    good = _line(timestamp=_stamp(1)).encode("utf-8")
    (trace_dir / "a.jsonl").write_bytes(good + b"\n\xff\xfe not utf8\n" + good + b"\n")
    (trace_dir / "b.jsonl").write_bytes(good + b"\n" + b"[" * 100_000 + b"\n")

    data = scan_traces(trace_dir, 90, now=NOW)

    assert data.stats == TraceScanStats(recent=3, stale=0, malformed=2)


def test_non_rfc3339_timestamps_count_as_malformed(tmp_path: Path) -> None:
    trace_dir = tmp_path / "traces"
    trace_dir.mkdir()
    (trace_dir / "a.jsonl").write_text(
        "\n".join(
            _line(timestamp=stamp)
            for stamp in ("2026-01-31T00:00+00:00", "20260131T000000Z", "2026-01-31T00+00:00")
        ),
        encoding="utf-8",
    )

    assert scan_traces(trace_dir, 90, now=NOW).stats == TraceScanStats(recent=0, stale=0, malformed=3)
