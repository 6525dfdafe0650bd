#!/usr/bin/env python3
"""Summarize formation API JSON line logs for ops usage."""

from __future__ import annotations

import argparse
import json
import math
from collections import Counter
from collections.abc import Iterator
from pathlib import Path
from typing import Any

# summary key -> log field counted by value
_COUNTED_FIELDS = {
    "event_counts": "event",
    "error_code_counts": "error_code",
    "status_code_counts": "status_code",
}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize formation API structured logs.")
    parser.add_argument("files", nargs="+", help="One or more JSONL log files.")
    parser.add_argument("--json", action="store_true", help="Output JSON.")
    return parser.parse_args()


def _percentile(values: list[int], p: float) -> int | None:
    if not values:
        return None
    ordered = sorted(values)
    index = min(len(ordered) - 1, max(0, math.ceil((p / 100) * len(ordered)) - 1))
    return ordered[index]


def _iter_lines(paths: list[Path]) -> Iterator[str | None]:
    """Yield stripped log lines; None marks an unreadable file."""

    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            yield None
            continue
        for line in text.splitlines():
            yield line.strip()


def summarize_log_files(paths: list[Path]) -> dict[str, Any]:
    counters: dict[str, Counter[str]] = {key: Counter() for key in _COUNTED_FIELDS}
    endpoint_counts: Counter[str] = Counter()
    total_ms_values: list[int] = []
    parse_errors = 0
    lines_total = 0

    for raw in _iter_lines(paths):
        if raw is None:
            parse_errors += 1
            continue
        lines_total += 1
        if not raw:
            continue

        try:
            payload = json.loads(raw)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            parse_errors += 1
            continue

        for key, field in _COUNTED_FIELDS.items():
            if payload.get(field) is not None:
                counters[key][str(payload[field])] += 1

        # One "start" line per request.
        if payload.get("event") == "start" and isinstance(payload.get("endpoint"), str):
            endpoint_counts[payload["endpoint"]] += 1

        timing = payload.get("timing")
        total_ms = timing.get("total_ms") if isinstance(timing, dict) else None
        if isinstance(total_ms, int | float):
            total_ms_values.append(int(total_ms))

    return {
        "files": [str(path) for path in paths],
        "lines_total": lines_total,
        "parse_errors": parse_errors,
        **{key: dict(sorted(counter.items())) for key, counter in counters.items()},
        "endpoint_counts": dict(sorted(endpoint_counts.items())),
        "total_ms_p50": _percentile(total_ms_values, 50),
        "total_ms_p95": _percentile(total_ms_values, 95),
    }


def main() -> None:
    args = _parse_args()
    summary = summarize_log_files([Path(item).expanduser() for item in args.files])

    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2, sort_keys=True))
        return

    print("Formation API Log Summary")
    summary["files"] = len(summary["files"])
    for key, value in summary.items():
        print(f"{key}={value}")


if __name__ == "__main__":
    main()
