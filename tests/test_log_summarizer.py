from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path


def test_log_summarizer_json_output(tmp_path: Path) -> None:
    log_path = tmp_path / "api.log"
    log_path.write_text(
        "\n".join(
            [
                json.dumps({"event": "start", "request_id": "a", "endpoint": "parse"}),
                json.dumps(
                    {
                        "event": "done",
                        "request_id": "a",
                        "endpoint": "parse",
                        "status_code": 200,
                        "timing": {"total_ms": 12},
                    }
                ),
                json.dumps({"event": "start", "request_id": "b", "endpoint": "formation"}),
                json.dumps(
                    {
                        "event": "error",
                        "request_id": "b",
                        "endpoint": "formation",
                        "error_code": "FORMATION_API_ERROR",
                        "status_code": 429,
                        "timing": {"total_ms": 340},
                    }
                ),
                "not-json-line",
            ]
        ),
        encoding="utf-8",
    )

    result = subprocess.run(
        [sys.executable, "scripts/summarize_logs.py", "--json", str(log_path)],
        cwd=Path(__file__).resolve().parents[1],
        check=False,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0

    payload = json.loads(result.stdout)
    assert payload["lines_total"] == 5
    assert payload["parse_errors"] == 1
    assert payload["event_counts"] == {"done": 1, "error": 1, "start": 2}
    assert payload["endpoint_counts"] == {"formation": 1, "parse": 1}
    assert payload["error_code_counts"] == {"FORMATION_API_ERROR": 1}
    assert payload["status_code_counts"] == {"200": 1, "429": 1}
    assert payload["total_ms_p50"] == 12
    assert payload["total_ms_p95"] == 340


def test_log_summarizer_human_output(tmp_path: Path) -> None:
    log_path = tmp_path / "api.log"
    log_path.write_text(json.dumps({"event": "done", "status_code": 200}), encoding="utf-8")

    result = subprocess.run(
        [sys.executable, "scripts/summarize_logs.py", str(log_path)],
        cwd=Path(__file__).resolve().parents[1],
        check=False,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0
    assert result.stdout.splitlines()[0] == "Formation API Log Summary"
    assert "status_code_counts={'200': 1}" in result.stdout


def test_log_summarizer_counts_unreadable_input_as_parse_errors(tmp_path: Path) -> None:
    log_path = tmp_path / "api.log"
    log_path.write_text(
        "\n".join(
            [
                json.dumps(["not", "an", "object"]),
                json.dumps({"event": "done", "timing": "fast"}),
            ]
        ),
        encoding="utf-8",
    )

    result = subprocess.run(
        [
            sys.executable,
            "scripts/summarize_logs.py",
            "--json",
            str(log_path),
            str(tmp_path / "missing.log"),
        ],
        cwd=Path(__file__).resolve().parents[1],
        check=False,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0

    payload = json.loads(result.stdout)
    assert payload["lines_total"] == 2
    assert payload["parse_errors"] == 2
    assert payload["event_counts"] == {"done": 1}
    assert payload["total_ms_p50"] is None
