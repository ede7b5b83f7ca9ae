"""
Trace recording and pretty printing for block cipher rounds.

Contains:
- TraceRecorder: JSON Lines trace + verbose 4x4 grid output
- print_header: shared formatting helper
"""

from __future__ import annotations

import json
from typing import Any, TextIO

from .utils import format_bytes_grid


class TraceRecorder:
    """
    Records the intermediate state after every step of a block operation.

    Supports:
    - JSON Lines file output  (when trace_file is set)
    - Verbose stdout          (state printed as a 4x4 grid)
    """

    def __init__(self, verbose: bool = False, trace_file: TextIO | None = None):
        self.verbose = verbose
        self.trace_file = trace_file
        self._records: list[dict[str, Any]] = []

    def record(self, **kwargs) -> None:
        """Record a trace entry (direction, round, operation, state)."""
        self._records.append(kwargs)

        if self.trace_file:
            self._write_jsonl(kwargs)

        if self.verbose:
            self._print_verbose(kwargs)

    def _write_jsonl(self, record: dict[str, Any]) -> None:
        serializable = self._make_serializable(record)
        self.trace_file.write(json.dumps(serializable) + "\n")
        self.trace_file.flush()

    def _make_serializable(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._make_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._make_serializable(item) for item in obj]
        elif isinstance(obj, bytes):
            return obj.hex()
        else:
            return obj

    def _print_verbose(self, record: dict[str, Any]) -> None:
        direction = record.get("direction", "?")
        round_num = record.get("round")
        if round_num is None:
            round_num = "-"
        operation = record.get("operation", "unknown")
        print(f"{direction:7s} R{round_num}  {operation}")
        if "state" in record:
            print(format_bytes_grid(record["state"]))

    def get_records(self) -> list[dict[str, Any]]:
        return list(self._records)

    def operations(self) -> list[str]:
        """Operation names in recording order."""
        return [r.get("operation", "") for r in self._records]

    def clear(self) -> None:
        self._records.clear()


# ------------------------------------------------------------------
# Shared formatting functions
# ------------------------------------------------------------------

def print_header(title: str) -> None:
    """Print a section header."""
    print(f"\n{'#'*70}")
    print(f"# {title}")
    print(f"{'#'*70}")

