"""File-based drafting usage tracking, broken down by generation tier.

Stores records as JSON lines under ``~/.glowup/llm_usage/``.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path


@dataclass
class UsageRecord:
    """A single drafting call."""

    id: str = ""
    session_id: str = ""
    tier: str = ""
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    cost_estimate: float = 0.0
    timestamp: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = uuid.uuid4().hex[:12]
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()


class UsageTracker:
    """Append-only JSONL tracker, one file per month (``YYYY-MM.jsonl``)."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base = Path(base_dir) if base_dir else Path.home() / ".glowup" / "llm_usage"
        self._base.mkdir(parents=True, exist_ok=True)

    def _records_file(self, dt: datetime | None = None) -> Path:
        dt = dt or datetime.now(timezone.utc)
        return self._base / f"{dt.strftime('%Y-%m')}.jsonl"

    def record(self, record: UsageRecord) -> UsageRecord:
        """Append a usage record and return it."""
        with self._records_file().open("a") as fh:
            fh.write(json.dumps(asdict(record)) + "\n")
        return record

    def get_usage(self, session_id: str | None = None, tier: str | None = None) -> list[UsageRecord]:
        """Return records, most recent first, optionally filtered."""
        records: list[UsageRecord] = []
        for path in sorted(self._base.glob("*.jsonl")):
            for line in path.read_text().splitlines():
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(UsageRecord(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    continue
        if session_id:
            records = [r for r in records if r.session_id == session_id]
        if tier:
            records = [r for r in records if r.tier == tier]
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    def summary_by_tier(self) -> dict[str, dict[str, float]]:
        """Call count, tokens, and cost per tier."""
        summary: dict[str, dict[str, float]] = {}
        for r in self.get_usage():
            row = summary.setdefault(r.tier, {"calls": 0, "tokens": 0, "cost": 0.0})
            row["calls"] += 1
            row["tokens"] += r.input_tokens + r.output_tokens
            row["cost"] = round(row["cost"] + r.cost_estimate, 6)
        return summary
