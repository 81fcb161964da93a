"""Team-visible escalation log.

Escalations are stored as newline-delimited JSON in daily files under
``~/.glowup/escalations/``.  Records are never rewritten once appended.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from glowup.models import EscalationCategory, EscalationRecord, EscalationSource

logger = logging.getLogger(__name__)


class EscalationLog:
    """Append-only JSONL log of escalation records."""

    def __init__(self, base_dir: Optional[Path | str] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".glowup" / "escalations"
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all(self) -> list[EscalationRecord]:
        records: list[EscalationRecord] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                if not line.strip():
                    continue
                try:
                    records.append(EscalationRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError):
                    logger.warning("Skipping unreadable escalation in %s", path.name)
        return records

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, record: EscalationRecord) -> EscalationRecord:
        """Persist *record* and return it."""
        log_file = self._log_file_for_date(datetime.now(timezone.utc))
        with log_file.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record.to_dict()) + "\n")
        logger.info(
            "Escalation %s filed for session %s (%s, %s)",
            record.id,
            record.session_id,
            record.category.value,
            record.source.value,
        )
        return record

    def submit(
        self,
        session_id: str,
        category: EscalationCategory | str,
        summary: str,
        tags: Iterable[str] = (),
    ) -> EscalationRecord:
        """Create and persist an operator-submitted escalation."""
        record = EscalationRecord(
            session_id=session_id,
            category=EscalationCategory(category),
            summary=summary,
            tags=tuple(tags),
            source=EscalationSource.operator,
        )
        return self.append(record)

    def get_escalations(
        self,
        *,
        session_id: Optional[str] = None,
        category: Optional[EscalationCategory | str] = None,
        limit: int = 200,
    ) -> list[EscalationRecord]:
        """Return escalations, newest first."""
        records = self._read_all()
        if session_id:
            records = [r for r in records if r.session_id == session_id]
        if category:
            wanted = EscalationCategory(category)
            records = [r for r in records if r.category == wanted]
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[:limit]

    def export(self, fmt: str = "json", **filters) -> str:
        """Export escalations as ``json`` or ``csv``."""
        records = self.get_escalations(**filters)
        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.writer(buf, lineterminator="\n")
            writer.writerow(["id", "timestamp", "session_id", "category", "source", "tags", "summary"])
            for r in records:
                writer.writerow(
                    [r.id, r.timestamp, r.session_id, r.category.value, r.source.value, " ".join(r.tags), r.summary]
                )
            return buf.getvalue()
        return json.dumps([r.to_dict() for r in records], indent=2)
