"""Tests for the escalation log."""

import csv
import io
import json
import tempfile

from glowup.escalation import EscalationLog
from glowup.models import EscalationCategory, EscalationRecord, EscalationSource


def test_submit_and_filter():
    with tempfile.TemporaryDirectory() as tmp:
        log = EscalationLog(tmp)
        log.submit("s1", "Boundary Violation", "asked for home address", tags=["boundary"])
        log.submit("s2", EscalationCategory.tone_concern, "felt off")

        records = log.get_escalations(session_id="s1")
        assert len(records) == 1
        assert records[0].category == EscalationCategory.boundary_violation
        assert records[0].source == EscalationSource.operator
        assert records[0].tags == ("boundary",)

        assert len(log.get_escalations(category="Tone Concern")) == 1
        assert len(log.get_escalations()) == 2


def test_records_survive_reopen():
    with tempfile.TemporaryDirectory() as tmp:
        record = EscalationRecord(
            session_id="s1",
            category=EscalationCategory.safety_risk,
            summary="auto",
            tags=("safety",),
            source=EscalationSource.auto,
        )
        EscalationLog(tmp).append(record)

        [loaded] = EscalationLog(tmp).get_escalations()
        assert loaded == record


def test_newest_first_and_limit():
    with tempfile.TemporaryDirectory() as tmp:
        log = EscalationLog(tmp)
        for i in range(5):
            log.append(EscalationRecord(
                session_id="s1",
                category=EscalationCategory.other,
                summary=f"note {i}",
                timestamp=f"2026-01-0{i + 1}T00:00:00+00:00",
            ))
        records = log.get_escalations(limit=2)
        assert [r.summary for r in records] == ["note 4", "note 3"]


def test_export_json_and_csv():
    with tempfile.TemporaryDirectory() as tmp:
        log = EscalationLog(tmp)
        log.submit("s1", "Technical Issue", "draft took forever", tags=["drift", "boundary"])

        data = json.loads(log.export("json"))
        assert data[0]["category"] == "Technical Issue"

        rows = list(csv.reader(io.StringIO(log.export("csv"))))
        assert rows[0][:4] == ["id", "timestamp", "session_id", "category"]
        assert rows[1][5] == "drift boundary"
