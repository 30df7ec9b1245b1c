"""
Test suite for analysis history and the result models
"""

import json

import pytest

from sentinel.core.history import HistoryStore
from sentinel.core.model import AnalysisResult, HistoryEntry, VulnerabilityFinding


def make_result(score=80, summary="done"):
    return AnalysisResult(
        score=score,
        summary=summary,
        vulnerabilities=(VulnerabilityFinding(severity="High", type="Capability Leak", title="Leak"),),
        recommendations=("Keep AdminCap owned",),
        attack_diagram="sequenceDiagram\nA->>B: call",
    )


class TestModels:
    """Test cases for the result dataclasses."""

    def test_result_is_immutable(self):
        result = make_result()
        with pytest.raises(AttributeError):
            result.score = 10

    def test_result_round_trip(self):
        result = make_result()
        assert AnalysisResult.from_dict(result.to_dict()) == result

    def test_attack_diagram_omitted_when_absent(self):
        result = AnalysisResult(score=100, summary="ok")
        assert "attack_diagram" not in result.to_dict()

    def test_report_shape(self):
        report = make_result().to_report()
        assert list(report) == ["timestamp", "score", "summary", "vulnerabilities", "recommendations"]
        assert report["vulnerabilities"][0]["title"] == "Leak"

    def test_severity_counts(self):
        result = AnalysisResult(score=0, summary="", vulnerabilities=(
            VulnerabilityFinding(severity="High"),
            VulnerabilityFinding(severity="High"),
            VulnerabilityFinding(severity="Informational"),
        ))
        assert result.severity_counts == {"Critical": 0, "High": 2, "Medium": 0, "Low": 0, "Informational": 1}

    def test_finding_normalization(self):
        finding = VulnerabilityFinding.from_dict({"severity": "critical", "confidence": "medium", "fix": None})
        assert finding.severity == "Critical"
        assert finding.confidence == "Medium"
        assert finding.fix == ""
        assert set(finding.to_dict()) == {
            "severity", "type", "location", "title", "description", "code_snippet", "fix", "confidence",
        }

    def test_history_entry_truncates_code(self):
        entry = HistoryEntry.create("x" * 500, make_result())
        assert len(entry.code) == 200
        assert entry.id.isdigit()


class TestHistoryStore:
    """Test cases for the bounded history list."""

    def test_newest_first_and_capped(self):
        store = HistoryStore(limit=3)
        for index in range(5):
            store.add(HistoryEntry(id=str(index), timestamp="t", code="c", results=make_result()))

        assert [entry.id for entry in store.entries] == ["4", "3", "2"]
        assert len(store) == 3

    def test_get_and_clear(self):
        store = HistoryStore()
        store.add(HistoryEntry(id="42", timestamp="t", code="c", results=make_result()))

        assert store.get("42").results.score == 80
        assert store.get("missing") is None
        store.clear()
        assert len(store) == 0

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "nested" / "history.json"
        store = HistoryStore(str(path))
        store.add(HistoryEntry(id="1", timestamp="t", code="module m {}", results=make_result(score=65)))

        reloaded = HistoryStore(str(path))
        assert reloaded.entries[0].code == "module m {}"
        assert reloaded.entries[0].results.score == 65
        assert json.loads(path.read_text(encoding="utf-8"))[0]["id"] == "1"

    def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json", encoding="utf-8")

        assert HistoryStore(str(path)).entries == []

    def test_entries_is_a_copy(self):
        store = HistoryStore()
        store.add(HistoryEntry(id="1", timestamp="t", code="c", results=make_result()))
        store.entries.clear()
        assert len(store) == 1
