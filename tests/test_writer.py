"""Tests for the JSON report dump (report/writer.py)."""

from __future__ import annotations

import json

from npm_vetter.models import PackageRef, Severity, VulnRecord, VulnResult
from npm_vetter.report.decision import build_report
from npm_vetter.report.writer import report_to_dict, write_report

_CANDIDATES = (PackageRef("left-pad", "^1.3.0"), PackageRef("express", "4.18.2"))


class TestReportToDict:
    def test_vulns_found(self):
        results = (
            VulnResult(_CANDIDATES[0], (VulnRecord("GHSA-1", "ReDoS", Severity.HIGH),)),
            VulnResult(_CANDIDATES[1]),
        )
        data = report_to_dict(build_report(results), _CANDIDATES)
        assert data["status"] == "vulns_found"
        assert data["flagged"] == ["left-pad"]
        assert data["candidates"][0] == {"name": "left-pad", "version": "^1.3.0"}
        assert data["results"][0]["vulns"] == [
            {"id": "GHSA-1", "summary": "ReDoS", "severity": "HIGH"}
        ]
        assert data["results"][1]["vulns"] == []
        assert str(data["generated_at"]).endswith("Z")

    def test_unknown_has_null_results(self):
        data = report_to_dict(build_report(None), _CANDIDATES)
        assert data["status"] == "unknown"
        assert data["results"] is None
        assert data["flagged"] == []


class TestWriteReport:
    def test_writes_json_file(self, tmp_path):
        target = tmp_path / "npm-vetter-report.json"
        written = write_report(build_report(()), (), target)
        assert written == target
        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["status"] == "clean"
        assert data["candidates"] == []
