"""SARIF 2.1.0 output so findings can surface in code-scanning tools."""

from __future__ import annotations

import json
from typing import Any, Dict

from .. import __version__
from ..models import Finding, HarnessReport

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
DRIVER_NAME = "harness"


def _result(finding: Finding) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "ruleId": finding.id,
        "level": "error" if finding.blocking else "warning",
        "message": {"text": finding.body},
    }
    if finding.file:
        result["locations"] = [
            {"physicalLocation": {"artifactLocation": {"uri": finding.file}}}
        ]
    return result


def to_sarif(report: HarnessReport) -> str:
    payload = {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {"driver": {"name": DRIVER_NAME, "version": __version__}},
                "results": [_result(finding) for finding in report.findings],
            }
        ],
    }
    return json.dumps(payload, indent=2)


__all__ = ["SARIF_VERSION", "to_sarif"]
