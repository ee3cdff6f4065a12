from __future__ import annotations

import json

from ..models import HarnessReport


def to_json(report: HarnessReport) -> str:
    return json.dumps(report.to_dict(), indent=2)
