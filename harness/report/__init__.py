"""Report rendering for analysis results."""

from __future__ import annotations

from enum import Enum

from ..models import HarnessReport
from .json_report import to_json
from .markdown import to_markdown
from .sarif import to_sarif


class OutputFormat(Enum):
    JSON = "json"
    MD = "md"
    SARIF = "sarif"


def render(report: HarnessReport, fmt: OutputFormat | str = OutputFormat.JSON) -> str:
    """Render ``report`` in the requested format."""
    fmt = OutputFormat(fmt)
    if fmt is OutputFormat.MD:
        return to_markdown(report)
    if fmt is OutputFormat.SARIF:
        return to_sarif(report)
    return to_json(report)


__all__ = ["OutputFormat", "render", "to_json", "to_markdown", "to_sarif"]
