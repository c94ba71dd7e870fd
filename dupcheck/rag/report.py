"""Report sink: persist duplicate reports and summarize saved ones."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from dupcheck.models import DuplicateReport
from dupcheck.utils.logger import ContextLogger, get_logger

FAIL_CLOSED_PREFIX = "Error during analysis:"


def save_report(
    report: DuplicateReport,
    path: Union[str, Path],
    logger: Optional[ContextLogger] = None,
) -> Path:
    """Write ``report`` as indented JSON, overwriting ``path``.

    No locking or atomic rename: concurrent writers to the same path race.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(report.to_json(), encoding="utf-8")
    (logger or get_logger("report")).info("Report saved", path=str(target))
    return target


def load_report(path: Union[str, Path]) -> DuplicateReport:
    with open(path, "r", encoding="utf-8") as f:
        return DuplicateReport.from_payload(json.load(f))


@dataclass
class ReportSummary:
    """Aggregate view over a directory of saved reports."""

    total: int = 0
    duplicates: int = 0
    new_defects: int = 0
    fail_closed: int = 0
    unreadable: int = 0
    mean_duplicate_confidence: Optional[float] = None


def summarize_reports(directory: Union[str, Path]) -> ReportSummary:
    """Count verdicts across ``*.json`` reports in ``directory``.

    Reports that cannot be read or validated are counted as ``unreadable``.
    """
    path = Path(directory)
    if not path.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")

    summary = ReportSummary()
    confidences: List[float] = []

    for report_file in sorted(path.glob("*.json")):
        try:
            report = load_report(report_file)
        except (OSError, ValueError):
            summary.unreadable += 1
            continue

        summary.total += 1
        if report.is_duplicate:
            summary.duplicates += 1
            confidences.append(report.confidence)
        elif report.reason.startswith(FAIL_CLOSED_PREFIX):
            summary.fail_closed += 1
        else:
            summary.new_defects += 1

    if confidences:
        summary.mean_duplicate_confidence = sum(confidences) / len(confidences)
    return summary
