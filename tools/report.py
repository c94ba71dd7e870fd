"""Summary reporter for saved duplicate reports.

Reads every ``*.json`` report in a directory (default: REPORTS_DIR) and
prints how many defects were judged duplicates, new, or fell back to the
fail-closed verdict.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dupcheck.rag.report import ReportSummary, summarize_reports


def render(summary: ReportSummary) -> str:
    lines = [
        f"Reports:          {summary.total}",
        f"  duplicates:     {summary.duplicates}",
        f"  new defects:    {summary.new_defects}",
        f"  analysis error: {summary.fail_closed}",
    ]
    if summary.unreadable:
        lines.append(f"Unreadable files: {summary.unreadable}")
    if summary.mean_duplicate_confidence is not None:
        lines.append(f"Mean duplicate confidence: {summary.mean_duplicate_confidence:.2f}")
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Summarize duplicate reports.")
    parser.add_argument("directory", nargs="?", default=None, help="Report directory (default: REPORTS_DIR).")
    args = parser.parse_args(argv)

    directory = args.directory
    if directory is None:
        from dupcheck.config import get_config
        directory = get_config().reports_dir

    try:
        summary = summarize_reports(directory)
    except FileNotFoundError as e:
        print(f"⚠️  {e}")
        return 1

    print(render(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
