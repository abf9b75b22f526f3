"""Final run report."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from backfill.lib.errors import excerpt
from backfill.lib.models import RunResult

__all__ = [
    "EXIT_OK",
    "EXIT_FAILED",
    "EXIT_PARTIAL",
    "EXIT_CONFIG",
    "format_report",
    "write_report_json",
    "exit_code",
]

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2
EXIT_CONFIG = 3


def format_report(result: RunResult) -> str:
    """Render a RunResult as a human-readable block of text."""
    lines: List[str] = []
    lines.append("=" * 60)
    lines.append("MIGRATION REPORT" + (" (DRY RUN)" if result.dry_run else ""))
    lines.append("=" * 60)
    lines.append(f"  Fetched:   {result.fetched} ({result.pages_fetched} pages)")
    lines.append(f"  Eligible:  {result.eligible}")
    lines.append(f"  Written:   {result.written} ({result.chunks_attempted} chunks attempted)")
    if result.unwritten:
        lines.append(f"  Unwritten: {result.unwritten}")

    if result.fetch_error is not None:
        lines.append("")
        lines.append("FETCH STOPPED EARLY:")
        lines.append(f"  {result.fetch_error.message}")
        lines.append(f"  cursor: {result.fetch_error.cursor}")
        if result.fetch_error.status_code is not None:
            lines.append(f"  status: {result.fetch_error.status_code}")

    if result.failures:
        lines.append("")
        lines.append(f"FAILED CHUNKS ({len(result.failures)}):")
        for failure in result.failures:
            status = failure.status_code if failure.status_code is not None else "n/a"
            lines.append(f"  chunk {failure.chunk_index}: {failure.size} instructions, status {status}")
            if failure.response_body:
                lines.append(f"    response: {excerpt(failure.response_body, 200)}")
            lines.append(f"    payload:  {excerpt(failure.payload, 200)}")

    lines.append("")
    if result.dry_run:
        lines.append("Commit: skipped (dry run)")
    elif result.committed:
        lines.append("Commit: ok")
    elif result.commit is not None and result.commit.error is not None:
        lines.append(f"Commit: FAILED - {result.commit.error.message}")
    else:
        lines.append("Commit: not attempted")

    lines.append(f"Status: {'SUCCESS' if result.succeeded else 'INCOMPLETE'}")
    return "\n".join(lines)


def write_report_json(result: RunResult, path: Union[str, Path]) -> Path:
    """Write the RunResult as JSON for later diagnosis."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def exit_code(result: RunResult) -> int:
    """Map a RunResult to a process exit code.

    0 = everything written and committed, 1 = fetch error or commit
    failure, 2 = committed with one or more failed chunks.
    """
    if result.fetch_error is not None:
        return EXIT_FAILED
    if not result.dry_run and not result.committed:
        return EXIT_FAILED
    if result.failures:
        return EXIT_PARTIAL
    return EXIT_OK
