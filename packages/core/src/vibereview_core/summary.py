"""Aggregation of per-file outcomes into the run's report.

Everything here is pure string building; it never touches GitHub.
"""

from __future__ import annotations

from vibereview_core.models import SEVERITIES, SEVERITY_EMOJI, Annotation, RunResult

NO_REVIEWABLE_FILES = "No reviewable files found in this PR."
REVIEW_FAILED = "⚠️ Review failed"

_SEVERITY_LABELS = {
    "critical": "Critical",
    "warning": "Warning",
    "suggestion": "Suggestion",
    "info": "Info",
}


def file_summary_line(path: str, summary: str) -> str:
    return f"**{path}:** {summary}"


def failed_summary_line(path: str) -> str:
    return file_summary_line(path, REVIEW_FAILED)


def count_by_severity(annotations: list[Annotation]) -> dict[str, int]:
    counts = {s: 0 for s in SEVERITIES}
    for a in annotations:
        counts[a.severity] = counts.get(a.severity, 0) + 1
    return counts


def build_summary(file_summaries: list[str], annotations: list[Annotation]) -> str:
    """Build the overall summary: severity table, then one line per file.

    Only severities with a non-zero count get a row. File lines keep the
    order in which files were processed.
    """
    lines = ["### Review Summary\n"]

    if not annotations:
        lines.append("✅ **No issues found!** The code looks good.\n")
    else:
        counts = count_by_severity(annotations)
        lines.append("| Severity | Count |")
        lines.append("|----------|-------|")
        for severity in SEVERITIES:
            if counts[severity]:
                lines.append(f"| {SEVERITY_EMOJI[severity]} {_SEVERITY_LABELS[severity]} | {counts[severity]} |")
        lines.append("")

    lines.append("### Files Reviewed\n")
    lines.append("\n\n".join(file_summaries))
    return "\n".join(lines)


def aggregate(file_summaries: list[str], annotations: list[Annotation], files_reviewed: int) -> RunResult:
    return RunResult(
        summary=build_summary(file_summaries, annotations),
        annotations=tuple(annotations),
        issues_found=len(annotations),
        files_reviewed=files_reviewed,
    )


def no_files_result() -> RunResult:
    return RunResult(summary=NO_REVIEWABLE_FILES)


def format_comment(severity: str, message: str) -> str:
    """Body of a single inline comment."""
    return f"{SEVERITY_EMOJI.get(severity, '')} **{severity.upper()}**\n\n{message}"


def format_review_body(summary: str, issue_count: int, annotations: list[Annotation] | None = None) -> str:
    """Top-level review body.

    When annotations are given, each one is also listed inline. That variant
    is the plain-comment fallback used when the inline review is rejected.
    """
    plural = "" if issue_count == 1 else "s"
    lines = [
        "## 🔍 Vibe Code Review",
        "",
        summary,
        "",
        "---",
        f"*Found {issue_count} issue{plural}*",
    ]

    if annotations:
        lines.append("\n### Issues Found\n")
        for a in annotations:
            lines.append(f"- {SEVERITY_EMOJI.get(a.severity, '')} **{a.path}:{a.line}** - {a.body}")

    return "\n".join(lines)
