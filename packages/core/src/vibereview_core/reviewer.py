"""Core PR review orchestration."""

from __future__ import annotations

import logging

from rich.console import Console

from vibereview_core.diff import find_closest_line, get_commentable_lines, get_patch_line_content
from vibereview_core.filters import select_files
from vibereview_core.models import Annotation, ChangedFile, FileReview, RunResult
from vibereview_core.summary import (
    aggregate,
    failed_summary_line,
    file_summary_line,
    format_review_body,
    no_files_result,
)

console = Console()
logger = logging.getLogger(__name__)


def review_file(model, file: ChangedFile, config: dict) -> FileReview:
    """Review one file and anchor the model's findings to its diff.

    The file's commentable lines are computed once and every finding is
    snapped onto them. Annotations that still end up on a line <= 0 (only
    possible when the diff has no added lines and the model sent a
    non-positive line) are dropped. Model errors are not caught here.
    """
    patch = file.patch or ""
    response = model.review(
        file.path,
        patch,
        config["review_depth"],
        config["language"],
        config.get("custom_instruction") or "",
    )

    valid_lines = get_commentable_lines(patch)

    annotations = []
    for finding in response.findings:
        line = find_closest_line(finding.line, valid_lines)
        if line != finding.line:
            logger.debug("%s: moved finding from line %d to line %d", file.path, finding.line, line)
        if line <= 0:
            logger.debug("%s: dropping finding with non-positive line %d", file.path, line)
            continue
        annotations.append(
            Annotation(
                path=file.path,
                line=line,
                severity=finding.severity,
                body=finding.message,
            )
        )

    return FileReview(summary=response.summary, annotations=annotations)


def print_shadow_comments(annotations: list[Annotation], patches: dict[str, str]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    _severity_color = {"critical": "red", "warning": "yellow", "suggestion": "blue", "info": "dim"}
    if not annotations:
        console.print("[yellow]Shadow mode: no comments generated.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review — {len(annotations)} comment(s) (not posted)[/bold]\n")
    for a in annotations:
        color = _severity_color.get(a.severity, "white")
        console.print(
            f"[bold cyan]{a.path}[/bold cyan]  line [bold]{a.line}[/bold]  " f"[{color}]{a.severity.upper()}[/{color}]"
        )
        code = get_patch_line_content(patches.get(a.path, ""), a.line).strip()
        if code:
            console.print(f"  [dim]{code}[/dim]")
        console.print(f"  {a.body}")
        console.print()


def run_review(pull_request, model, config: dict, shadow: bool = False) -> RunResult:
    """Run the review pipeline for one pull request and return its RunResult.

    Files are reviewed one after another. A file whose review raises is
    logged and recorded with a failure marker; the run carries on. When no
    file survives filtering nothing is posted.
    """
    files = select_files(
        pull_request.list_changed_files(),
        config["include"],
        config["exclude"],
        config["max_files"],
    )

    if not files:
        console.print("[yellow]No files to review after filtering.[/yellow]")
        return no_files_result()

    all_annotations: list[Annotation] = []
    file_summaries: list[str] = []
    total = len(files)

    for i, file in enumerate(files, 1):
        console.print(f"[[{i}/{total}]] Reviewing: {file.path}")
        try:
            result = review_file(model, file, config)
        except Exception as e:
            logger.warning("Failed to review %s: %s", file.path, e)
            console.print(f"  [red]Review failed: {e}[/red]")
            file_summaries.append(failed_summary_line(file.path))
            continue

        all_annotations.extend(result.annotations)
        file_summaries.append(file_summary_line(file.path, result.summary))
        console.print(f"  {len(result.annotations)} comment(s) found.")

    run_result = aggregate(file_summaries, all_annotations, files_reviewed=total)

    if shadow:
        print_shadow_comments(list(run_result.annotations), {f.path: f.patch or "" for f in files})
        console.print(f"[bold]Shadow review complete. {run_result.issues_found} comment(s) would be posted.[/bold]")
    else:
        annotations = list(run_result.annotations)
        pull_request.post_review(
            annotations,
            format_review_body(run_result.summary, run_result.issues_found),
            format_review_body(run_result.summary, run_result.issues_found, annotations),
        )

    logger.info(
        "Review complete: %d issue(s) found in %d file(s)", run_result.issues_found, run_result.files_reviewed
    )
    return run_result
