"""Value types passed between the review pipeline stages.

Kept free of any GitHub or SDK imports so the diff-mapping and aggregation
logic can be exercised with plain objects in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Fixed display order for severity tables and counts.
SEVERITIES = ("critical", "warning", "suggestion", "info")

SEVERITY_EMOJI = {
    "critical": "🚨",
    "warning": "⚠️",
    "suggestion": "💡",
    "info": "ℹ️",
}


@dataclass(frozen=True)
class ChangedFile:
    """One entry of a pull request's changed-file list.

    ``patch`` is None when GitHub omits the diff (binary or too large);
    such files are never sent to a model.
    """

    path: str
    status: str
    additions: int = 0
    deletions: int = 0
    patch: str | None = None


@dataclass(frozen=True)
class Finding:
    """A single issue reported by a model. ``line`` is untrusted."""

    line: int
    severity: str
    message: str


@dataclass(frozen=True)
class ModelReview:
    summary: str
    findings: list[Finding] = field(default_factory=list)


@dataclass(frozen=True)
class Annotation:
    """A finding anchored to a commentable line of the new file."""

    path: str
    line: int
    severity: str
    body: str
    side: str = "RIGHT"


@dataclass
class FileReview:
    summary: str
    annotations: list[Annotation] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a whole run, handed to the posting step and the CLI."""

    summary: str
    annotations: tuple[Annotation, ...] = ()
    issues_found: int = 0
    files_reviewed: int = 0

    @property
    def critical_count(self) -> int:
        return sum(1 for a in self.annotations if a.severity == "critical")

    def to_outputs(self) -> dict:
        """Machine-readable run outputs."""
        return {
            "review_summary": self.summary,
            "issues_found": self.issues_found,
            "files_reviewed": self.files_reviewed,
        }
