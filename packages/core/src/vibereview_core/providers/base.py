"""Base review model implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_system_prompt() + _build_user_prompt()
             → _call_api()   ← only this differs per provider
             → _parse()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

A failed call is not retried. Any failure (transport error, empty reply,
reply that does not match the response schema) surfaces as ReviewModelError
so the run loop can mark the file as failed and move on.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from vibereview_core.models import SEVERITIES, Finding, ModelReview

logger = logging.getLogger(__name__)

_MAX_TOKENS = 2000

REVIEW_DEPTHS = ("quick", "standard", "comprehensive")

_DEPTH_INSTRUCTIONS = {
    "quick": "Focus only on critical bugs, security issues, and obvious errors. Be brief.",
    "standard": (
        "Review for bugs, security issues, performance problems, and code quality. " "Provide balanced feedback."
    ),
    "comprehensive": (
        "Perform a thorough review covering bugs, security, performance, code style, best practices, "
        "documentation, and potential edge cases."
    ),
}


class ReviewModelError(RuntimeError):
    """Raised when a model call fails or its reply does not match the schema."""


class BaseReviewModel(ABC):
    DEFAULT_MODEL: str = ""
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None):
        self.model = model or self.DEFAULT_MODEL

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(
        self,
        filename: str,
        patch: str,
        review_depth: str,
        language: str,
        custom_instruction: str = "",
    ) -> ModelReview:
        """Review a single file's patch and return the model's findings.

        Raises ReviewModelError instead of returning partial data.
        """
        system = self._build_system_prompt(review_depth, language, custom_instruction)
        user = self._build_user_prompt(filename, patch)
        try:
            raw = self._call_api(system, user)
        except ReviewModelError:
            raise
        except Exception as e:
            raise ReviewModelError(f"{self.__class__.__name__} API call failed: {e}") from e
        if not raw:
            raise ReviewModelError(f"{self.__class__.__name__} returned an empty response")
        return self._parse(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _build_system_prompt(self, review_depth: str, language: str, custom_instruction: str = "") -> str:
        depth_instruction = _DEPTH_INSTRUCTIONS.get(review_depth, _DEPTH_INSTRUCTIONS["standard"])
        extra = f"Additional Instructions: {custom_instruction}" if custom_instruction else ""
        return f"""You are an expert code reviewer. Your task is to review code changes and provide constructive feedback.

Review Level: {review_depth.upper()}
{depth_instruction}

Language: Provide feedback in {language}.

{extra}

You MUST respond with ONLY a JSON object (no markdown, no explanation) containing:
{{
  "summary": "A brief summary of the overall code quality and main findings",
  "comments": [
    {{
      "line": <line number from the diff where issue is found>,
      "severity": "critical" | "warning" | "suggestion" | "info",
      "message": "Description of the issue and how to fix it"
    }}
  ]
}}

Guidelines for line numbers:
- Use the line numbers shown in the diff (lines starting with +)
- Only comment on added or modified lines
- Line numbers should correspond to the new file, not the old file

Severity levels:
- critical: Bugs, security vulnerabilities, data loss risks
- warning: Performance issues, potential bugs, bad practices
- suggestion: Style improvements, refactoring opportunities
- info: Educational notes, alternative approaches

Keep feedback actionable and specific. If the code looks good, say so with an empty comments array."""  # noqa: E501

    def _build_user_prompt(self, filename: str, patch: str) -> str:
        return f"""Please review the following code changes:

**File:** {filename}

**Diff:**
```diff
{patch}
```

Analyze the changes and provide your review in JSON format only."""

    def _parse(self, raw: str) -> ModelReview:
        """Parse the model's raw text response into a ModelReview.

        Only the outer ```json ... ``` fence is stripped, so code blocks inside
        message strings survive.
        """
        cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning("%s: failed to parse response as JSON: %s", self.__class__.__name__, raw[:200])
            raise ReviewModelError(f"Response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ReviewModelError("Response must be a JSON object")
        summary = data.get("summary")
        if not isinstance(summary, str):
            raise ReviewModelError("Response is missing a string 'summary'")
        comments = data.get("comments", [])
        if not isinstance(comments, list):
            raise ReviewModelError("'comments' must be a list")

        return ModelReview(summary=summary, findings=[self._parse_finding(c) for c in comments])

    def _parse_finding(self, item) -> Finding:
        if not isinstance(item, dict):
            raise ReviewModelError(f"Comment entry must be an object, got {type(item).__name__}")
        line = item.get("line")
        message = item.get("message")
        if isinstance(line, bool) or not isinstance(line, int):
            raise ReviewModelError(f"Comment entry has no integer 'line': {item!r}")
        if not isinstance(message, str):
            raise ReviewModelError(f"Comment entry has no string 'message': {item!r}")
        severity = item.get("severity")
        if severity not in SEVERITIES:
            logger.warning("%s: unknown severity %r, treating as info", self.__class__.__name__, severity)
            severity = "info"
        return Finding(line=line, severity=severity, message=message)
