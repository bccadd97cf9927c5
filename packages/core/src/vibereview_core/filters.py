"""Glob-based selection of the changed files that get reviewed."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable

from vibereview_core.models import ChangedFile

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile(pattern: str, dot: bool) -> re.Pattern:
    """Translate a glob into an anchored regex.

    Supports:
    - ``**``  any run of characters, ``/`` included
    - ``**/`` zero or more whole directories ("src/**/*.py" matches "src/a.py")
      (deliberately wider than a plain ``**`` to ``.*`` translation, which needs one ``/``)
    - ``*``   any run of characters except ``/``
    - ``?``   exactly one character
    Everything else is literal.

    With dot=False a wildcard never starts a match on a segment beginning
    with ".", so hidden files and directories must be named explicitly.
    """
    hidden = "" if dot else r"(?!\.)"
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        at_segment_start = i == 0 or pattern[i - 1] == "/"
        if pattern.startswith("**", i):
            i += 2
            if pattern.startswith("/", i):
                i += 1
                parts.append(f"(?:{hidden}[^/]*/)*")
            elif dot:
                parts.append(".*")
            else:
                parts.append(r"(?:(?!\.)[^/]*(?:/(?!\.)[^/]*)*)?")
        elif pattern[i] == "*":
            i += 1
            parts.append((hidden if at_segment_start else "") + "[^/]*")
        elif pattern[i] == "?":
            i += 1
            parts.append((hidden if at_segment_start else "") + ".")
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def matches_glob(path: str, pattern: str, dot: bool = True) -> bool:
    """Return True if the whole path matches the glob pattern."""
    return _compile(pattern, dot).match(path) is not None


def is_eligible(path: str, include: Iterable[str], exclude: Iterable[str], dot: bool = True) -> bool:
    """A path is eligible iff it matches at least one include and no exclude pattern."""
    if not any(matches_glob(path, p, dot) for p in include):
        return False
    return not any(matches_glob(path, p, dot) for p in exclude)


def select_files(
    files: Iterable[ChangedFile],
    include: list[str],
    exclude: list[str],
    max_files: int,
) -> list[ChangedFile]:
    """Filter the PR's changed files down to the ones sent for review.

    Upstream diff order is preserved; the list is truncated to max_files
    after filtering, so excluded files never consume the budget.
    """
    all_files = list(files)
    selected = [f for f in all_files if f.patch and is_eligible(f.path, include, exclude)]
    selected = selected[:max_files]
    logger.info("Found %d file(s) to review (filtered from %d total)", len(selected), len(all_files))
    return selected
