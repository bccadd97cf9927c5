"""Mapping between unified-diff patches and new-file line numbers.

GitHub only accepts an inline review comment (``side=RIGHT``) on a line that
is part of the diff. We restrict comment targets further, to added lines,
and snap every model-reported line onto the nearest one of those.
"""

from __future__ import annotations

import re

_HUNK_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def get_commentable_lines(patch_text: str) -> list[int]:
    """Return the new-file line numbers of every added line, in patch order.

    - ``@@ -a,b +c,d @@`` moves the cursor to ``c``; the header is not counted.
    - ``+`` lines (but not the ``+++`` file marker) are emitted, then advance the cursor.
    - ``-`` lines (but not ``---``) do not exist in the new file: nothing happens.
    - Every other line is context: the cursor advances, nothing is emitted.

    A ``@@`` line that does not parse is not a hunk header: it counts as
    context, like the ``\\ No newline at end of file`` marker.
    """
    lines: list[int] = []
    cursor = 0

    for line in patch_text.splitlines():
        match = _HUNK_RE.match(line)
        if match:
            cursor = int(match.group(1))
        elif line.startswith("+") and not line.startswith("+++"):
            lines.append(cursor)
            cursor += 1
        elif line.startswith("-") and not line.startswith("---"):
            pass
        else:
            cursor += 1

    return lines


def find_closest_line(target_line: int, valid_lines: list[int]) -> int:
    """Snap target_line onto the nearest entry of valid_lines.

    An exact hit is returned unchanged. Otherwise the entry with the smallest
    absolute distance wins; on a tie the first one in valid_lines order is
    kept (the scan only replaces on a strictly smaller distance). With no
    valid lines there is nothing to snap to and target_line is returned as is.
    """
    if not valid_lines:
        return target_line
    if target_line in valid_lines:
        return target_line

    closest = valid_lines[0]
    min_diff = abs(target_line - closest)
    for line in valid_lines:
        diff = abs(target_line - line)
        if diff < min_diff:
            min_diff = diff
            closest = line
    return closest


def get_patch_line_content(patch_text: str, target_line: int) -> str:
    """Return the source content of a specific new-file line number from a patch."""
    file_line: int | None = None
    for line in patch_text.splitlines():
        match = _HUNK_RE.match(line)
        if match:
            file_line = int(match.group(1))
            continue
        if line.startswith("-") and not line.startswith("---"):
            continue
        if file_line is not None:
            if file_line == target_line:
                return line[1:] if line and line[0] in ("+", " ") else line
            file_line += 1
    return ""
