"""Run outputs for GitHub Actions steps and other machine consumers."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4


def append_output(output_path: Path, key: str, value: str) -> None:
    """Append one output using the multi-line ``key<<DELIMITER`` syntax."""
    delimiter = f"VIBEREVIEW_{key.upper()}_{uuid4().hex}"
    while delimiter in value:
        delimiter = f"VIBEREVIEW_{key.upper()}_{uuid4().hex}"
    with output_path.open("a", encoding="utf-8") as fh:
        fh.write(f"{key}<<{delimiter}\n")
        fh.write(value)
        if not value.endswith("\n"):
            fh.write("\n")
        fh.write(f"{delimiter}\n")


def write_github_outputs(output_path: Path, outputs: dict) -> None:
    for key, value in outputs.items():
        append_output(output_path, key, str(value))


def to_json(outputs: dict) -> str:
    return json.dumps(outputs, indent=2, ensure_ascii=False)
