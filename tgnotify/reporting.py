"""Output reporting: step outputs for the CI runner and the warning sink."""

from __future__ import annotations

import sys
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, TextIO


class WarningSink(Protocol):
    """Anything that accepts warnings; ``logging.Logger`` qualifies."""

    def warning(self, msg: str, *args: object) -> None: ...


class OutputSink(Protocol):
    def set(self, name: str, value: object) -> None: ...


def format_output_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class GitHubOutputs:
    """Appends ``name=value`` lines to ``$GITHUB_OUTPUT``.

    Without an output file the legacy ``::set-output`` command is written
    to stdout for older runners.
    """

    def __init__(self, output_path: str | None = None, stream: TextIO | None = None) -> None:
        self.output_path = Path(output_path) if output_path else None
        self._stream = stream
        self.values: dict[str, str] = {}

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> GitHubOutputs:
        return cls(output_path=environ.get("GITHUB_OUTPUT") or None)

    def set(self, name: str, value: object) -> None:
        text = format_output_value(value)
        self.values[name] = text
        if self.output_path is None:
            stream = self._stream or sys.stdout
            stream.write(f"::set-output name={name}::{text}\n")
            return

        if "\n" in text:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            line = f"{name}<<{delimiter}\n{text}\n{delimiter}\n"
        else:
            line = f"{name}={text}\n"
        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(line)
