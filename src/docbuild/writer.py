"""Artifact writer that lays output files out under one output root."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class FileSystemOutput:
    """Write build artifacts relative to an output directory."""

    def __init__(self, output_root: str | Path) -> None:
        self._root = Path(output_root)

    @property
    def root(self) -> Path:
        return self._root

    def _target(self, path: str) -> Path:
        relative = Path(path.replace("\\", "/").lstrip("/"))
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Output path escapes the output root: {path}")
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def write_text(self, text: str, path: str) -> None:
        self._target(path).write_text(text, encoding="utf-8")

    def write_json(self, obj: Any, path: str) -> None:
        self._target(path).write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
