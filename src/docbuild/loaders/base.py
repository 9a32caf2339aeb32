"""Shared loader contract for per-format content loaders."""

from __future__ import annotations

from typing import Awaitable, Callable

from docbuild.capabilities import BuildContext
from docbuild.errors import BuildError
from docbuild.models import JsonObject, SourceDocument


LoadResult = tuple[list[BuildError], JsonObject]

Loader = Callable[[BuildContext, SourceDocument], Awaitable[LoadResult]]
"""Turn one source file into its canonical model plus non-fatal errors."""
