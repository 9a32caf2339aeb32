"""Content loaders keyed by source format."""

from __future__ import annotations

import logging

from docbuild.capabilities import BuildContext
from docbuild.loaders.base import Loader, LoadResult
from docbuild.loaders.markdown_loader import load_markdown
from docbuild.loaders.schema_loader import load_json, load_schema_document, load_yaml
from docbuild.models import SourceDocument, SourceFormat

logger = logging.getLogger(__name__)

LOADERS: dict[SourceFormat, Loader] = {
    SourceFormat.MARKDOWN: load_markdown,
    SourceFormat.YAML: load_yaml,
    SourceFormat.JSON: load_json,
}


async def load_content(context: BuildContext, document: SourceDocument) -> LoadResult:
    """Dispatch a source file to the loader registered for its format."""

    source_format = document.format
    logger.debug("Loading %s as %s", document.file_path, source_format.value)
    return await LOADERS[source_format](context, document)


__all__ = [
    "LOADERS",
    "Loader",
    "LoadResult",
    "load_content",
    "load_json",
    "load_markdown",
    "load_schema_document",
    "load_yaml",
]
