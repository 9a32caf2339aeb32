"""Markdown loader producing the conceptual page model."""

from __future__ import annotations

import logging

from docbuild.capabilities import BuildContext, read_input_metadata
from docbuild.errors import BuildError, heading_not_found, merge_conflict_marker
from docbuild.html_utils import count_words, get_bookmarks, load_html, post_process, try_extract_title
from docbuild.loaders.base import LoadResult
from docbuild.models import ConceptualModel, SourceDocument

logger = logging.getLogger(__name__)

_MARKER_START = "<<<<<<<"
_MARKER_SEPARATOR = "======="
_MARKER_END = ">>>>>>>"


def find_merge_conflict_marker(text: str) -> int | None:
    """Line number of the first complete unresolved conflict block, if any."""

    start_line: int | None = None
    seen_separator = False
    for line_no, line in enumerate(text.splitlines(), start=1):
        if line.startswith(_MARKER_START):
            start_line, seen_separator = line_no, False
        elif line.startswith(_MARKER_SEPARATOR) and start_line is not None:
            seen_separator = True
        elif line.startswith(_MARKER_END) and start_line is not None and seen_separator:
            return start_line
    return None


async def load_markdown(context: BuildContext, document: SourceDocument) -> LoadResult:
    errors: list[BuildError] = []
    content = document.read_text()

    conflict_line = find_merge_conflict_marker(content)
    if conflict_line is not None:
        errors.append(merge_conflict_marker(document.file_path, conflict_line))

    markup_errors, html = context.markdown.to_html(document, content)
    errors.extend(markup_errors)

    dom = load_html(html)
    word_count = count_words(dom)
    bookmarks = get_bookmarks(dom)

    found, title, raw_title = try_extract_title(dom)
    if not found:
        errors.append(heading_not_found(document.file_path))

    _, input_metadata = await read_input_metadata(context, document)

    page_model = ConceptualModel(
        conceptual=post_process(dom, document.locale),
        word_count=word_count,
        title=input_metadata.title or title,
        raw_title=raw_title,
    )

    context.bookmark_validator.add_bookmarks(document, bookmarks)
    logger.debug("Loaded markdown %s (%d words, %d bookmarks)", document.file_path, word_count, len(bookmarks))
    return errors, page_model.to_dict()
