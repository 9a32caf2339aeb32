"""Per-file build entrypoint: load, merge, render and publish one source file."""

from __future__ import annotations

import logging
from typing import Any

from docbuild.capabilities import BuildContext, read_input_metadata
from docbuild.errors import BuildAbort, BuildError, custom_404_page
from docbuild.loaders import load_content
from docbuild.models import JsonObject, SourceDocument, SystemMetadata
from docbuild.page.output_model import create_data_output
from docbuild.page.publish import PublishItem, is_custom_404, publish
from docbuild.page.rendering import create_page_output
from docbuild.page.system_metadata import build_system_metadata
from docbuild.routing import get_output_path

logger = logging.getLogger(__name__)


async def build_document(context: BuildContext, document: SourceDocument) -> list[BuildError]:
    """Build one file and return its ordered error list.

    Raises :class:`BuildAbort` when the file cannot be built at all; other files of the same
    build are unaffected.
    """

    try:
        if document.is_page:
            return await build_page(context, document)
        return await build_data(context, document)
    except BuildAbort as exc:
        logger.error("Build aborted for %s: %s", document.file_path, exc)
        raise


async def build_page(context: BuildContext, document: SourceDocument) -> list[BuildError]:
    errors, source_model, system_metadata = await _load(context, document)

    input_metadata: JsonObject = {}
    if document.is_conceptual:
        _, metadata = await read_input_metadata(context, document)
        input_metadata = metadata.raw

    output, metadata = create_page_output(
        context, document, source_model, input_metadata, system_metadata.to_dict()
    )
    _publish(context, document, errors, system_metadata, output, metadata)
    return errors


async def build_data(context: BuildContext, document: SourceDocument) -> list[BuildError]:
    errors, source_model, system_metadata = await _load(context, document)

    output, metadata = create_data_output(context, document, source_model, system_metadata.to_dict())
    _publish(context, document, errors, system_metadata, output, metadata)
    return errors


async def _load(
    context: BuildContext, document: SourceDocument
) -> tuple[list[BuildError], JsonObject, SystemMetadata]:
    errors: list[BuildError] = []

    system_metadata_errors, system_metadata = await build_system_metadata(context, document)
    errors.extend(system_metadata_errors)

    try:
        load_errors, source_model = await load_content(context, document)
    except BuildAbort as exc:
        raise BuildAbort(exc.error, collected=[*errors, *exc.collected]) from exc
    errors.extend(load_errors)

    return errors, source_model, system_metadata


def _publish(
    context: BuildContext,
    document: SourceDocument,
    errors: list[BuildError],
    system_metadata: SystemMetadata,
    output: Any,
    metadata: JsonObject | None,
) -> None:
    monikers = list(system_metadata.monikers)

    if is_custom_404(document):
        logger.warning("Custom 404 page is not supported: %s", document.file_path)
        errors.append(custom_404_page(document.file_path))

    item = PublishItem(
        url=document.site_url,
        path=get_output_path(document, monikers),
        source_path=document.file_path,
        locale=document.locale,
        monikers=monikers,
        moniker_group=system_metadata.moniker_group,
        extension_data=metadata,
    )
    publish(context, document, item, output)
