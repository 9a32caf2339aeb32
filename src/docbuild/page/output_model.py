"""Merging of content model, author metadata and system metadata."""

from __future__ import annotations

from typing import Any, Mapping

from docbuild.capabilities import BuildContext
from docbuild.models import JsonObject, SourceDocument


def merge(container: JsonObject, *overwrites: Mapping[str, Any] | None) -> JsonObject:
    """Shallow right-biased merge into ``container``: on a key collision the last source wins."""

    for overwrite in overwrites:
        if overwrite:
            container.update(overwrite)
    return container


def create_sdp_output(source_model: JsonObject, system_metadata: JsonObject) -> tuple[JsonObject, JsonObject]:
    """Fold system metadata into the nested ``metadata`` object of structured content."""

    source_metadata = source_model.get("metadata")
    metadata = source_metadata if isinstance(source_metadata, dict) else {}
    merge(metadata, system_metadata)
    model = merge({}, source_model, {"metadata": metadata})
    return model, metadata


def create_page_output_model(
    document: SourceDocument,
    source_model: JsonObject,
    input_metadata: JsonObject,
    system_metadata: JsonObject,
) -> tuple[JsonObject, JsonObject]:
    """Return ``(output_model, output_metadata)`` for a page, per content type."""

    if document.is_conceptual:
        output_metadata = merge({}, input_metadata, system_metadata)
        output_model = merge({}, input_metadata, source_model, system_metadata)
        return output_model, output_metadata

    return create_sdp_output(source_model, system_metadata)


def create_data_output(
    context: BuildContext,
    document: SourceDocument,
    source_model: JsonObject,
    system_metadata: JsonObject,
) -> tuple[Any, None]:
    output_model, _ = create_sdp_output(source_model, system_metadata)
    return context.template_engine.run_script(f"{document.mime}.json.js", output_model), None
