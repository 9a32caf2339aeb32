"""Output shape selection: raw JSON model, templated JSON, or final site markup."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from docbuild.capabilities import BuildContext
from docbuild.html_utils import add_link_type, create_html_meta_tags, get_bookmarks, load_html, to_html
from docbuild.models import JsonObject, SourceDocument, TemplateModel
from docbuild.page.output_model import create_page_output_model

logger = logging.getLogger(__name__)

# Hosting treats an empty body as not found.
EMPTY_CONTENT_PLACEHOLDER = "<div></div>"
CONCEPTUAL_METADATA_SCRIPT = "Conceptual.mta.json.js"
THEMES_RELATIVE_PATH = "_themes/"


def sort_properties(obj: Mapping[str, Any]) -> JsonObject:
    return {key: obj[key] for key in sorted(obj)}


def create_content(context: BuildContext, document: SourceDocument, page_model: JsonObject) -> str:
    engine = context.template_engine
    if document.is_conceptual or engine.is_landing_data(document.mime):
        conceptual = page_model.get("conceptual")
        return conceptual if isinstance(conceptual, str) else ""

    view_model = engine.run_script(f"{document.mime}.html.primary.js", page_model)
    content = engine.run_mustache(f"{document.mime}.html.primary.tmpl", view_model)

    dom = load_html(content)
    context.bookmark_validator.add_bookmarks(document, get_bookmarks(dom))
    return to_html(add_link_type(dom, document.locale))


def create_template_model(
    context: BuildContext, page_model: JsonObject, document: SourceDocument
) -> tuple[TemplateModel, JsonObject]:
    """Return the template model and the metadata written next to it."""

    engine = context.template_engine
    content = create_content(context, document, page_model)
    if not content.strip():
        content = EMPTY_CONTENT_PLACEHOLDER

    script = f"{document.mime}.mta.json.js" if document.mime else CONCEPTUAL_METADATA_SCRIPT
    script_result = engine.run_script(script, page_model)
    template_metadata: JsonObject = dict(script_result) if isinstance(script_result, Mapping) else {}

    if engine.is_landing_data(document.mime):
        template_metadata.pop("conceptual", None)

    metadata = {key: value for key, value in template_metadata.items() if not key.startswith("_")}
    metadata["is_dynamic_rendering"] = True

    config = document.config
    page_metadata = create_html_meta_tags(metadata, config.html_meta_hidden, config.html_meta_names)

    model = TemplateModel(
        content=content,
        raw_metadata=template_metadata,
        page_metadata=page_metadata,
        themes_relative_path_to_output_root=THEMES_RELATIVE_PATH,
    )
    return model, metadata


def create_page_output(
    context: BuildContext,
    document: SourceDocument,
    source_model: JsonObject,
    input_metadata: JsonObject,
    system_metadata: JsonObject,
) -> tuple[Any, JsonObject]:
    """Pick the terminal output for a page from the ``output_json`` and ``legacy`` flags."""

    config = document.config
    output_model, output_metadata = create_page_output_model(document, source_model, input_metadata, system_metadata)

    if config.output_json and not config.legacy:
        return output_model, sort_properties(output_metadata)

    template_model, template_metadata = create_template_model(context, sort_properties(output_model), document)
    if config.output_json:
        return template_model.to_dict(), sort_properties(template_metadata)

    logger.debug("Rendering site markup for %s", document.file_path)
    html = context.template_engine.run_liquid(document, template_model.to_dict())
    return html, sort_properties(template_metadata)
