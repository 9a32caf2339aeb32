"""YAML/JSON loaders and the schema document processor for structured content."""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from docbuild.capabilities import BuildContext, read_input_metadata
from docbuild.errors import (
    BuildAbort,
    BuildError,
    json_syntax_error,
    unexpected_type,
    yaml_syntax_error,
)
from docbuild.html_utils import count_words, get_bookmarks, load_html, post_process
from docbuild.loaders.base import LoadResult
from docbuild.loaders.landing import LandingData
from docbuild.models import ConceptualModel, SourceDocument

logger = logging.getLogger(__name__)


class _JsonLikeLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings so every value stays JSON-like."""


_JsonLikeLoader.yaml_implicit_resolvers = {
    key: [resolver for resolver in resolvers if resolver[0] != "tag:yaml.org,2002:timestamp"]
    for key, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def token_type(token: Any) -> str:
    if token is None:
        return "null"
    if isinstance(token, bool):
        return "boolean"
    if isinstance(token, int):
        return "integer"
    if isinstance(token, float):
        return "float"
    if isinstance(token, str):
        return "string"
    if isinstance(token, list):
        return "array"
    if isinstance(token, dict):
        return "object"
    return type(token).__name__


def parse_yaml(document: SourceDocument, text: str) -> tuple[list[BuildError], Any]:
    try:
        return [], yaml.load(text, Loader=_JsonLikeLoader)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 1 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        problem = getattr(exc, "problem", None) or str(exc)
        return [yaml_syntax_error(document.file_path, str(problem), line, column)], None


def parse_json(document: SourceDocument, text: str) -> tuple[list[BuildError], Any]:
    try:
        return [], json.loads(text)
    except json.JSONDecodeError as exc:
        return [json_syntax_error(document.file_path, exc.msg, exc.lineno, exc.colno)], None


async def load_yaml(context: BuildContext, document: SourceDocument) -> LoadResult:
    errors, token = parse_yaml(document, document.read_text())
    return await load_schema_document(context, errors, token, document)


async def load_json(context: BuildContext, document: SourceDocument) -> LoadResult:
    errors, token = parse_json(document, document.read_text())
    return await load_schema_document(context, errors, token, document)


async def load_schema_document(
    context: BuildContext,
    errors: list[BuildError],
    token: Any,
    document: SourceDocument,
) -> LoadResult:
    """Validate and transform a structured source into its page model.

    A top-level token that is not an object aborts the file. Metadata is transformed on its own
    and spliced into the transformed document under ``metadata``. Legacy landing pages get a
    second pass: the transformed object is rendered through the server template and wrapped as
    conceptual content that still carries the transformed object as extension data.
    """

    if not isinstance(token, dict):
        raise BuildAbort(unexpected_type(document.file_path, "object", token_type(token)), collected=list(errors))

    engine = context.template_engine
    schema = engine.get_schema(document.mime)
    logger.debug("Resolved schema %s for %s", document.mime, document.file_path)

    errors.extend(schema.validate(document, token))

    _, input_metadata = await read_input_metadata(context, document)
    metadata_errors, transformed_metadata = await schema.transform(document, {"metadata": input_metadata.raw})
    errors.extend(metadata_errors)

    transform_errors, transformed = await schema.transform(document, token)
    errors.extend(transform_errors)

    if not isinstance(transformed, dict):
        raise BuildAbort(unexpected_type(document.file_path, "object", token_type(transformed)), collected=list(errors))

    page_model = transformed
    metadata = transformed_metadata.get("metadata") if isinstance(transformed_metadata, dict) else None
    page_model["metadata"] = metadata if isinstance(metadata, dict) else {}

    if document.legacy and engine.is_landing_data(document.mime):
        landing_errors, landing_data = LandingData.from_dict(document.file_path, page_model)
        errors.extend(landing_errors)

        dom = load_html(await engine.render_server_template(document.mime, landing_data))
        context.bookmark_validator.add_bookmarks(document, get_bookmarks(dom))
        word_count = count_words(dom)

        page_model = ConceptualModel(
            conceptual=post_process(dom, document.locale),
            word_count=word_count,
            extension_data=page_model,
        ).to_dict()

    return errors, page_model
