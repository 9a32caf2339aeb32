from __future__ import annotations

from dataclasses import replace

import pytest

from docbuild.capabilities import BuildContext
from docbuild.config import BuildConfig
from docbuild.errors import BuildAbort, ErrorCategory
from docbuild.loaders import load_content
from docbuild.loaders.schema_loader import parse_json, parse_yaml, token_type

from conftest import LANDING_MIME


@pytest.mark.asyncio
async def test_yaml_loader_transforms_document_and_splices_metadata(
    context: BuildContext, config: BuildConfig, write_source
) -> None:
    document = write_source(
        config,
        "reference/widget.yml",
        "### YamlMime:Reference\nname: Widget\nmetadata:\n  ms.topic: stale\nreleased: 2024-01-02\n",
    )
    context.metadata_provider.metadata["reference/widget.yml"] = {"ms.topic": "reference", "author": "octocat"}

    errors, model = await load_content(context, document)

    schema = context.template_engine.schemas["Reference"]
    assert errors == []
    assert schema.transform_calls[0] == {"metadata": {"ms.topic": "reference", "author": "octocat"}}
    assert schema.transform_calls[1]["name"] == "Widget"
    assert model["transformed"] is True
    assert model["released"] == "2024-01-02"
    assert model["metadata"] == {"ms.topic": "reference", "author": "octocat", "schema_transformed": True}


@pytest.mark.asyncio
async def test_json_loader_collects_schema_violations(context: BuildContext, config: BuildConfig, write_source) -> None:
    document = write_source(config, "cards.json", '{"$schema": "https://x/Card.schema.json", "items": []}')
    context.template_engine.get_schema("Card").violations = ["items must not be empty"]

    errors, model = await load_content(context, document)

    assert [error.code for error in errors] == ["violate-schema"]
    assert errors[0].category is ErrorCategory.VALIDATION
    assert model["items"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("file_path", "content", "actual"),
    [
        ("list.yml", "### YamlMime:Reference\n- a\n- b\n", "array"),
        ("scalar.json", '"just a string"', "string"),
        ("empty.yml", "### YamlMime:Reference\n", "null"),
    ],
)
async def test_non_object_top_level_aborts_file(
    context: BuildContext, config: BuildConfig, write_source, file_path: str, content: str, actual: str
) -> None:
    document = write_source(config, file_path, content, mime="Reference")

    with pytest.raises(BuildAbort) as excinfo:
        await load_content(context, document)

    assert excinfo.value.error.code == "unexpected-type"
    assert excinfo.value.error.category is ErrorCategory.TYPE
    assert f"'{actual}'" in excinfo.value.error.message
    assert context.template_engine.schemas == {}


@pytest.mark.asyncio
async def test_syntax_error_is_collected_before_abort(context: BuildContext, config: BuildConfig, write_source) -> None:
    document = write_source(config, "broken.json", '{"a": ', mime="Reference")

    with pytest.raises(BuildAbort) as excinfo:
        await load_content(context, document)

    assert [error.code for error in excinfo.value.errors] == ["json-syntax-error", "unexpected-type"]


@pytest.mark.asyncio
async def test_legacy_landing_page_is_rendered_and_wrapped(
    context: BuildContext, config: BuildConfig, write_source
) -> None:
    document = write_source(
        replace(config, legacy=True),
        "hub/index.yml",
        "### YamlMime:Landing\ntitle: Widgets hub\nsections:\n  - title: Get started\n    items: []\n",
    )
    engine = context.template_engine
    captured: dict[str, object] = {}
    original_transform = engine.get_schema(LANDING_MIME).transform

    async def _capturing_transform(doc, obj):
        errors, result = await original_transform(doc, obj)
        captured["result"] = result
        return errors, result

    engine.get_schema(LANDING_MIME).transform = _capturing_transform

    errors, model = await load_content(context, document)

    assert errors == []
    transformed = captured["result"]
    assert engine.server_template_calls[0].title == "Widgets hub"
    assert engine.server_template_calls[0].sections[0].title == "Get started"
    assert "<h1>Widgets hub</h1>" in model["conceptual"]
    assert 'href="/en-us/landing/next"' in model["conceptual"]
    assert model["wordCount"] == 5
    for key, value in transformed.items():
        assert model[key] == value
    assert context.bookmark_validator.bookmarks["hub/index.yml"] == {"get-started"}


@pytest.mark.asyncio
async def test_landing_page_outside_legacy_mode_stays_structured(
    context: BuildContext, config: BuildConfig, write_source
) -> None:
    document = write_source(config, "hub/index.yml", "### YamlMime:Landing\ntitle: Hub\n")

    _, model = await load_content(context, document)

    assert "conceptual" not in model
    assert context.template_engine.server_template_calls == []


def test_parsers_report_locations(config: BuildConfig, write_source) -> None:
    document = write_source(config, "x.yml", "a: [1, 2\n", mime="Reference")

    yaml_errors, token = parse_yaml(document, "a: [1, 2\n")
    json_errors, _ = parse_json(document, '{\n  "a": }')

    assert token is None
    assert yaml_errors[0].code == "yaml-syntax-error"
    assert yaml_errors[0].line is not None
    assert json_errors[0].code == "json-syntax-error"
    assert json_errors[0].line == 2


def test_token_type_names() -> None:
    assert token_type(None) == "null"
    assert token_type(True) == "boolean"
    assert token_type(3) == "integer"
    assert token_type(2.5) == "float"
    assert token_type([]) == "array"
    assert token_type({}) == "object"
