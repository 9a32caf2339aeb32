from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
import html
from pathlib import Path
import re
from typing import Any, Callable

import pytest

from docbuild.capabilities import BuildContext
from docbuild.config import BuildConfig
from docbuild.errors import BuildError, CollaboratorError, ErrorCategory, schema_violation
from docbuild.models import (
    ContributionInfo,
    Contributor,
    GitUrls,
    InputMetadata,
    SourceDocument,
)
from docbuild.page.publish import InMemoryPublishRegistry
from docbuild.routing import create_document


LANDING_MIME = "Landing"


class FakeMetadataProvider:
    def __init__(self) -> None:
        self.metadata: dict[str, dict[str, Any]] = {}
        self.errors: dict[str, list[BuildError]] = {}
        self.failing: set[str] = set()

    async def get_metadata(self, document: SourceDocument) -> tuple[list[BuildError], InputMetadata]:
        if document.file_path in self.failing:
            raise CollaboratorError(BuildError("metadata-failed", "boom", ErrorCategory.COLLABORATOR, file=document.file_path))
        raw = self.metadata.get(document.file_path, {})
        return list(self.errors.get(document.file_path, [])), InputMetadata.from_raw(raw)


class FakeMonikerProvider:
    def __init__(self) -> None:
        self.monikers: dict[str, list[str]] = {}
        self.error: BuildError | None = None

    def get_file_level_monikers(self, document: SourceDocument) -> tuple[BuildError | None, list[str]]:
        return self.error, list(self.monikers.get(document.file_path, []))


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


class FakeMarkdown:
    """Line-based stand-in: '# ' -> h1, '## ' -> h2 with id, anything else -> paragraph."""

    def __init__(self) -> None:
        self.errors: list[BuildError] = []

    def to_html(self, document: SourceDocument, markdown: str) -> tuple[list[BuildError], str]:
        parts: list[str] = []
        for line in markdown.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith(("<<<<<<<", "=======", ">>>>>>>")):
                continue
            if stripped.startswith("## "):
                text = stripped[3:]
                parts.append(f'<h2 id="{_slug(text)}">{html.escape(text)}</h2>')
            elif stripped.startswith("# "):
                parts.append(f"<h1>{html.escape(stripped[2:])}</h1>")
            elif stripped.startswith("<"):
                parts.append(stripped)
            else:
                parts.append(f"<p>{html.escape(stripped)}</p>")
        return list(self.errors), "\n".join(parts)


class FakeSchema:
    def __init__(self, mime: str) -> None:
        self.mime = mime
        self.transform_calls: list[dict[str, Any]] = []
        self.violations: list[str] = []

    def validate(self, document: SourceDocument, obj: dict[str, Any]) -> list[BuildError]:
        return [schema_violation(document.file_path, message) for message in self.violations]

    async def transform(self, document: SourceDocument, obj: dict[str, Any]) -> tuple[list[BuildError], Any]:
        self.transform_calls.append(copy.deepcopy(obj))
        result = copy.deepcopy(obj)
        if set(result) == {"metadata"}:
            result["metadata"] = {**(result["metadata"] or {}), "schema_transformed": True}
        else:
            result["transformed"] = True
        return [], result


class FakeTemplateEngine:
    def __init__(self) -> None:
        self.schemas: dict[str, FakeSchema] = {}
        self.script_calls: list[str] = []
        self.liquid_calls = 0
        self.server_template_calls: list[Any] = []
        self.primary_html: Callable[[dict[str, Any]], str] = lambda view: f'<section id="main">{view.get("body", "")}</section>'

    def get_schema(self, mime: str) -> FakeSchema:
        return self.schemas.setdefault(mime, FakeSchema(mime))

    def is_landing_data(self, mime: str) -> bool:
        return mime == LANDING_MIME

    def run_script(self, name: str, model: Any) -> Any:
        self.script_calls.append(name)
        if name.endswith(".mta.json.js"):
            metadata = dict(model.get("metadata") or {}) if "metadata" in model else {}
            metadata.update({key: value for key, value in model.items() if key not in {"metadata"}})
            metadata["_internal"] = "hidden"
            return metadata
        if name.endswith(".html.primary.js"):
            return {"body": model.get("body", "")}
        if name.endswith(".json.js"):
            return {"data": model}
        raise KeyError(name)

    def run_mustache(self, name: str, model: Any) -> str:
        return self.primary_html(model)

    def run_liquid(self, document: SourceDocument, model: dict[str, Any]) -> str:
        self.liquid_calls += 1
        return f"<html><body>{model['content']}</body></html>"

    async def render_server_template(self, name: str, record: Any) -> str:
        self.server_template_calls.append(record)
        sections = "".join(f'<h2 id="{_slug(section.title or "")}">{section.title}</h2>' for section in record.sections)
        return f"<h1>{record.title}</h1>{sections}<a href=\"/landing/next\">Next</a>"


class FakeLinkResolver:
    def __init__(self) -> None:
        self.links: dict[str, str] = {}
        self.unresolved: set[str] = set()
        self.failing: set[str] = set()

    def resolve_relative_link(
        self, document: SourceDocument, href: str, relative_to: SourceDocument
    ) -> tuple[BuildError | None, str | None]:
        if href in self.failing:
            raise CollaboratorError(
                BuildError("link-lookup-failed", f"Cannot look up {href}", ErrorCategory.COLLABORATOR, file=document.file_path)
            )
        if href in self.unresolved:
            return None, None
        if href in self.links:
            return None, self.links[href]
        return BuildError("file-not-found", f"Missing {href}", ErrorCategory.COLLABORATOR, file=document.file_path), None


class FakeTocMap:
    def __init__(self) -> None:
        self.failing = False

    def find_toc_relative_path(self, document: SourceDocument) -> str | None:
        if self.failing:
            raise CollaboratorError(BuildError("toc-failed", "no toc", ErrorCategory.COLLABORATOR, file=document.file_path))
        return "../toc.json"


class FakeRedirections:
    def __init__(self) -> None:
        self.ids: dict[str, tuple[str, str]] = {}

    def try_get_document_id(self, document: SourceDocument) -> tuple[str, str] | None:
        return self.ids.get(document.file_path)


class FakeContributionProvider:
    def __init__(self) -> None:
        self.failing = False

    def get_git_urls(self, document: SourceDocument) -> GitUrls:
        if self.failing:
            raise CollaboratorError(BuildError("git-failed", "no repo", ErrorCategory.COLLABORATOR, file=document.file_path))
        return GitUrls(
            content_git_url=f"https://github.com/org/docs/blob/live/{document.file_path}",
            original_content_git_url=f"https://github.com/org/docs/blob/main/{document.file_path}",
            original_content_git_url_template="https://github.com/org/docs/blob/{branch}/" + document.file_path,
            git_commit="0123abcd",
        )

    async def get_contribution_info(
        self, document: SourceDocument, author: str | None
    ) -> tuple[list[BuildError], ContributionInfo | None]:
        if self.failing:
            raise CollaboratorError(BuildError("contribution-failed", "api down", ErrorCategory.COLLABORATOR, file=document.file_path))
        return [], ContributionInfo(
            author=Contributor(name=author or "octocat"),
            contributors=[Contributor(name="octocat"), Contributor(name="hubot")],
            updated_at=datetime(2024, 3, 5, 14, 7),
        )


@dataclass
class RecordingBookmarks:
    bookmarks: dict[str, set[str]] = field(default_factory=dict)

    def add_bookmarks(self, document: SourceDocument, bookmarks: set[str]) -> None:
        self.bookmarks.setdefault(document.file_path, set()).update(bookmarks)


@dataclass
class MemoryOutput:
    files: dict[str, Any] = field(default_factory=dict)

    def write_text(self, text: str, path: str) -> None:
        self.files[path] = text

    def write_json(self, obj: Any, path: str) -> None:
        self.files[path] = obj


@pytest.fixture
def context() -> BuildContext:
    return BuildContext(
        metadata_provider=FakeMetadataProvider(),
        moniker_provider=FakeMonikerProvider(),
        markdown=FakeMarkdown(),
        template_engine=FakeTemplateEngine(),
        link_resolver=FakeLinkResolver(),
        toc_map=FakeTocMap(),
        redirections=FakeRedirections(),
        contribution_provider=FakeContributionProvider(),
        bookmark_validator=RecordingBookmarks(),
        output=MemoryOutput(),
        publish_registry=InMemoryPublishRegistry(),
    )


@pytest.fixture
def config() -> BuildConfig:
    return BuildConfig(
        product="Azure",
        name="azure-documents",
        host_name="https://learn.example.org",
        site_base_path="azure",
        locale="en-us",
    )


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[..., SourceDocument]:
    def _write(
        config: BuildConfig,
        file_path: str,
        content: str | bytes,
        *,
        mime: str | None = None,
        content_kind: Any = None,
    ) -> SourceDocument:
        target = tmp_path / file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        return create_document(config, tmp_path, file_path, mime=mime, content_kind=content_kind)

    return _write
