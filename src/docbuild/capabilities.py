"""Contracts for the collaborators the page build consumes.

Each protocol is the narrow surface one external capability exposes to the build. Lookups that
can fail in an expected way either return an ``(error, value)`` pair or raise
:class:`docbuild.errors.CollaboratorError`; any other exception is treated as an unhandled fault
and aborts the file that triggered it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from docbuild.errors import BuildError, CollaboratorError
from docbuild.models import ContributionInfo, GitUrls, InputMetadata, JsonObject, SourceDocument


@runtime_checkable
class MetadataProvider(Protocol):
    async def get_metadata(self, document: SourceDocument) -> tuple[list[BuildError], InputMetadata]:
        """Parse the author metadata that applies to a file."""


@runtime_checkable
class MonikerProvider(Protocol):
    def get_file_level_monikers(self, document: SourceDocument) -> tuple[BuildError | None, list[str]]:
        """Return the ordered monikers a file applies to."""


@runtime_checkable
class MarkdownConverter(Protocol):
    def to_html(self, document: SourceDocument, markdown: str) -> tuple[list[BuildError], str]:
        """Convert authored markdown to an HTML fragment."""


@runtime_checkable
class SchemaTemplate(Protocol):
    def validate(self, document: SourceDocument, obj: JsonObject) -> list[BuildError]:
        """Validate a source object against the schema."""

    async def transform(self, document: SourceDocument, obj: JsonObject) -> tuple[list[BuildError], Any]:
        """Apply schema-driven transforms (markdown fields, xrefs, links) to an object."""


@runtime_checkable
class TemplateEngine(Protocol):
    def get_schema(self, mime: str) -> SchemaTemplate:
        """Resolve the schema template registered for a schema type."""

    def is_landing_data(self, mime: str) -> bool:
        """True for the legacy landing page schema type."""

    def run_script(self, name: str, model: Any) -> Any:
        """Run a named template script over a model and return its plain result."""

    def run_mustache(self, name: str, model: Any) -> str:
        """Render a named logic-less template."""

    def run_liquid(self, document: SourceDocument, model: JsonObject) -> str:
        """Render the final site markup for a page."""

    async def render_server_template(self, name: str, record: Any) -> str:
        """Render a legacy server-side template."""


@runtime_checkable
class LinkResolver(Protocol):
    def resolve_relative_link(
        self, document: SourceDocument, href: str, relative_to: SourceDocument
    ) -> tuple[BuildError | None, str | None]:
        """Resolve an authored link to a site-relative URL."""


@runtime_checkable
class TocMap(Protocol):
    def find_toc_relative_path(self, document: SourceDocument) -> str | None:
        """Relative path from a page to the table of contents that owns it."""


@runtime_checkable
class RedirectionMap(Protocol):
    def try_get_document_id(self, document: SourceDocument) -> tuple[str, str] | None:
        """Document ids inherited through a redirection, if any."""


@runtime_checkable
class ContributionProvider(Protocol):
    def get_git_urls(self, document: SourceDocument) -> GitUrls:
        """Source-control URLs for a file."""

    async def get_contribution_info(
        self, document: SourceDocument, author: str | None
    ) -> tuple[list[BuildError], ContributionInfo | None]:
        """Author, contributors and last update time for a file."""


@runtime_checkable
class BookmarkValidator(Protocol):
    def add_bookmarks(self, document: SourceDocument, bookmarks: set[str]) -> None:
        """Record the anchors a page defines for later cross-reference checks."""


@runtime_checkable
class OutputWriter(Protocol):
    def write_text(self, text: str, path: str) -> None:
        """Write a text artifact at an output-relative path."""

    def write_json(self, obj: Any, path: str) -> None:
        """Write a structured artifact at an output-relative path."""


@runtime_checkable
class PublishRegistry(Protocol):
    def try_add(self, document: SourceDocument, item: Any) -> bool:
        """Atomically claim the item's output location; False when already claimed."""


@dataclass(slots=True)
class BuildContext:
    """Collaborators shared by every file of one build."""

    metadata_provider: MetadataProvider
    moniker_provider: MonikerProvider
    markdown: MarkdownConverter
    template_engine: TemplateEngine
    link_resolver: LinkResolver
    toc_map: TocMap
    redirections: RedirectionMap
    contribution_provider: ContributionProvider
    bookmark_validator: BookmarkValidator
    output: OutputWriter
    publish_registry: PublishRegistry


async def read_input_metadata(
    context: BuildContext, document: SourceDocument
) -> tuple[list[BuildError], InputMetadata]:
    """Author metadata for a file, or empty metadata when the provider reports a failure."""

    try:
        return await context.metadata_provider.get_metadata(document)
    except CollaboratorError as exc:
        return [exc.error], InputMetadata()
