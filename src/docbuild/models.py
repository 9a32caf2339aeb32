"""Canonical data structures shared by the loaders and the page build stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from charset_normalizer import from_bytes

from docbuild.config import BuildConfig


JsonObject = dict[str, Any]

_UTF8_BOM = "\ufeff"


class SourceFormat(str, Enum):
    """Closed set of authored source formats, resolved from the file extension."""

    MARKDOWN = "markdown"
    YAML = "yaml"
    JSON = "json"

    @classmethod
    def from_path(cls, path: str) -> "SourceFormat":
        suffix = Path(path).suffix.lower()
        if suffix == ".md":
            return cls.MARKDOWN
        if suffix in {".yml", ".yaml"}:
            return cls.YAML
        if suffix == ".json":
            return cls.JSON
        raise ValueError(f"Unsupported source file extension: {path}")


class ContentKind(str, Enum):
    PAGE = "page"
    DATA = "data"


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """One authored file plus its routing; immutable for the duration of a build."""

    file_path: str
    docset_path: Path
    config: BuildConfig
    content_kind: ContentKind = ContentKind.PAGE
    mime: str = ""
    site_path: str = ""
    site_url: str = ""
    canonical_url: str = ""
    document_id: str = ""
    version_independent_id: str = ""

    @property
    def format(self) -> SourceFormat:
        return SourceFormat.from_path(self.file_path)

    @property
    def locale(self) -> str:
        return self.config.locale

    @property
    def legacy(self) -> bool:
        return self.config.legacy

    @property
    def is_page(self) -> bool:
        return self.content_kind is ContentKind.PAGE

    @property
    def is_conceptual(self) -> bool:
        return not self.mime

    def read_text(self) -> str:
        raw = (self.docset_path / self.file_path).read_bytes()
        best = from_bytes(raw).best() if raw else None
        text = str(best) if best is not None else raw.decode("utf-8", errors="replace")
        return text[1:] if text.startswith(_UTF8_BOM) else text


@dataclass(slots=True)
class InputMetadata:
    """Author-declared metadata for one file, as parsed by the metadata provider."""

    raw: JsonObject = field(default_factory=dict)
    title: str | None = None
    breadcrumb_path: str | None = None
    toc_rel: str | None = None
    author: str | None = None

    @classmethod
    def from_raw(cls, raw: JsonObject) -> "InputMetadata":
        def _text(key: str) -> str | None:
            value = raw.get(key)
            return value if isinstance(value, str) and value.strip() else None

        return cls(
            raw=dict(raw),
            title=_text("title"),
            breadcrumb_path=_text("breadcrumb_path"),
            toc_rel=_text("toc_rel"),
            author=_text("author"),
        )


@dataclass(slots=True)
class ConceptualModel:
    """Canonical page model for free-form authored content."""

    conceptual: str
    word_count: int = 0
    title: str | None = None
    raw_title: str | None = None
    extension_data: JsonObject = field(default_factory=dict)

    def to_dict(self) -> JsonObject:
        model: JsonObject = {
            "conceptual": self.conceptual,
            "wordCount": self.word_count,
            "title": self.title,
            "rawTitle": self.raw_title,
        }
        model = {key: value for key, value in model.items() if value is not None}
        for key, value in self.extension_data.items():
            model.setdefault(key, value)
        return model


@dataclass(slots=True)
class GitUrls:
    content_git_url: str | None = None
    original_content_git_url: str | None = None
    original_content_git_url_template: str | None = None
    git_commit: str | None = None


@dataclass(slots=True)
class Contributor:
    name: str
    profile_url: str | None = None
    display_name: str | None = None

    def to_dict(self) -> JsonObject:
        return {"name": self.name, "profile_url": self.profile_url, "display_name": self.display_name}


@dataclass(slots=True)
class ContributionInfo:
    author: Contributor | None = None
    contributors: list[Contributor] = field(default_factory=list)
    updated_at: Any = None


@dataclass(slots=True)
class SystemMetadata:
    """Fields computed by the build itself, present for every file regardless of format."""

    locale: str = ""
    toc_rel: str | None = None
    canonical_url: str = ""
    canonical_url_prefix: str = ""
    breadcrumb_path: str | None = None
    monikers: list[str] = field(default_factory=list)
    moniker_group: str | None = None
    document_id: str = ""
    document_version_independent_id: str = ""
    content_git_url: str | None = None
    original_content_git_url: str | None = None
    original_content_git_url_template: str | None = None
    git_commit: str | None = None
    author: str | None = None
    contributors: list[Contributor] = field(default_factory=list)
    updated_at: str | None = None
    search_product: str = ""
    search_docset_name: str = ""
    path: str = ""
    pdf_url_prefix_template: str | None = None
    enable_loc_sxs: bool = False
    site_name: str = ""

    def to_dict(self) -> JsonObject:
        data: JsonObject = {
            "locale": self.locale,
            "toc_rel": self.toc_rel,
            "canonical_url": self.canonical_url,
            "canonical_url_prefix": self.canonical_url_prefix,
            "breadcrumb_path": self.breadcrumb_path,
            "monikers": list(self.monikers),
            "moniker_group": self.moniker_group,
            "document_id": self.document_id,
            "document_version_independent_id": self.document_version_independent_id,
            "content_git_url": self.content_git_url,
            "original_content_git_url": self.original_content_git_url,
            "original_content_git_url_template": self.original_content_git_url_template,
            "gitcommit": self.git_commit,
            "author": self.author,
            "contributors": [contributor.to_dict() for contributor in self.contributors],
            "updated_at": self.updated_at,
            "search.product": self.search_product,
            "search.docset_name": self.search_docset_name,
            "_path": self.path,
            "enable_loc_sxs": self.enable_loc_sxs,
            "site_name": self.site_name,
        }
        if self.pdf_url_prefix_template is not None:
            data["pdf_url_prefix_template"] = self.pdf_url_prefix_template
        return {key: value for key, value in data.items() if value is not None}


@dataclass(slots=True)
class TemplateModel:
    """Page shape handed to the site markup renderer (and written as-is for JSON output)."""

    content: str
    raw_metadata: JsonObject
    page_metadata: str
    themes_relative_path_to_output_root: str = "_themes/"

    def to_dict(self) -> JsonObject:
        return {
            "content": self.content,
            "rawMetadata": self.raw_metadata,
            "pageMetadata": self.page_metadata,
            "themesRelativePathToOutputRoot": self.themes_relative_path_to_output_root,
        }
