"""File routing: schema type sniffing, site URLs, output paths and moniker groups."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path, PurePosixPath
import re
from typing import Iterable
import uuid

from docbuild.config import BuildConfig
from docbuild.models import ContentKind, SourceDocument, SourceFormat


_YAML_MIME_RE = re.compile(r"^#{3}\s*YamlMime\s*:\s*(?P<mime>[A-Za-z0-9_.\-]+)\s*$")
_SCHEMA_SUFFIXES = (".schema.json", ".json")
_JSON_SCHEMA_SNIFF_CHARS = 4096

LEGACY_PAGE_SUFFIX = ".raw.page.json"


def normalize_path(path: str) -> str:
    """Express a relative path with forward slashes, without leading './' or '/'."""

    normalized = str(PurePosixPath(path.replace("\\", "/")))
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/") if normalized != "." else ""


def read_mime(source_format: SourceFormat, text: str) -> str:
    """Return the schema type declared inside a YAML or JSON source, or an empty string."""

    if source_format is SourceFormat.YAML:
        first_line = text.lstrip("\ufeff").split("\n", 1)[0].rstrip("\r")
        match = _YAML_MIME_RE.match(first_line)
        return match.group("mime") if match else ""

    if source_format is SourceFormat.JSON:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return ""
        schema = payload.get("$schema") if isinstance(payload, dict) else None
        if not isinstance(schema, str) or not schema.strip():
            return ""
        name = schema.rstrip("/").rsplit("/", 1)[-1]
        for suffix in _SCHEMA_SUFFIXES:
            if name.lower().endswith(suffix):
                return name[: -len(suffix)]
        return name

    return ""


def _join(*parts: str) -> str:
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


def _site_suffix(config: BuildConfig, content_kind: ContentKind) -> str:
    if content_kind is ContentKind.DATA:
        return ".json"
    if config.legacy:
        return LEGACY_PAGE_SUFFIX
    if config.output_json:
        return ".json"
    return ".html"


def _guid(value: str) -> str:
    return str(uuid.UUID(bytes=hashlib.md5(value.encode("utf-8")).digest()))


def create_document(
    config: BuildConfig,
    docset_path: str | Path,
    file_path: str,
    *,
    mime: str | None = None,
    content_kind: ContentKind | None = None,
) -> SourceDocument:
    """Route one source file of a docset into an immutable SourceDocument."""

    docset_root = Path(docset_path)
    relative = normalize_path(file_path)
    source_format = SourceFormat.from_path(relative)

    if mime is None:
        mime = ""
        if source_format is not SourceFormat.MARKDOWN:
            raw = (docset_root / relative).read_text(encoding="utf-8-sig", errors="replace")
            sniff = raw if source_format is SourceFormat.JSON else raw[:_JSON_SCHEMA_SNIFF_CHARS]
            mime = read_mime(source_format, sniff)

    if content_kind is None:
        content_kind = ContentKind.DATA if mime and mime in config.data_mimes else ContentKind.PAGE

    stem = str(PurePosixPath(relative).with_suffix(""))
    is_index = PurePosixPath(stem).name.lower() == "index"
    url_path = str(PurePosixPath(stem).parent) if is_index else stem
    url_path = "" if url_path == "." else url_path

    site_url = "/" + _join(config.site_base_path, url_path)
    if is_index and content_kind is ContentKind.PAGE and not site_url.endswith("/"):
        site_url += "/"
    site_path = _join(config.site_base_path, stem) + _site_suffix(config, content_kind)

    return SourceDocument(
        file_path=relative,
        docset_path=docset_root,
        config=config,
        content_kind=content_kind,
        mime=mime,
        site_path=site_path,
        site_url=site_url,
        canonical_url=f"{config.host_name}/{config.locale}{site_url}",
        document_id=_guid(f"{config.product}|{config.name}|{site_url}"),
        version_independent_id=_guid(f"{config.product}|{config.name}|{relative}"),
    )


def moniker_group(monikers: Iterable[str]) -> str | None:
    """Stable identifier of a moniker set; None when no monikers apply."""

    ordered = sorted(set(monikers))
    if not ordered:
        return None
    return hashlib.sha256(",".join(ordered).encode("utf-8")).hexdigest()[:12]


def get_output_path(document: SourceDocument, monikers: Iterable[str]) -> str:
    """Output path of the primary artifact, with the moniker group folder below the base path."""

    group = moniker_group(monikers)
    if not group:
        return document.site_path

    base = document.config.site_base_path
    relative = document.site_path
    if base and relative.startswith(base + "/"):
        relative = relative[len(base) + 1 :]
    return _join(base, group, relative)
