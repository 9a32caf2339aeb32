"""System metadata: build-derived fields that every page carries regardless of format."""

from __future__ import annotations

from datetime import datetime
import logging
from pathlib import PurePosixPath
import posixpath
from typing import Awaitable, Callable, TypeVar

from docbuild.capabilities import BuildContext, read_input_metadata
from docbuild.errors import BuildError, CollaboratorError, invalid_breadcrumb_path
from docbuild.models import ContributionInfo, GitUrls, SourceDocument, SystemMetadata
from docbuild.routing import moniker_group

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(errors: list[BuildError], default: T, lookup: Callable[[], T]) -> T:
    try:
        return lookup()
    except CollaboratorError as exc:
        errors.append(exc.error)
        return default


async def _guarded_async(errors: list[BuildError], default: T, lookup: Callable[[], Awaitable[T]]) -> T:
    try:
        return await lookup()
    except CollaboratorError as exc:
        errors.append(exc.error)
        return default


def format_updated_at(value: object) -> str | None:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %I:%M %p")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def site_relative_path(document: SourceDocument) -> str:
    """Site path relative to the base path, always with forward slashes."""

    site_path = document.site_path.replace("\\", "/")
    base = document.config.site_base_path
    if not base:
        return str(PurePosixPath(site_path))
    return posixpath.relpath(site_path, base)


async def build_system_metadata(
    context: BuildContext, document: SourceDocument
) -> tuple[list[BuildError], SystemMetadata]:
    """Aggregate the independent lookups into a fully populated record.

    A failed lookup leaves its field at the default and adds its error; the record itself is
    always returned.
    """

    errors: list[BuildError] = []
    config = document.config
    system_metadata = SystemMetadata()

    metadata_errors, input_metadata = await read_input_metadata(context, document)
    errors.extend(metadata_errors)

    if input_metadata.breadcrumb_path:
        try:
            breadcrumb_error, breadcrumb_path = context.link_resolver.resolve_relative_link(
                document, input_metadata.breadcrumb_path, document
            )
        except CollaboratorError as exc:
            errors.append(exc.error)
        else:
            if breadcrumb_error is not None:
                errors.append(breadcrumb_error)
            elif breadcrumb_path is None:
                errors.append(invalid_breadcrumb_path(document.file_path, input_metadata.breadcrumb_path))
            system_metadata.breadcrumb_path = breadcrumb_path

    system_metadata.locale = document.locale
    system_metadata.toc_rel = input_metadata.toc_rel or _guarded(
        errors, None, lambda: context.toc_map.find_toc_relative_path(document)
    )
    system_metadata.canonical_url = document.canonical_url
    system_metadata.enable_loc_sxs = config.bilingual
    system_metadata.site_name = config.site_name

    moniker_error, monikers = _guarded(
        errors, (None, []), lambda: context.moniker_provider.get_file_level_monikers(document)
    )
    if moniker_error is not None:
        errors.append(moniker_error)
    system_metadata.monikers = list(monikers)
    system_metadata.moniker_group = moniker_group(monikers)

    redirected_id = _guarded(errors, None, lambda: context.redirections.try_get_document_id(document))
    system_metadata.document_id, system_metadata.document_version_independent_id = redirected_id or (
        document.document_id,
        document.version_independent_id,
    )

    git_urls = _guarded(errors, GitUrls(), lambda: context.contribution_provider.get_git_urls(document))
    system_metadata.content_git_url = git_urls.content_git_url
    system_metadata.original_content_git_url = git_urls.original_content_git_url
    system_metadata.original_content_git_url_template = git_urls.original_content_git_url_template
    system_metadata.git_commit = git_urls.git_commit

    contribution_errors, contribution_info = await _guarded_async(
        errors,
        ([], None),
        lambda: context.contribution_provider.get_contribution_info(document, input_metadata.author),
    )
    contribution = contribution_info or ContributionInfo()
    system_metadata.author = contribution.author.name if contribution.author else None
    system_metadata.contributors = list(contribution.contributors)
    system_metadata.updated_at = format_updated_at(contribution.updated_at)

    system_metadata.search_product = config.product
    system_metadata.search_docset_name = config.name

    system_metadata.path = site_relative_path(document)
    host_name = config.host_name
    base_path = f"{config.site_base_path}/" if config.site_base_path else ""
    system_metadata.canonical_url_prefix = f"{host_name}/{system_metadata.locale}/{base_path}"

    if config.output_pdf:
        system_metadata.pdf_url_prefix_template = (
            f"{host_name}/pdfstore/{system_metadata.locale}/{config.product}.{config.name}/{{branchName}}"
        )

    errors.extend(contribution_errors)
    logger.debug("Built system metadata for %s with %d errors", document.file_path, len(errors))
    return errors, system_metadata
