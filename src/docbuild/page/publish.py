"""Manifest entries and the claim-or-reject registry that keeps them unique."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import PurePosixPath
import threading
from typing import Any

from docbuild.capabilities import BuildContext
from docbuild.errors import BuildError, publish_conflict
from docbuild.models import JsonObject, SourceDocument
from docbuild.routing import LEGACY_PAGE_SUFFIX

logger = logging.getLogger(__name__)

METADATA_ARTIFACT_SUFFIX = ".mta.json"


@dataclass(slots=True)
class PublishItem:
    """One file's claim to an output location."""

    url: str
    path: str
    source_path: str
    locale: str
    monikers: list[str] = field(default_factory=list)
    moniker_group: str | None = None
    extension_data: JsonObject | None = None

    def to_dict(self) -> JsonObject:
        entry: JsonObject = {
            "url": self.url,
            "path": self.path,
            "source_path": self.source_path,
            "locale": self.locale,
            "monikers": list(self.monikers),
            "moniker_group": self.moniker_group,
        }
        for key, value in (self.extension_data or {}).items():
            entry.setdefault(key, value)
        return entry


class InMemoryPublishRegistry:
    """Thread-safe registry of publish claims for one build."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_path: dict[str, PublishItem] = {}
        self._by_url: dict[tuple[str, str | None], PublishItem] = {}
        self._conflicts: list[BuildError] = []

    @property
    def conflicts(self) -> list[BuildError]:
        """Rejected claims, reported against the file that lost."""

        with self._lock:
            return list(self._conflicts)

    def try_add(self, document: SourceDocument, item: PublishItem) -> bool:
        path_key = item.path.casefold()
        url_key = (item.url.casefold(), item.moniker_group)

        with self._lock:
            existing = self._by_path.get(path_key) or self._by_url.get(url_key)
            if existing is not None:
                self._conflicts.append(publish_conflict(document.file_path, existing.source_path, item.path))
                logger.warning("Publish claim rejected for %s: %s already taken", document.file_path, item.path)
                return False

            self._by_path[path_key] = item
            self._by_url[url_key] = item
            return True

    def items(self) -> list[PublishItem]:
        """Snapshot of accepted claims ordered by output path."""

        with self._lock:
            return sorted(self._by_path.values(), key=lambda item: item.path)

    def manifest(self) -> JsonObject:
        return {"files": [item.to_dict() for item in self.items()]}


def is_custom_404(document: SourceDocument) -> bool:
    return PurePosixPath(document.file_path).stem.casefold() == "404"


def metadata_artifact_path(output_path: str) -> str:
    """Companion metadata path for a legacy page artifact."""

    if output_path.endswith(LEGACY_PAGE_SUFFIX):
        return output_path[: -len(LEGACY_PAGE_SUFFIX)] + METADATA_ARTIFACT_SUFFIX
    return str(PurePosixPath(output_path).with_suffix("")) + METADATA_ARTIFACT_SUFFIX


def publish(context: BuildContext, document: SourceDocument, item: PublishItem, output: Any) -> bool:
    """Claim the item's location and, only if the claim holds, write its artifacts."""

    if not context.publish_registry.try_add(document, item):
        return False

    if isinstance(output, str):
        context.output.write_text(output, item.path)
    else:
        context.output.write_json(output, item.path)

    if document.legacy and document.is_page:
        context.output.write_json(item.extension_data, metadata_artifact_path(item.path))

    logger.info("Published %s to %s", document.file_path, item.path)
    return True
