"""Page build stages."""

from .builder import build_data, build_document, build_page
from .publish import InMemoryPublishRegistry, PublishItem

__all__ = ["InMemoryPublishRegistry", "PublishItem", "build_data", "build_document", "build_page"]
