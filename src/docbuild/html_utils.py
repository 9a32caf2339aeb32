"""HTML helpers shared by the markdown loader, landing pages and structured content."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from razdel import tokenize


_WORD_RE = re.compile(r"\w", re.UNICODE)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_LOCALE_PREFIX_RE = re.compile(r"^/[a-z]{2}(-[a-z]{2,4}){1,2}(/|$)", re.IGNORECASE)
_NON_TEXT_TAGS = {"script", "style"}
_INVISIBLE_TAGS = _NON_TEXT_TAGS | {"link", "meta"}


def load_html(html: str) -> BeautifulSoup:
    """Parse an HTML fragment; leading <script>/<style>/<link>/<meta> stay in the body."""

    return BeautifulSoup(f"<body>{html or ''}</body>", "lxml")


def _root(dom: BeautifulSoup) -> Tag:
    return dom.body or dom


def to_html(dom: BeautifulSoup) -> str:
    """Serialize the fragment back without the html/body wrapper lxml adds."""

    return _root(dom).decode_contents()


def count_words(dom: BeautifulSoup) -> int:
    text_parts: list[str] = []
    for node in _root(dom).find_all(string=True):
        if isinstance(node, Comment):
            continue
        if node.parent is not None and node.parent.name in _NON_TEXT_TAGS:
            continue
        text_parts.append(str(node))

    return sum(1 for token in tokenize(" ".join(text_parts)) if _WORD_RE.search(token.text))


def get_bookmarks(dom: BeautifulSoup) -> set[str]:
    root = _root(dom)
    bookmarks = {str(tag["id"]) for tag in root.find_all(id=True) if str(tag["id"]).strip()}
    bookmarks.update(
        str(tag["name"]) for tag in root.find_all("a", attrs={"name": True}) if str(tag["name"]).strip()
    )
    return bookmarks


def try_extract_title(dom: BeautifulSoup) -> tuple[bool, str | None, str | None]:
    """Take the leading <h1> out of the fragment.

    Only a heading that is the first visible node counts; the heading is removed so the page
    template can place the title itself.
    """

    for node in list(_root(dom).children):
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            if node.strip():
                return False, None, None
            continue
        if isinstance(node, Tag) and node.name in _INVISIBLE_TAGS:
            continue
        if isinstance(node, Tag) and node.name == "h1":
            raw_title = str(node)
            title = node.get_text(" ", strip=True)
            node.extract()
            return True, title, raw_title
        return False, None, None
    return False, None, None


def _link_type(href: str) -> str:
    if href.startswith("#"):
        return "self-bookmark"
    if href.startswith("//") or _SCHEME_RE.match(href):
        return "external"
    if href.startswith("/"):
        return "absolute-path"
    return "relative-path"


def add_link_type(dom: BeautifulSoup, locale: str) -> BeautifulSoup:
    for anchor in _root(dom).find_all("a", href=True):
        href = str(anchor["href"]).strip()
        link_type = _link_type(href)
        if link_type == "absolute-path" and locale and not _LOCALE_PREFIX_RE.match(href):
            anchor["href"] = f"/{locale}{href}"
        anchor["data-linktype"] = link_type
    return dom


def post_process(dom: BeautifulSoup, locale: str) -> str:
    return to_html(add_link_type(dom, locale))


def _meta_content(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def create_html_meta_tags(
    metadata: Mapping[str, Any],
    hidden: Iterable[str] = (),
    names: Mapping[str, str] | None = None,
) -> str:
    """Render page metadata as <meta> tags, skipping hidden and '_'-prefixed keys."""

    hidden_keys = set(hidden)
    renames = names or {}
    soup = BeautifulSoup("", "lxml")
    tags: list[str] = []

    for key, value in metadata.items():
        if key.startswith("_") or key in hidden_keys or value is None:
            continue
        values = value if isinstance(value, list) else [value]
        for item in values:
            if item is None or isinstance(item, (dict, list)):
                continue
            tag = soup.new_tag("meta", attrs={"name": renames.get(key, key), "content": _meta_content(item)})
            tags.append(str(tag))

    return "\n".join(tags)
