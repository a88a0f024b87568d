"""HTML to readable markdown, links and metadata.

Main content is the first ``<article>``, ``<main>`` or ``[role=main]``
element, falling back to ``<body>``. Page chrome (navigation, headers,
footers, sidebars, forms) and non-content tags are removed before rendering.
Extraction never raises: an unparseable document yields an empty string.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 50_000

_STRIP_TAGS = ("script", "style", "noscript", "template", "svg", "iframe", "canvas")
_CHROME_TAGS = ("nav", "aside", "form", "button")
_PAGE_CHROME_TAGS = ("header", "footer")
_MAIN_SELECTORS = ("article", "main", "[role=main]")
_BLOCK_TAGS = {
    "p", "div", "section", "article", "main", "blockquote", "pre", "table",
    "ul", "ol", "li", "tr", "figure", "figcaption", "dl", "dt", "dd",
}


@dataclass(frozen=True)
class PageLink:
    text: str
    href: str

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "href": self.href}


@dataclass(frozen=True)
class PageMetadata:
    title: str = ""
    description: str = ""
    author: str = ""


def _normalize_text(text: str) -> str:
    text = text.replace("\xa0", " ")
    text = re.sub(r"\r\n?", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _resolve(href: str, base_url: Optional[str]) -> str:
    href = href.strip()
    if base_url and href and not href.startswith(("http://", "https://", "//", "#", "mailto:")):
        return urljoin(base_url, href)
    return href


def _select_main(soup: BeautifulSoup) -> Tag:
    for selector in _MAIN_SELECTORS:
        found = soup.select_one(selector)
        if found is not None and found.get_text(strip=True):
            return found
    return soup.body or soup


def _render_inline(node: Tag, base_url: Optional[str]) -> str:
    parts: list[str] = []
    for child in node.children:
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag):
            parts.append(_render(child, base_url))
    return "".join(parts)


def _render(node: Tag, base_url: Optional[str]) -> str:
    """Render a tag and its children as markdown."""
    name = node.name
    if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
        text = node.get_text(" ", strip=True)
        return f"\n\n{'#' * int(name[1])} {text}\n\n" if text else ""
    if name == "a":
        text = node.get_text(" ", strip=True)
        href = _resolve(str(node.get("href") or ""), base_url)
        if text and href.startswith(("http://", "https://")):
            return f"[{text}]({href})"
        return text
    if name == "li":
        return f"\n- {_render_inline(node, base_url).strip()}"
    if name == "br":
        return "\n"
    if name in ("strong", "b"):
        text = node.get_text(" ", strip=True)
        return f"**{text}**" if text else ""
    if name in ("em", "i"):
        text = node.get_text(" ", strip=True)
        return f"*{text}*" if text else ""
    if name == "code" and (node.parent is None or node.parent.name != "pre"):
        return f"`{node.get_text()}`"
    if name == "pre":
        return f"\n\n```\n{node.get_text().strip()}\n```\n\n"
    if name in ("td", "th"):
        return f" {node.get_text(' ', strip=True)} |"
    if name == "tr":
        return "\n|" + _render_inline(node, base_url)

    inner = _render_inline(node, base_url)
    if name in _BLOCK_TAGS:
        return f"\n\n{inner}\n\n"
    return inner


def _html_to_markdown(html: str, url: Optional[str]) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_STRIP_TAGS):
        tag.decompose()
    root = _select_main(soup)
    chrome = _CHROME_TAGS
    if root is soup or root is soup.body:
        chrome = _CHROME_TAGS + _PAGE_CHROME_TAGS
    for tag in root.find_all(chrome):
        tag.decompose()
    return _normalize_text(_render(root, url))


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return str(tag.get("content") or "").strip()


class ContentExtractor:
    """Converts rendered HTML into text the completion provider can read."""

    def extract_markdown(
        self,
        html: str,
        url: Optional[str] = None,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> str:
        """Extract the main content of a page as markdown.

        Args:
            html: Rendered page HTML
            url: Page URL, used for resolving relative links
            max_chars: Truncation limit

        Returns:
            Markdown text (possibly empty), at most ``max_chars`` long
        """
        if not html or not html.strip():
            return ""
        try:
            markdown = _html_to_markdown(html, url)
        except Exception as exc:
            logger.debug("Content extraction failed for %s: %s", url, exc)
            return ""
        return markdown[:max_chars]

    def extract_links(self, html: str, base_url: Optional[str] = None) -> list[PageLink]:
        """Return every anchor on the page, with relative hrefs resolved."""
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:
            logger.debug("Link extraction failed for %s: %s", base_url, exc)
            return []

        return [
            PageLink(text=anchor.get_text(" ", strip=True), href=_resolve(str(anchor["href"]), base_url))
            for anchor in soup.find_all("a", href=True)
        ]

    def extract_metadata(self, html: str) -> PageMetadata:
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:
            logger.debug("Metadata extraction failed: %s", exc)
            return PageMetadata()

        title = soup.title.get_text(strip=True) if soup.title else ""
        description = _meta_content(soup, name="description") or _meta_content(
            soup, property="og:description"
        )
        author = _meta_content(soup, name="author") or _meta_content(
            soup, property="article:author"
        )
        return PageMetadata(title=title, description=description, author=author)
