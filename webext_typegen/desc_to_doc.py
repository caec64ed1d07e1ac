"""Conversion of schema descriptions to doc comments.

Schema descriptions are small HTML fragments with Chrome-docs macros;
they are turned into markdown with BeautifulSoup and wrapped in
``/** */`` blocks.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag

DOC_START = "/**"
DOC_CONT = " * "
DOC_END = " */"

# Longest description kept on a single comment line
SINGLE_LINE_LIMIT = 100

_REF_RE = re.compile(r"\$\(ref:(.*?)\)")
_TOPIC_RE = re.compile(r"\$\(topic:(.*?)\)\[(.*?)]")
_CHROME_RE = re.compile(r"\bchrome\.(?=[a-zA-Z])")
_SPACE_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def to_doc_comment(content: str) -> str:
    """Wrap text in a doc comment, on one line when it is short."""
    if "\n" not in content and len(content) <= SINGLE_LINE_LIMIT:
        return f"{DOC_START} {content}{DOC_END}"
    lines = "\n".join(DOC_CONT + line for line in content.split("\n"))
    return f"{DOC_START}\n{lines}\n{DOC_END}"


def is_web_uri(href: str | None) -> bool:
    if not href:
        return False
    parsed = urlparse(href)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _to_markdown(node) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return _SPACE_RE.sub(" ", str(node))
    if not isinstance(node, Tag):
        return ""

    name = node.name
    if name == "br":
        return "  \n"
    if name == "pre":
        return f"\n\n```\n{node.get_text()}\n```\n\n"

    content = "".join(_to_markdown(child) for child in node.children)

    if name == "a":
        href = node.get("href")
        # Fragment and relative links point into the Chrome docs
        if is_web_uri(href):
            return f"[{content}]({href})"
        return content
    if name in ("var", "code"):
        return f"`{content}`"
    if name in ("b", "strong"):
        return f"**{content}**"
    if name in ("i", "em"):
        return f"_{content}_"
    if name == "p":
        return f"\n\n{content.strip()}\n\n"
    if name in ("ul", "ol"):
        return f"\n\n{content.strip()}\n\n"
    if name == "li":
        return f"\n*   {content.strip()}"
    # Markdown has no definition lists
    if name == "dl":
        return f"{content}\n"
    if name == "dt":
        return f"*{content}*:\n"
    if name == "dd":
        return f"  {content}  \n"
    return content


def desc_to_markdown(description: str) -> str:
    """Convert a schema description to markdown.

    Args:
        description: HTML description from a schema file.

    Returns:
        Markdown text for a doc comment.
    """
    description = _REF_RE.sub(r"<code>\1</code>", description)
    description = _TOPIC_RE.sub(r"\2", description)
    description = _CHROME_RE.sub("browser.", description, count=1)
    # "<webview>" is literal text, not a tag
    description = description.replace("</webview>", "").replace("<webview>", "&lt;webview&gt;")

    soup = BeautifulSoup(description, "html.parser")
    markdown = "".join(_to_markdown(child) for child in soup.children)
    markdown = "\n".join(line if line.strip() else "" for line in markdown.split("\n"))
    markdown = _BLANK_LINES_RE.sub("\n\n", markdown)
    return markdown.strip()


class DescriptionRenderer:
    """Default renderer used for doc comments."""

    def render_description(self, text: str) -> str:
        return desc_to_markdown(text)

    def wrap_as_comment(self, text: str) -> str:
        return to_doc_comment(text)
