"""Article loader: markdown source -> stored article record.

The source contract is deliberately small:

- the file starts with ``# Title``;
- everything up to the first ``## Heading`` is the excerpt;
- the rest of the file after the title line is the body.

Both excerpt and body are rendered to HTML, relative resource references are
rewritten to the per-article API path, and code-block language classes are
rewritten for the client-side highlighter.
"""

# mdblog:domain=content

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from markdown_it import MarkdownIt

from mdblog.content.keys import ArticleKey
from mdblog.errors import MissingTitleError

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_API_PREFIX = "api/article"

_md = MarkdownIt("commonmark", {"html": True})

# Title must be the very first line of the document.
_TITLE_RE = re.compile(r"\A# ([^\n]+?)[ \t]*(?:\r?\n|\Z)")

# First second-level heading after the title ends the excerpt.
_H2_RE = re.compile(r"^## (.+)$", re.MULTILINE)

_CODE_LANG_RE = re.compile(r'<code class="language-([A-Za-z0-9_+-]+)">')

# The attribute may appear anywhere in the tag, single- or double-quoted.
_IMG_SRC_RE = re.compile(r"""(<img\b[^>]*?\ssrc=(["']))(.+?)(\2)""", re.IGNORECASE)
_A_HREF_RE = re.compile(r"""(<a\b[^>]*?\shref=(["']))(.+?)(\2)""", re.IGNORECASE)

# Attachments served next to an article: "<anything>.<1-4 alnum>".
_ATTACHMENT_RE = re.compile(r".+\.[A-Za-z0-9]{1,4}$")

_ABSOLUTE_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.-]*:|//|/|#|\?)")


@dataclass
class Article:
    """Store view of one article version."""

    category: str
    slug: str
    mtime: int
    title: str
    excerpt: str
    content: str

    @property
    def identity(self) -> ArticleKey:
        return ArticleKey(self.category, self.slug)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Article:
        return cls(
            category=str(data["category"]),
            slug=str(data["slug"]),
            mtime=int(data["mtime"]),
            title=str(data["title"]),
            excerpt=str(data.get("excerpt", "")),
            content=str(data.get("content", "")),
        )


def is_relative_reference(ref: str) -> bool:
    """True for references resolved against the article's own directory."""
    return bool(ref) and _ABSOLUTE_RE.match(ref) is None


def article_resource_path(api_prefix: str, identity: ArticleKey, ref: str) -> str:
    """Stable API path for a resource stored next to an article."""
    prefix = api_prefix.rstrip("/")
    if ref.startswith("./"):
        ref = ref[2:]
    return f"{prefix}/{identity.category}/{identity.slug}/{ref}"


def highlight_code_classes(html: str) -> str:
    """Map ``language-X`` code classes to the highlighter's ``brush: X``."""
    return _CODE_LANG_RE.sub(r'<code class="brush: \1">', html)


def rewrite_resource_links(html: str, identity: ArticleKey, api_prefix: str) -> str:
    """Point relative ``<img src>`` and attachment ``<a href>`` at the API.

    Relative links that do not look like a file (no short extension) are
    left alone, since they are not served from the article directory.
    """

    def _img(match: re.Match[str]) -> str:
        ref = match.group(3)
        if not is_relative_reference(ref):
            return match.group(0)
        return match.group(1) + article_resource_path(api_prefix, identity, ref) + match.group(4)

    def _href(match: re.Match[str]) -> str:
        ref = match.group(3)
        if not is_relative_reference(ref) or not _ATTACHMENT_RE.match(ref):
            return match.group(0)
        return match.group(1) + article_resource_path(api_prefix, identity, ref) + match.group(4)

    html = _IMG_SRC_RE.sub(_img, html)
    return _A_HREF_RE.sub(_href, html)


def render_markdown(text: str) -> str:
    """Render markdown to HTML with the highlighter class convention applied."""
    if not text.strip():
        return ""
    return highlight_code_classes(_md.render(text))


def parse_article(
    text: str,
    category: str,
    slug: str,
    mtime: int,
    *,
    api_prefix: str = DEFAULT_API_PREFIX,
) -> Article:
    """Build the stored record from raw markdown *text*.

    Raises ``MissingTitleError`` if the text does not start with ``# Title``.
    """
    identity = ArticleKey(category, slug)
    text = text.removeprefix("\ufeff")

    title_match = _TITLE_RE.match(text)
    if title_match is None:
        raise MissingTitleError(identity)
    title = title_match.group(1).strip()
    body = text[title_match.end():]

    excerpt_end = _H2_RE.search(body)
    if excerpt_end is not None:
        excerpt = render_markdown(body[: excerpt_end.start()].strip())
    else:
        excerpt = ""

    content = render_markdown(body)

    return Article(
        category=category,
        slug=slug,
        mtime=mtime,
        title=title,
        excerpt=rewrite_resource_links(excerpt, identity, api_prefix),
        content=rewrite_resource_links(content, identity, api_prefix),
    )


def article_path(articles_dir: Path, identity: ArticleKey) -> Path:
    """Filesystem location of an article's markdown source."""
    return articles_dir / identity.category / f"{identity.slug}.md"


def load_article(
    articles_dir: Path,
    identity: ArticleKey,
    mtime: int,
    *,
    api_prefix: str = DEFAULT_API_PREFIX,
) -> Article:
    """Read and transform one article from disk.

    *mtime* is the version recorded by the scan, so the stored key matches
    the inventory even if the file is touched while loading.
    """
    text = article_path(articles_dir, identity).read_bytes().decode("utf-8")
    return parse_article(
        text,
        identity.category,
        identity.slug,
        mtime,
        api_prefix=api_prefix,
    )
