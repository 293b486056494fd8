"""HTML and text formatting for job descriptions and listing fields.

Descriptions arrive as arbitrary HTML (or plain text) from third-party feeds.
format_description() reduces them to a small allow-list of tags and gives
them paragraph structure; the remaining helpers produce plain text for
titles, companies, locations and length checks.
"""

import html
import re
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit

# Allowed tags mapped to their allowed attributes
ALLOWED_TAGS: Dict[str, Tuple[str, ...]] = {
    "p": (),
    "br": (),
    "ul": (),
    "ol": (),
    "li": (),
    "strong": (),
    "b": (),
    "em": (),
    "i": (),
    "a": ("href", "title", "rel", "target"),
    "h3": (),
    "h4": (),
    "h5": (),
    "h6": (),
    "div": ("class",),
    "span": ("class",),
}

VOID_TAGS = frozenset({"br"})

# Tags whose content is dropped together with the tag
DROP_CONTENT_TAGS = frozenset({"script", "style", "iframe", "object", "noscript", "template"})

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

# Blocks that are not wrapped in <p> by autop()
BLOCK_TAGS = ("ul", "ol", "li", "div", "h3", "h4", "h5", "h6", "p")

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_EMPTY_PARAGRAPH_RE = re.compile(r"<p>\s*</p>", re.IGNORECASE)
_BLOCK_START_RE = re.compile(r"^<(?:%s)[\s>]" % "|".join(BLOCK_TAGS), re.IGNORECASE)


def _is_safe_href(value: str) -> bool:
    """Allow relative links and http(s)/mailto links only."""
    # Browsers ignore control characters and spaces inside the scheme
    compact = re.sub(r"[\x00-\x20]", "", html.unescape(value))
    match = _SCHEME_RE.match(compact)
    if not match:
        return True
    return match.group(1).lower() in ALLOWED_PROTOCOLS


class _AllowListSanitizer(HTMLParser):
    """Re-emits only allow-listed tags and attributes; text is escaped."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._drop_depth = 0

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._drop_depth += 1
            return
        if self._drop_depth or tag not in ALLOWED_TAGS:
            return

        allowed = ALLOWED_TAGS[tag]
        rendered = []
        for name, value in attrs:
            if name not in allowed or value is None:
                continue
            if name == "href" and not _is_safe_href(value):
                continue
            rendered.append(f' {name}="{html.escape(value, quote=True)}"')

        if tag in VOID_TAGS:
            self._parts.append(f"<{tag}{''.join(rendered)} />")
        else:
            self._parts.append(f"<{tag}{''.join(rendered)}>")

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            return
        self.handle_starttag(tag, attrs)
        if tag not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            if self._drop_depth:
                self._drop_depth -= 1
            return
        if self._drop_depth or tag not in ALLOWED_TAGS or tag in VOID_TAGS:
            return
        self._parts.append(f"</{tag}>")

    def handle_data(self, data: str) -> None:
        if self._drop_depth:
            return
        self._parts.append(html.escape(data, quote=False))

    def result(self) -> str:
        return "".join(self._parts)


def sanitize_html(value: str) -> str:
    """Reduce HTML to the allow-listed tags and attributes.

    Disallowed tags are removed but their text is kept; the content of
    script/style-like tags is dropped entirely; links with protocols other
    than http, https or mailto lose their href.
    """
    if not value:
        return ""
    parser = _AllowListSanitizer()
    parser.feed(value)
    parser.close()
    return parser.result()


def autop(text: str) -> str:
    """Wrap blank-line separated blocks in <p> and turn single newlines into <br />.

    Blocks that already start with a block-level tag are left unwrapped.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not text:
        return ""

    paragraphs = []
    for block in re.split(r"\n\s*\n", text):
        block = block.strip()
        if not block:
            continue
        if _BLOCK_START_RE.match(block):
            paragraphs.append(block)
            continue
        block = re.sub(r"\s*\n\s*", "<br />\n", block)
        paragraphs.append(f"<p>{block}</p>")
    return "\n".join(paragraphs)


def format_description(value: Optional[str]) -> str:
    """Sanitize a description and give it paragraph structure.

    Args:
        value: Raw description HTML or plain text

    Returns:
        Allow-listed HTML, wrapped in paragraphs when the source had none,
        with empty paragraphs removed
    """
    if not value:
        return ""

    cleaned = sanitize_html(value)
    if not re.search(r"<p[\s>]", cleaned, re.IGNORECASE):
        cleaned = autop(cleaned)
    cleaned = _EMPTY_PARAGRAPH_RE.sub("", cleaned)
    return cleaned.strip()


def strip_tags(value: Optional[str]) -> str:
    """Remove every tag (and script/style content) without decoding entities."""
    if not value:
        return ""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1\s*>", "", value, flags=re.IGNORECASE | re.DOTALL)
    return re.sub(r"<[^>]*>", "", text)


def html_to_text(value: Optional[str]) -> str:
    """Render HTML as plain text, keeping line and paragraph breaks."""
    if not value:
        return ""

    text = html.unescape(value)
    text = re.sub(r"<(script|style)[^>]*>.*?</\1\s*>", "", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</(p|li|div|h[1-6])>", "\n\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"[ \t\xa0]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def sanitize_text(value: Optional[str]) -> str:
    """Single-line plain text: tags removed, entities decoded, whitespace collapsed."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", html_to_text(value)).strip()


def sanitize_url(value: Optional[str]) -> str:
    """Return the URL if it is an absolute http(s) URL, otherwise an empty string."""
    if not value:
        return ""
    candidate = value.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return ""
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return ""
    return candidate
