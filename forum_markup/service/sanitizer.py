"""
Sanitization helpers for values that reach the rendered HTML.

Everything here is a pure function that neutralizes its input instead of
raising: URLs become ``""``, colors become ``"inherit"`` and identifiers lose
every unsafe character.
"""

from collections.abc import Iterable
import html
from typing import ClassVar

import bleach
from bleach.css_sanitizer import CSSSanitizer
from pydantic import HttpUrl, TypeAdapter, ValidationError
import regex as re

REGEX_TIMEOUT = 5

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-f]{3,6}$", re.IGNORECASE)
NAMED_COLORS = frozenset(
    {"black", "white", "red", "green", "blue", "yellow", "orange", "purple", "pink", "brown", "gray", "grey"}
)
IDENTIFIER_PATTERN = re.compile(r"[^a-zA-Z0-9\-_]")

SCRIPT_BLOCK_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
IFRAME_BLOCK_PATTERN = re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL)
# searched backwards, so the first match is the last closing tag
LAST_SCRIPT_CLOSE_PATTERN = re.compile(r"</script>", re.IGNORECASE | re.REVERSE)
LAST_IFRAME_CLOSE_PATTERN = re.compile(r"</iframe>", re.IGNORECASE | re.REVERSE)
JAVASCRIPT_URI_PATTERN = re.compile(r"javascript:", re.IGNORECASE)
# only tried at the start of a word, so long words are scanned once
EVENT_HANDLER_PATTERN = re.compile(r"(?<!\w)on\w++=", re.IGNORECASE)

_http_url_adapter = TypeAdapter(HttpUrl)


def sanitize_url(url: str, whitelist: Iterable[str] = ()) -> str:
    """
    Normalize an http(s) URL, or return an empty string.

    Protocol-relative URLs (``//host/path``) are treated as https. When a
    whitelist is given, the host must equal one of its domains or be a
    subdomain of one.
    """
    if not url:
        return ""
    url = url.strip()
    if url.startswith("//"):
        url = f"https:{url}"

    try:
        parsed = _http_url_adapter.validate_python(url)
    except ValidationError:
        return ""

    if parsed.scheme not in ("http", "https") or not parsed.host:
        return ""

    domains = [domain.lower().strip(".") for domain in whitelist if domain]
    if domains:
        host = parsed.host.lower()
        if not any(host == domain or host.endswith(f".{domain}") for domain in domains):
            return ""

    return str(parsed)


def sanitize_color(color: str, timeout: float = REGEX_TIMEOUT) -> str:
    """Allow hex colors and a few basic color names."""
    if not color:
        return "inherit"
    if HEX_COLOR_PATTERN.match(color, timeout=timeout) or color.lower() in NAMED_COLORS:
        return color
    return "inherit"


def sanitize_identifier(value: str, timeout: float = REGEX_TIMEOUT) -> str:
    return IDENTIFIER_PATTERN.sub("", value or "", timeout=timeout)


def escape_html(text: str) -> str:
    return html.escape(text or "", quote=True)


def unescape_html(text: str) -> str:
    return html.unescape(text or "")


def sanitize_input(text: str, timeout: float = REGEX_TIMEOUT) -> str:
    """
    Remove obviously dangerous content before tag parsing.

    This is a blunt filter (script/iframe blocks, ``javascript:`` and inline
    event handler attributes), not an HTML sanitizer. The allow-list pass in
    ``HTMLSanitizer`` runs on the rendered output.
    """
    text = remove_before_last(SCRIPT_BLOCK_PATTERN, text, LAST_SCRIPT_CLOSE_PATTERN, timeout)
    text = remove_before_last(IFRAME_BLOCK_PATTERN, text, LAST_IFRAME_CLOSE_PATTERN, timeout)
    text = JAVASCRIPT_URI_PATTERN.sub("", text, timeout=timeout)
    text = EVENT_HANDLER_PATTERN.sub("", text, timeout=timeout)
    return text


def remove_before_last(pattern: re.Pattern, text: str, last_close: re.Pattern, timeout: float = REGEX_TIMEOUT) -> str:
    """
    Remove every match of ``pattern``, each of which ends with a ``last_close`` match.

    Only the text up to the last closing tag is searched, so unclosed openers
    after it are never scanned to the end of the input.
    """
    close = last_close.search(text, timeout=timeout)
    if close is None:
        return text
    return pattern.sub("", text[: close.end()], timeout=timeout) + text[close.end() :]


class HTMLSanitizer:
    """Allow-list sanitizer for rendered markup.

    Attributes:
        ALLOWED_TAGS: HTML tags the built-in catalog can produce.
        ALLOWED_ATTRIBUTES: Attributes kept per tag.
        ALLOWED_CSS_PROPERTIES: Inline style properties kept by the CSS sanitizer.
    """

    ALLOWED_TAGS: ClassVar[list[str]] = [
        "a",
        "blockquote",
        "br",
        "cite",
        "code",
        "del",
        "details",
        "div",
        "em",
        "iframe",
        "img",
        "li",
        "ol",
        "p",
        "pre",
        "span",
        "strong",
        "summary",
        "table",
        "tbody",
        "td",
        "th",
        "thead",
        "tr",
        "u",
        "ul",
    ]

    ALLOWED_ATTRIBUTES: ClassVar[dict[str, list[str]]] = {
        "a": ["href", "target", "rel", "class"],
        "code": ["class"],
        "div": ["class", "style"],
        "iframe": ["src", "frameborder", "allowfullscreen", "class"],
        "img": ["src", "alt", "class", "loading"],
        "span": ["class", "style"],
        "*": ["class"],
    }

    ALLOWED_CSS_PROPERTIES: ClassVar[list[str]] = ["color", "font-size", "text-align"]

    PROTOCOLS: ClassVar[list[str]] = ["http", "https"]

    @classmethod
    def sanitize_html(cls, html_content: str) -> str:
        """
        Clean and sanitize HTML content to prevent XSS attacks.
        Uses bleach to allow only a safe subset of HTML tags and attributes.

        Args:
            html_content: Rendered HTML content

        Returns:
            Sanitized HTML content
        """
        if not html_content:
            return ""

        css_sanitizer = CSSSanitizer(allowed_css_properties=cls.ALLOWED_CSS_PROPERTIES)

        return bleach.clean(
            html_content,
            tags=cls.ALLOWED_TAGS,
            attributes=cls.ALLOWED_ATTRIBUTES,
            protocols=cls.PROTOCOLS,
            css_sanitizer=css_sanitizer,
            strip=True,
        )


sanitize_html = HTMLSanitizer.sanitize_html
