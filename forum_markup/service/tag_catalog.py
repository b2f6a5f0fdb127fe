"""
Built-in BBCode tag catalog.

Each tag is a ``TagDefinition`` whose transform turns already-expanded inner
content into an HTML fragment. Transforms never raise: unsafe or invalid
input drops the styling (or the whole tag) instead.

Reference:
    - https://www.bbcode.org/reference.php
"""

from collections.abc import Iterable
import html

from forum_markup.exceptions import DuplicateTagError
from forum_markup.models.markup import ParserConfig, TagDefinition
from forum_markup.service.sanitizer import (
    REGEX_TIMEOUT,
    escape_html,
    sanitize_color,
    sanitize_identifier,
    sanitize_url,
)

import regex as re

YOUTUBE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{11}$")
YOUTUBE_URL_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?(?:[^#\s]*&)?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})(?![a-zA-Z0-9_-])",
    re.IGNORECASE,
)
LIST_ITEM_PATTERN = re.compile(r"\[\*\]", re.IGNORECASE)
TABLE_MARKER_PATTERN = re.compile(r"\[(/?)(tr|td|th)\]", re.IGNORECASE)
# a run of breaks is only tried from its start, so long runs are scanned once
TABLE_BREAK_PATTERN = re.compile(r"^(?:<br>|\s)++|(?<!<br>|\s)(?:<br>|\s)++(?=</?t[rdh]>|$)", re.IGNORECASE)
EDGE_BREAK_PATTERN = re.compile(r"^(?:<br>|\s)++|(?<!<br>|\s)(?:<br>|\s)++$", re.IGNORECASE)
PARAGRAPH_BREAK_PATTERN = re.compile(r"</p><p>", re.IGNORECASE)
LINE_BREAK_PATTERN = re.compile(r"<br>", re.IGNORECASE)

DEFAULT_FONT_SIZE = 3

# markers rewritten by their parent tag's transform, never paired on their own
STRUCTURAL_MARKERS: dict[str, frozenset[str]] = {
    "list": frozenset({"*"}),
    "table": frozenset({"tr", "td", "th"}),
}


def make_tag(
    tag: str,
    content: str,
    attributes: dict[str, str] | None = None,
    self_closing: bool = False,
) -> str:
    """Generate an HTML tag with optional attributes."""
    attr_str = ""
    if attributes:
        attr_parts = [f'{key}="{html.escape(value)}"' if value else key for key, value in attributes.items()]
        attr_str = " " + " ".join(attr_parts)

    if self_closing:
        return f"<{tag}{attr_str} />"
    else:
        return f"<{tag}{attr_str}>{content}</{tag}>"


def extract_youtube_id(value: str, timeout: float = REGEX_TIMEOUT) -> str | None:
    value = value.strip()
    if YOUTUBE_ID_PATTERN.match(value, timeout=timeout):
        return value
    match = YOUTUBE_URL_PATTERN.search(value, timeout=timeout)
    return match.group(1) if match else None


def _restore_line_breaks(content: str, timeout: float) -> str:
    """Turn the engine's line break markup back into newlines."""
    content = PARAGRAPH_BREAK_PATTERN.sub("\n\n", content, timeout=timeout)
    return LINE_BREAK_PATTERN.sub("\n", content, timeout=timeout)


def _escape_block(content: str, timeout: float) -> str:
    # newlines are emitted as <br> so they survive whitespace collapsing
    return escape_html(_restore_line_breaks(content, timeout).strip("\n")).replace("\n", "<br>")


class BuiltinTags:
    """Transforms of the built-in catalog, bound to a URL whitelist."""

    def __init__(self, url_whitelist: Iterable[str] = (), timeout: float = REGEX_TIMEOUT):
        self.url_whitelist = tuple(url_whitelist)
        self.timeout = timeout

    def definitions(self) -> tuple[TagDefinition, ...]:
        """The built-in catalog, in matching order."""
        return (
            # text formatting
            TagDefinition("b", self.bold),
            TagDefinition("i", self.italic),
            TagDefinition("u", self.underline),
            TagDefinition("s", self.strike),
            # colors and sizing
            TagDefinition("color", self.color, allowed_attributes=("color",)),
            TagDefinition("size", self.size, allowed_attributes=("size",)),
            # links and media
            TagDefinition("url", self.url, allowed_attributes=("url",)),
            TagDefinition("img", self.image),
            TagDefinition("youtube", self.youtube),
            # code and preformatted text
            TagDefinition("code", self.code, allowed_attributes=("language",), block_level=True),
            TagDefinition("pre", self.pre, block_level=True),
            # quotes and blocks
            TagDefinition("quote", self.quote, allowed_attributes=("author",), block_level=True),
            TagDefinition("spoiler", self.spoiler, allowed_attributes=("title",), block_level=True),
            TagDefinition("list", self.list_block, allowed_attributes=("type",), block_level=True),
            # alignment
            TagDefinition("center", self.center, block_level=True),
            TagDefinition("right", self.right, block_level=True),
            TagDefinition("table", self.table, block_level=True),
        )

    def bold(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("strong", content)

    def italic(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("em", content)

    def underline(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("u", content)

    def strike(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("del", content)

    def color(self, content: str, attributes: dict[str, str]) -> str:
        color = sanitize_color(attributes.get("color", "").strip(), self.timeout)
        return make_tag("span", content, attributes={"style": f"color:{color}"})

    def size(self, content: str, attributes: dict[str, str]) -> str:
        try:
            size = int(attributes.get("size", "").strip())
        except ValueError:
            size = DEFAULT_FONT_SIZE
        # 10px to 22px
        font_size = 8 + 2 * max(1, min(7, size))
        return make_tag("span", content, attributes={"style": f"font-size:{font_size}px"})

    def url(self, content: str, attributes: dict[str, str]) -> str:
        # [url]http://example.com[/url] uses its content as the target
        target = attributes.get("url", "").strip().strip("\"'") or content
        url = sanitize_url(target, self.url_whitelist)
        if not url:
            return content
        return make_tag(
            "a",
            content or escape_html(url),
            attributes={"href": url, "target": "_blank", "rel": "noopener noreferrer"},
        )

    def image(self, content: str, attributes: dict[str, str]) -> str:
        url = sanitize_url(content.strip(), self.url_whitelist)
        if not url:
            return ""
        return make_tag(
            "img",
            "",
            attributes={"src": url, "alt": "User Image", "class": "bbcode-img", "loading": "lazy"},
            self_closing=True,
        )

    def youtube(self, content: str, attributes: dict[str, str]) -> str:
        video_id = extract_youtube_id(content, self.timeout)
        if not video_id:
            return content
        iframe = make_tag(
            "iframe",
            "",
            attributes={
                "src": f"https://www.youtube.com/embed/{video_id}",
                "frameborder": "0",
                "allowfullscreen": "",
            },
        )
        return make_tag("div", iframe, attributes={"class": "bbcode-youtube"})

    def code(self, content: str, attributes: dict[str, str]) -> str:
        language = sanitize_identifier(attributes.get("language", ""), self.timeout)
        code_attributes = {"class": f"language-{language}"} if language else None
        return make_tag("pre", make_tag("code", _escape_block(content, self.timeout), attributes=code_attributes))

    def pre(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("pre", _escape_block(content, self.timeout))

    def quote(self, content: str, attributes: dict[str, str]) -> str:
        # [quote="author"] and [quote=author] are both accepted
        author = attributes.get("author", "").strip().strip("\"'").strip()
        cite = make_tag("cite", f"Originally posted by {escape_html(author)}") if author else ""
        return make_tag("blockquote", cite + content, attributes={"class": "bbcode-quote"})

    def spoiler(self, content: str, attributes: dict[str, str]) -> str:
        title = attributes.get("title", "").strip()
        summary = make_tag("summary", escape_html(title) if title else "Spoiler")
        return make_tag("details", summary + content, attributes={"class": "bbcode-spoiler"})

    def list_block(self, content: str, attributes: dict[str, str]) -> str:
        list_type = "ol" if attributes.get("type", "").strip() == "1" else "ul"
        head, *items = LIST_ITEM_PATTERN.split(content, timeout=self.timeout)
        parts = []
        head = EDGE_BREAK_PATTERN.sub("", head, timeout=self.timeout)
        if head:
            parts.append(head)
        for item in items:
            parts.append(make_tag("li", EDGE_BREAK_PATTERN.sub("", item, timeout=self.timeout)))
        return make_tag(list_type, "".join(parts), attributes={"class": "bbcode-list"})

    def center(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("div", content, attributes={"style": "text-align:center"})

    def right(self, content: str, attributes: dict[str, str]) -> str:
        return make_tag("div", content, attributes={"style": "text-align:right"})

    def table(self, content: str, attributes: dict[str, str]) -> str:
        table_content = TABLE_MARKER_PATTERN.sub(
            lambda match: f"<{match.group(1)}{match.group(2).lower()}>", content, timeout=self.timeout
        )
        table_content = TABLE_BREAK_PATTERN.sub("", table_content, timeout=self.timeout)
        return make_tag("table", table_content, attributes={"class": "bbcode-table"})


def build_catalog(config: ParserConfig) -> tuple[TagDefinition, ...]:
    """
    Build the active catalog for a configuration.

    Built-ins are filtered by ``allowed_tags`` and keep their order; custom
    tags are always active. A custom tag named like a built-in replaces it in
    place, any other custom tag is appended.
    """
    custom: dict[str, TagDefinition] = {}
    for tag in config.custom_tags:
        if tag.name in custom:
            raise DuplicateTagError(tag.name)
        custom[tag.name] = tag

    catalog: list[TagDefinition] = []
    for tag in BuiltinTags(config.url_whitelist, config.regex_timeout).definitions():
        if tag.name in custom:
            catalog.append(custom.pop(tag.name))
        elif config.allowed_tags is None or tag.name in config.allowed_tags:
            catalog.append(tag)
    catalog.extend(custom.values())
    return tuple(catalog)
