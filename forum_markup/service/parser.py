"""
BBCode to HTML rendering engine.

The engine runs one substitution pass per catalog tag, in catalog order, and
recurses into each match's inner content one nesting level deeper. Openers
and closers are paired with a stack scan, so a pass is linear in the content.
Pairs nested deeper than ``max_depth`` are protected before expansion and
stay literal text, and a failing transform only affects its own span, so
rendering never raises. One ``regex_timeout`` budget covers the whole render.
"""

import time

from forum_markup.log import service_logger
from forum_markup.models.markup import ParserConfig, TagDefinition
from forum_markup.service.sanitizer import escape_html, sanitize_html, sanitize_input

import regex as re

logger = service_logger("BBCodeEngine")

PARAGRAPH_BREAK_PATTERN = re.compile(r"\n{2,}")
EMPTY_PARAGRAPH_PATTERN = re.compile(r"<p>\s*</p>")
WHITESPACE_PATTERN = re.compile(r"\s+")

# stand-ins for the brackets of literal tags, turned back into brackets after expansion
LITERAL_OPEN = "\x0e"
LITERAL_CLOSE = "\x0f"

TagPair = tuple[re.Match, re.Match]


def time_left(deadline: float) -> float:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise TimeoutError("Render time budget exhausted")
    return remaining


def protect_brackets(text: str) -> str:
    return text.replace("[", LITERAL_OPEN).replace("]", LITERAL_CLOSE)


class ParsingEngine:
    def __init__(self, catalog: tuple[TagDefinition, ...], config: ParserConfig):
        # tags that keep their content verbatim run first, so no other pass rewrites it
        self.catalog = tuple(tag for tag in catalog if not tag.parse_content) + tuple(
            tag for tag in catalog if tag.parse_content
        )
        self.paired_tags = tuple(tag for tag in self.catalog if not tag.self_closing)
        self.config = config
        self.timeout = config.regex_timeout

    def render(self, text: str) -> str:
        """
        Parse BBCode text and convert it to HTML.

        Args:
            text: Original text containing BBCode

        Returns:
            Converted HTML string
        """
        if not text or not isinstance(text, str):
            return ""

        deadline = time.monotonic() + self.timeout
        text = text.replace(LITERAL_OPEN, "").replace(LITERAL_CLOSE, "")

        if self.config.xss_protection:
            try:
                text = sanitize_input(text, timeout=time_left(deadline))
            except TimeoutError:
                logger.warning("Input sanitization timed out, escaping the whole input")
                text = escape_html(text)

        text = self.process_line_breaks(text)
        try:
            text = self.protect_deep_tags(text, deadline)
        except TimeoutError:
            logger.warning("Nesting scan timed out, leaving every tag as text")
        else:
            text = self.parse_tags(text, 1, deadline)
        text = text.replace(LITERAL_OPEN, "[").replace(LITERAL_CLOSE, "]")

        if self.config.sanitize_output:
            text = sanitize_html(text)

        return self.final_cleanup(text)

    def process_line_breaks(self, text: str) -> str:
        text = text.replace("\r\n", "\n")
        text = PARAGRAPH_BREAK_PATTERN.sub("</p><p>", text)
        text = text.replace("\n", "<br>")
        return f"<p>{text}</p>"

    def match_pairs(self, tag: TagDefinition, content: str, deadline: float) -> list[TagPair]:
        """Every ``(opener, closer)`` pair of ``tag``; a closer takes the nearest unmatched opener."""
        # every token ends with "]", so nothing after the last one is scanned
        end = content.rfind("]") + 1
        stack: list[re.Match] = []
        pairs: list[TagPair] = []
        for token in tag.token_pattern.finditer(content, endpos=end, timeout=time_left(deadline)):
            if token.group("close") is None:
                stack.append(token)
            elif stack:
                pairs.append((stack.pop(), token))
        return pairs

    def protect_deep_tags(self, text: str, deadline: float) -> str:
        """Protect the brackets of every pair nested deeper than ``max_depth``."""
        events: list[tuple[int, int, int]] = []
        pairs: list[TagPair] = []
        for tag in self.paired_tags:
            for opener, closer in self.match_pairs(tag, text, deadline):
                events.append((opener.start(), 1, len(pairs)))
                events.append((closer.start(), -1, len(pairs)))
                pairs.append((opener, closer))

        deep: list[tuple[int, int]] = []
        level = 0
        for _, step, index in sorted(events):
            level += step
            if step > 0 and level > self.config.max_depth:
                deep.extend((token.start(), token.end()) for token in pairs[index])
        if not deep:
            return text

        parts = []
        position = 0
        # an attribute value can contain another tag's opener, so spans may overlap
        for start, end in sorted(deep):
            start = max(start, position)
            if start >= end:
                continue
            parts.append(text[position:start])
            parts.append(protect_brackets(text[start:end]))
            position = end
        parts.append(text[position:])
        return "".join(parts)

    def parse_tags(self, content: str, depth: int, deadline: float) -> str:
        """Expand every active tag; ``depth`` is the nesting level of the tags matched here."""
        if depth > self.config.max_depth:
            return protect_brackets(content)

        for tag in self.catalog:
            content = self.parse_tag(content, tag, depth, deadline)
        return content

    def parse_tag(self, content: str, tag: TagDefinition, depth: int, deadline: float) -> str:
        try:
            if tag.self_closing:
                end = content.rfind("]") + 1
                expanded = tag.token_pattern.sub(
                    lambda match: self.expand(tag, match, "", match.group(0), depth, deadline),
                    content[:end],
                    timeout=time_left(deadline),
                )
                return expanded + content[end:]
            if not tag.close_matcher.search(content, timeout=time_left(deadline)):
                return content
            pairs = self.match_pairs(tag, content, deadline)
        except TimeoutError:
            logger.warning(f"Matching [{tag.name}] timed out at depth {depth}, leaving it as text")
            return content

        parts = []
        position = 0
        # pairs of one tag nest or are disjoint, so the outermost ones never overlap
        for opener, closer in sorted(pairs, key=lambda pair: pair[0].start()):
            if opener.start() < position:
                continue
            parts.append(content[position : opener.start()])
            inner = content[opener.end() : closer.start()]
            source = content[opener.start() : closer.end()]
            parts.append(self.expand(tag, opener, inner, source, depth, deadline))
            position = closer.end()
        parts.append(content[position:])
        return "".join(parts)

    def expand(
        self, tag: TagDefinition, opener: re.Match, inner: str, source: str, depth: int, deadline: float
    ) -> str:
        """Render one matched tag, or return its ``source`` text when the transform fails."""
        try:
            attributes = tag.parse_attributes(opener.group("attr"))
            if inner and tag.parse_content:
                inner = self.parse_tags(inner, depth + 1, deadline)
            elif inner:
                inner = inner.replace("[", "&#91;").replace("]", "&#93;")
            result = tag.transform(inner, attributes)
            if not isinstance(result, str):
                raise TypeError(f"transform returned {type(result).__name__}, expected str")
            return result
        except Exception:
            logger.opt(exception=True).warning(f"Failed to render [{tag.name}], keeping its source text")
            return source

    def final_cleanup(self, text: str) -> str:
        text = EMPTY_PARAGRAPH_PATTERN.sub("", text)
        text = WHITESPACE_PATTERN.sub(" ", text)
        return text.strip()
