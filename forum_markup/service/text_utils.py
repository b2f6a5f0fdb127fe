"""
Plain-text extraction, previews and the best-effort HTML to BBCode converter.

``to_markup`` is intentionally lossy: only link targets and code languages
are recovered from attributes, and nested formatting inside list items is
not guaranteed to survive a round trip.
"""

from forum_markup.log import service_logger
from forum_markup.service.sanitizer import REGEX_TIMEOUT, unescape_html

import bleach
import regex as re

logger = service_logger("BBCodeText")

TAG_PATTERN = re.compile(r"\[[^\]]*\]")
WHITESPACE_PATTERN = re.compile(r"\s+")
TRAILING_WORD_PATTERN = re.compile(r"\s+\S*$")

_FLAGS = re.IGNORECASE | re.DOTALL

CODE_BLOCK_PATTERN = re.compile(r'<pre><code(?:\s+class="language-([^"]*)")?>(.*?)</code></pre>', _FLAGS)
PRE_BLOCK_PATTERN = re.compile(r"<pre(?:\s[^>]*)?>(.*?)</pre>", _FLAGS)
BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")

# (pattern, replacement), applied in order
HTML_TO_MARKUP: list[tuple[re.Pattern, str]] = [
    # basic formatting
    (re.compile(r"<strong(?:\s[^>]*)?>(.*?)</strong>", _FLAGS), r"[b]\1[/b]"),
    (re.compile(r"<b(?:\s[^>]*)?>(.*?)</b>", _FLAGS), r"[b]\1[/b]"),
    (re.compile(r"<em(?:\s[^>]*)?>(.*?)</em>", _FLAGS), r"[i]\1[/i]"),
    (re.compile(r"<i(?:\s[^>]*)?>(.*?)</i>", _FLAGS), r"[i]\1[/i]"),
    (re.compile(r"<u(?:\s[^>]*)?>(.*?)</u>", _FLAGS), r"[u]\1[/u]"),
    (re.compile(r"<(del|s|strike)(?:\s[^>]*)?>(.*?)</\1>", _FLAGS), r"[s]\2[/s]"),
    # links and images
    (re.compile(r'<a\s[^>]*href="([^"]*)"[^>]*>(.*?)</a>', _FLAGS), r"[url=\1]\2[/url]"),
    (re.compile(r'<img\s[^>]*src="([^"]*)"[^>]*/?>', _FLAGS), r"[img]\1[/img]"),
    # quotes, the author line is not recovered
    (re.compile(r"<cite(?:\s[^>]*)?>.*?</cite>", _FLAGS), ""),
    (re.compile(r"<blockquote(?:\s[^>]*)?>(.*?)</blockquote>", _FLAGS), r"[quote]\1[/quote]"),
    # lists
    (re.compile(r"<ul(?:\s[^>]*)?>(.*?)</ul>", _FLAGS), r"[list]\1[/list]"),
    (re.compile(r"<ol(?:\s[^>]*)?>(.*?)</ol>", _FLAGS), r"[list=1]\1[/list]"),
    (re.compile(r"<li(?:\s[^>]*)?>(.*?)</li>", _FLAGS), r"[*]\1"),
    # line breaks
    (BREAK_PATTERN, "\n"),
    (re.compile(r"</p>\s*<p(?:\s[^>]*)?>", re.IGNORECASE), "\n\n"),
    (re.compile(r"</?p(?:\s[^>]*)?>", re.IGNORECASE), ""),
    # anything else
    (re.compile(r"<[^>]+>"), ""),
]


def strip_tags(markup: str, timeout: float = REGEX_TIMEOUT) -> str:
    """Remove every bracket token and normalize whitespace."""
    if not markup or not isinstance(markup, str):
        return ""
    # an unmatched "[" after the last "]" never starts a token
    end = markup.rfind("]") + 1
    text = TAG_PATTERN.sub("", markup[:end], timeout=timeout) + markup[end:]
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def preview(markup: str, max_length: int = 150, timeout: float = REGEX_TIMEOUT) -> str:
    """
    Plain-text excerpt of at most ``max_length`` characters.

    Longer text is cut at a word boundary and ends with ``...``. Below 3
    characters there is no room for the ellipsis, so the text is just cut.
    """
    plain_text = strip_tags(markup, timeout)
    if len(plain_text) <= max_length:
        return plain_text
    if max_length < 3:
        return plain_text[: max(max_length, 0)]

    truncated = plain_text[: max_length - 3]
    return TRAILING_WORD_PATTERN.sub("", truncated, timeout=timeout) + "..."


def to_markup(html: str, timeout: float = REGEX_TIMEOUT) -> str:
    """
    Convert HTML back to BBCode (basic conversion).

    Code blocks are converted first and kept aside so their content is not
    reinterpreted by the other rules.
    """
    if not html or not isinstance(html, str):
        return ""

    html = html.replace("\x00", "")
    blocks: list[str] = []

    def stash(markup: str) -> str:
        blocks.append(markup)
        return f"\x00{len(blocks) - 1}\x00"

    def replace_code(match: re.Match) -> str:
        language, content = match.group(1), match.group(2)
        code = unescape_html(BREAK_PATTERN.sub("\n", content))
        return stash(f"[code={language}]{code}[/code]" if language else f"[code]{code}[/code]")

    def replace_pre(match: re.Match) -> str:
        content = unescape_html(BREAK_PATTERN.sub("\n", match.group(1)))
        return stash(f"[pre]{content}[/pre]")

    try:
        text = CODE_BLOCK_PATTERN.sub(replace_code, html, timeout=timeout)
        text = PRE_BLOCK_PATTERN.sub(replace_pre, text, timeout=timeout)
        for pattern, replacement in HTML_TO_MARKUP:
            text = pattern.sub(replacement, text, timeout=timeout)
    except TimeoutError:
        logger.warning("HTML conversion timed out, falling back to plain text")
        return unescape_html(bleach.clean(html, tags=[], strip=True)).strip()

    text = unescape_html(text)
    text = PLACEHOLDER_PATTERN.sub(lambda match: blocks[int(match.group(1))], text)
    return text.strip()
