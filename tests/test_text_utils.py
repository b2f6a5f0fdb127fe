import time

from forum_markup.service.bbcode_service import preview, strip_tags, to_markup

import pytest


class TestStripTags:
    def test_removes_tokens_and_collapses_whitespace(self):
        assert strip_tags("[b]Hello[/b]   [url=https://x.com]world[/url]\n") == "Hello world"

    def test_is_idempotent(self):
        once = strip_tags("[quote=Ann][i]a[/i]\n\n b[/quote] [foo]")
        assert strip_tags(once) == once

    def test_empty(self):
        assert strip_tags("") == ""
        assert strip_tags(None) == ""  # type: ignore[arg-type]

    def test_unclosed_brackets(self):
        markup = "[" * 50000 + " tail"
        started = time.perf_counter()
        assert strip_tags(markup) == markup
        assert time.perf_counter() - started < 1


class TestPreview:
    def test_short_text_is_returned_whole(self):
        assert preview("[b]short[/b]") == "short"

    def test_truncates_at_word_boundary(self):
        assert preview("[b]" + "word " * 50 + "[/b]", 20) == "word word word..."

    def test_length_bound(self):
        text = preview("lorem ipsum dolor " * 30, 50)
        assert len(text) <= 50
        assert text.endswith("...")

    def test_lengths_too_short_for_the_ellipsis(self):
        assert preview("hello world", 0) == ""
        assert preview("hello world", 2) == "he"
        assert preview("hello world", -5) == ""

    @pytest.mark.parametrize("max_length", range(12))
    def test_never_exceeds_max_length(self, max_length):
        assert len(preview("hello brave new world", max_length)) <= max_length


class TestToMarkup:
    @pytest.mark.parametrize(
        ("html", "markup"),
        [
            ("<strong>a</strong> <em>b</em> <u>c</u> <del>d</del>", "[b]a[/b] [i]b[/i] [u]c[/u] [s]d[/s]"),
            (
                '<a href="https://x.com/" target="_blank" rel="noopener noreferrer">x</a>',
                "[url=https://x.com/]x[/url]",
            ),
            (
                '<img src="https://x.com/a.png" alt="User Image" class="bbcode-img" loading="lazy" />',
                "[img]https://x.com/a.png[/img]",
            ),
            ('<ul class="bbcode-list"><li>one</li><li>two</li></ul>', "[list][*]one[*]two[/list]"),
            ("<ol><li>one</li></ol>", "[list=1][*]one[/list]"),
            ("<p>a<br>b</p><p>c</p>", "a\nb\n\nc"),
            (
                '<blockquote class="bbcode-quote"><cite>Originally posted by Ann</cite>hi</blockquote>',
                "[quote]hi[/quote]",
            ),
            ('<span style="color:red">Tom &amp; Jerry</span>', "Tom & Jerry"),
        ],
    )
    def test_conversions(self, html, markup):
        assert to_markup(html) == markup

    def test_code_with_language(self):
        html = '<pre><code class="language-python">a &lt; b<br>c</code></pre>'
        assert to_markup(html) == "[code=python]a < b\nc[/code]"

    def test_code_content_is_not_reinterpreted(self):
        html = "<pre><code>&lt;strong&gt;x&lt;/strong&gt;</code></pre>"
        assert to_markup(html) == "[code]<strong>x</strong>[/code]"

    def test_pre_block(self):
        assert to_markup("<pre>a &amp; b</pre>") == "[pre]a & b[/pre]"

    def test_empty(self):
        assert to_markup("") == ""
        assert to_markup(None) == ""  # type: ignore[arg-type]

    def test_rendered_markup_converts_back(self, raw_parser):
        markup = "[b]bold[/b] and [i]italic[/i]"
        assert to_markup(raw_parser.render(markup)) == markup
