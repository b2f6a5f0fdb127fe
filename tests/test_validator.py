from forum_markup.models.markup import ParserConfig, TagDefinition
from forum_markup.service.bbcode_service import BBCodeParser, validate

import pytest


def test_balanced_markup_is_valid():
    result = validate("[b]hi[/b]")
    assert result.is_valid
    assert result.errors == []


def test_empty_markup_is_valid():
    assert validate("").is_valid
    assert validate(None).is_valid  # type: ignore[arg-type]


def test_unclosed_tag():
    result = validate("[b]hi")
    assert not result.is_valid
    assert result.errors == ["Unclosed tag: [b]"]


def test_mismatched_tags():
    result = validate("[b]hi[/i]")
    assert not result.is_valid
    assert result.errors == ["Mismatched tags: expected [/b], found [/i]"]


def test_mismatch_pops_to_resynchronize():
    result = validate("[quote][b]hi[/quote]")
    assert result.errors == [
        "Mismatched tags: expected [/b], found [/quote]",
        "Unclosed tag: [quote]",
    ]


def test_unexpected_closing_tag():
    result = validate("hi[/b]")
    assert result.errors == ["Unexpected closing tag: [/b]"]


def test_one_error_per_unclosed_tag():
    result = validate("[quote][list][*]x")
    assert result.errors == ["Unclosed tag: [quote]", "Unclosed tag: [list]"]


@pytest.mark.parametrize(
    "markup",
    [
        "[url=https://example.com/?a=1]link[/url]",
        "[list=1][*]a[*]b[/list]",
        "[table][tr][td]1[/td][/tr][/table]",
        "[CODE=python]x[/code]",
        "[color=#fff][size=3]x[/size][/color]",
    ],
)
def test_valid_markup(markup):
    assert validate(markup).is_valid


def test_nesting_depth_limit():
    config = ParserConfig(max_depth=2)
    assert validate("[b][i]x[/i][/b]", config).is_valid

    result = validate("[b][i][u]x[/u][/i][/b]", config)
    assert not result.is_valid
    assert result.errors == ["Nesting depth exceeds maximum of 2"]


def test_sequential_tags_do_not_add_depth():
    config = ParserConfig(max_depth=1)
    assert validate("[b]a[/b][i]b[/i][u]c[/u]", config).is_valid


def test_disallowed_tags_are_not_tracked():
    parser = BBCodeParser(ParserConfig(allowed_tags={"b"}))
    assert parser.validate("[i]x").is_valid
    assert not parser.validate("[b]x").is_valid


def test_self_closing_custom_tags_are_not_pushed():
    hr = TagDefinition("hr", lambda content, attributes: "<hr />", self_closing=True)
    parser = BBCodeParser(ParserConfig(custom_tags=(hr,)))
    assert parser.validate("a[hr]b").is_valid


def test_validation_is_independent_of_render_depth():
    parser = BBCodeParser(ParserConfig(max_depth=1, sanitize_output=False))
    markup = "[b][i]x[/i][/b]"
    assert parser.render(markup) == "<p><strong>[i]x[/i]</strong></p>"
    assert parser.validate(markup).errors == ["Nesting depth exceeds maximum of 1"]


def test_closing_tag_of_unknown_name():
    assert validate("hello [/foo]").errors == ["Unexpected closing tag: [/foo]"]
    assert validate("[foo]x[/foo]").errors == ["Unexpected closing tag: [/foo]"]


def test_unknown_closing_tag_inside_a_pair():
    result = validate("[b]x[/foo][/b]")
    assert result.errors == ["Mismatched tags: expected [/b], found [/foo]", "Unexpected closing tag: [/b]"]


def test_structural_markers_need_their_parent_tag():
    parser = BBCodeParser(ParserConfig(allowed_tags={"b"}))
    assert parser.validate("[/td]").errors == ["Unexpected closing tag: [/td]"]
    assert validate("[table][tr][td]1[/td][/tr][/table]").is_valid
