from forum_markup.exceptions import BBCodeValidationError, ContentEmptyError, ContentTooLongError
from forum_markup.models.markup import CustomBBCode, ParserConfig
from forum_markup.service.bbcode_service import BBCodeParser
from forum_markup.service.markup_service import MarkupService

from pydantic import ValidationError
import pytest


class TestCustomBBCode:
    def test_tag_is_lowercased(self):
        bbcode = CustomBBCode(tag="Mark", replacement="<mark>$1</mark>")
        assert bbcode.tag == "mark"

    @pytest.mark.parametrize("tag", ["", "has space", "a]b", "x" * 21])
    def test_invalid_tag_names(self, tag):
        with pytest.raises(ValidationError):
            CustomBBCode(tag=tag, replacement="<b>$1</b>")

    def test_option_placeholder_is_required(self):
        with pytest.raises(ValidationError, match=r"\$option"):
            CustomBBCode(tag="mark", replacement="<mark>$1</mark>", has_option=True)

    def test_content_placeholder_is_required(self):
        with pytest.raises(ValidationError, match=r"\$1"):
            CustomBBCode(tag="mark", replacement="<mark></mark>")

    def test_content_placeholder_is_optional_for_unparsed_tags(self):
        bbcode = CustomBBCode(tag="hr", replacement="<hr />", parse_content=False)
        assert bbcode.to_tag_definition().transform("", {}) == "<hr />"

    def test_tag_definition_substitutes_placeholders(self):
        bbcode = CustomBBCode(tag="mark", replacement='<mark title="$option">$1</mark>', has_option=True)
        definition = bbcode.to_tag_definition()
        assert definition.name == "mark"
        assert definition.allowed_attributes == ("option",)
        assert definition.transform("hi", {"option": 'a"<b>'}) == '<mark title="a&quot;&lt;b&gt;">hi</mark>'

    def test_rendered_through_the_engine(self):
        bbcode = CustomBBCode(tag="mark", replacement='<mark title="$option">$1</mark>', has_option=True)
        parser = BBCodeParser(ParserConfig(custom_tags=(bbcode.to_tag_definition(),), sanitize_output=False))
        assert parser.render("[mark=note][b]hi[/b][/mark]") == (
            '<p><mark title="note"><strong>hi</strong></mark></p>'
        )


class TestMarkupService:
    @pytest.fixture
    def service(self) -> MarkupService:
        return MarkupService(BBCodeParser(ParserConfig(sanitize_output=False)), max_content_length=10)

    def test_process_post_content(self, service):
        assert service.process_post_content("[b]hi[/b]") == {
            "raw": "[b]hi[/b]",
            "html": '<div class="bbcode"><p><strong>hi</strong></p></div>',
        }

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_empty_content(self, service, content):
        with pytest.raises(ContentEmptyError) as excinfo:
            service.process_post_content(content)
        assert excinfo.value.code == "content_empty"

    def test_content_too_long(self, service):
        with pytest.raises(ContentTooLongError) as excinfo:
            service.process_post_content("x" * 11)
        assert excinfo.value.code == "content_too_long"
        assert excinfo.value.current_length == 11
        assert excinfo.value.max_length == 10

    def test_strict_mode_rejects_unbalanced_markup(self, service):
        with pytest.raises(BBCodeValidationError) as excinfo:
            service.process_post_content("[b]x", strict=True)
        assert excinfo.value.errors == ["Unclosed tag: [b]"]
        assert excinfo.value.code == "bbcode_validation_error"

    def test_lenient_mode_renders_unbalanced_markup(self, service):
        assert service.process_post_content("[b]x")["html"] == '<div class="bbcode"><p>[b]x</p></div>'

    def test_explicit_max_length(self, service):
        assert service.process_post_content("x" * 11, max_length=20)["raw"] == "x" * 11

    def test_preview_uses_configured_length(self):
        service = MarkupService(BBCodeParser(), preview_length=12)
        assert service.preview("one two three four") == "one two..."

    def test_from_settings_loads_active_custom_tags(self):
        service = MarkupService.from_settings(
            [
                CustomBBCode(tag="mark", replacement="<mark>$1</mark>"),
                CustomBBCode(tag="hidden", replacement="<x>$1</x>", is_active=False),
            ]
        )
        assert "mark" in service.parser.active_tags
        assert "hidden" not in service.parser.active_tags
