"""
Post content processing on top of the BBCode parser.

This is the layer the post/reply surfaces and the editor endpoints talk to:
it builds the default parser from settings and turns raw post content into
the ``{"raw", "html"}`` pair that gets stored.
"""

from collections.abc import Iterable

from forum_markup.config import settings
from forum_markup.exceptions import BBCodeValidationError, ContentEmptyError, ContentTooLongError
from forum_markup.log import service_logger
from forum_markup.models.markup import CustomBBCode, ParserConfig, ValidationResult
from forum_markup.service.bbcode_service import BBCodeParser
from forum_markup.service.tag_catalog import make_tag

logger = service_logger("MarkupService")


class MarkupService:
    def __init__(self, parser: BBCodeParser, max_content_length: int = 60000, preview_length: int = 150):
        self.parser = parser
        self.max_content_length = max_content_length
        self.preview_length = preview_length

    @classmethod
    def from_settings(cls, custom_bbcodes: Iterable[CustomBBCode] = ()) -> "MarkupService":
        """Build the service from settings, activating the given administrator-defined tags."""
        custom_tags = tuple(bbcode.to_tag_definition() for bbcode in custom_bbcodes if bbcode.is_active)
        config = ParserConfig(
            max_depth=settings.markup_max_depth,
            url_whitelist=tuple(settings.markup_url_whitelist),
            xss_protection=settings.markup_xss_protection,
            sanitize_output=settings.markup_sanitize_output,
            regex_timeout=settings.markup_regex_timeout,
            custom_tags=custom_tags,
        )
        if custom_tags:
            logger.info(f"Loaded {len(custom_tags)} custom BBCode tags: {', '.join(t.name for t in custom_tags)}")
        return cls(
            BBCodeParser(config),
            max_content_length=settings.markup_max_content_length,
            preview_length=settings.markup_preview_length,
        )

    def process_post_content(
        self, raw_content: str, max_length: int | None = None, strict: bool = False
    ) -> dict[str, str]:
        """
        Process post BBCode content.

        Args:
            raw_content: Raw BBCode content
            max_length: Maximum allowed length, defaults to the configured one
            strict: Reject content with unbalanced or too deeply nested tags

        Returns:
            A dictionary containing both raw and html versions
        """
        if not raw_content or not raw_content.strip():
            raise ContentEmptyError()

        max_length = max_length or self.max_content_length
        content_length = len(raw_content)
        if content_length > max_length:
            raise ContentTooLongError(content_length, max_length)

        if strict:
            result = self.parser.validate(raw_content)
            if not result.is_valid:
                raise BBCodeValidationError(result.errors)

        html_content = self.parser.render(raw_content)

        # Wrap in a container div
        final_html = make_tag("div", html_content, attributes={"class": "bbcode"})

        return {"raw": raw_content, "html": final_html}

    def validate(self, content: str) -> ValidationResult:
        return self.parser.validate(content)

    def render(self, content: str) -> str:
        return self.parser.render(content)

    def preview(self, content: str, max_length: int | None = None) -> str:
        return self.parser.preview(content, max_length or self.preview_length)

    def to_markup(self, html: str) -> str:
        return self.parser.to_markup(html)


markup_service = MarkupService.from_settings()
