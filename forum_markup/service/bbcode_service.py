"""
BBCode markup language to HTML.

This module is the public entry point of the markup engine: it wires a
``ParserConfig`` into the tag catalog, the rendering engine and the validator,
and exposes ``render``, ``to_markup``, ``strip_tags``, ``preview`` and
``validate``. Every operation is a pure function of its input and the
configuration, so one parser can be shared between requests.
"""

from forum_markup.models.markup import ParserConfig, TagDefinition, ValidationResult
from forum_markup.service import text_utils
from forum_markup.service.parser import ParsingEngine
from forum_markup.service.tag_catalog import build_catalog
from forum_markup.service.validator import BBCodeValidator


class BBCodeParser:
    """A configured BBCode parser.

    Attributes:
        config: The immutable configuration this parser was built with.
        tags: The active catalog, in matching order.

    Methods:
        render(markup: str) -> str:
            Convert BBCode to HTML.

        to_markup(html: str) -> str:
            Best-effort conversion of HTML back to BBCode.

        strip_tags(markup: str) -> str:
            Remove every tag, keeping only plain text.

        preview(markup: str, max_length: int = 150) -> str:
            Plain-text excerpt for listings and notifications.

        validate(markup: str) -> ValidationResult:
            Check tag balance and nesting depth.
    """

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()
        self.tags: tuple[TagDefinition, ...] = build_catalog(self.config)
        self._engine = ParsingEngine(self.tags, self.config)
        self._validator = BBCodeValidator(self.tags, self.config.max_depth, self.config.regex_timeout)

    @property
    def active_tags(self) -> list[str]:
        return [tag.name for tag in self.tags]

    def render(self, markup: str) -> str:
        return self._engine.render(markup)

    def to_markup(self, html: str) -> str:
        return text_utils.to_markup(html, self.config.regex_timeout)

    def strip_tags(self, markup: str) -> str:
        return text_utils.strip_tags(markup, self.config.regex_timeout)

    def preview(self, markup: str, max_length: int = 150) -> str:
        return text_utils.preview(markup, max_length, self.config.regex_timeout)

    def validate(self, markup: str) -> ValidationResult:
        return self._validator.validate(markup)


bbcode_parser = BBCodeParser()


def render(markup: str, config: ParserConfig | None = None) -> str:
    parser = BBCodeParser(config) if config is not None else bbcode_parser
    return parser.render(markup)


def to_markup(html: str) -> str:
    return bbcode_parser.to_markup(html)


def strip_tags(markup: str) -> str:
    return bbcode_parser.strip_tags(markup)


def preview(markup: str, max_length: int = 150) -> str:
    return bbcode_parser.preview(markup, max_length)


def validate(markup: str, config: ParserConfig | None = None) -> ValidationResult:
    parser = BBCodeParser(config) if config is not None else bbcode_parser
    return parser.validate(markup)
