"""BBCode rendering, validation and text extraction for forum content."""

from forum_markup.models.markup import CustomBBCode, ParserConfig, TagDefinition, ValidationResult
from forum_markup.service.bbcode_service import (
    BBCodeParser,
    bbcode_parser,
    preview,
    render,
    strip_tags,
    to_markup,
    validate,
)

__all__ = [
    "BBCodeParser",
    "CustomBBCode",
    "ParserConfig",
    "TagDefinition",
    "ValidationResult",
    "bbcode_parser",
    "preview",
    "render",
    "strip_tags",
    "to_markup",
    "validate",
]
