from __future__ import annotations

from .bbcode_service import (
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
    "bbcode_parser",
    "preview",
    "render",
    "strip_tags",
    "to_markup",
    "validate",
]
