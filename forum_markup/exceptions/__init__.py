from .markup import (
    BBCodeValidationError,
    ContentEmptyError,
    ContentTooLongError,
    DuplicateTagError,
    MarkupError,
)

__all__ = [
    "BBCodeValidationError",
    "ContentEmptyError",
    "ContentTooLongError",
    "DuplicateTagError",
    "MarkupError",
]
