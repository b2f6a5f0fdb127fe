from .markup import CustomBBCode, ParserConfig, TagDefinition, ValidationResult

__all__ = [
    "CustomBBCode",
    "ParserConfig",
    "TagDefinition",
    "ValidationResult",
]
